"""Data models for study results and flashcard export."""

import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class PhraseCategory(Enum):
    """The closed set of example phrase categories."""
    DESCRIPTIVE = "Descriptive/Aesthetic"
    PRACTICAL = "Practical/Work"
    AMAZEMENT = "Question/Amazement"
    MEMORY = "Memory/Emotion"
    LEARNING = "Learning/Question"

    @classmethod
    def match(cls, label: Any) -> Optional["PhraseCategory"]:
        """Match a label case-insensitively, ignoring surrounding whitespace."""
        if not isinstance(label, str):
            return None
        wanted = label.strip().lower()
        for category in cls:
            if category.value.lower() == wanted:
                return category
        return None


class SourceField(Enum):
    """Study result attributes that can be mapped onto flashcard fields."""
    WORD = "word"
    EXPLANATION = "explanation"
    PHRASE_TEXT = "phrase_text"
    PHRASE_TRANSLATION = "phrase_translation"
    PHRASE_CATEGORY = "phrase_category"
    IMAGE = "image"
    AUDIO = "audio"

    @classmethod
    def _missing_(cls, value):
        # Accept camelCase spellings ("phraseText")
        if isinstance(value, str):
            snake = re.sub(r"(?<!^)(?=[A-Z])", "_", value).lower()
            for member in cls:
                if member.value == snake:
                    return member
        return None


@dataclass
class ImageResult:
    """One image search hit."""
    url: str
    thumbnail_url: str
    title: Optional[str] = None
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "thumbnail": self.thumbnail_url,
            "title": self.title,
            "source": self.source,
        }


@dataclass
class ExamplePhrase:
    """An example sentence with its translation and category label."""
    text: str
    translation: str
    category: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PaginatedImages:
    """Image page plus pagination envelope."""
    images: List[ImageResult]
    current_page: int
    total_pages: int
    has_next: bool
    has_previous: bool


@dataclass
class StudyResult:
    """Everything fetched for one word lookup. Not persisted."""
    word: str
    explanation: Optional[str] = None
    images: List[ImageResult] = field(default_factory=list)
    phrases: List[ExamplePhrase] = field(default_factory=list)


@dataclass
class ExportCard:
    """The unit handed to the flashcard bridge."""
    word: str
    explanation: str
    phrase: ExamplePhrase
    image: Optional[ImageResult] = None
    audio_reference: Optional[str] = None


@dataclass
class ExportSummary:
    """Per-batch outcome of a flashcard export."""
    succeeded: int = 0
    failed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"succeeded": self.succeeded, "failed": self.failed}


@dataclass
class SearchRecord:
    """One row of search history."""
    word: str
    search_count: int
    last_searched_at: str
    created_at: str
    is_favorite: bool = False
    favorited_at: Optional[str] = None
    id: Optional[int] = None
