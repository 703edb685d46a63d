"""
Prompt templates for the language-model provider.

Each template is a markdown file in this directory with two sections,
``## System Prompt`` and ``## User Prompt Template``. Placeholders use
``{{name}}`` and are substituted literally.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional

from ..errors import TemplateError

logger = logging.getLogger(__name__)

PHRASE_GENERATION = "phrase-generation"
EXPLANATION_BILINGUAL = "explanation-generation-bilingual"
EXPLANATION_MONOLINGUAL = "explanation-generation-monolingual"

BUILTIN_TEMPLATES = (PHRASE_GENERATION, EXPLANATION_BILINGUAL, EXPLANATION_MONOLINGUAL)


@dataclass(frozen=True)
class PromptTemplate:
    system: str
    user: str


@dataclass(frozen=True)
class RenderedPrompt:
    system: str
    user: str


class PromptTemplates:
    """
    Loads and memoizes prompt templates by name.

    One instance is created by the application root and injected into the
    text provider; the cache lives as long as that instance.
    """

    SYSTEM_SECTION = re.compile(r'## System Prompt\n([\s\S]*?)(?=\n## |\Z)')
    USER_SECTION = re.compile(r'## User Prompt Template\n([\s\S]*?)(?=\n## |\Z)')

    def __init__(self, prompts_dir: Optional[str] = None):
        self.prompts_dir = Path(prompts_dir) if prompts_dir else Path(__file__).parent
        self._cache: Dict[str, PromptTemplate] = {}

    def get(self, name: str) -> PromptTemplate:
        """Return the named template, loading it on first use."""
        template = self._cache.get(name)
        if template is None:
            template = self._load(name)
            self._cache[name] = template
        return template

    def render(self, name: str, variables: Mapping[str, str]) -> RenderedPrompt:
        """
        Substitute every ``{{key}}`` occurrence in both sections.

        Placeholders without a supplied variable are left as they are.
        """
        template = self.get(name)
        return RenderedPrompt(
            system=self._substitute(template.system, variables),
            user=self._substitute(template.user, variables),
        )

    def preload(self, names: Iterable[str] = BUILTIN_TEMPLATES) -> None:
        """Load templates eagerly so a packaging defect surfaces at start-up."""
        for name in names:
            self.get(name)

    def _load(self, name: str) -> PromptTemplate:
        path = self.prompts_dir / f"{name}.md"
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise TemplateError(f"Cannot read prompt template {path}: {e}") from e

        content = content.replace("\r\n", "\n")
        system_match = self.SYSTEM_SECTION.search(content)
        user_match = self.USER_SECTION.search(content)
        if not system_match or not user_match:
            raise TemplateError(f"Invalid prompt format in {name}.md")

        logger.debug("Loaded prompt template %s", name)
        return PromptTemplate(system=system_match.group(1).strip(), user=user_match.group(1).strip())

    @staticmethod
    def _substitute(text: str, variables: Mapping[str, str]) -> str:
        for key, value in variables.items():
            text = text.replace("{{" + key + "}}", str(value))
        return text
