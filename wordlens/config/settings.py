"""Global settings and configuration."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Credentials may live in a .env file at the project root
load_dotenv(Path(__file__).parent.parent.parent / ".env")


@dataclass
class Config:
    """Application-wide constants."""

    # Data locations
    BASE_DIR: Path = Path(os.environ.get("WORDLENS_HOME", Path.home() / ".wordlens")).expanduser()
    DB_FILE: str = str(BASE_DIR / "data" / "wordlens.db")
    AUDIO_CACHE_DIR: str = str(BASE_DIR / "cache" / "audio")
    OUTPUT_DIR: str = str(BASE_DIR / "output")

    # Image search
    GOOGLE_SEARCH_URL: str = "https://www.googleapis.com/customsearch/v1"
    PIXABAY_URL: str = "https://pixabay.com/api/"
    DUCKDUCKGO_IMAGES_URL: str = "https://duckduckgo.com/i.js"
    PLACEHOLDER_IMAGE_URL: str = "https://picsum.photos"
    DEFAULT_PAGE: int = 1
    DEFAULT_PER_PAGE: int = 6
    # Upstream engines rarely return useful results past ~30 hits
    MAX_RESULTS: int = 30
    MAX_PAGES: int = 5

    # Language model
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4o-mini"
    PHRASE_TEMPERATURE: float = 0.7
    PHRASE_MAX_TOKENS: int = 800
    EXPLANATION_TEMPERATURE: float = 0.3
    EXPLANATION_MAX_TOKENS: int = 400

    # Speech
    GOOGLE_TTS_URL: str = "https://texttospeech.googleapis.com/v1/text:synthesize"
    GOOGLE_VOICES_URL: str = "https://texttospeech.googleapis.com/v1/voices"
    OPENAI_TTS_MODEL: str = "tts-1"
    WEB_SPEECH_SENTINEL: str = "web-speech-api"
    AUDIO_CACHE_MAX_AGE: int = 7 * 24 * 60 * 60

    # Flashcard bridge (AnkiConnect)
    ANKI_CONNECT_URL: str = "http://127.0.0.1:8765"
    ANKI_CONNECT_VERSION: int = 6
    ANKI_TIMEOUT: int = 10

    # Outbound HTTP budget (seconds, per request)
    HTTP_TIMEOUT: int = 30

    USER_AGENT: str = "wordlens/1.0.0"
