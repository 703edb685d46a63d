"""Services module - orchestration and persistence."""

from .orchestration import OrchestrationService
from .repository import SQLiteRepository
from .search_service import SearchService, paginate
from .speech_service import SpeechService

__all__ = [
    'OrchestrationService',
    'SQLiteRepository',
    'SearchService',
    'SpeechService',
    'paginate',
]
