"""Content-addressed on-disk cache for synthesized audio."""

import logging
import os
import time
import uuid
from pathlib import Path
from typing import Optional

import aiofiles

from ..config import Config
from ..utils import content_hash, ensure_dir

logger = logging.getLogger(__name__)


class AudioCache:
    """
    Write-once audio cache.

    File names are ``{prefix}{md5(parts)}.mp3`` so identical requests to the
    same provider always resolve to the same file. Entries are never
    overwritten; they only disappear through cleanup_old_files().
    """

    EXTENSION = ".mp3"

    def __init__(self, cache_dir: Optional[str] = None):
        self.cache_dir = Path(cache_dir or Config.AUDIO_CACHE_DIR)

    def path_for(self, prefix: str, *parts: str) -> Path:
        return self.cache_dir / f"{prefix}{content_hash(*parts)}{self.EXTENSION}"

    async def read(self, path: Path) -> Optional[bytes]:
        """Cached bytes, or None when there is no usable entry."""
        if not path.is_file():
            return None
        async with aiofiles.open(path, "rb") as f:
            data = await f.read()
        return data or None

    async def write(self, path: Path, data: bytes) -> None:
        """Store bytes once; an existing entry is left untouched."""
        if path.exists():
            return
        ensure_dir(str(path.parent))

        # Atomic write: temp file + rename
        temp_path = f"{path}.{uuid.uuid4().hex[:8]}.tmp"
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(data)
            os.replace(temp_path, path)
        finally:
            if os.path.exists(temp_path):
                os.remove(temp_path)

    def cleanup_old_files(self, max_age: int = Config.AUDIO_CACHE_MAX_AGE, prefix: Optional[str] = None) -> int:
        """
        Delete cache entries older than max_age seconds.

        Args:
            max_age: Age threshold in seconds
            prefix: Only consider files from one provider

        Returns:
            Number of files removed
        """
        if not self.cache_dir.is_dir():
            return 0

        cutoff = time.time() - max_age
        removed = 0
        for path in self.cache_dir.glob(f"{prefix or ''}*{self.EXTENSION}"):
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed += 1
            except OSError as e:
                logger.warning("Could not remove cached audio %s: %s", path.name, e)

        if removed:
            logger.info("Removed %d cached audio file(s) from %s", removed, self.cache_dir)
        return removed
