"""Utility functions."""

import base64
import hashlib
import re
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

DATA_URL_PREFIX = re.compile(r'^data:audio/[^;]+;base64,')


def is_present(value: Any) -> bool:
    """A value is present iff it is a non-empty string."""
    return isinstance(value, str) and value != ""


def present_or_none(value: Any) -> Optional[str]:
    """Collapse every absent value (None, empty string) to None."""
    return value if is_present(value) else None


def is_valid_credential(value: Any) -> bool:
    """Shape check only: non-blank and free of whitespace."""
    return is_present(value) and value.strip() == value and not re.search(r'\s', value)


def extract_domain(url: str) -> str:
    """Host name of a URL without a leading "www."."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        return "unknown"
    if not host:
        return "unknown"
    return host[4:] if host.startswith("www.") else host


def content_hash(*parts: str) -> str:
    """Deterministic hex digest of the joined parts."""
    return hashlib.md5("-".join(parts).encode("utf-8")).hexdigest()


def audio_data_url(audio: bytes, mime: str = "audio/mp3") -> str:
    return f"data:{mime};base64,{base64.b64encode(audio).decode('ascii')}"


def strip_data_url(reference: str) -> str:
    """Base64 payload of a data URL (unchanged if it is not one)."""
    return DATA_URL_PREFIX.sub("", reference)


def mask_secret(text: str, secret: Optional[str]) -> str:
    """Hide a credential inside a string meant for logs."""
    if not secret:
        return text
    return text.replace(secret, "[HIDDEN]")


def ensure_dir(path: str) -> None:
    """Ensure directory exists."""
    Path(path).mkdir(parents=True, exist_ok=True)
