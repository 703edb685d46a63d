"""Utils module."""

from .helpers import (
    audio_data_url,
    content_hash,
    ensure_dir,
    extract_domain,
    is_present,
    is_valid_credential,
    mask_secret,
    present_or_none,
    strip_data_url,
)
from .logger import setup_logger

__all__ = [
    'audio_data_url',
    'content_hash',
    'ensure_dir',
    'extract_domain',
    'is_present',
    'is_valid_credential',
    'mask_secret',
    'present_or_none',
    'strip_data_url',
    'setup_logger',
]
