"""
Asset keys, content types and batch outcomes.

Pure functions and plain dataclasses; nothing here touches the network.
"""

from .content_types import CONTENT_TYPES, DEFAULT_CONTENT_TYPE, content_type_for
from .keys import (
    asset_key_for_file,
    asset_key_from_request_path,
    is_root_key,
    public_url_for_key,
    rewrite_legacy_url,
)
from .models import BatchReport, FileOutcome, FileStatus

__all__ = [
    "CONTENT_TYPES",
    "DEFAULT_CONTENT_TYPE",
    "content_type_for",
    "asset_key_for_file",
    "asset_key_from_request_path",
    "is_root_key",
    "public_url_for_key",
    "rewrite_legacy_url",
    "BatchReport",
    "FileOutcome",
    "FileStatus",
]
