"""
Content-type inference for uploaded assets.

A pure function of the file extension. Unknown extensions are uploaded as
opaque binary rather than rejected.
"""

from pathlib import PurePath
from typing import Union

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".md": "text/markdown",
}


def content_type_for(path: Union[str, PurePath]) -> str:
    """Return the MIME type for a path based on its (case-insensitive) extension."""
    ext = PurePath(path).suffix.lower()
    return CONTENT_TYPES.get(ext, DEFAULT_CONTENT_TYPE)
