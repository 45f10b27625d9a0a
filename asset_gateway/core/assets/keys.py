"""
Asset key derivation.

The uploader derives keys from file paths and the proxy derives them from
request paths. Both must produce the same string for the same asset, so
the two rules live side by side here.
"""

import os
from pathlib import Path
from typing import Union

LEGACY_UPLOADS_PREFIX = "/api/uploads/"


def asset_key_from_request_path(path: str) -> str:
    """
    Map a request path to a bucket key by stripping one leading '/'.

    An empty result means the request was for the root.
    """
    return path[1:] if path.startswith("/") else path


def is_root_key(key: str) -> bool:
    """True for keys that address the proxy root rather than an object."""
    return key in ("", "/")


def asset_key_for_file(path: Union[str, Path], root: Union[str, Path]) -> str:
    """
    Key for a file under the assets root: its relative path with '/' separators.

    Raises ValueError if path is not inside root.
    """
    relative = os.path.relpath(path, root)
    if relative in (os.curdir, os.pardir) or relative.startswith(os.pardir + os.sep):
        raise ValueError(f"{path} is not inside {root}")
    return relative.replace(os.sep, "/").replace("\\", "/")


def public_url_for_key(key: str, public_base_url: str) -> str:
    return f"{public_base_url.rstrip('/')}/{key.lstrip('/')}"


def rewrite_legacy_url(url: str, public_base_url: str) -> str:
    """
    Point a legacy '/api/uploads/<name>' URL at the migrated asset.

    Migrated uploads land under 'uploads/' in the assets root, so the new
    URL is the proxy URL of the key 'uploads/<name>'. Other URLs, including
    ones already rewritten, are returned unchanged.
    """
    if not url.startswith(LEGACY_UPLOADS_PREFIX):
        return url
    name = url[len(LEGACY_UPLOADS_PREFIX):]
    return public_url_for_key(f"uploads/{name}", public_base_url)
