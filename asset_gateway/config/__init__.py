"""
Configuration shared by the proxy and the asset tools.

Values come from environment variables (or a .env file).
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
