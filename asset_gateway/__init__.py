"""
Asset Gateway - serves bucket assets over HTTP and fills the bucket.

This package contains:
- core: Asset keys, content types and batch outcomes (no I/O)
- infrastructure: Object storage clients (R2 and in-memory)
- pipeline: Legacy uploads migration and bulk upload tools
- api: The FastAPI asset proxy route
- config: Application configuration
"""

__version__ = "0.1.0"
