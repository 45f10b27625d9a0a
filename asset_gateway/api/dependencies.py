"""
FastAPI dependency injection.

Dependencies provide the settings and the bucket client to the proxy
route. Tests replace them through app.dependency_overrides, so the route
never has to know whether it talks to R2 or to the in-memory bucket.
"""

import logging
from typing import Annotated

from fastapi import Depends

from ..config.settings import Settings, get_settings
from ..infrastructure.storage.client import (
    BucketClient,
    create_bucket_client,
    storage_config_from_settings,
)

logger = logging.getLogger(__name__)

# Shared client; boto3 clients are thread-safe and expensive to build
_bucket_client = None


def get_bucket_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> BucketClient:
    """
    Provide the bucket client for object lookups.

    Returns either the R2 client or the in-memory client based on settings.
    The client is created on first use and reused for later requests.
    """
    global _bucket_client

    if _bucket_client is None:
        if settings.r2_mock_mode:
            _bucket_client = create_bucket_client(mock_mode=True)
            logger.info("Created shared mock bucket client")
        else:
            config = storage_config_from_settings(
                settings,
                timeout_seconds=settings.proxy_fetch_timeout_seconds,
            )
            _bucket_client = create_bucket_client(config=config)
            logger.info("Created shared R2 bucket client")

    return _bucket_client


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

BucketClientDep = Annotated[BucketClient, Depends(get_bucket_client)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
