"""
Asset proxy endpoint.

Serves bucket objects over HTTP: the request path (minus one leading '/')
is the object key. Hits stream the object with its stored HTTP metadata
and etag, misses are 404, and any bucket fault becomes a generic 500 so
internal details never reach the client.

The root path is a fixed placeholder and is never looked up in the bucket.
Only GET is routed; other methods get 405 from the router.
"""

import asyncio
import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import PlainTextResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from ...core.assets.keys import asset_key_from_request_path, is_root_key
from ..dependencies import BucketClientDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()

WELCOME_MESSAGE = "Welcome to the R2 asset proxy!"
NOT_FOUND_MESSAGE = "Not Found"
FETCH_ERROR_MESSAGE = "Error fetching object"


def _close_abandoned_fetch(fetch: "asyncio.Future") -> None:
    """Release the body of an object nobody is waiting for any more."""
    if fetch.cancelled() or fetch.exception() is not None:
        return
    obj = fetch.result()
    if obj is not None:
        logger.debug("Closing abandoned object", extra={"key": obj.key})
        obj.close()


@router.get("/{path:path}", include_in_schema=False)
async def serve_asset(
    request: Request,
    bucket: BucketClientDep,
    settings: SettingsDep,
) -> Response:
    """
    Fetch the object for the request path and stream it back.

    The blocking bucket call runs in a worker thread so any number of
    requests can be in flight, each bounded by the fetch timeout.
    """
    key = asset_key_from_request_path(request.scope["path"])

    if is_root_key(key):
        return PlainTextResponse(WELCOME_MESSAGE, status_code=status.HTTP_200_OK)

    # A timed-out fetch keeps running in its thread; close whatever it returns
    fetch = asyncio.ensure_future(asyncio.to_thread(bucket.get, key))
    try:
        obj = await asyncio.wait_for(
            asyncio.shield(fetch),
            timeout=settings.proxy_fetch_timeout_seconds,
        )
    except Exception as e:
        fetch.add_done_callback(_close_abandoned_fetch)
        logger.error(
            "Error fetching object",
            extra={"key": key, "error": repr(e)},
        )
        return PlainTextResponse(
            FETCH_ERROR_MESSAGE,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if obj is None:
        logger.debug("Object not found", extra={"key": key})
        return PlainTextResponse(NOT_FOUND_MESSAGE, status_code=status.HTTP_404_NOT_FOUND)

    headers: dict[str, str] = {}
    obj.write_http_metadata(headers)
    headers["etag"] = obj.http_etag

    # Closing twice is harmless; the background task covers client disconnects
    return StreamingResponse(
        obj.iter_body(),
        status_code=status.HTTP_200_OK,
        headers=headers,
        background=BackgroundTask(obj.close),
    )
