"""Utilities for fetching remote resources from within actions."""

import asyncio
import logging
from typing import Any, Callable

import httpx

from .exceptions import FetchError

logger = logging.getLogger(__name__)


async def _get(
    client: httpx.AsyncClient,
    url: str,
    error_cls: type[FetchError],
    require_success: bool,
) -> httpx.Response:
    try:
        response = await client.get(url, follow_redirects=True)
    except httpx.HTTPError as exc:
        raise error_cls(f"Failed to fetch {url}: {exc}", url) from exc

    if not response.is_success:
        if require_success:
            raise error_cls(
                f"Failed to fetch {url}: HTTP {response.status_code}",
                url,
                status_code=response.status_code,
            )
        logger.warning("Using body of %s despite HTTP %s", url, response.status_code)
    return response


async def fetch_bytes(
    client: httpx.AsyncClient,
    url: str,
    error_cls: type[FetchError] = FetchError,
) -> bytes:
    """
    Download the body at the given URL.

    Raises error_cls (a FetchError subclass) on transport errors and on
    non-success status codes.
    """

    response = await _get(client, url, error_cls, require_success=True)
    return response.content


async def fetch_text(
    client: httpx.AsyncClient,
    url: str,
    error_cls: type[FetchError] = FetchError,
    require_success: bool = True,
) -> str:
    """
    Download the body at the given URL, decoded with its declared charset.

    With require_success=False only transport errors raise; the body of an
    error status is returned as is.
    """

    response = await _get(client, url, error_cls, require_success)
    return response.text


async def run_blocking(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """
    Run a blocking function in a thread pool to avoid blocking the event loop.
    """

    return await asyncio.to_thread(func, *args, **kwargs)


__all__ = ["fetch_bytes", "fetch_text", "run_blocking"]
