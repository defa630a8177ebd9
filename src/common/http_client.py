"""Shared async HTTP helpers used by the registry client.

Encapsulates session creation and transport error handling so callers only
deal with a ``(status, headers, body)`` triple. The body is returned as raw
bytes; decoding belongs to the caller. A status of 0 means the request never
produced a response (timeout or connection failure) and the body holds the
reason. Requests are attempted exactly once.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Tuple

import aiohttp

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

USER_AGENT = "depfresh/1.0"


def create_session(timeout: int = Constants.REQUEST_TIMEOUT) -> aiohttp.ClientSession:
    """Create a client session with the project-wide timeout and headers.

    Must be called from within a running event loop.
    """
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=timeout),
        headers={"User-Agent": USER_AGENT},
    )


async def robust_get(
    session: aiohttp.ClientSession,
    url: str,
    *,
    context: str,
    headers: Optional[Dict[str, str]] = None,
) -> Tuple[int, Dict[str, str], bytes]:
    """Perform a single GET request with DEBUG traces.

    Args:
        session: Open aiohttp session.
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "npm").
        headers: Optional request headers.

    Returns:
        Tuple of (status_code, headers_dict, body_bytes). status_code is 0 when
        the request failed before a response arrived and the body is the
        encoded reason.
    """
    safe_target = safe_url(url)
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context,
                ),
            )
        try:
            async with session.get(url, headers=headers) as response:
                body = await response.read()
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP response",
                        extra=extra_context(
                            event="http_response",
                            component="http_client",
                            action="GET",
                            status_code=response.status,
                            duration_ms=t.duration_ms(),
                            target=safe_target,
                            context=context,
                        ),
                    )
                return response.status, dict(response.headers), body
        except asyncio.TimeoutError:
            logger.debug(
                "HTTP timeout",
                extra=extra_context(
                    event="http_exception",
                    component="http_client",
                    outcome="timeout",
                    target=safe_target,
                    context=context,
                ),
            )
            return 0, {}, f"{context} request timed out".encode()
        except aiohttp.ClientError as exc:
            logger.debug(
                "HTTP request exception",
                extra=extra_context(
                    event="http_exception",
                    component="http_client",
                    outcome="client_error",
                    target=safe_target,
                    context=context,
                ),
            )
            return 0, {}, f"{context} connection error: {exc}".encode()
