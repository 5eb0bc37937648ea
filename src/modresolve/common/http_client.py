"""Shared blocking HTTP helpers used by the protocol resolvers.

Encapsulates request/timeout error handling so resolvers avoid duplicating
try/except blocks. Transport failures and non-200 statuses surface as
``FetchError``; nothing here retries or exits the process.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests

from ..constants import Constants
from ..errors import FetchError
from .logging_utils import Timer, extra_context, is_debug_enabled, safe_url

logger = logging.getLogger(__name__)


def safe_get(
    url: str,
    *,
    context: str,
    timeout: Optional[float] = None,
    **kwargs: Any,
) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "npm", "jsr", "http").
        timeout: Seconds before giving up; defaults to Constants.REQUEST_TIMEOUT.
        **kwargs: Passed through to requests.get.

    Returns:
        requests.Response: The HTTP response object, whatever its status.

    Raises:
        FetchError: On timeout or connection failure.
    """
    safe_target = safe_url(url)
    effective_timeout = timeout if timeout is not None else Constants.REQUEST_TIMEOUT
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
            res = requests.get(url, timeout=effective_timeout, **kwargs)
        except requests.Timeout as exc:
            logger.error(
                "%s request timed out after %s seconds",
                context,
                effective_timeout,
            )
            raise FetchError(url, None, "timed out") from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error: %s", context, exc)
            raise FetchError(url, None, str(exc)) from exc
    if is_debug_enabled(logger):
        logger.debug(
            "HTTP response",
            extra=extra_context(
                event="http_response",
                component="http_client",
                action="GET",
                status_code=res.status_code,
                duration_ms=t.duration_ms(),
                target=safe_target,
                context=context,
            ),
        )
    return res


def fetch_bytes(
    url: str,
    *,
    context: str,
    timeout: Optional[float] = None,
    headers: Optional[Dict[str, str]] = None,
) -> bytes:
    """GET ``url`` and return the body, requiring a 200 status.

    Raises:
        FetchError: Any status other than 200, or a transport failure.
    """
    res = safe_get(url, context=context, timeout=timeout, headers=headers)
    if res.status_code != 200:
        logger.warning(
            "HTTP non-200 received",
            extra=extra_context(
                event="http_response",
                outcome="non_200",
                status_code=res.status_code,
                target=safe_url(url),
                context=context,
            ),
        )
        raise FetchError(url, res.status_code, res.reason or "")
    return res.content


def get_json(
    url: str,
    *,
    context: str,
    timeout: Optional[float] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    """GET ``url`` and parse the body as JSON.

    Raises:
        FetchError: Non-200 status, transport failure, or a body that is not JSON.
    """
    body = fetch_bytes(url, context=context, timeout=timeout, headers=headers)
    try:
        return json.loads(body)
    except ValueError as exc:
        if is_debug_enabled(logger):
            logger.debug(
                "JSON decode error",
                extra=extra_context(
                    event="parse",
                    component="http_client",
                    action="get_json",
                    outcome="json_decode_error",
                    target=safe_url(url),
                ),
            )
        raise FetchError(url, 200, "response is not valid JSON") from exc
