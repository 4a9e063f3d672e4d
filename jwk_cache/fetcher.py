"""
Fetching of the remote key set and cache lifetime derivation.
"""

import re
from datetime import timedelta
from typing import NamedTuple, Optional

import httpx
from pydantic import ValidationError

from .errors import MalformedResponseError
from .keys import JWKSDocument
from .logging import get_logger

logger = get_logger("jwk_cache.fetcher")

_MAX_AGE = re.compile(r"max-age=([0-9]*)")


class FetchResult(NamedTuple):
    """Decoded key set plus the lifetime it may be cached for."""

    document: JWKSDocument
    cache_age: timedelta


def parse_max_age(cache_control: Optional[str]) -> Optional[timedelta]:
    """Extract the max-age directive of a Cache-Control header.

    Returns None when there is no directive. A directive without a
    non-negative integer value (``max-age=`` or ``max-age=abc``) raises
    MalformedResponseError.
    """
    if not cache_control:
        return None

    match = _MAX_AGE.search(cache_control)
    if match is None:
        return None

    value = match.group(1)
    try:
        return timedelta(seconds=int(value))
    except (ValueError, OverflowError) as exc:
        raise MalformedResponseError(
            "Invalid max-age in cache-control header",
            details={"cache_control": cache_control},
        ) from exc


def _build_result(response: httpx.Response, default_cache_age: timedelta,
                  require_success_status: bool) -> FetchResult:
    if require_success_status:
        response.raise_for_status()

    max_age = parse_max_age(response.headers.get("cache-control"))
    cache_age = default_cache_age if max_age is None else max_age

    try:
        document = JWKSDocument.model_validate_json(response.content)
    except ValidationError as exc:
        raise MalformedResponseError(
            "JWKS response body could not be decoded",
            details={"status_code": response.status_code, "error": str(exc)},
        ) from exc

    logger.debug(
        "JWKS response decoded",
        status_code=response.status_code,
        keys_count=len(document.keys),
        ttl_seconds=cache_age.total_seconds(),
    )
    return FetchResult(document, cache_age)


def fetch_jwks(client: httpx.Client, url: str, default_cache_age: timedelta,
               require_success_status: bool = False) -> FetchResult:
    """GET the key set at ``url`` and decode it.

    Transport errors from httpx propagate unchanged. The status code is
    ignored unless ``require_success_status`` is set.
    """
    response = client.get(url)
    return _build_result(response, default_cache_age, require_success_status)


async def fetch_jwks_async(client: httpx.AsyncClient, url: str, default_cache_age: timedelta,
                           require_success_status: bool = False) -> FetchResult:
    """Coroutine version of fetch_jwks."""
    response = await client.get(url)
    return _build_result(response, default_cache_age, require_success_status)
