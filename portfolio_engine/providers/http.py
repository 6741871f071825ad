"""Shared aiohttp GET helper for market data providers."""
from __future__ import annotations

import logging
import math
import ssl
from typing import Any

import aiohttp
import certifi

logger = logging.getLogger(__name__)


class ProviderError(RuntimeError):
    """A data provider failed to return usable data."""


async def fetch_json(
    url: str,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float = 8,
) -> Any:
    """GET ``url`` and decode the JSON body; raise ProviderError on HTTP errors."""
    logger.debug("GET %s", url)
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context)

    async with aiohttp.ClientSession(connector=connector) as session:
        async with session.get(
            url,
            params=params,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as response:
            if response.status != 200:
                raise ProviderError(f"HTTP {response.status} from {url}")
            return await response.json(content_type=None)


def to_float(value: Any, default: float = 0.0) -> float:
    """Coerce an API field to float, ``default`` when absent or malformed."""
    if value is None:
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return default if math.isnan(result) else result
