#!/usr/bin/env python3
# src/openapi_mcp_server/openapi/loader.py
"""
API description loader with an in-memory and on-disk cache.

The description is fetched from ``{base_url}/openapi.json``, kept in memory
and written to ``{cache_dir}/openapi.json`` together with its fetch time.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Any

import httpx
import orjson

from ..config.constants import (
    DEFAULT_CACHE_DIR,
    DEFAULT_CACHE_FILENAME,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_FETCH_RETRIES,
    DEFAULT_RETRY_DELAY_SECONDS,
)
from ..constants import OPENAPI_PATH
from ..errors import OpenAPIFetchError

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class OpenAPILoader:
    """Fetch and cache the remote API description."""

    def __init__(
        self,
        base_url: str,
        cache_dir: str | Path = DEFAULT_CACHE_DIR,
        cache_ttl: float = DEFAULT_CACHE_TTL_SECONDS,
        max_retries: int = DEFAULT_FETCH_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache_file = Path(cache_dir) / DEFAULT_CACHE_FILENAME
        self.cache_ttl = cache_ttl
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self._transport = transport

        self._spec: dict[str, Any] | None = None
        self._last_fetch = 0
        self._lock = asyncio.Lock()

    @property
    def url(self) -> str:
        return f"{self.base_url}{OPENAPI_PATH}"

    async def get_spec(self) -> dict[str, Any]:
        """Return the API description, fetching it only when no fresh copy exists."""
        async with self._lock:
            if self._spec is not None and self._is_fresh(self._last_fetch):
                return self._spec

            cached = self._load_from_cache()
            if cached is not None:
                self._spec, self._last_fetch = cached
                return self._spec

            return await self._fetch_spec()

    async def _fetch_spec(self) -> dict[str, Any]:
        """Fetch with bounded retry; the delay grows linearly with the attempt number."""
        last_error: Exception | None = None

        async with httpx.AsyncClient(transport=self._transport) as client:
            for attempt in range(1, self.max_retries + 1):
                try:
                    logger.info(f"Fetching OpenAPI spec from {self.url} (attempt {attempt}/{self.max_retries})")
                    response = await client.get(self.url)
                    response.raise_for_status()
                    spec = orjson.loads(response.content)
                    if not isinstance(spec, dict):
                        raise ValueError("OpenAPI document is not a JSON object")
                except (httpx.HTTPError, orjson.JSONDecodeError, ValueError) as e:
                    last_error = e
                    logger.warning(f"Failed to fetch OpenAPI spec (attempt {attempt}): {e}")
                    if attempt < self.max_retries:
                        await asyncio.sleep(self.retry_delay * attempt)
                    continue

                self._spec = spec
                self._last_fetch = _now_ms()
                self._save_to_cache()
                logger.info("Successfully fetched OpenAPI spec")
                return spec

        raise OpenAPIFetchError(
            f"Failed to fetch OpenAPI spec after {self.max_retries} attempts",
            data={"url": self.url, "error": str(last_error)},
        )

    def _load_from_cache(self) -> tuple[dict[str, Any], int] | None:
        """Read the cache file if it exists and is still fresh."""
        try:
            cached = orjson.loads(self.cache_file.read_bytes())
        except FileNotFoundError:
            return None
        except (OSError, orjson.JSONDecodeError) as e:
            logger.debug(f"Ignoring unreadable OpenAPI cache {self.cache_file}: {e}")
            return None

        if not isinstance(cached, dict) or not isinstance(cached.get("spec"), dict):
            return None

        last_fetch = cached.get("lastFetch", 0)
        if not isinstance(last_fetch, int | float) or not self._is_fresh(last_fetch):
            return None

        logger.info("Loaded OpenAPI spec from cache")
        return cached["spec"], int(last_fetch)

    def _save_to_cache(self) -> None:
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            self.cache_file.write_bytes(
                orjson.dumps({"spec": self._spec, "lastFetch": self._last_fetch}, option=orjson.OPT_INDENT_2)
            )
        except OSError as e:
            logger.error(f"Failed to save OpenAPI spec to cache: {e}")

    def _is_fresh(self, last_fetch: float) -> bool:
        return _now_ms() - last_fetch < self.cache_ttl * 1000

    def clear_cache(self) -> None:
        """Forget the in-memory copy; the next call re-reads the file cache or fetches."""
        self._spec = None
        self._last_fetch = 0
