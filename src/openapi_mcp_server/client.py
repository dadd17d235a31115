#!/usr/bin/env python3
# src/openapi_mcp_server/client.py
"""
Authenticated client for the remote platform API.

``APIClient`` wraps an ``httpx.AsyncClient`` and exposes the single
``request(config)`` capability tools need, plus login and domain selection.
``ClientProvider`` owns the process-wide authenticated instance.
"""

import asyncio
import logging
import time
from typing import Any

import httpx
import orjson

from .config.constants import (
    DEFAULT_HEALTH_POLL_INTERVAL_SECONDS,
    DEFAULT_HEALTH_TIMEOUT_SECONDS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
)
from .config.settings import ServerSettings
from .errors import APIRequestError, AuthenticationError

logger = logging.getLogger(__name__)

HEALTH_PATH = "/healthz"
LOGIN_PATH = "/login"
ME_PATH = "/me"
SELECTED_DOMAIN_PATH = "/selected-domain/{domain_id}"


def _decode_body(response: httpx.Response) -> Any:
    """Parse a JSON body, or return None when there is none."""
    if not response.content:
        return None
    try:
        return orjson.loads(response.content)
    except orjson.JSONDecodeError:
        return None


class APIClient:
    """Thin async client for the remote REST API."""

    def __init__(
        self,
        base_url: str,
        username: str | None = None,
        password: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self._token: str | None = None
        self._http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    async def request(self, config: dict[str, Any]) -> httpx.Response:
        """Send one request described by ``config``.

        ``config`` holds ``method``, ``url`` and optionally ``params``,
        ``json`` and ``headers``.

        Raises:
            APIRequestError: the API answered with a 4xx/5xx status.
            httpx.HTTPError: the request could not be sent.
        """
        method = str(config.get("method", "GET")).upper()
        url = config["url"]
        response = await self._http.request(
            method,
            url,
            params=config.get("params"),
            json=config.get("json"),
            headers=config.get("headers"),
        )

        if response.is_error:
            details = _decode_body(response)
            logger.debug(f"{method} {url} failed with {response.status_code}")
            raise APIRequestError(
                f"Request failed with status code {response.status_code}",
                status=response.status_code,
                status_text=response.reason_phrase,
                details=details,
            )
        return response

    async def wait_until_healthy(
        self,
        timeout: float = DEFAULT_HEALTH_TIMEOUT_SECONDS,
        interval: float = DEFAULT_HEALTH_POLL_INTERVAL_SECONDS,
    ) -> None:
        """Poll the health endpoint until it answers 200 or ``timeout`` runs out."""
        deadline = time.monotonic() + timeout
        while True:
            try:
                response = await self._http.get(HEALTH_PATH)
                if response.status_code == 200:
                    return
                logger.debug(f"API not healthy yet (status {response.status_code})")
            except httpx.HTTPError as e:
                logger.debug(f"API health check failed: {e}")

            if time.monotonic() >= deadline:
                raise AuthenticationError(f"API at {self.base_url} did not become healthy within {timeout}s")
            await asyncio.sleep(interval)

    async def login(self) -> None:
        """Exchange username/password for a bearer token."""
        if not self.username or not self.password:
            raise AuthenticationError("Username and password are required to log in")

        try:
            response = await self.request(
                {"method": "POST", "url": LOGIN_PATH, "json": {"username": self.username, "password": self.password}}
            )
        except APIRequestError as e:
            raise AuthenticationError(f"Login failed: {e}", data=e.details) from e

        token = ((_decode_body(response) or {}).get("data") or {}).get("token")
        if not token:
            raise AuthenticationError("Login response did not contain a token")

        self._token = token
        self._http.headers["Authorization"] = f"Bearer {token}"
        logger.info("Successfully authenticated with the API")

    async def set_selected_domain(self, domain_id: str) -> None:
        await self.request({"method": "POST", "url": SELECTED_DOMAIN_PATH.format(domain_id=domain_id)})

    async def me(self) -> dict[str, Any]:
        """Return the current user session (user, active domain, domains)."""
        response = await self.request({"method": "GET", "url": ME_PATH})
        return (_decode_body(response) or {}).get("data") or {}

    async def select_domain(self, domain_id: str) -> dict[str, Any]:
        """Select ``domain_id`` and verify the server agrees."""
        await self.set_selected_domain(domain_id)
        session = await self.me()

        active_domain_id = session.get("domain")
        domains = session.get("domains") or []
        active = next((d for d in domains if isinstance(d, dict) and d.get("id") == active_domain_id), None)
        user_name = (session.get("user") or {}).get("name", "unknown")
        logger.info(f"User: {user_name}")
        logger.info(f"Active domain: {(active or {}).get('name', active_domain_id)} (ID: {active_domain_id})")

        if active_domain_id != domain_id:
            raise AuthenticationError(
                f"Domain configuration error: Unable to set domain to {domain_id}. "
                f"Server responded with domain {active_domain_id}"
            )
        return session

    async def close(self) -> None:
        await self._http.aclose()


class ClientProvider:
    """Create, authenticate and hand out the process-wide ``APIClient``.

    The first call does the health wait, login and domain selection; later
    calls return the same instance.
    """

    def __init__(self, settings: ServerSettings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self._transport = transport
        self._client: APIClient | None = None
        self._lock = asyncio.Lock()

    async def __call__(self) -> APIClient:
        if self._client is not None:
            return self._client

        async with self._lock:
            if self._client is None:
                self._client = await self._connect()
        return self._client

    async def _connect(self) -> APIClient:
        settings = self.settings
        if not settings.has_credentials:
            raise AuthenticationError("API username and password environment variables must be set")

        client = APIClient(
            settings.api_base_url,
            username=settings.username,
            password=settings.password,
            transport=self._transport,
        )
        try:
            logger.info(
                f"Waiting for API at {settings.api_base_url} to be healthy (timeout: {settings.health_timeout}s)..."
            )
            await client.wait_until_healthy(settings.health_timeout)
            await client.login()
            if settings.domain_id:
                await client.select_domain(settings.domain_id)
        except AuthenticationError:
            await client.close()
            raise
        except (APIRequestError, httpx.HTTPError) as e:
            await client.close()
            raise AuthenticationError(f"Could not connect to API at {settings.api_base_url}: {e}") from e
        except Exception:
            await client.close()
            raise
        return client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
