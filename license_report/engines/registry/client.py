"""Async npm registry client with timeouts and bounded retries."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from license_report.core.config import ReportConfig
from license_report.engines.registry.models import RegistryAccessData
from license_report.exceptions import RegistryError

log = structlog.get_logger("license_report.engine")

_RETRY_BASE_DELAY = 0.5  # seconds


class RegistryClient:
    """Thin async wrapper fetching registry metadata documents."""

    def __init__(
        self,
        *,
        retry_limit: int = 5,
        timeout: float = 30.0,
        retry_delay: float = _RETRY_BASE_DELAY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._retry_limit = retry_limit
        self._retry_delay = retry_delay
        self._client = httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: ReportConfig, **kwargs: Any) -> RegistryClient:
        return cls(
            retry_limit=config.http_retry.limit,
            timeout=config.request_timeout,
            **kwargs,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RegistryClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def get_document(self, access: RegistryAccessData, package_name: str) -> dict[str, Any]:
        """GET ``<uri><package_name>`` and return the parsed JSON document.

        Raises :class:`RegistryError` on a non-success response, on invalid
        JSON, or once the retries are exhausted.
        """
        url = f"{access.uri}{package_name}"
        response = await self._request_with_retry(url, access.headers, package_name)
        try:
            data = response.json()
        except ValueError as exc:
            raise RegistryError(package_name, f"invalid JSON document: {exc}") from exc
        if not isinstance(data, dict):
            raise RegistryError(package_name, "registry document is not a JSON object")
        return data

    # ── internal ───────────────────────────────────────────────────────────

    async def _request_with_retry(
        self,
        url: str,
        headers: dict[str, str],
        package_name: str,
    ) -> httpx.Response:
        """GET with exponential backoff on 5xx, 429, timeout and connection errors."""
        attempts = self._retry_limit + 1
        last_reason = "no request made"
        last_status: int | None = None
        for attempt in range(attempts):
            try:
                resp = await self._client.get(url, headers=headers)
            except httpx.TimeoutException:
                log.debug("registry.timeout", url=url, attempt=attempt + 1, max_attempts=attempts)
                last_reason = "request timed out"
            except httpx.TransportError as exc:
                log.debug(
                    "registry.transport_error",
                    url=url,
                    error=str(exc),
                    attempt=attempt + 1,
                    max_attempts=attempts,
                )
                last_reason = f"{type(exc).__name__}: {exc}"
            except httpx.HTTPError as exc:
                # redirect loops, undecodable bodies: not retryable
                raise RegistryError(package_name, f"{type(exc).__name__}: {exc}") from exc
            else:
                if resp.is_success:
                    return resp
                last_status = resp.status_code
                last_reason = f"HTTP {resp.status_code} {resp.reason_phrase}".strip()
                if resp.status_code < 500 and resp.status_code != 429:
                    raise RegistryError(package_name, last_reason, resp.status_code)
                log.debug(
                    "registry.server_error",
                    url=url,
                    status=resp.status_code,
                    attempt=attempt + 1,
                    max_attempts=attempts,
                )

            if attempt < attempts - 1:
                await asyncio.sleep(self._retry_delay * (2**attempt))

        raise RegistryError(package_name, last_reason, last_status)
