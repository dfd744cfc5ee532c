"""Shared pytest fixtures for license-report tests — no network access needed."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from license_report.core.config import ReportConfig, load_config
from license_report.engines.registry.client import RegistryClient


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def config() -> ReportConfig:
    return load_config()


@pytest.fixture
def left_pad_document() -> dict:
    return {
        "name": "left-pad",
        "versions": {
            "1.3.0": {
                "_resolved": "https://registry.npmjs.org/left-pad/-/left-pad-1.3.0.tgz",
                "license": "WTFPL",
                "author": {"name": "azer", "email": "azer@example.com"},
            },
            "1.3.1": {"time": "2020-04-01T10:00:00.000Z"},
        },
        "time": {"modified": "2022-06-12T00:00:00.000Z"},
    }


@pytest.fixture
def registry_transport() -> Callable[..., httpx.MockTransport]:
    """Build a MockTransport serving ``{package_name: document}``.

    Every request is appended to *calls*; unknown packages get a 404.
    """

    def _build(documents: dict[str, dict], calls: list[httpx.Request] | None = None):
        def handler(request: httpx.Request) -> httpx.Response:
            if calls is not None:
                calls.append(request)
            name = request.url.path.lstrip("/")
            if name not in documents:
                return httpx.Response(404, json={"error": "Not found"})
            return httpx.Response(200, content=json.dumps(documents[name]))

        return httpx.MockTransport(handler)

    return _build


@pytest.fixture
def make_client() -> Callable[..., RegistryClient]:
    def _make(transport: httpx.MockTransport, retry_limit: int = 2) -> RegistryClient:
        return RegistryClient(retry_limit=retry_limit, retry_delay=0, transport=transport)

    return _make
