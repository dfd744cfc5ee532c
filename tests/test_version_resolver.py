"""Tests for remote version resolution against registry documents."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from license_report.engines.registry.models import PackageDetails, RegistryAccessData
from license_report.engines.registry.resolver import (
    is_link_version,
    resolve_from_document,
    resolve_remote_version,
)
from license_report.exceptions import RegistryError

ACCESS = RegistryAccessData(uri="https://registry.example/")


class TestIsLinkVersion:
    @pytest.mark.parametrize(
        "specifier",
        [
            "git+https://example.com/x.git",
            "git+ssh://git@github.com/o/r.git",
            "git://github.com/o/r.git",
            "github:owner/repo",
            "file:../local",
            "http://example.com/pkg.tgz",
            "HTTPS://EXAMPLE.COM/pkg.tgz",
        ],
    )
    def test_link_versions(self, specifier):
        assert is_link_version(specifier)

    @pytest.mark.parametrize("specifier", ["^1.0.0", "1.2.3", "latest", "", None, "npm:other@1", "file:"])
    def test_registry_versions(self, specifier):
        assert not is_link_version(specifier)


class TestResolveFromDocument:
    def test_left_pad(self, left_pad_document):
        result = resolve_from_document(left_pad_document, "^1.3.0", "1.3.0")
        assert result.ok
        assert result.remote_version == "1.3.1"
        assert result.latest_remote_version == "1.3.1"
        assert result.latest_remote_modified == "2020-04-01T10:00:00.000Z"
        assert result.installed_from == "https://registry.npmjs.org/left-pad/-/left-pad-1.3.0.tgz"

    def test_details_of_installed_version(self, left_pad_document):
        result = resolve_from_document(left_pad_document, "^1.3.0", "1.3.0")
        assert result.details == PackageDetails(license="WTFPL", author="azer <azer@example.com>")

    def test_installed_version_unknown(self, left_pad_document):
        result = resolve_from_document(left_pad_document, "^1.3.0")
        assert result.installed_from == "n/a"
        assert result.details is None

    def test_modified_falls_back_to_document_time(self):
        doc = {"versions": {"1.0.0": {}}, "time": {"modified": "2023-01-01T00:00:00Z"}}
        assert resolve_from_document(doc, "1.0.0").latest_remote_modified == "2023-01-01T00:00:00Z"

    def test_modified_empty_when_unknown(self):
        assert resolve_from_document({"versions": {"1.0.0": {}}}, "1.0.0").latest_remote_modified == ""

    def test_prereleases_in_remote_but_not_latest(self):
        doc = {"versions": {"1.0.0": {}, "1.1.0-beta.1": {}}}
        result = resolve_from_document(doc, "^1.0.0")
        assert result.remote_version == "1.1.0-beta.1"
        assert result.latest_remote_version == "1.0.0"

    def test_only_prereleases(self):
        doc = {"versions": {"2.0.0-rc.1": {}}}
        result = resolve_from_document(doc, "2.0.0-rc.1")
        assert result.remote_version == "2.0.0-rc.1"
        assert result.latest_remote_version == "n/a"

    def test_unsatisfied_exact_version_is_cleaned(self):
        result = resolve_from_document({"versions": {"1.0.0": {}}}, "v3.0.0")
        assert result.remote_version == "3.0.0"

    def test_unsatisfied_range_returns_raw_specifier(self):
        result = resolve_from_document({"versions": {"1.0.0": {}}}, "^9.0.0")
        assert result.remote_version == "^9.0.0"
        result = resolve_from_document({"versions": {"1.0.0": {}}}, "latest")
        assert result.remote_version == "latest"

    def test_remote_version_is_string(self, left_pad_document):
        result = resolve_from_document(left_pad_document, "1.3.x")
        assert isinstance(result.remote_version, str)

    def test_no_versions(self):
        result = resolve_from_document({"name": "empty"}, "^1.0.0")
        assert result.status == "failed"
        assert result.remote_version is None

    def test_idempotent(self, left_pad_document):
        first = resolve_from_document(left_pad_document, "^1.3.0", "1.3.0")
        second = resolve_from_document(left_pad_document, "^1.3.0", "1.3.0")
        assert first == second


class TestResolveRemoteVersion:
    @pytest.mark.anyio
    async def test_link_version_skips_network(self):
        client = AsyncMock()
        result = await resolve_remote_version(
            client, "x", "git+https://example.com/x.git", ACCESS
        )
        client.get_document.assert_not_called()
        assert result.status == "skipped"
        assert result.installed_from == "git+https://example.com/x.git"
        assert result.remote_version == "n/a"
        assert result.latest_remote_version == "n/a"
        assert result.latest_remote_modified == "n/a"

    @pytest.mark.anyio
    async def test_registry_error_becomes_failed_result(self):
        client = AsyncMock()
        client.get_document.side_effect = RegistryError("pkg", "HTTP 500 Internal Server Error", 500)
        result = await resolve_remote_version(client, "pkg", "^1.0.0", ACCESS)
        assert result.status == "failed"
        assert result.error == "HTTP 500 Internal Server Error"
        assert result.installed_from == "n/a"
        assert result.remote_version is None

    @pytest.mark.anyio
    async def test_end_to_end(self, registry_transport, make_client, left_pad_document):
        calls: list[httpx.Request] = []
        async with make_client(registry_transport({"left-pad": left_pad_document}, calls)) as client:
            result = await resolve_remote_version(
                client, "left-pad", "^1.3.0", ACCESS, installed_version="1.3.0"
            )
        assert result.remote_version == "1.3.1"
        assert result.latest_remote_version == "1.3.1"
        assert len(calls) == 1

    @pytest.mark.anyio
    async def test_not_found(self, registry_transport, make_client):
        async with make_client(registry_transport({})) as client:
            result = await resolve_remote_version(client, "ghost", "^1.0.0", ACCESS)
        assert result.status == "failed"
        assert "404" in result.error
