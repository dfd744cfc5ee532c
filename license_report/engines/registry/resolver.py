"""Resolve remote, latest and installed-from data for one package."""

from __future__ import annotations

import re
from typing import Any

import structlog

from license_report.core.config import NOT_AVAILABLE
from license_report.engines.registry.client import RegistryClient
from license_report.engines.registry.models import (
    PackageDetails,
    RegistryAccessData,
    RemoteVersionResult,
)
from license_report.engines.registry.semver import max_satisfying, valid
from license_report.exceptions import RegistryError

log = structlog.get_logger("license_report.engine")

LINK_VERSION_RE = re.compile(r"^(http|https|file|git|git\+ssh|git\+https|github):.+", re.IGNORECASE)


def is_link_version(defined_version: str | None) -> bool:
    """Whether the declared version points at a URL/git/file source."""
    return bool(defined_version) and LINK_VERSION_RE.match(defined_version) is not None


def resolve_from_document(
    document: dict[str, Any],
    defined_version: str,
    installed_version: str | None = None,
) -> RemoteVersionResult:
    """Compute the remote fields from an already fetched registry document."""
    versions = document.get("versions")
    if not isinstance(versions, dict) or not versions:
        return RemoteVersionResult.failed("registry document has no versions")

    installed_meta = versions.get(installed_version or defined_version)
    if not isinstance(installed_meta, dict):
        installed_meta = None
    installed_from = (installed_meta or {}).get("_resolved") or NOT_AVAILABLE

    published = list(versions)
    match = max_satisfying(published, defined_version, include_prerelease=True)
    if match is not None:
        remote_version = str(match)
    else:
        remote_version = valid(defined_version) or defined_version

    latest = max_satisfying(published, "*", include_prerelease=False)
    latest_text = str(latest) if latest is not None else NOT_AVAILABLE

    modified = ""
    latest_meta = versions.get(latest_text) if latest is not None else None
    document_time = document.get("time")
    if isinstance(latest_meta, dict) and latest_meta.get("time"):
        modified = str(latest_meta["time"])
    elif isinstance(document_time, dict) and document_time.get("modified"):
        modified = str(document_time["modified"])

    return RemoteVersionResult(
        status="ok",
        installed_from=installed_from,
        remote_version=str(remote_version),
        latest_remote_version=latest_text,
        latest_remote_modified=modified,
        details=PackageDetails.from_metadata(installed_meta) if installed_meta else None,
    )


async def resolve_remote_version(
    client: RegistryClient,
    package_name: str,
    defined_version: str,
    access: RegistryAccessData,
    installed_version: str | None = None,
) -> RemoteVersionResult:
    """Fetch the registry document for *package_name* and resolve versions.

    Link-style specifiers never reach the network. Registry failures are
    returned as a ``failed`` result, never raised.
    """
    if is_link_version(defined_version):
        log.debug("registry.link_version", package=package_name, link=defined_version)
        return RemoteVersionResult.skipped(defined_version)

    try:
        document = await client.get_document(access, package_name)
    except RegistryError as exc:
        return RemoteVersionResult.failed(exc.reason)

    return resolve_from_document(document, defined_version or "", installed_version)
