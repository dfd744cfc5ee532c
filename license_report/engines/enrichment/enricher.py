"""Enrich a single package record — registry, license text, license expression."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path

import structlog

from license_report.core.config import ReportConfig
from license_report.engines.enrichment.models import PackageRecord
from license_report.engines.license.expression import parse_license_expression
from license_report.engines.license.text import license_text_for
from license_report.engines.registry.access import resolve_registry_access
from license_report.engines.registry.client import RegistryClient
from license_report.engines.registry.resolver import resolve_remote_version
from license_report.exceptions import InvalidRecordError

log = structlog.get_logger("license_report.engine")


async def enrich_package(
    record: PackageRecord,
    config: ReportConfig,
    project_root: str | Path,
    client: RegistryClient,
    *,
    cwd: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> PackageRecord:
    """Return a new record carrying registry and license data for *record*.

    License text is only read when ``licenseText`` is a configured field and
    the license expression is only split when ``possibleLicenses`` is.
    Registry failures leave the remote fields unset; a record without a
    name raises :class:`InvalidRecordError`.
    """
    if not record.name:
        raise InvalidRecordError(f"package record without a name: {record!r}")

    access = resolve_registry_access(record.name, config.registry, environ)
    remote = await resolve_remote_version(
        client,
        record.name,
        record.defined_version,
        access,
        installed_version=record.installed_version,
    )
    if remote.status == "failed":
        log.info("enricher.remote_failed", package=record.name, error=remote.error)

    enriched = replace(
        record,
        installed_version=record.installed_version or record.defined_version,
        installed_from=remote.installed_from,
        link=remote.installed_from,
        remote_version=remote.remote_version,
        latest_remote_version=remote.latest_remote_version,
        latest_remote_modified=remote.latest_remote_modified,
        comment=remote.remote_version,
    )
    if remote.details is not None:
        enriched = replace(
            enriched,
            author=enriched.author or remote.details.author,
            license_type=enriched.license_type or remote.details.license,
        )

    if config.wants("licenseText"):
        text = await asyncio.to_thread(license_text_for, record.name, project_root, cwd)
        enriched = replace(enriched, license_text=text)

    if config.wants("possibleLicenses"):
        possible = parse_license_expression(enriched.license_type)
        enriched = replace(
            enriched,
            possible_licenses=tuple(possible),
            license_type=possible[0] if possible else enriched.license_type,
        )

    return enriched
