"""EnrichmentRunner — enrich many package records with bounded concurrency."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from dataclasses import replace
from pathlib import Path

import structlog

from license_report.core.config import NOT_AVAILABLE, ReportConfig
from license_report.engines.enrichment.enricher import enrich_package
from license_report.engines.enrichment.models import PackageRecord
from license_report.engines.registry.client import RegistryClient
from license_report.exceptions import InvalidRecordError

log = structlog.get_logger("license_report.engine")


class EnrichmentRunner:
    """Orchestration layer: one :func:`enrich_package` task per record."""

    def __init__(
        self,
        config: ReportConfig,
        project_root: str | Path,
        *,
        cwd: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._config = config
        self._project_root = project_root
        self._cwd = cwd
        self._environ = environ

    async def run(
        self,
        records: Iterable[PackageRecord],
        client: RegistryClient | None = None,
    ) -> list[PackageRecord]:
        """Enrich all non-excluded *records*, preserving input order.

        Per-package registry and filesystem failures are absorbed into the
        record; contract violations raise before any lookup starts.
        """
        selected: list[PackageRecord] = []
        for record in records:
            if not record.name:
                raise InvalidRecordError(f"package record without a name: {record!r}")
            if record.name in self._config.exclude:
                log.debug("enricher.excluded", package=record.name)
                continue
            selected.append(record)

        if not selected:
            return []

        if client is None:
            async with RegistryClient.from_config(self._config) as owned:
                return await self._run_all(selected, owned)
        return await self._run_all(selected, client)

    async def _run_all(
        self,
        records: list[PackageRecord],
        client: RegistryClient,
    ) -> list[PackageRecord]:
        sem = asyncio.Semaphore(self._config.concurrency)

        async def _run_one(record: PackageRecord) -> PackageRecord:
            async with sem:
                try:
                    return await enrich_package(
                        record,
                        self._config,
                        self._project_root,
                        client,
                        cwd=self._cwd,
                        environ=self._environ,
                    )
                except InvalidRecordError:
                    raise
                except Exception as exc:
                    log.error("enricher.failed", package=record.name, error=str(exc))
                    return replace(record, installed_from=NOT_AVAILABLE, link=NOT_AVAILABLE)

        results = await asyncio.gather(*(_run_one(r) for r in records))
        log.info("enricher.done", packages=len(results))
        return list(results)
