"""Enrichment engine — combine registry and license data per package."""

from license_report.engines.enrichment.enricher import enrich_package
from license_report.engines.enrichment.models import PackageRecord
from license_report.engines.enrichment.runner import EnrichmentRunner

__all__ = ["EnrichmentRunner", "PackageRecord", "enrich_package"]
