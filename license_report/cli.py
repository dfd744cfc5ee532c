"""CLI entry point: license-report.

Usage:
    license-report deps.json                          # enrich and print JSON
    license-report deps.json --project-root ./app     # where node_modules lives
    license-report deps.json --config report.json     # custom fields / registry
    license-report deps.json --output tree -v

``deps.json`` is the dependency walker's output: a JSON array of package
objects with at least ``name`` and ``definedVersion`` (or ``version``).
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import click

from license_report.core.config import load_config
from license_report.core.logging import setup_logging
from license_report.engines.enrichment.models import PackageRecord
from license_report.engines.enrichment.runner import EnrichmentRunner
from license_report.engines.report.formatter import get_formatter
from license_report.exceptions import ConfigError, InvalidRecordError, UnsupportedOutputError


def _load_records(path: Path) -> list[PackageRecord]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise click.ClickException(f"{path} must contain a JSON array of package objects")
    return [PackageRecord.from_mapping(item) for item in data]


@click.command()
@click.argument(
    "records_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--project-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Project directory whose node_modules holds the installed packages",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON config file merged over the defaults",
)
@click.option("--output", "output_style", default=None, help="Output style: json | tree")
@click.option("--concurrency", type=click.IntRange(min=1), default=None, help="Parallel lookups")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(
    records_file: Path,
    project_root: Path,
    config_path: Path | None,
    output_style: str | None,
    concurrency: int | None,
    verbose: bool,
) -> None:
    """Enrich dependency records with license data and print the report."""
    setup_logging("DEBUG" if verbose else None)

    overrides: dict[str, object] = {}
    if output_style:
        overrides["output"] = output_style
    if concurrency:
        overrides["concurrency"] = concurrency

    try:
        config = load_config(config_path, overrides)
        formatter = get_formatter(config.output)
    except (ConfigError, UnsupportedOutputError) as exc:
        raise click.ClickException(str(exc)) from exc

    records = _load_records(records_file)
    runner = EnrichmentRunner(config, project_root)
    try:
        enriched = asyncio.run(runner.run(records))
    except InvalidRecordError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(formatter(enriched, config))


if __name__ == "__main__":
    main()
