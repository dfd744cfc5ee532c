"""Locate installed packages and read their license files."""

from __future__ import annotations

import re
from pathlib import Path

import structlog

from license_report.core.config import NOT_AVAILABLE

log = structlog.get_logger("license_report.engine")

LICENSE_FILE_NAMES = (
    "LICENSE",
    "LICENSE.txt",
    "LICENSE.md",
    "license",
    "license.txt",
    "license.md",
    "LICENCE",
    "LICENCE.txt",
    "LICENCE.md",
    "licence",
    "licence.txt",
    "licence.md",
)

_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")


def normalize_license_text(text: str) -> str:
    """Unify line endings, collapse runs of blank lines, trim."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return _EXCESS_NEWLINES_RE.sub("\n\n", text).strip()


def extract_license_text(package_dir: str | Path) -> str:
    """Return the first readable license file in *package_dir*, or ``"n/a"``.

    Unreadable candidates are logged and skipped.
    """
    base = Path(package_dir)
    for file_name in LICENSE_FILE_NAMES:
        candidate = base / file_name
        try:
            if not candidate.is_file():
                continue
            content = candidate.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            log.warning("license.read_failed", path=str(candidate), error=str(exc))
            continue
        return normalize_license_text(content)
    return NOT_AVAILABLE


def find_package_dir(
    package_name: str,
    project_root: str | Path,
    cwd: str | Path | None = None,
) -> Path | None:
    """Find the installed directory of *package_name*.

    Probes ``node_modules`` under the project root, its parent, its
    grandparent and finally the working directory.
    """
    root = Path(project_root)
    work_dir = Path.cwd() if cwd is None else Path(cwd)
    candidates = (
        root / "node_modules" / package_name,
        root / ".." / "node_modules" / package_name,
        root / ".." / ".." / "node_modules" / package_name,
        work_dir / "node_modules" / package_name,
    )
    for candidate in candidates:
        try:
            if candidate.exists():
                return candidate
        except OSError as exc:
            log.debug("license.probe_failed", path=str(candidate), error=str(exc))
    return None


def license_text_for(
    package_name: str,
    project_root: str | Path,
    cwd: str | Path | None = None,
) -> str:
    """License text of an installed package, ``"n/a"`` when not installed."""
    package_dir = find_package_dir(package_name, project_root, cwd)
    if package_dir is None:
        return NOT_AVAILABLE
    return extract_license_text(package_dir)
