"""License engine — license text discovery and license expression parsing."""

from license_report.engines.license.expression import parse_license_expression
from license_report.engines.license.text import (
    LICENSE_FILE_NAMES,
    extract_license_text,
    find_package_dir,
    license_text_for,
)

__all__ = [
    "LICENSE_FILE_NAMES",
    "extract_license_text",
    "find_package_dir",
    "license_text_for",
    "parse_license_expression",
]
