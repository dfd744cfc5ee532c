"""Custom exceptions for license-report."""


class LicenseReportError(Exception):
    """Base exception for all license-report errors."""


class ConfigError(LicenseReportError):
    """Raised when the report configuration cannot be loaded or validated."""


class InvalidRecordError(LicenseReportError):
    """Raised when a package record violates the input contract (e.g. has no name)."""


class RegistryError(LicenseReportError):
    """Raised when the registry document for a package cannot be fetched."""

    def __init__(self, package_name: str, reason: str, status_code: int | None = None):
        self.package_name = package_name
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"registry lookup for '{package_name}' failed: {reason}")


class UnsupportedOutputError(LicenseReportError):
    """Raised when no formatter exists for the requested output style."""
