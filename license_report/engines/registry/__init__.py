"""Registry engine — access resolution, version ranges and remote lookups."""

from license_report.engines.registry.access import resolve_registry_access
from license_report.engines.registry.client import RegistryClient
from license_report.engines.registry.models import (
    PackageDetails,
    RegistryAccessData,
    RemoteVersionResult,
)
from license_report.engines.registry.resolver import is_link_version, resolve_remote_version

__all__ = [
    "PackageDetails",
    "RegistryAccessData",
    "RegistryClient",
    "RemoteVersionResult",
    "is_link_version",
    "resolve_registry_access",
    "resolve_remote_version",
]
