"""Data models for the registry engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from license_report.core.config import NOT_AVAILABLE

ResolveStatus = Literal["ok", "skipped", "failed"]


@dataclass(frozen=True)
class RegistryAccessData:
    """Registry URI and optional bearer token for one package lookup."""

    uri: str
    auth_token: str | None = None

    @property
    def headers(self) -> dict[str, str]:
        if not self.auth_token:
            return {}
        return {"Authorization": f"Bearer {self.auth_token}"}


def _as_text(value: Any, *keys: str) -> str | None:
    """Flatten a manifest value that may be a string or an object."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        for key in keys:
            if isinstance(value.get(key), str) and value[key]:
                return value[key]
    return None


@dataclass(frozen=True)
class PackageDetails:
    """Descriptive metadata of one published version."""

    description: str | None = None
    homepage: str | None = None
    repository: str | None = None
    license: str | None = None
    author: str | None = None

    @classmethod
    def from_metadata(cls, metadata: dict[str, Any]) -> PackageDetails:
        author = metadata.get("author")
        if isinstance(author, dict):
            name, email = author.get("name"), author.get("email")
            author_text = f"{name} <{email}>" if name and email else (name or email)
        else:
            author_text = _as_text(author)
        return cls(
            description=_as_text(metadata.get("description")),
            homepage=_as_text(metadata.get("homepage")),
            repository=_as_text(metadata.get("repository"), "url"),
            license=_as_text(metadata.get("license"), "type"),
            author=author_text,
        )


@dataclass(frozen=True)
class RemoteVersionResult:
    """Outcome of resolving one package against the registry.

    ``failed`` results keep every remote field unset; the caller decides how
    to log and report them.
    """

    status: ResolveStatus
    installed_from: str = NOT_AVAILABLE
    remote_version: str | None = None
    latest_remote_version: str | None = None
    latest_remote_modified: str | None = None
    details: PackageDetails | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def skipped(cls, link: str) -> RemoteVersionResult:
        return cls(
            status="skipped",
            installed_from=link,
            remote_version=NOT_AVAILABLE,
            latest_remote_version=NOT_AVAILABLE,
            latest_remote_modified=NOT_AVAILABLE,
        )

    @classmethod
    def failed(cls, error: str) -> RemoteVersionResult:
        return cls(status="failed", error=error)
