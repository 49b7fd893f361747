"""Pydantic models for CIP identities and bootstrap inputs."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator


class _StrictModel(BaseModel):
    """Shared strict model settings for configuration contracts."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


def _clean_segment(value: str, field_name: str) -> str:
    cleaned = value.strip()
    if "/" in cleaned:
        raise ValueError(f"{field_name} must not contain '/': {value!r}")
    return cleaned


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def stringify_value(value: Any) -> str:
    """Render a default value the way it is stored in a backend."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def coerce_entries(entries: Mapping[Any, Any]) -> dict[str, str]:
    """Copy a mapping into string keys and string values."""
    return {str(key): stringify_value(value) for key, value in entries.items()}


class CipIdentity(_StrictModel):
    """The (name, version, classifier) tuple addressing one configuration set.

    The classifier lets several running instances of the same CIP version
    hold independent configuration.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    version: str
    classifier: str | None = None

    @field_validator("name", "version")
    @classmethod
    def normalize_required(cls, value: str, info: ValidationInfo) -> str:
        cleaned = _clean_segment(value, info.field_name)
        if not cleaned:
            raise ValueError(f"{info.field_name} must not be empty")
        return cleaned

    @field_validator("classifier")
    @classmethod
    def normalize_classifier(cls, value: str | None) -> str | None:
        cleaned = _optional_text(value)
        if cleaned is None:
            return None
        return _clean_segment(cleaned, "classifier")

    @property
    def segments(self) -> tuple[str, ...]:
        """Name, version and (when set) classifier in addressing order."""
        if self.classifier:
            return (self.name, self.version, self.classifier)
        return (self.name, self.version)

    def __str__(self) -> str:
        return "/".join(self.segments)


class BootstrapSettings(_StrictModel):
    """Everything a CIP supplies to resolve its configuration.

    ``etcd_url`` wins over ``config_path`` when both are set.  Neither set
    means a file store under ``~/.ciao``.
    """

    cip_name: str
    version: str
    classifier: str | None = None
    etcd_url: str | None = None
    config_path: str | None = None
    defaults: dict[str, str] | None = None
    etcd_read_timeout: float = 60.0

    @field_validator("classifier", "etcd_url", "config_path", mode="before")
    @classmethod
    def normalize_optional(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _optional_text(str(value))

    @field_validator("defaults", mode="before")
    @classmethod
    def normalize_defaults(cls, value: Any) -> dict[str, str] | None:
        if value is None:
            return None
        if not isinstance(value, Mapping):
            raise ValueError("defaults must be a mapping")
        return coerce_entries(value)

    @property
    def identity(self) -> CipIdentity:
        return CipIdentity(
            name=self.cip_name, version=self.version, classifier=self.classifier,
        )
