"""File-backed property store.

One ``.properties`` file per identity, named
``<name>-<version>[-<classifier>].properties``, inside a configuration
directory (``~/.ciao`` unless the CIP supplies its own path).  The directory
is created on first use.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ciao_configuration.errors import ConfigNotFoundError, StoreUnavailableError
from ciao_configuration.models import CipIdentity
from ciao_configuration.properties import CipProperties
from ciao_configuration.properties_file import read_properties, write_properties
from ciao_configuration.store.base import require_defaults

logger = logging.getLogger(__name__)

FILE_SUFFIX = ".properties"


def default_config_directory() -> Path:
    return Path.home() / ".ciao"


def properties_file_name(identity: CipIdentity) -> str:
    return "-".join(identity.segments) + FILE_SUFFIX


class FilePropertyStore:
    """Property store keeping each configuration set in a local file."""

    backend = "file"

    def __init__(
        self, path: str | Path | None = None, *, log: logging.Logger | None = None,
    ) -> None:
        self.path = Path(path).expanduser() if path else default_config_directory()
        self.location = str(self.path)
        self._log = log or logger

    def file_for(self, identity: CipIdentity) -> Path:
        return self.path / properties_file_name(identity)

    def _ensure_directory(self) -> None:
        try:
            self.path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreUnavailableError(
                f"Configuration directory {self.path} is not usable: {exc}"
            ) from exc

    def _is_file(self, config_file: Path) -> bool:
        try:
            return config_file.is_file()
        except OSError as exc:
            raise StoreUnavailableError(
                f"Unable to inspect config file {config_file}: {exc}"
            ) from exc

    def version_exists(self, identity: CipIdentity) -> bool:
        self._ensure_directory()
        return self._is_file(self.file_for(identity))

    def load_config(self, identity: CipIdentity) -> CipProperties:
        config_file = self.file_for(identity)
        if not self._is_file(config_file):
            raise ConfigNotFoundError(f"No config file found at {config_file}")
        try:
            entries = read_properties(config_file)
        except OSError as exc:
            raise StoreUnavailableError(
                f"Unable to read config file {config_file}: {exc}"
            ) from exc
        except ValueError as exc:
            raise StoreUnavailableError(
                f"Config file {config_file} is not a valid properties file: {exc}"
            ) from exc
        self._log.debug("Loaded %d keys from %s", len(entries), config_file)
        return CipProperties(identity, entries)

    def set_defaults(
        self, identity: CipIdentity, defaults: Mapping[str, Any] | None,
    ) -> CipProperties:
        entries = require_defaults(defaults)
        self._ensure_directory()
        config_file = self.file_for(identity)
        comments = (
            f"Default configuration for {identity}",
            datetime.now(timezone.utc).isoformat(),
        )
        try:
            write_properties(config_file, entries, comments)
        except (OSError, ValueError) as exc:
            raise StoreUnavailableError(
                f"Unable to write config file {config_file}: {exc}"
            ) from exc
        self._log.debug("Wrote %d default keys to %s", len(entries), config_file)
        return CipProperties(identity, entries)
