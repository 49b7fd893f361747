"""CiaoConfig: the single entry point a CIP uses for its configuration.

On construction a CIP's configuration is resolved exactly once:

- With an etcd URL, etcd is used.  If configuration already exists under
  ``ciao/<name>/<version>`` it is loaded, otherwise the defaults are seeded.
  If etcd cannot be reached construction fails; there is deliberately no
  fallback to a local file.
- Without an etcd URL, a ``<name>-<version>.properties`` file is looked up
  in the given directory (``~/.ciao`` by default) and created from the
  defaults if missing.

All configuration values in a CIP should be read through this class.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from typing import Any

from ciao_configuration.args import settings_from_args
from ciao_configuration.errors import (
    CiaoConfigurationError,
    NotInitialisedError,
    StoreUnavailableError,
)
from ciao_configuration.models import BootstrapSettings, CipIdentity
from ciao_configuration.properties import CipProperties
from ciao_configuration.store.base import PropertyStore, bootstrap, create_property_store
from ciao_configuration.telemetry import (
    BOOTSTRAP_EVENT,
    NoOpTelemetrySink,
    TelemetryEvent,
    TelemetrySink,
)

logger = logging.getLogger(__name__)


class BootstrapState(str, Enum):
    UNRESOLVED = "unresolved"
    BACKEND_SELECTED = "backend_selected"
    BOOTSTRAPPED = "bootstrapped"
    FAILED = "failed"


class CiaoConfig:
    """Resolved configuration of one CIP, backed by etcd or a local file."""

    state: BootstrapState = BootstrapState.UNRESOLVED
    store: PropertyStore | None = None
    _properties: CipProperties | None = None

    def __init__(
        self,
        cip_name: str,
        version: str,
        default_config: Mapping[str, Any] | None = None,
        *,
        etcd_url: str | None = None,
        config_path: str | None = None,
        classifier: str | None = None,
        etcd_client_factory: Callable[..., Any] | None = None,
        etcd_read_timeout: float = 60.0,
        telemetry_sink: TelemetrySink | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._log = log or logger
        self._telemetry = telemetry_sink or NoOpTelemetrySink()
        identity = CipIdentity(name=cip_name, version=version, classifier=classifier)
        self._initialise(
            identity,
            default_config,
            etcd_url=etcd_url,
            config_path=config_path,
            etcd_client_factory=etcd_client_factory,
            etcd_read_timeout=etcd_read_timeout,
        )

    @classmethod
    def from_properties(
        cls,
        cip_properties: CipProperties,
        *,
        telemetry_sink: TelemetrySink | None = None,
        log: logging.Logger | None = None,
    ) -> CiaoConfig:
        """Wrap an already-resolved property set without touching any backend."""
        if cip_properties is None:
            raise ValueError("cip_properties is required")
        config = cls.__new__(cls)
        config._log = log or logger
        config._telemetry = telemetry_sink or NoOpTelemetrySink()
        config._properties = cip_properties
        config.state = BootstrapState.BOOTSTRAPPED
        return config

    @classmethod
    def from_settings(cls, settings: BootstrapSettings, **kwargs: Any) -> CiaoConfig:
        return cls(
            settings.cip_name,
            settings.version,
            settings.defaults,
            etcd_url=settings.etcd_url,
            config_path=settings.config_path,
            classifier=settings.classifier,
            etcd_read_timeout=settings.etcd_read_timeout,
            **kwargs,
        )

    @classmethod
    def from_cli_args(
        cls,
        argv: Sequence[str] | None,
        cip_name: str,
        version: str,
        default_config: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> CiaoConfig:
        """Resolve configuration from ``--etcd-url`` / ``--config-path`` / ``--classifier``."""
        settings = settings_from_args(argv, cip_name, version, default_config)
        return cls.from_settings(settings, **kwargs)

    def _initialise(
        self,
        identity: CipIdentity,
        default_config: Mapping[str, Any] | None,
        *,
        etcd_url: str | None,
        config_path: str | None,
        etcd_client_factory: Callable[..., Any] | None,
        etcd_read_timeout: float,
    ) -> None:
        if not etcd_url:
            self._log.debug("No ETCD URL provided, using local configuration")
        self.store = create_property_store(
            etcd_url,
            config_path,
            etcd_client_factory=etcd_client_factory,
            etcd_read_timeout=etcd_read_timeout,
            log=self._log,
        )
        self.state = BootstrapState.BACKEND_SELECTED

        try:
            result = bootstrap(self.store, identity, default_config, log=self._log)
        except CiaoConfigurationError as exc:
            self._fail(identity, exc)
            raise
        except Exception as exc:  # noqa: BLE001
            self._log.exception("Unexpected %s backend failure", self.store.backend)
            wrapped = StoreUnavailableError(
                f"{self.store.backend} backend at {self.store.location} failed: {exc}"
            )
            self._fail(identity, wrapped)
            raise wrapped from exc

        self._properties = result.properties
        self.state = BootstrapState.BOOTSTRAPPED
        self._emit(identity, result.branch.value)

    def _fail(self, identity: CipIdentity, exc: CiaoConfigurationError) -> None:
        self.state = BootstrapState.FAILED
        if isinstance(exc, StoreUnavailableError) and self.store.backend == "etcd":
            self._log.error("Can't connect to ETCD URL provided: %s", self.store.location)
        else:
            self._log.error(
                "Unable to initialise %s config for %s: %s",
                self.store.backend, identity, exc,
            )
        self._emit(identity, "failed", error=type(exc).__name__)

    def _emit(self, identity: CipIdentity, outcome: str, **extra: Any) -> None:
        self._telemetry.emit(TelemetryEvent(
            name=BOOTSTRAP_EVENT,
            attributes={
                "backend": self.store.backend,
                "location": self.store.location,
                "outcome": outcome,
                "cip_name": identity.name,
                "version": identity.version,
                "classifier": identity.classifier,
                **extra,
            },
        ))

    def _require_properties(self) -> CipProperties:
        if self._properties is None:
            raise NotInitialisedError(
                "Configuration not initialised correctly - see error logs for details."
            )
        return self._properties

    def get_cip_name(self) -> str:
        return self._require_properties().get_cip_name()

    def get_version(self) -> str:
        return self._require_properties().get_version()

    def get_classifier(self) -> str | None:
        return self._require_properties().get_classifier()

    def get_config_value(self, key: str) -> str | None:
        """Value for *key*, or None when it is not configured."""
        return self._require_properties().get_config_value(key)

    def get_config_keys(self) -> set[str]:
        return self._require_properties().get_config_keys()

    def get_all_properties(self) -> dict[str, str]:
        return self._require_properties().get_all_properties()

    def __str__(self) -> str:
        if self._properties is None:
            return "Config not initialised"
        return str(self._properties)
