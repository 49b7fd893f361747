"""Property store protocol and the bootstrap protocol that drives it.

A property store knows how to answer three questions for a CIP identity:
does a configuration set exist, what does it hold, and how to seed it
with defaults the first time.  Two stores exist (etcd and file); the
bootstrap protocol below is identical for both:

1. ``version_exists``, which never mutates configuration storage
2. existing set → ``load_config``
3. no set → ``set_defaults`` (defaults are mandatory at this point)

No compare-and-set is attempted between steps 1 and 3: two processes
seeding the same identity concurrently both write, and the last writer wins.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from ciao_configuration.errors import InvalidDefaultsError, MissingDefaultsError
from ciao_configuration.models import CipIdentity, coerce_entries
from ciao_configuration.properties import CipProperties

logger = logging.getLogger(__name__)


@runtime_checkable
class PropertyStore(Protocol):
    """Backend holding versioned configuration sets.

    Implementations translate every backend failure into
    :class:`~ciao_configuration.errors.StoreUnavailableError`.
    """

    backend: str
    location: str

    def version_exists(self, identity: CipIdentity) -> bool: ...

    def load_config(self, identity: CipIdentity) -> CipProperties: ...

    def set_defaults(
        self, identity: CipIdentity, defaults: Mapping[str, Any] | None,
    ) -> CipProperties: ...


class BootstrapBranch(str, Enum):
    LOADED = "loaded"
    SEEDED = "seeded"


@dataclass
class BootstrapResult:
    properties: CipProperties
    branch: BootstrapBranch


def require_defaults(defaults: Mapping[str, Any] | None) -> dict[str, str]:
    """Validate seed values and return them as strings.

    Raises InvalidDefaultsError if *defaults* is None or empty.
    """
    if defaults is None:
        raise InvalidDefaultsError("No default configuration supplied")
    if not defaults:
        raise InvalidDefaultsError("Default configuration is empty")
    return coerce_entries(defaults)


def bootstrap(
    store: PropertyStore,
    identity: CipIdentity,
    defaults: Mapping[str, Any] | None,
    *,
    log: logging.Logger | None = None,
) -> BootstrapResult:
    """Load the configuration for *identity*, seeding *defaults* if absent."""
    log = log or logger
    if store.version_exists(identity):
        log.info("Found %s config for %s at: %s", store.backend, identity, store.location)
        return BootstrapResult(store.load_config(identity), BootstrapBranch.LOADED)

    log.debug("%s config not yet initialised for %s", store.backend, identity)
    if defaults is None:
        raise MissingDefaultsError(
            "No default CIP config was provided - unable to initialise CIP"
        )
    properties = store.set_defaults(identity, defaults)
    log.info(
        "Initialised default %s config for %s at: %s",
        store.backend, identity, store.location,
    )
    return BootstrapResult(properties, BootstrapBranch.SEEDED)


def create_property_store(
    etcd_url: str | None = None,
    config_path: str | None = None,
    *,
    etcd_client_factory: Callable[..., Any] | None = None,
    etcd_read_timeout: float = 60.0,
    log: logging.Logger | None = None,
) -> PropertyStore:
    """Pick the backend for a CIP.

    An etcd URL always selects etcd, even when *config_path* is also given.
    Without one, a file store rooted at *config_path* (or ``~/.ciao``) is used.
    """
    if etcd_url:
        from ciao_configuration.store.etcd_store import EtcdPropertyStore

        return EtcdPropertyStore(
            etcd_url,
            client_factory=etcd_client_factory,
            read_timeout=etcd_read_timeout,
            log=log,
        )

    from ciao_configuration.store.file_store import FilePropertyStore

    return FilePropertyStore(config_path, log=log)
