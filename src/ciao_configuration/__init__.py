"""CIAO configuration: versioned configuration bootstrap for CIPs.

A CIP resolves its configuration once at start-up, from etcd when a URL is
supplied and from a local ``.properties`` file otherwise, seeding defaults
the first time it runs.

Public API::

    from ciao_configuration import CiaoConfig

    config = CiaoConfig("my-cip", "v1", {"queue": "inbound"}, etcd_url="http://etcd:2379")
    config.get_config_value("queue")
"""

from ciao_configuration.config import BootstrapState, CiaoConfig
from ciao_configuration.errors import (
    CiaoConfigurationError,
    ConfigNotFoundError,
    InvalidDefaultsError,
    MissingDefaultsError,
    NotInitialisedError,
    StoreUnavailableError,
)
from ciao_configuration.models import BootstrapSettings, CipIdentity
from ciao_configuration.properties import CipProperties

__all__ = [
    "BootstrapSettings",
    "BootstrapState",
    "CiaoConfig",
    "CiaoConfigurationError",
    "CipIdentity",
    "CipProperties",
    "ConfigNotFoundError",
    "InvalidDefaultsError",
    "MissingDefaultsError",
    "NotInitialisedError",
    "StoreUnavailableError",
]
__version__ = "0.1.0"
