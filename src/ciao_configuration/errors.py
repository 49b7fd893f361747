"""Error taxonomy for CIAO configuration.

Every backend failure is translated into one of these types inside the
property store that observed it, so callers of :class:`CiaoConfig` never
see ``etcd`` or ``OSError`` exceptions directly.
"""

from __future__ import annotations


class CiaoConfigurationError(Exception):
    """Base class for all configuration errors."""


class StoreUnavailableError(CiaoConfigurationError):
    """The backend could not be reached, opened, or written."""


class ConfigNotFoundError(CiaoConfigurationError):
    """A load was attempted for an identity with no stored configuration."""


class InvalidDefaultsError(CiaoConfigurationError):
    """Defaults passed to ``set_defaults`` were absent or empty."""


class MissingDefaultsError(InvalidDefaultsError):
    """Seeding was required but the caller supplied no defaults."""


class NotInitialisedError(CiaoConfigurationError):
    """The read API was used before a successful bootstrap."""
