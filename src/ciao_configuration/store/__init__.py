"""Property stores: where a CIP's configuration set is kept."""

from ciao_configuration.store.base import (
    BootstrapBranch,
    BootstrapResult,
    PropertyStore,
    bootstrap,
    create_property_store,
    require_defaults,
)
from ciao_configuration.store.file_store import FilePropertyStore

__all__ = [
    "BootstrapBranch",
    "BootstrapResult",
    "FilePropertyStore",
    "PropertyStore",
    "bootstrap",
    "create_property_store",
    "require_defaults",
]
