"""CipProperties, one resolved, versioned set of configuration values.

Instances are handed out by a property store (etcd or file).  The store
decides where values live; a CipProperties only ever holds the values of a
single identity for the lifetime of one process.  Mutations through
:meth:`CipProperties.add_config_value` and :meth:`CipProperties.remove_key`
stay in memory: nothing is written back to the backend.
"""

from __future__ import annotations

from collections.abc import Mapping

from ciao_configuration.models import CipIdentity, coerce_entries


class CipProperties:
    """Mutable key/value view over the configuration of one CIP identity."""

    def __init__(
        self, identity: CipIdentity, entries: Mapping[str, str] | None = None,
    ) -> None:
        self._identity = identity
        self._entries: dict[str, str] = coerce_entries(entries or {})

    @property
    def identity(self) -> CipIdentity:
        return self._identity

    def get_cip_name(self) -> str:
        return self._identity.name

    def get_version(self) -> str:
        return self._identity.version

    def get_classifier(self) -> str | None:
        return self._identity.classifier

    def get_config_value(self, key: str) -> str | None:
        """Value for *key*, or None when the key is not configured."""
        return self._entries.get(key)

    def contains_value(self, key: str) -> bool:
        return key in self._entries

    def get_config_keys(self) -> set[str]:
        return set(self._entries)

    def get_all_properties(self) -> dict[str, str]:
        """Return a copy of every key/value pair."""
        return dict(self._entries)

    def add_config_value(self, key: str, value: str) -> None:
        self._entries[str(key)] = str(value)

    def remove_key(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"CipProperties(identity={str(self._identity)!r}, keys={sorted(self._entries)!r})"

    def __str__(self) -> str:
        lines = [f"CIP: {self._identity}"]
        lines.extend(f"{key}={self._entries[key]}" for key in sorted(self._entries))
        return "\n".join(lines)
