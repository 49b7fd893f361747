"""Default configuration loading from YAML or ``.properties`` files.

Nested YAML mappings are flattened into dotted keys, so::

    database:
      host: db.local
      port: 5432

seeds ``database.host`` and ``database.port``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from ciao_configuration.models import stringify_value
from ciao_configuration.properties_file import read_properties

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}
PROPERTIES_SUFFIXES = {".properties"}


def _flatten(data: Mapping[Any, Any], prefix: str = "") -> dict[str, str]:
    flat: dict[str, str] = {}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(_flatten(value, prefix=f"{name}."))
        elif value is None:
            flat[name] = ""
        else:
            flat[name] = stringify_value(value)
    return flat


def load_yaml_defaults(path: Path) -> dict[str, str]:
    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f)
    if raw_data is None:
        raise ValueError(f"Empty defaults YAML: {path}")
    if not isinstance(raw_data, dict):
        raise ValueError(f"Defaults YAML root must be a mapping: {path}")
    return _flatten(raw_data)


def load_defaults_file(path: str | Path) -> dict[str, str]:
    """Load seed values for a CIP from a YAML or ``.properties`` file.

    Raises ValueError for unsupported suffixes or malformed YAML roots.
    """
    path = Path(path).expanduser()
    suffix = path.suffix.lower()
    if suffix in YAML_SUFFIXES:
        defaults = load_yaml_defaults(path)
    elif suffix in PROPERTIES_SUFFIXES:
        defaults = read_properties(path)
    else:
        raise ValueError(
            f"Unsupported defaults file {path}: expected one of "
            f"{', '.join(sorted(YAML_SUFFIXES | PROPERTIES_SUFFIXES))}"
        )
    logger.debug("Loaded %d default keys from %s", len(defaults), path)
    return defaults
