"""Mapper configuration: pydantic models, reference defaults and file loading."""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from ruamel.yaml import YAML

from .core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_SECTION: Final[str] = "jsonmapper"
WILDCARD_MODULE: Final[str] = "*"

_YAML_EXTS: Final[set[str]] = {".yaml", ".yml"}
_JSON_EXTS: Final[set[str]] = {".json"}

_yaml_parser = YAML(typ="safe")  # safe loader, YAML 1.2

# Defaults applied underneath every loaded configuration
REFERENCE_CONFIG: Final[dict[str, Any]] = {
    "serialization-features": {
        "WRITE_DATES_AS_TIMESTAMPS": False,
    },
    "deserialization-features": {
        "FAIL_ON_UNKNOWN_PROPERTIES": False,
    },
    "jackson-modules": [
        "parameter-names",
        "datetime",
        "standard-types",
        "pydantic",
    ],
}


class MapperConfig(BaseModel):
    """
    Configuration snapshot read when an object mapper is built.

    Feature maps keep their insertion order, which is the order features are
    applied in.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    serialization_features: dict[str, bool] = Field(
        default_factory=dict,
        alias="serialization-features",
        description="SerializationFeature names mapped to on/off.",
    )
    deserialization_features: dict[str, bool] = Field(
        default_factory=dict,
        alias="deserialization-features",
        description="DeserializationFeature names mapped to on/off.",
    )
    modules: list[str] = Field(
        default_factory=list,
        alias="jackson-modules",
        description=(
            "Ordered module names or dotted class paths; '*' discovers every "
            "available module."
        ),
    )

    @property
    def discover_all_modules(self) -> bool:
        return WILDCARD_MODULE in self.modules


def merge_with_reference(
    overrides: Mapping[str, Any], reference: Mapping[str, Any] = REFERENCE_CONFIG
) -> dict[str, Any]:
    """
    Merge user values over reference values.

    Nested mappings are merged key by key; any other value (including
    lists) replaces the reference value.
    """
    merged = copy.deepcopy(dict(reference))
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_with_reference(value, current)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def config_from_dict(
    data: Mapping[str, Any] | None, with_reference: bool = True
) -> MapperConfig:
    """
    Build a MapperConfig from the contents of the `jsonmapper` section.

    Raises:
        ConfigurationError: If the section does not match the schema
    """
    section = dict(data or {})
    if with_reference:
        section = merge_with_reference(section)

    try:
        return MapperConfig.model_validate(section)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid mapper configuration: {e}") from e


def load_config(path: str | Path | None = None, with_reference: bool = True) -> MapperConfig:
    """
    Read the mapper configuration from a YAML or JSON file.

    The file's top level must be a mapping; mapper settings live under the
    `jsonmapper` key. Without a path, the reference configuration is used.

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    if path is None:
        return config_from_dict({}, with_reference=with_reference)

    file_path = Path(path)

    if not file_path.exists():
        logger.error("Configuration file not found: %s", file_path)
        raise ConfigurationError(f"Configuration file not found: {file_path}")

    suffix = file_path.suffix.lower()
    if suffix not in _YAML_EXTS | _JSON_EXTS:
        raise ConfigurationError(
            f"Unsupported extension '{file_path.suffix}'. "
            f"Supported: {', '.join(sorted(_YAML_EXTS | _JSON_EXTS))}"
        )

    raw_text = file_path.read_text(encoding="utf-8")

    try:
        if suffix in _YAML_EXTS:
            data = _yaml_parser.load(raw_text)
        else:
            data = json.loads(raw_text)
    except Exception as exc:
        raise ConfigurationError(f"Cannot parse {file_path.name}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError("Top-level object must be a mapping")

    section = data.get(CONFIG_SECTION) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{CONFIG_SECTION}' must be a mapping")

    logger.debug("Configuration loaded from %s (%d keys)", file_path, len(section))
    return config_from_dict(section, with_reference=with_reference)
