"""Construction pipeline for configured object mappers."""

import logging
from enum import Enum
from typing import TypeVar

from ..config import MapperConfig
from ..mapper.features import (
    DeserializationFeature,
    EncodingFormat,
    PropertyAccessor,
    SerializationFeature,
    Visibility,
)
from ..mapper.module import Module
from ..mapper.object_mapper import ObjectMapper
from ..modules.parameter_names import CreatorMode, ParameterNamesModule
from .customizer import MapperCustomizer
from .exceptions import ConfigurationError, ModuleLoadError
from .loader import ModuleLoader

logger = logging.getLogger(__name__)

FeatureT = TypeVar("FeatureT", bound=Enum)


def create_object_mapper(
    serializer_identifier: int,
    encoding: EncodingFormat,
    customizer: MapperCustomizer,
    config: MapperConfig,
    loader: ModuleLoader,
    log: logging.Logger | None = None,
) -> ObjectMapper:
    """
    Build one fully configured ObjectMapper.

    Steps, in order:
    1. Create the bare mapper through the customizer
    2. Make all fields visible, whatever their name
    3. Apply configured serialization features (customizer may amend)
    4. Apply configured deserialization features (customizer may amend)
    5. Load configured modules, or discover all of them for '*'
    6. Bind constructors by property name for ParameterNamesModule
    7. Let the customizer amend the module list
    8. Register the modules in order

    Args:
        serializer_identifier: The identifier of the consumer using this mapper
        encoding: Encoding format of the mapper
        customizer: Hook amending the defaults
        config: Configuration snapshot
        loader: Loader used to instantiate and discover modules
        log: Diagnostics logger; the module logger when omitted

    Returns:
        The configured, not yet frozen, mapper

    Raises:
        ConfigurationError: If a feature name is unknown or module discovery fails
    """
    log = log if log is not None else logger

    mapper = customizer.new_object_mapper(serializer_identifier, encoding)

    mapper.set_visibility(PropertyAccessor.FIELD, Visibility.ANY)

    configured_serialization_features = _features(
        config.serialization_features, SerializationFeature, "serialization-features"
    )
    serialization_features = customizer.override_configured_serialization_features(
        serializer_identifier, configured_serialization_features
    )
    for feature, enabled in serialization_features:
        mapper.configure(feature, enabled)

    configured_deserialization_features = _features(
        config.deserialization_features,
        DeserializationFeature,
        "deserialization-features",
    )
    deserialization_features = customizer.override_configured_deserialization_features(
        serializer_identifier, configured_deserialization_features
    )
    for feature, enabled in deserialization_features:
        mapper.configure(feature, enabled)

    if config.discover_all_modules:
        try:
            configured_modules = loader.find_modules()
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Module discovery failed: {e}") from e
    else:
        configured_modules = _load_modules(config.modules, loader, log)

    modules = [_canonical_module(module) for module in configured_modules]

    modules = customizer.override_configured_modules(serializer_identifier, modules)

    for module in modules:
        mapper.register_module(module)
        log.debug(
            f"Registered mapper module [{type(module).__module__}."
            f"{type(module).__qualname__}]"
        )

    return mapper


def _features(
    configured: dict[str, bool], feature_type: type[FeatureT], section: str
) -> list[tuple[FeatureT, bool]]:
    features = []
    for name, enabled in configured.items():
        try:
            features.append((feature_type[name], enabled))
        except KeyError as e:
            raise ConfigurationError(
                f"Unknown {feature_type.__name__} '{name}' in [{section}]. "
                f"Valid names: {', '.join(feature_type.__members__)}"
            ) from e
    return features


def _load_modules(
    module_names: list[str], loader: ModuleLoader, log: logging.Logger
) -> list[Module]:
    modules = []
    for module_name in module_names:
        try:
            modules.append(loader.create_instance_for(module_name))
        except ModuleLoadError as e:
            log.warning(
                f"Could not load configured mapper module [{module_name}], "
                "please verify installed dependencies or amend the configuration "
                f"[jsonmapper.jackson-modules]. Continuing without this module. "
                f"Cause: {e}"
            )
    return modules


def _canonical_module(module: Module) -> Module:
    if isinstance(module, ParameterNamesModule):
        # Single-parameter constructors must bind by property name like
        # multi-parameter ones, otherwise single-field objects fail to read
        return ParameterNamesModule(CreatorMode.PROPERTIES)
    return module
