"""Per-consumer cache of configured JSON object mappers."""

from .config import MapperConfig, config_from_dict, load_config
from .core.customizer import MapperCustomizer
from .core.exceptions import (
    ConfigurationError,
    JsonMapperError,
    MapperFrozenError,
    MappingError,
    ModuleLoadError,
)
from .core.factory import create_object_mapper
from .core.loader import ModuleLoader
from .core.module_registry import ModuleRegistry, register_builtin_modules
from .core.provider import ObjectMapperProvider
from .core.setup import MapperProviderSetup, ProcessSetup, Setup
from .mapper import (
    DeserializationFeature,
    EncodingFormat,
    Module,
    ObjectMapper,
    SerializationFeature,
)

__all__ = [
    "ConfigurationError",
    "DeserializationFeature",
    "EncodingFormat",
    "JsonMapperError",
    "MapperConfig",
    "MapperCustomizer",
    "MapperFrozenError",
    "MapperProviderSetup",
    "MappingError",
    "Module",
    "ModuleLoadError",
    "ModuleLoader",
    "ModuleRegistry",
    "ObjectMapper",
    "ObjectMapperProvider",
    "ProcessSetup",
    "SerializationFeature",
    "Setup",
    "config_from_dict",
    "create_object_mapper",
    "load_config",
    "register_builtin_modules",
]
