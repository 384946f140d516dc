"""Object mapper engine: features, modules and the ObjectMapper itself."""

from .features import (
    DeserializationFeature,
    EncodingFormat,
    PropertyAccessor,
    SerializationFeature,
    Visibility,
)
from .module import Module, SetupContext
from .object_mapper import ObjectMapper

__all__ = [
    "DeserializationFeature",
    "EncodingFormat",
    "Module",
    "ObjectMapper",
    "PropertyAccessor",
    "SerializationFeature",
    "SetupContext",
    "Visibility",
]
