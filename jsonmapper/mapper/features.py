"""Toggle, visibility and encoding enumerations used to configure an ObjectMapper."""

from enum import Enum


class SerializationFeature(Enum):
    """On/off switches for write-time behaviour, with their defaults."""

    INDENT_OUTPUT = (1, False)
    ORDER_MAP_ENTRIES_BY_KEYS = (2, False)
    WRITE_DATES_AS_TIMESTAMPS = (3, True)
    WRITE_ENUMS_USING_TO_STRING = (4, False)
    FAIL_ON_EMPTY_BEANS = (5, True)
    WRITE_NONE_MAP_VALUES = (6, True)

    def __init__(self, ordinal: int, enabled_by_default: bool):
        self.ordinal = ordinal
        self.enabled_by_default = enabled_by_default


class DeserializationFeature(Enum):
    """On/off switches for read-time behaviour, with their defaults."""

    FAIL_ON_UNKNOWN_PROPERTIES = (1, True)
    FAIL_ON_NULL_FOR_PRIMITIVES = (2, False)
    ACCEPT_SINGLE_VALUE_AS_ARRAY = (3, False)
    USE_DECIMAL_FOR_FLOATS = (4, False)
    READ_ENUMS_USING_TO_STRING = (5, False)

    def __init__(self, ordinal: int, enabled_by_default: bool):
        self.ordinal = ordinal
        self.enabled_by_default = enabled_by_default


class PropertyAccessor(Enum):
    """Kinds of members the mapper may introspect."""

    FIELD = "field"
    GETTER = "getter"


class Visibility(Enum):
    """How much of an object's members are visible to the mapper."""

    ANY = "any"
    PUBLIC_ONLY = "public_only"
    NONE = "none"


class EncodingFormat(Enum):
    """
    Low-level encoding used by a mapper.

    JSON is the default text encoding; YAML is the alternate encoding.
    """

    JSON = "json"
    YAML = "yaml"
