"""
JSON Mapper Exception Classes

Custom exceptions raised while building, publishing and using object mappers.
"""


class JsonMapperError(Exception):
    """Base exception for all jsonmapper errors."""

    pass


class ConfigurationError(JsonMapperError):
    """Raised when mapper configuration is invalid or modules cannot be discovered."""

    pass


class ModuleLoadError(JsonMapperError):
    """Raised when a single configured module cannot be instantiated."""

    def __init__(self, module_name: str, message: str):
        super().__init__(message)
        self.module_name = module_name


class MapperFrozenError(JsonMapperError):
    """Raised when a published (frozen) mapper is modified."""

    pass


class MappingError(JsonMapperError):
    """Raised when a value cannot be converted to or from its encoded form."""

    pass
