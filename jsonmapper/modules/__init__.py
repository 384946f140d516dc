"""Built-in modules for the object mapper."""

from .datetime_module import DateTimeModule
from .parameter_names import CreatorMode, ParameterNamesModule
from .pydantic_module import PydanticModule
from .standard_types import StandardTypesModule

__all__ = [
    "CreatorMode",
    "DateTimeModule",
    "ParameterNamesModule",
    "PydanticModule",
    "StandardTypesModule",
]
