"""Support for common standard library value types."""

from decimal import Decimal, InvalidOperation
from pathlib import PurePath
from typing import TYPE_CHECKING, Any
from uuid import UUID

from ..core.exceptions import MappingError
from ..mapper.module import Module, SetupContext

if TYPE_CHECKING:
    from ..mapper.object_mapper import ObjectMapper


def _write_as_string(value: Any, mapper: "ObjectMapper") -> str:
    return str(value)


def _read_decimal(tree: Any, cls: type, mapper: "ObjectMapper") -> Decimal:
    if isinstance(tree, bool) or not isinstance(tree, (str, int, float, Decimal)):
        raise MappingError(f"Cannot map {tree!r} into Decimal")
    try:
        return Decimal(str(tree))
    except InvalidOperation as e:
        raise MappingError(f"Invalid decimal value {tree!r}") from e


def _read_uuid(tree: Any, cls: type, mapper: "ObjectMapper") -> UUID:
    if not isinstance(tree, str):
        raise MappingError(f"Cannot map {type(tree).__name__} value into UUID")
    try:
        return UUID(tree)
    except ValueError as e:
        raise MappingError(f"Invalid UUID value {tree!r}: {e}") from e


def _read_path(tree: Any, cls: type, mapper: "ObjectMapper") -> PurePath:
    if not isinstance(tree, str):
        raise MappingError(f"Cannot map {type(tree).__name__} value into path")
    return cls(tree)


class StandardTypesModule(Module):
    """Decimal, UUID and path values, all written as strings."""

    module_name = "standard-types"

    def setup_module(self, context: SetupContext) -> None:
        for value_type in (Decimal, UUID, PurePath):
            context.add_serializer(value_type, _write_as_string)
        context.add_deserializer(Decimal, _read_decimal)
        context.add_deserializer(UUID, _read_uuid)
        context.add_deserializer(PurePath, _read_path)
