"""Support for pydantic models."""

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from ..core.exceptions import MappingError
from ..mapper.module import Module, SetupContext

if TYPE_CHECKING:
    from ..mapper.object_mapper import ObjectMapper


def _write_model(value: BaseModel, mapper: "ObjectMapper") -> Any:
    return value.model_dump(mode="json", by_alias=True)


def _read_model(tree: Any, cls: type[BaseModel], mapper: "ObjectMapper") -> BaseModel:
    try:
        return cls.model_validate(tree)
    except ValidationError as e:
        raise MappingError(f"Invalid data for {cls.__qualname__}: {e}") from e


class PydanticModule(Module):
    """Delegate (de)serialization of pydantic models to pydantic itself."""

    module_name = "pydantic"

    def setup_module(self, context: SetupContext) -> None:
        context.add_serializer(BaseModel, _write_model)
        context.add_deserializer(BaseModel, _read_model)
