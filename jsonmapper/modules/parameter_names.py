"""Constructor binding by parameter name."""

import inspect
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..core.exceptions import MappingError
from ..mapper.module import Module, SetupContext

if TYPE_CHECKING:
    from ..mapper.object_mapper import ObjectMapper

logger = logging.getLogger(__name__)

_BINDABLE_KINDS = (
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


class CreatorMode(Enum):
    """How a constructor is used to create instances while reading."""

    # Single-parameter constructors delegate; others bind by property name
    DEFAULT = "default"
    # Single-parameter constructors receive the whole decoded value
    DELEGATING = "delegating"
    # Every parameter is bound to the property of the same name
    PROPERTIES = "properties"


class ParameterNamesModule(Module):
    """
    Create plain objects by calling their constructor with decoded values.

    Parameters are matched to object properties by name. Properties that are
    not constructor parameters are assigned as fields afterwards by the
    mapper.
    """

    module_name = "parameter-names"

    def __init__(self, creator_mode: CreatorMode = CreatorMode.DEFAULT):
        self.creator_mode = creator_mode
        self._logger = logger.getChild(self.__class__.__name__)

    def setup_module(self, context: SetupContext) -> None:
        context.set_creator_resolver(self._create)

    def _create(
        self, cls: type, tree: Any, mapper: "ObjectMapper"
    ) -> tuple[Any, set[str]]:
        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError) as e:
            raise MappingError(
                f"Cannot introspect constructor of {cls.__qualname__}: {e}"
            ) from e

        params = [p for p in signature.parameters.values() if p.kind in _BINDABLE_KINDS]
        try:
            hints = inspect.get_annotations(cls.__init__, eval_str=True)
        except (NameError, TypeError):
            hints = {}

        if len(params) == 1 and self.creator_mode is not CreatorMode.PROPERTIES:
            param = params[0]
            self._logger.debug(
                f"Using delegating creator '{param.name}' for {cls.__qualname__}"
            )
            value = mapper.tree_to_value(tree, hints.get(param.name, Any))
            consumed = set(tree) if isinstance(tree, dict) else set()
            return self._invoke(cls, {param.name: value}), consumed

        if not isinstance(tree, dict):
            raise MappingError(
                f"Cannot map {type(tree).__name__} value into {cls.__qualname__} "
                "(expected an object)"
            )

        kwargs: dict[str, Any] = {}
        for param in params:
            if param.name in tree:
                kwargs[param.name] = mapper.tree_to_value(
                    tree[param.name], hints.get(param.name, Any)
                )
            elif param.default is inspect.Parameter.empty:
                raise MappingError(
                    f"Missing creator property '{param.name}' "
                    f"for class {cls.__qualname__}"
                )
        return self._invoke(cls, kwargs), set(kwargs)

    @staticmethod
    def _invoke(cls: type, kwargs: dict[str, Any]) -> Any:
        try:
            return cls(**kwargs)
        except (TypeError, ValueError) as e:
            raise MappingError(
                f"Cannot construct instance of {cls.__qualname__}: {e}"
            ) from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}(creator_mode={self.creator_mode.name})"
