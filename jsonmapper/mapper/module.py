"""Extension contract for ObjectMapper modules."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .features import DeserializationFeature, SerializationFeature

if TYPE_CHECKING:
    from .object_mapper import ObjectMapper

Serializer = Callable[[Any, "ObjectMapper"], Any]
Deserializer = Callable[[Any, type, "ObjectMapper"], Any]
# (target class, decoded tree, mapper) -> (instance, consumed property names)
CreatorResolver = Callable[[type, Any, "ObjectMapper"], tuple[Any, set[str]]]


class SetupContext:
    """
    Handle given to a module while it is being registered.

    Registrations made through the context are keyed by type; a later module
    registering for the same type replaces the earlier registration.
    """

    def __init__(self, mapper: "ObjectMapper"):
        self._mapper = mapper

    def add_serializer(self, value_type: type, serializer: Serializer) -> None:
        """Use `serializer` for values of `value_type` and its subclasses."""
        self._mapper._serializers[value_type] = serializer

    def add_deserializer(self, value_type: type, deserializer: Deserializer) -> None:
        """Use `deserializer` when reading `value_type` or its subclasses."""
        self._mapper._deserializers[value_type] = deserializer

    def set_creator_resolver(self, resolver: CreatorResolver) -> None:
        """Replace the strategy used to construct plain classes."""
        self._mapper._creator_resolver = resolver

    def is_enabled(self, feature: SerializationFeature | DeserializationFeature) -> bool:
        return self._mapper.is_enabled(feature)


class Module(ABC):
    """
    Base class for mapper modules.

    A module adds serializers, deserializers or a creator strategy to an
    ObjectMapper when it is registered.

    Subclasses must implement:
    - setup_module(): Register the module's extensions on the context
    """

    module_name: str = "unnamed"

    @property
    def module_id(self) -> str:
        """Identity used to skip duplicate registrations of the same module."""
        return f"{type(self).__module__}.{type(self).__qualname__}"

    @abstractmethod
    def setup_module(self, context: SetupContext) -> None:
        """
        Register this module's extensions.

        Args:
            context: Setup context bound to the mapper being configured
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.module_name!r})"
