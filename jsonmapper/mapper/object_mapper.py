"""ObjectMapper: converts Python values to JSON or YAML text and back."""

import base64
import collections.abc
import dataclasses
import functools
import json
import logging
import types
import typing
from decimal import Decimal
from enum import Enum
from io import StringIO
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin, get_type_hints

from pydantic import TypeAdapter, ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ..core.exceptions import MapperFrozenError, MappingError
from .features import (
    DeserializationFeature,
    EncodingFormat,
    PropertyAccessor,
    SerializationFeature,
    Visibility,
)
from .module import CreatorResolver, Deserializer, Serializer, SetupContext

if TYPE_CHECKING:
    from .module import Module

logger = logging.getLogger(__name__)

_SEQUENCE_ORIGINS: dict[Any, type] = {
    list: list,
    tuple: tuple,
    set: set,
    frozenset: frozenset,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
}
_MAPPING_ORIGINS = {dict, collections.abc.Mapping, collections.abc.MutableMapping}


def _type_hints(target: Any) -> dict[str, Any]:
    """Resolve annotations, falling back to the raw ones on forward-ref errors."""
    try:
        return get_type_hints(target)
    except (NameError, TypeError):
        return dict(getattr(target, "__annotations__", {}))


@functools.lru_cache(maxsize=None)
def _scalar_adapter(value_type: Any) -> TypeAdapter:
    """Lax pydantic validator for int, float, bool and Literal targets."""
    return TypeAdapter(value_type)


def _is_visible(name: str, visibility: Visibility) -> bool:
    if visibility is Visibility.ANY:
        return True
    if visibility is Visibility.PUBLIC_ONLY:
        return not name.startswith("_")
    return False


class ObjectMapper:
    """
    Configurable engine converting between Python values and encoded text.

    Values are first turned into a tree of JSON-compatible primitives
    (dict, list, str, int, float, bool, None), then written with `json`
    or `ruamel.yaml` depending on the encoding format. Reading runs the
    same steps backwards, guided by the requested target type.

    A mapper is configured while it is built (features, visibility,
    modules). Once frozen, every configuration call raises
    MapperFrozenError; reading and writing stay available and are safe to
    use from many threads.
    """

    def __init__(self, encoding: EncodingFormat = EncodingFormat.JSON):
        self._logger = logger.getChild(self.__class__.__name__)
        self._encoding = encoding
        self._serialization_features = {
            f: f.enabled_by_default for f in SerializationFeature
        }
        self._deserialization_features = {
            f: f.enabled_by_default for f in DeserializationFeature
        }
        # Fields are introspected; getters (properties) only when enabled
        self._visibility = {
            PropertyAccessor.FIELD: Visibility.PUBLIC_ONLY,
            PropertyAccessor.GETTER: Visibility.NONE,
        }
        self._serializers: dict[type, Serializer] = {}
        self._deserializers: dict[type, Deserializer] = {}
        self._creator_resolver: CreatorResolver | None = None
        self._modules: list["Module"] = []
        self._frozen = False

    # --- Configuration ---

    def _check_not_frozen(self) -> None:
        if self._frozen:
            raise MapperFrozenError(
                "ObjectMapper has been published and must not be modified"
            )

    def configure(
        self, feature: SerializationFeature | DeserializationFeature, enabled: bool
    ) -> "ObjectMapper":
        """
        Turn a serialization or deserialization feature on or off.

        Returns:
            Self for method chaining

        Raises:
            MapperFrozenError: If the mapper is frozen
            TypeError: If `feature` is not a known feature type
        """
        self._check_not_frozen()
        if isinstance(feature, SerializationFeature):
            self._serialization_features[feature] = bool(enabled)
        elif isinstance(feature, DeserializationFeature):
            self._deserialization_features[feature] = bool(enabled)
        else:
            raise TypeError(f"Unsupported feature: {feature!r}")
        return self

    def enable(
        self, feature: SerializationFeature | DeserializationFeature
    ) -> "ObjectMapper":
        return self.configure(feature, True)

    def disable(
        self, feature: SerializationFeature | DeserializationFeature
    ) -> "ObjectMapper":
        return self.configure(feature, False)

    def is_enabled(self, feature: SerializationFeature | DeserializationFeature) -> bool:
        if isinstance(feature, SerializationFeature):
            return self._serialization_features[feature]
        if isinstance(feature, DeserializationFeature):
            return self._deserialization_features[feature]
        raise TypeError(f"Unsupported feature: {feature!r}")

    def set_visibility(
        self, accessor: PropertyAccessor, visibility: Visibility
    ) -> "ObjectMapper":
        self._check_not_frozen()
        self._visibility[accessor] = visibility
        return self

    def get_visibility(self, accessor: PropertyAccessor) -> Visibility:
        return self._visibility[accessor]

    def register_module(self, module: "Module") -> "ObjectMapper":
        """
        Register a module; a module whose id is already registered is skipped.

        Returns:
            Self for method chaining
        """
        self._check_not_frozen()
        if any(m.module_id == module.module_id for m in self._modules):
            self._logger.debug(
                f"Module '{module.module_id}' already registered, skipping"
            )
            return self

        module.setup_module(SetupContext(self))
        self._modules.append(module)
        return self

    @property
    def registered_modules(self) -> tuple["Module", ...]:
        return tuple(self._modules)

    def freeze(self) -> "ObjectMapper":
        """Make the mapper read-only. Idempotent."""
        self._frozen = True
        return self

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    @property
    def encoding(self) -> EncodingFormat:
        return self._encoding

    @encoding.setter
    def encoding(self, encoding: EncodingFormat) -> None:
        self._check_not_frozen()
        self._encoding = encoding

    def copy(self) -> "ObjectMapper":
        """Return an unfrozen mapper with the same configuration."""
        clone = type(self)(self._encoding)
        clone._serialization_features = dict(self._serialization_features)
        clone._deserialization_features = dict(self._deserialization_features)
        clone._visibility = dict(self._visibility)
        clone._serializers = dict(self._serializers)
        clone._deserializers = dict(self._deserializers)
        clone._creator_resolver = self._creator_resolver
        clone._modules = list(self._modules)
        return clone

    def get_mapper_info(self) -> dict[str, Any]:
        """
        Get a description of this mapper's configuration.

        Returns:
            Dictionary with encoding, visibility, features and modules
        """
        return {
            "encoding": self._encoding.value,
            "frozen": self._frozen,
            "visibility": {a.name: v.name for a, v in self._visibility.items()},
            "serialization_features": {
                f.name: v for f, v in self._serialization_features.items()
            },
            "deserialization_features": {
                f.name: v for f, v in self._deserialization_features.items()
            },
            "modules": [
                f"{type(m).__module__}.{type(m).__qualname__}" for m in self._modules
            ],
        }

    # --- Writing ---

    def write_value_as_string(self, value: Any) -> str:
        tree = self.value_to_tree(value)
        if self._encoding is EncodingFormat.YAML:
            stream = StringIO()
            yaml = YAML(typ="safe")
            yaml.default_flow_style = False
            yaml.dump(tree, stream)
            return stream.getvalue()

        indent = 2 if self.is_enabled(SerializationFeature.INDENT_OUTPUT) else None
        return json.dumps(tree, indent=indent, ensure_ascii=False)

    def write_value_as_bytes(self, value: Any) -> bytes:
        return self.write_value_as_string(value).encode("utf-8")

    def value_to_tree(self, value: Any) -> Any:
        """
        Convert a value into a tree of JSON-compatible primitives.

        Raises:
            MappingError: If no serializer applies and the object exposes
                no visible properties while FAIL_ON_EMPTY_BEANS is enabled
        """
        if value is None:
            return None

        serializer = self._find_handler(self._serializers, type(value))
        if serializer is not None:
            return serializer(value, self)

        if isinstance(value, Enum):
            if self.is_enabled(SerializationFeature.WRITE_ENUMS_USING_TO_STRING):
                return str(value)
            return value.name
        if isinstance(value, (bool, int, float, str)):
            return value
        if isinstance(value, collections.abc.Mapping):
            return self._mapping_to_tree(value)
        if isinstance(value, (bytes, bytearray)):
            return base64.b64encode(bytes(value)).decode("ascii")
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self.value_to_tree(item) for item in value]

        return self._object_to_tree(value)

    def _mapping_to_tree(self, value: collections.abc.Mapping) -> dict[str, Any]:
        tree: dict[str, Any] = {}
        for key, item in value.items():
            if item is None and not self.is_enabled(
                SerializationFeature.WRITE_NONE_MAP_VALUES
            ):
                continue
            name = key.name if isinstance(key, Enum) else str(key)
            tree[name] = self.value_to_tree(item)

        if self.is_enabled(SerializationFeature.ORDER_MAP_ENTRIES_BY_KEYS):
            tree = dict(sorted(tree.items()))
        return tree

    def _object_to_tree(self, value: Any) -> dict[str, Any]:
        properties = self._visible_properties(value)
        if not properties and self.is_enabled(SerializationFeature.FAIL_ON_EMPTY_BEANS):
            raise MappingError(
                f"No serializer found for class {type(value).__qualname__} "
                "and no properties discovered"
            )
        return {name: self.value_to_tree(item) for name, item in properties.items()}

    def _visible_properties(self, value: Any) -> dict[str, Any]:
        properties: dict[str, Any] = {}

        field_visibility = self._visibility[PropertyAccessor.FIELD]
        if field_visibility is not Visibility.NONE:
            for name, item in self._instance_fields(value):
                if _is_visible(name, field_visibility):
                    properties[name] = item

        getter_visibility = self._visibility[PropertyAccessor.GETTER]
        if getter_visibility is not Visibility.NONE:
            for klass in type(value).__mro__:
                for name, attr in vars(klass).items():
                    if (
                        isinstance(attr, property)
                        and name not in properties
                        and _is_visible(name, getter_visibility)
                    ):
                        properties[name] = getattr(value, name)

        return properties

    @staticmethod
    def _instance_fields(value: Any) -> list[tuple[str, Any]]:
        if dataclasses.is_dataclass(value):
            return [(f.name, getattr(value, f.name)) for f in dataclasses.fields(value)]

        fields = list(getattr(value, "__dict__", {}).items())
        seen = {name for name, _ in fields}
        for klass in type(value).__mro__:
            slots = klass.__dict__.get("__slots__", ())
            if isinstance(slots, str):
                slots = (slots,)
            for name in slots:
                if name in seen or name in ("__dict__", "__weakref__"):
                    continue
                if hasattr(value, name):
                    fields.append((name, getattr(value, name)))
                    seen.add(name)
        return fields

    # --- Reading ---

    def read_value(self, content: str | bytes, value_type: Any = Any) -> Any:
        """
        Parse encoded content and convert it into `value_type`.

        Args:
            content: JSON or YAML text (str or UTF-8 bytes)
            value_type: Target type; `Any` returns the decoded tree as is

        Raises:
            MappingError: If the content cannot be parsed or converted
        """
        if isinstance(content, (bytes, bytearray)):
            try:
                content = bytes(content).decode("utf-8")
            except UnicodeDecodeError as e:
                raise MappingError(f"Malformed content, not valid UTF-8: {e}") from e
        return self.tree_to_value(self._parse(content), value_type)

    def _parse(self, content: str) -> Any:
        use_decimal = self.is_enabled(DeserializationFeature.USE_DECIMAL_FOR_FLOATS)

        if self._encoding is EncodingFormat.YAML:
            try:
                tree = YAML(typ="safe").load(content)
            except YAMLError as e:
                raise MappingError(f"Malformed YAML content: {e}") from e
            return self._floats_to_decimal(tree) if use_decimal else tree

        try:
            return json.loads(content, parse_float=Decimal if use_decimal else None)
        except json.JSONDecodeError as e:
            raise MappingError(f"Malformed JSON content: {e}") from e

    def _floats_to_decimal(self, tree: Any) -> Any:
        if isinstance(tree, float):
            return Decimal(repr(tree))
        if isinstance(tree, dict):
            return {k: self._floats_to_decimal(v) for k, v in tree.items()}
        if isinstance(tree, list):
            return [self._floats_to_decimal(v) for v in tree]
        return tree

    def tree_to_value(self, tree: Any, value_type: Any = Any) -> Any:
        """
        Convert a decoded tree into an instance of `value_type`.

        Raises:
            MappingError: If the tree does not fit the requested type
        """
        if value_type is Any or value_type is object:
            return tree

        origin = get_origin(value_type)
        if origin is Union or origin is types.UnionType:
            return self._read_union(tree, get_args(value_type))
        if origin is typing.Literal:
            return self._read_scalar(tree, value_type)
        if origin in _SEQUENCE_ORIGINS:
            return self._read_sequence(
                tree, _SEQUENCE_ORIGINS[origin], get_args(value_type)
            )
        if origin in _MAPPING_ORIGINS:
            return self._read_mapping(tree, get_args(value_type))
        if origin is not None:
            value_type = origin

        if not isinstance(value_type, type):
            raise MappingError(f"Unsupported target type: {value_type!r}")

        deserializer = self._find_handler(self._deserializers, value_type)
        if deserializer is not None:
            return deserializer(tree, value_type, self)

        if tree is None:
            if value_type in (bool, int, float) and self.is_enabled(
                DeserializationFeature.FAIL_ON_NULL_FOR_PRIMITIVES
            ):
                raise MappingError(
                    f"Cannot map null into type {value_type.__name__} "
                    "(FAIL_ON_NULL_FOR_PRIMITIVES is enabled)"
                )
            return None

        if issubclass(value_type, Enum):
            return self._read_enum(tree, value_type)
        if value_type in (bool, int, float, str):
            return self._read_scalar(tree, value_type)
        if value_type in (bytes, bytearray):
            if not isinstance(tree, str):
                raise MappingError("Binary values must be base64 encoded strings")
            return value_type(base64.b64decode(tree))
        if value_type in _SEQUENCE_ORIGINS:
            return self._read_sequence(tree, _SEQUENCE_ORIGINS[value_type], ())
        if value_type in _MAPPING_ORIGINS:
            return self._read_mapping(tree, ())
        if dataclasses.is_dataclass(value_type):
            return self._read_dataclass(tree, value_type)

        return self._read_object(tree, value_type)

    def _read_union(self, tree: Any, options: tuple[Any, ...]) -> Any:
        if tree is None and type(None) in options:
            return None

        errors = []
        for option in options:
            if option is type(None):
                continue
            try:
                return self.tree_to_value(tree, option)
            except MappingError as e:
                errors.append(str(e))
        raise MappingError(
            f"Value {tree!r} matches none of the union members: {'; '.join(errors)}"
        )

    def _read_scalar(self, tree: Any, value_type: Any) -> Any:
        type_name = getattr(value_type, "__name__", repr(value_type))
        if isinstance(tree, (dict, list)):
            raise MappingError(
                f"Cannot map {type(tree).__name__} value into type {type_name}"
            )
        if value_type is str:
            # Any scalar reads as its text form
            if isinstance(tree, bool):
                return "true" if tree else "false"
            return str(tree)
        if isinstance(tree, bool) and value_type in (int, float):
            raise MappingError(f"Cannot map boolean into type {type_name}")

        try:
            return _scalar_adapter(value_type).validate_python(tree)
        except ValidationError as e:
            raise MappingError(
                f"Cannot map {tree!r} into type {type_name}: {e.errors()[0]['msg']}"
            ) from e

    def _read_enum(self, tree: Any, enum_type: type[Enum]) -> Enum:
        if self.is_enabled(DeserializationFeature.READ_ENUMS_USING_TO_STRING):
            for member in enum_type:
                if str(member) == tree:
                    return member
        elif isinstance(tree, str) and tree in enum_type.__members__:
            return enum_type[tree]

        raise MappingError(
            f"Cannot map {tree!r} into enum {enum_type.__qualname__}; "
            f"accepted values: {', '.join(enum_type.__members__)}"
        )

    def _read_sequence(
        self, tree: Any, container: type, args: tuple[Any, ...]
    ) -> Any:
        if not isinstance(tree, list):
            if not self.is_enabled(DeserializationFeature.ACCEPT_SINGLE_VALUE_AS_ARRAY):
                raise MappingError(
                    f"Cannot map {type(tree).__name__} value into "
                    f"{container.__name__} (expected an array)"
                )
            tree = [tree]

        if container is tuple and args and args[-1] is not Ellipsis:
            if len(args) != len(tree):
                raise MappingError(
                    f"Expected array of {len(args)} items, got {len(tree)}"
                )
            return tuple(self.tree_to_value(t, a) for t, a in zip(tree, args))

        item_type = args[0] if args else Any
        return container(self.tree_to_value(item, item_type) for item in tree)

    def _read_mapping(self, tree: Any, args: tuple[Any, ...]) -> dict[Any, Any]:
        if not isinstance(tree, dict):
            raise MappingError(
                f"Cannot map {type(tree).__name__} value into dict (expected an object)"
            )
        key_type, item_type = args if len(args) == 2 else (Any, Any)
        return {
            self.tree_to_value(key, key_type): self.tree_to_value(item, item_type)
            for key, item in tree.items()
        }

    def _read_dataclass(self, tree: Any, cls: type) -> Any:
        if not isinstance(tree, dict):
            raise MappingError(
                f"Cannot map {type(tree).__name__} value into {cls.__qualname__}"
            )

        hints = _type_hints(cls)
        fields = {f.name: f for f in dataclasses.fields(cls)}
        visibility = self._visibility[PropertyAccessor.FIELD]
        init_kwargs: dict[str, Any] = {}
        post_init: dict[str, Any] = {}

        for name, raw in tree.items():
            field = fields.get(name)
            if field is None or not _is_visible(name, visibility):
                self._handle_unknown_property(cls, name)
                continue
            value = self.tree_to_value(raw, hints.get(name, Any))
            if field.init:
                init_kwargs[name] = value
            else:
                post_init[name] = value

        try:
            instance = cls(**init_kwargs)
        except TypeError as e:
            raise MappingError(f"Cannot construct instance of {cls.__qualname__}: {e}") from e

        for name, value in post_init.items():
            object.__setattr__(instance, name, value)
        return instance

    def _read_object(self, tree: Any, cls: type) -> Any:
        if self._creator_resolver is not None:
            instance, consumed = self._creator_resolver(cls, tree, self)
        else:
            if not isinstance(tree, dict):
                raise MappingError(
                    f"Cannot map {type(tree).__name__} value into {cls.__qualname__}"
                )
            try:
                instance = cls()
            except TypeError as e:
                raise MappingError(
                    f"Cannot construct instance of {cls.__qualname__}: no creator "
                    "usable without arguments (register a parameter-names module "
                    "to bind constructor parameters by name)"
                ) from e
            consumed = set()

        if isinstance(tree, dict):
            remaining = {k: v for k, v in tree.items() if k not in consumed}
            self._assign_fields(instance, cls, remaining)
        return instance

    def _assign_fields(self, instance: Any, cls: type, values: dict[str, Any]) -> None:
        hints = _type_hints(cls)
        known = set(hints) | set(getattr(instance, "__dict__", {}))
        visibility = self._visibility[PropertyAccessor.FIELD]

        for name, raw in values.items():
            if name not in known or not _is_visible(name, visibility):
                self._handle_unknown_property(cls, name)
                continue
            setattr(instance, name, self.tree_to_value(raw, hints.get(name, Any)))

    def _handle_unknown_property(self, cls: type, name: str) -> None:
        if self.is_enabled(DeserializationFeature.FAIL_ON_UNKNOWN_PROPERTIES):
            raise MappingError(
                f"Unrecognized field '{name}' for class {cls.__qualname__}"
            )
        self._logger.debug(f"Ignoring unknown field '{name}' for {cls.__qualname__}")

    @staticmethod
    def _find_handler(handlers: dict[type, Any], value_type: type) -> Any:
        for klass in value_type.__mro__:
            handler = handlers.get(klass)
            if handler is not None:
                return handler
        return None
