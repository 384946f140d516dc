"""Unit tests for the ObjectMapper engine."""

import json
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Literal

import pytest

from jsonmapper.core.exceptions import MapperFrozenError, MappingError
from jsonmapper.mapper import (
    DeserializationFeature,
    EncodingFormat,
    Module,
    ObjectMapper,
    PropertyAccessor,
    SerializationFeature,
    Visibility,
)

# -------------------- Fakes / helpers --------------------


@dataclass
class Point:
    x: int
    y: int


class Color(Enum):
    RED = "r"
    GREEN = "g"


@dataclass
class Palette:
    name: str
    colors: list[Color]
    weights: dict[str, float] = field(default_factory=dict)
    note: str | None = None


class Account:
    def __init__(self):
        self.owner = ""
        self._balance = 0


class Named:
    def __init__(self, name):
        self.name = name


class Empty:
    pass


class Circle:
    def __init__(self):
        self.radius = 2

    @property
    def diameter(self) -> int:
        return self.radius * 2


class CountingModule(Module):
    module_name = "counting"

    def __init__(self) -> None:
        self.setup_calls = 0

    def setup_module(self, context) -> None:
        self.setup_calls += 1


class PointAsListModule(Module):
    module_name = "point-as-list"

    def setup_module(self, context) -> None:
        context.add_serializer(Point, lambda value, mapper: [value.x, value.y])


class PointAsTextModule(Module):
    module_name = "point-as-text"

    def setup_module(self, context) -> None:
        context.add_serializer(Point, lambda value, mapper: f"{value.x},{value.y}")


# --------------------------- Tests ---------------------------


class TestConfiguration:
    def test_feature_defaults(self) -> None:
        mapper = ObjectMapper()
        assert mapper.is_enabled(SerializationFeature.FAIL_ON_EMPTY_BEANS)
        assert mapper.is_enabled(SerializationFeature.WRITE_DATES_AS_TIMESTAMPS)
        assert not mapper.is_enabled(SerializationFeature.INDENT_OUTPUT)
        assert mapper.is_enabled(DeserializationFeature.FAIL_ON_UNKNOWN_PROPERTIES)
        assert mapper.encoding is EncodingFormat.JSON

    def test_configure_is_chainable(self) -> None:
        mapper = ObjectMapper()
        result = mapper.configure(SerializationFeature.INDENT_OUTPUT, True).disable(
            DeserializationFeature.FAIL_ON_UNKNOWN_PROPERTIES
        )
        assert result is mapper
        assert mapper.is_enabled(SerializationFeature.INDENT_OUTPUT)
        assert not mapper.is_enabled(DeserializationFeature.FAIL_ON_UNKNOWN_PROPERTIES)

    def test_configure_rejects_non_feature(self) -> None:
        with pytest.raises(TypeError):
            ObjectMapper().configure("INDENT_OUTPUT", True)  # type: ignore[arg-type]

    def test_default_visibility_is_public_fields_only(self) -> None:
        mapper = ObjectMapper()
        assert mapper.get_visibility(PropertyAccessor.FIELD) is Visibility.PUBLIC_ONLY
        assert mapper.get_visibility(PropertyAccessor.GETTER) is Visibility.NONE

    def test_get_mapper_info(self) -> None:
        mapper = ObjectMapper(EncodingFormat.YAML)
        mapper.register_module(CountingModule())
        info = mapper.get_mapper_info()
        assert info["encoding"] == "yaml"
        assert info["frozen"] is False
        assert info["serialization_features"]["INDENT_OUTPUT"] is False
        assert info["modules"] == [f"{__name__}.CountingModule"]


class TestModules:
    def test_duplicate_module_is_skipped(self) -> None:
        mapper = ObjectMapper()
        first, second = CountingModule(), CountingModule()
        mapper.register_module(first).register_module(second)
        assert mapper.registered_modules == (first,)
        assert first.setup_calls == 1
        assert second.setup_calls == 0

    def test_later_module_overrides_earlier_serializer(self) -> None:
        mapper = ObjectMapper()
        mapper.register_module(PointAsListModule())
        assert json.loads(mapper.write_value_as_string(Point(1, 2))) == [1, 2]

        mapper.register_module(PointAsTextModule())
        assert mapper.write_value_as_string(Point(1, 2)) == '"1,2"'


class TestWriting:
    def test_dataclass_is_written_as_object(self) -> None:
        mapper = ObjectMapper()
        assert json.loads(mapper.write_value_as_string(Point(1, 2))) == {"x": 1, "y": 2}

    def test_write_value_as_bytes_is_utf8(self) -> None:
        mapper = ObjectMapper()
        assert mapper.write_value_as_bytes({"name": "café"}) == '{"name": "café"}'.encode()

    def test_indent_output(self) -> None:
        mapper = ObjectMapper().enable(SerializationFeature.INDENT_OUTPUT)
        assert mapper.write_value_as_string({"a": 1}) == '{\n  "a": 1\n}'

    def test_order_map_entries_by_keys(self) -> None:
        mapper = ObjectMapper()
        assert mapper.write_value_as_string({"b": 1, "a": 2}) == '{"b": 1, "a": 2}'
        mapper.enable(SerializationFeature.ORDER_MAP_ENTRIES_BY_KEYS)
        assert mapper.write_value_as_string({"b": 1, "a": 2}) == '{"a": 2, "b": 1}'

    def test_none_map_values_can_be_skipped(self) -> None:
        mapper = ObjectMapper().disable(SerializationFeature.WRITE_NONE_MAP_VALUES)
        assert json.loads(mapper.write_value_as_string({"a": None, "b": 1})) == {"b": 1}

    def test_enums_by_name_or_to_string(self) -> None:
        mapper = ObjectMapper()
        assert mapper.write_value_as_string(Color.RED) == '"RED"'
        mapper.enable(SerializationFeature.WRITE_ENUMS_USING_TO_STRING)
        assert mapper.write_value_as_string(Color.RED) == '"Color.RED"'

    def test_field_visibility(self) -> None:
        account = Account()
        account.owner = "bob"
        account._balance = 10

        mapper = ObjectMapper()
        assert json.loads(mapper.write_value_as_string(account)) == {"owner": "bob"}

        mapper.set_visibility(PropertyAccessor.FIELD, Visibility.ANY)
        assert json.loads(mapper.write_value_as_string(account)) == {
            "owner": "bob",
            "_balance": 10,
        }

    def test_getter_visibility_includes_properties(self) -> None:
        mapper = ObjectMapper()
        assert json.loads(mapper.write_value_as_string(Circle())) == {"radius": 2}

        mapper.set_visibility(PropertyAccessor.GETTER, Visibility.PUBLIC_ONLY)
        assert json.loads(mapper.write_value_as_string(Circle())) == {
            "radius": 2,
            "diameter": 4,
        }

    def test_empty_object_fails_unless_disabled(self) -> None:
        mapper = ObjectMapper()
        with pytest.raises(MappingError, match="no properties discovered"):
            mapper.write_value_as_string(Empty())

        mapper.disable(SerializationFeature.FAIL_ON_EMPTY_BEANS)
        assert mapper.write_value_as_string(Empty()) == "{}"

    def test_bytes_are_base64(self) -> None:
        mapper = ObjectMapper()
        assert mapper.write_value_as_string(b"hi") == '"aGk="'
        assert mapper.read_value('"aGk="', bytes) == b"hi"


class TestReading:
    def test_read_nested_dataclass(self) -> None:
        mapper = ObjectMapper()
        palette = mapper.read_value(
            '{"name": "p", "colors": ["RED", "GREEN"], "weights": {"a": 1}}', Palette
        )
        assert palette == Palette(
            name="p", colors=[Color.RED, Color.GREEN], weights={"a": 1.0}
        )

    def test_read_from_bytes(self) -> None:
        assert ObjectMapper().read_value(b'{"x": 1, "y": 2}', Point) == Point(1, 2)

    def test_read_without_type_returns_tree(self) -> None:
        assert ObjectMapper().read_value('{"a": [1, 2]}') == {"a": [1, 2]}

    def test_unknown_property(self) -> None:
        mapper = ObjectMapper()
        content = '{"x": 1, "y": 2, "z": 3}'
        with pytest.raises(MappingError, match="Unrecognized field 'z'"):
            mapper.read_value(content, Point)

        mapper.disable(DeserializationFeature.FAIL_ON_UNKNOWN_PROPERTIES)
        assert mapper.read_value(content, Point) == Point(1, 2)

    def test_unknown_enum_name(self) -> None:
        with pytest.raises(MappingError, match="accepted values: RED, GREEN"):
            ObjectMapper().read_value('"BLUE"', Color)

    def test_read_enums_using_to_string(self) -> None:
        mapper = ObjectMapper().enable(DeserializationFeature.READ_ENUMS_USING_TO_STRING)
        assert mapper.read_value('"Color.GREEN"', Color) is Color.GREEN

    def test_accept_single_value_as_array(self) -> None:
        mapper = ObjectMapper()
        with pytest.raises(MappingError, match="expected an array"):
            mapper.read_value("5", list[int])

        mapper.enable(DeserializationFeature.ACCEPT_SINGLE_VALUE_AS_ARRAY)
        assert mapper.read_value("5", list[int]) == [5]

    def test_fail_on_null_for_primitives(self) -> None:
        mapper = ObjectMapper()
        assert mapper.read_value("null", int) is None

        mapper.enable(DeserializationFeature.FAIL_ON_NULL_FOR_PRIMITIVES)
        with pytest.raises(MappingError, match="FAIL_ON_NULL_FOR_PRIMITIVES"):
            mapper.read_value("null", int)

    def test_use_decimal_for_floats(self) -> None:
        mapper = ObjectMapper()
        assert mapper.read_value("1.10") == 1.1

        mapper.enable(DeserializationFeature.USE_DECIMAL_FOR_FLOATS)
        assert mapper.read_value("1.10") == Decimal("1.10")

    def test_scalar_coercion(self) -> None:
        mapper = ObjectMapper()
        assert mapper.read_value('"12"', int) == 12
        assert mapper.read_value("3", float) == 3.0
        assert mapper.read_value("true", str) == "true"
        with pytest.raises(MappingError):
            mapper.read_value("1.5", int)
        assert mapper.read_value('"false"', bool) is False
        with pytest.raises(MappingError, match="into type bool"):
            mapper.read_value('"maybe"', bool)
        with pytest.raises(MappingError, match="Cannot map boolean into type int"):
            mapper.read_value("true", int)
        with pytest.raises(MappingError, match="Cannot map list value into type float"):
            mapper.read_value("[1]", float)

    def test_literal_types(self) -> None:
        mapper = ObjectMapper()
        assert mapper.read_value('"red"', Literal["red", "blue"]) == "red"
        with pytest.raises(MappingError, match="Cannot map 'green'"):
            mapper.read_value('"green"', Literal["red", "blue"])

    def test_union_and_tuple_types(self) -> None:
        mapper = ObjectMapper()
        assert mapper.read_value("null", int | None) is None
        assert mapper.read_value('"x"', int | str) == "x"
        assert mapper.read_value('[1, "a"]', tuple[int, str]) == (1, "a")
        with pytest.raises(MappingError, match="Expected array of 2 items"):
            mapper.read_value("[1]", tuple[int, str])

    def test_malformed_content(self) -> None:
        with pytest.raises(MappingError, match="Malformed JSON"):
            ObjectMapper().read_value("{not json", Point)

    def test_invalid_utf8_bytes(self) -> None:
        with pytest.raises(MappingError, match="not valid UTF-8"):
            ObjectMapper().read_value(b'{"a": "\xff"}')

    def test_plain_class_with_zero_arg_constructor(self) -> None:
        mapper = ObjectMapper()
        account = mapper.read_value('{"owner": "ann"}', Account)
        assert isinstance(account, Account)
        assert account.owner == "ann"

    def test_private_field_needs_any_visibility(self) -> None:
        mapper = ObjectMapper()
        with pytest.raises(MappingError, match="Unrecognized field '_balance'"):
            mapper.read_value('{"owner": "ann", "_balance": 5}', Account)

        mapper.set_visibility(PropertyAccessor.FIELD, Visibility.ANY)
        assert mapper.read_value('{"_balance": 5}', Account)._balance == 5

    def test_plain_class_without_creator_fails(self) -> None:
        with pytest.raises(MappingError, match="no creator usable without arguments"):
            ObjectMapper().read_value('{"name": "n"}', Named)


class TestYamlEncoding:
    def test_round_trip(self) -> None:
        mapper = ObjectMapper(EncodingFormat.YAML)
        text = mapper.write_value_as_string(Point(1, 2))
        assert "x: 1" in text and "y: 2" in text
        assert mapper.read_value(text, Point) == Point(1, 2)

    def test_malformed_yaml(self) -> None:
        with pytest.raises(MappingError, match="Malformed YAML"):
            ObjectMapper(EncodingFormat.YAML).read_value("a: [1, 2", list)


class TestFreeze:
    def test_frozen_mapper_rejects_configuration(self) -> None:
        mapper = ObjectMapper().freeze()
        assert mapper.is_frozen
        with pytest.raises(MapperFrozenError):
            mapper.configure(SerializationFeature.INDENT_OUTPUT, True)
        with pytest.raises(MapperFrozenError):
            mapper.set_visibility(PropertyAccessor.FIELD, Visibility.ANY)
        with pytest.raises(MapperFrozenError):
            mapper.register_module(CountingModule())
        with pytest.raises(MapperFrozenError):
            mapper.encoding = EncodingFormat.YAML
        assert mapper.encoding is EncodingFormat.JSON

    def test_frozen_mapper_still_reads_and_writes(self) -> None:
        mapper = ObjectMapper().freeze()
        assert mapper.read_value(mapper.write_value_as_string(Point(3, 4)), Point) == Point(3, 4)

    def test_copy_is_unfrozen_with_same_configuration(self) -> None:
        mapper = ObjectMapper().enable(SerializationFeature.INDENT_OUTPUT)
        module = CountingModule()
        mapper.register_module(module).freeze()

        clone = mapper.copy()
        assert not clone.is_frozen
        assert clone.is_enabled(SerializationFeature.INDENT_OUTPUT)
        assert clone.registered_modules == (module,)
        clone.disable(SerializationFeature.INDENT_OUTPUT)
        assert mapper.is_enabled(SerializationFeature.INDENT_OUTPUT)

    def test_encoding_follows_freeze_and_copy(self) -> None:
        mapper = ObjectMapper()
        mapper.encoding = EncodingFormat.YAML
        mapper.freeze()
        clone = mapper.copy()
        assert clone.encoding is EncodingFormat.YAML
        clone.encoding = EncodingFormat.JSON
        assert mapper.get_mapper_info()["encoding"] == "yaml"
        assert clone.get_mapper_info()["encoding"] == "json"
