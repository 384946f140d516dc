"""Unit tests for the DateTime, StandardTypes and Pydantic modules."""

import json
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from uuid import UUID

import pytest
from pydantic import BaseModel

from jsonmapper.core.exceptions import MappingError
from jsonmapper.mapper import ObjectMapper, SerializationFeature
from jsonmapper.modules import DateTimeModule, PydanticModule, StandardTypesModule


class Item(BaseModel):
    name: str
    qty: int = 1


MOMENT = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def time_mapper() -> ObjectMapper:
    return ObjectMapper().register_module(DateTimeModule())


class TestDateTimeModule:
    def test_datetime_as_epoch_millis(self, time_mapper: ObjectMapper) -> None:
        assert time_mapper.write_value_as_string(MOMENT) == "1704164645000"
        assert time_mapper.read_value("1704164645000", datetime) == MOMENT

    def test_naive_datetime_is_taken_as_utc(self, time_mapper: ObjectMapper) -> None:
        naive = datetime(2024, 1, 2, 3, 4, 5)
        assert time_mapper.write_value_as_string(naive) == "1704164645000"

    def test_datetime_as_iso_text(self, time_mapper: ObjectMapper) -> None:
        time_mapper.disable(SerializationFeature.WRITE_DATES_AS_TIMESTAMPS)
        text = time_mapper.write_value_as_string(MOMENT)
        assert text == '"2024-01-02T03:04:05+00:00"'
        assert time_mapper.read_value(text, datetime) == MOMENT

    def test_date_as_array_or_text(self, time_mapper: ObjectMapper) -> None:
        day = date(2024, 1, 2)
        assert json.loads(time_mapper.write_value_as_string(day)) == [2024, 1, 2]
        assert time_mapper.read_value("[2024, 1, 2]", date) == day

        time_mapper.disable(SerializationFeature.WRITE_DATES_AS_TIMESTAMPS)
        assert time_mapper.write_value_as_string(day) == '"2024-01-02"'
        assert time_mapper.read_value('"2024-01-02"', date) == day

    def test_time_and_timedelta(self, time_mapper: ObjectMapper) -> None:
        assert time_mapper.write_value_as_string(time(8, 30)) == '"08:30:00"'
        assert time_mapper.read_value('"08:30:00"', time) == time(8, 30)
        assert time_mapper.write_value_as_string(timedelta(minutes=1, seconds=5)) == "65.0"
        assert time_mapper.read_value("65", timedelta) == timedelta(seconds=65)

    def test_invalid_values(self, time_mapper: ObjectMapper) -> None:
        with pytest.raises(MappingError, match="Invalid datetime"):
            time_mapper.read_value('"nope"', datetime)
        with pytest.raises(MappingError, match="Invalid date"):
            time_mapper.read_value("[2024, 13, 1]", date)
        with pytest.raises(MappingError):
            time_mapper.read_value("true", timedelta)

    def test_datetime_unsupported_without_module(self) -> None:
        with pytest.raises(MappingError, match="No serializer found"):
            ObjectMapper().write_value_as_string(MOMENT)


class TestStandardTypesModule:
    @pytest.fixture
    def mapper(self) -> ObjectMapper:
        return ObjectMapper().register_module(StandardTypesModule())

    def test_decimal(self, mapper: ObjectMapper) -> None:
        assert mapper.write_value_as_string(Decimal("1.10")) == '"1.10"'
        assert mapper.read_value('"1.10"', Decimal) == Decimal("1.10")
        assert mapper.read_value("2", Decimal) == Decimal(2)
        with pytest.raises(MappingError, match="Invalid decimal"):
            mapper.read_value('"abc"', Decimal)

    def test_uuid(self, mapper: ObjectMapper) -> None:
        value = UUID("12345678-1234-5678-1234-567812345678")
        text = mapper.write_value_as_string(value)
        assert text == '"12345678-1234-5678-1234-567812345678"'
        assert mapper.read_value(text, UUID) == value
        with pytest.raises(MappingError, match="Invalid UUID"):
            mapper.read_value('"not-a-uuid"', UUID)

    def test_paths_keep_requested_class(self, mapper: ObjectMapper) -> None:
        assert mapper.write_value_as_string(Path("a/b")) == '"a/b"'
        result = mapper.read_value('"a/b"', Path)
        assert isinstance(result, Path)
        assert result == Path("a/b")


class TestPydanticModule:
    @pytest.fixture
    def mapper(self) -> ObjectMapper:
        return ObjectMapper().register_module(PydanticModule())

    def test_round_trip(self, mapper: ObjectMapper) -> None:
        text = mapper.write_value_as_string(Item(name="bolt", qty=3))
        assert json.loads(text) == {"name": "bolt", "qty": 3}
        assert mapper.read_value(text, Item) == Item(name="bolt", qty=3)

    def test_nested_in_collections(self, mapper: ObjectMapper) -> None:
        items = mapper.read_value('[{"name": "a"}, {"name": "b", "qty": 2}]', list[Item])
        assert items == [Item(name="a"), Item(name="b", qty=2)]

    def test_validation_error_becomes_mapping_error(self, mapper: ObjectMapper) -> None:
        with pytest.raises(MappingError, match="Invalid data for Item"):
            mapper.read_value('{"qty": "many"}', Item)
