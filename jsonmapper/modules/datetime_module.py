"""Support for the `datetime` module types."""

from datetime import date, datetime, time, timedelta, timezone
from typing import TYPE_CHECKING, Any

from ..core.exceptions import MappingError
from ..mapper.features import SerializationFeature
from ..mapper.module import Module, SetupContext

if TYPE_CHECKING:
    from ..mapper.object_mapper import ObjectMapper


def _write_datetime(value: datetime, mapper: "ObjectMapper") -> Any:
    if mapper.is_enabled(SerializationFeature.WRITE_DATES_AS_TIMESTAMPS):
        # Naive values are taken as UTC
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp() * 1000)
    return value.isoformat()


def _write_date(value: date, mapper: "ObjectMapper") -> Any:
    if mapper.is_enabled(SerializationFeature.WRITE_DATES_AS_TIMESTAMPS):
        return [value.year, value.month, value.day]
    return value.isoformat()


def _write_time(value: time, mapper: "ObjectMapper") -> str:
    return value.isoformat()


def _write_timedelta(value: timedelta, mapper: "ObjectMapper") -> float:
    return value.total_seconds()


def _read_datetime(tree: Any, cls: type, mapper: "ObjectMapper") -> datetime:
    if isinstance(tree, (int, float)) and not isinstance(tree, bool):
        return datetime.fromtimestamp(tree / 1000, tz=timezone.utc)
    if isinstance(tree, str):
        try:
            return datetime.fromisoformat(tree)
        except ValueError as e:
            raise MappingError(f"Invalid datetime value {tree!r}: {e}") from e
    raise MappingError(f"Cannot map {type(tree).__name__} value into datetime")


def _read_date(tree: Any, cls: type, mapper: "ObjectMapper") -> date:
    try:
        if isinstance(tree, list):
            return date(*tree)
        if isinstance(tree, str):
            return date.fromisoformat(tree)
    except (TypeError, ValueError) as e:
        raise MappingError(f"Invalid date value {tree!r}: {e}") from e
    raise MappingError(f"Cannot map {type(tree).__name__} value into date")


def _read_time(tree: Any, cls: type, mapper: "ObjectMapper") -> time:
    if not isinstance(tree, str):
        raise MappingError(f"Cannot map {type(tree).__name__} value into time")
    try:
        return time.fromisoformat(tree)
    except ValueError as e:
        raise MappingError(f"Invalid time value {tree!r}: {e}") from e


def _read_timedelta(tree: Any, cls: type, mapper: "ObjectMapper") -> timedelta:
    if isinstance(tree, bool) or not isinstance(tree, (int, float)):
        raise MappingError(f"Cannot map {tree!r} into timedelta (expected seconds)")
    return timedelta(seconds=float(tree))


class DateTimeModule(Module):
    """
    Serializers and deserializers for datetime, date, time and timedelta.

    With WRITE_DATES_AS_TIMESTAMPS enabled, datetimes are written as epoch
    milliseconds and dates as [year, month, day]; otherwise ISO-8601 text
    is used. Timedeltas are always written as seconds.
    """

    module_name = "datetime"

    def setup_module(self, context: SetupContext) -> None:
        # datetime is a subclass of date, so both need explicit entries
        context.add_serializer(datetime, _write_datetime)
        context.add_serializer(date, _write_date)
        context.add_serializer(time, _write_time)
        context.add_serializer(timedelta, _write_timedelta)
        context.add_deserializer(datetime, _read_datetime)
        context.add_deserializer(date, _read_date)
        context.add_deserializer(time, _read_time)
        context.add_deserializer(timedelta, _read_timedelta)
