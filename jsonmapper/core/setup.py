"""Typed startup options handed to the object mapper provider."""

from dataclasses import dataclass
from typing import TypeVar

from .customizer import MapperCustomizer


class Setup:
    """Marker base class for startup options."""


SetupT = TypeVar("SetupT", bound=Setup)


class ProcessSetup:
    """
    Collection of startup options, at most one per option type.

    Options are looked up by their exact type.
    """

    def __init__(self, *setups: Setup):
        self._setups: dict[type[Setup], Setup] = {type(s): s for s in setups}

    def get(self, setup_type: type[SetupT]) -> SetupT | None:
        return self._setups.get(setup_type)  # type: ignore[return-value]

    def and_then(self, setup: Setup) -> "ProcessSetup":
        """Return a new ProcessSetup with `setup` added (replacing its type)."""
        return ProcessSetup(*self._setups.values(), setup)

    def __contains__(self, setup_type: type[Setup]) -> bool:
        return setup_type in self._setups


@dataclass(frozen=True)
class MapperProviderSetup(Setup):
    """Supplies the MapperCustomizer used for every mapper the provider builds."""

    customizer: MapperCustomizer
