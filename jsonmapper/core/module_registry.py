"""Name table of the mapper modules that configuration may refer to."""

import logging
from typing import Any

from ..mapper.module import Module

logger = logging.getLogger(__name__)


def _normalize(module_name: str) -> str:
    return (module_name or "").strip().lower()


class ModuleRegistry:
    """
    Maps the names used in `jackson-modules` to Module subclasses.

    Names are case-insensitive and surrounding whitespace is ignored, so
    `DateTime` and `datetime` select the same module.
    """

    def __init__(self):
        self._modules: dict[str, type[Module]] = {}
        self._logger = logger.getChild(self.__class__.__name__)

    def register_module(self, module_name: str, module_class: type[Module]) -> None:
        """
        Make `module_class` available under `module_name`.

        Raises:
            ValueError: If the name is blank or the class is not a Module
        """
        name = _normalize(module_name)
        if not name:
            raise ValueError("Module name cannot be empty")
        if not (isinstance(module_class, type) and issubclass(module_class, Module)):
            raise ValueError(f"{module_class!r} is not a mapper Module class")

        previous = self._modules.get(name)
        if previous is not None and previous is not module_class:
            self._logger.warning(
                f"Overwriting existing module registration for name '{name}': "
                f"{previous.__qualname__} -> {module_class.__qualname__}"
            )
        self._modules[name] = module_class
        self._logger.debug(f"Module '{name}' -> {module_class.__qualname__}")

    def get_module_class(self, module_name: str) -> type[Module]:
        """
        Raises:
            ValueError: If no module is registered under the name
        """
        name = _normalize(module_name)
        try:
            return self._modules[name]
        except KeyError:
            raise ValueError(
                f"Unknown module '{name}'. Available modules: "
                f"{', '.join(self.get_available_names()) or 'none'}"
            ) from None

    def create_module_instance(self, module_name: str) -> Module:
        """
        Instantiate the module registered under `module_name`.

        Raises:
            ValueError: If no module is registered under the name
            RuntimeError: If the module constructor fails
        """
        module_class = self.get_module_class(module_name)
        try:
            return module_class()
        except Exception as e:
            raise RuntimeError(
                f"Failed to create instance of module '{module_class.__name__}' "
                f"for name '{_normalize(module_name)}': {e}"
            ) from e

    def get_available_names(self) -> list[str]:
        return sorted(self._modules)

    def module_classes(self) -> set[type[Module]]:
        return set(self._modules.values())

    def is_name_available(self, module_name: str) -> bool:
        return _normalize(module_name) in self._modules

    __contains__ = is_name_available

    def get_module_info(self, module_name: str) -> dict[str, Any]:
        """Name, class path and first docstring line, as listed by the CLI."""
        module_class = self.get_module_class(module_name)
        doc = (module_class.__doc__ or "").strip()
        return {
            "name": _normalize(module_name),
            "class": f"{module_class.__module__}.{module_class.__qualname__}",
            "description": doc.splitlines()[0] if doc else "No description available",
        }


_global_registry = ModuleRegistry()


def get_global_registry() -> ModuleRegistry:
    return _global_registry


def register_builtin_modules(registry: ModuleRegistry | None = None) -> ModuleRegistry:
    """
    Add the built-in modules under their `module_name`, keeping any module
    already registered under the same name.

    Returns:
        The registry that was filled, the global one when none is given
    """
    from ..modules import (  # deferred: modules import the mapper package
        DateTimeModule,
        ParameterNamesModule,
        PydanticModule,
        StandardTypesModule,
    )

    registry = registry if registry is not None else get_global_registry()
    for module_class in (
        ParameterNamesModule,
        DateTimeModule,
        StandardTypesModule,
        PydanticModule,
    ):
        if module_class.module_name not in registry:
            registry.register_module(module_class.module_name, module_class)
    return registry
