"""Loader that instantiates and discovers mapper modules."""

from __future__ import annotations

import importlib
import importlib.metadata as importlib_metadata
import logging
from typing import Final

from ..mapper.module import Module
from .exceptions import ConfigurationError, ModuleLoadError
from .module_registry import ModuleRegistry, get_global_registry

logger = logging.getLogger(__name__)

ENTRYPOINT_GROUP: Final[str] = "jsonmapper.modules"


class ModuleLoader:
    """
    Create module instances by name and discover every available module.

    A name is first looked up in the module registry; a dotted path of the
    form ``package.module.ClassName`` is imported otherwise. Discovery
    returns one instance per registered module followed by the modules
    advertised in the ``jsonmapper.modules`` entry-point group.
    """

    def __init__(
        self,
        registry: ModuleRegistry | None = None,
        entry_point_group: str | None = ENTRYPOINT_GROUP,
    ):
        self._registry = registry if registry is not None else get_global_registry()
        self._entry_point_group = entry_point_group
        self._logger = logger.getChild(self.__class__.__name__)

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    def create_instance_for(self, module_name: str) -> Module:
        """
        Instantiate the module configured under `module_name`.

        Raises:
            ModuleLoadError: If the name is unknown, cannot be imported,
                does not name a Module subclass or fails to instantiate
        """
        if self._registry.is_name_available(module_name):
            try:
                return self._registry.create_module_instance(module_name)
            except (ValueError, RuntimeError) as e:
                raise ModuleLoadError(module_name, str(e)) from e

        if "." not in module_name:
            raise ModuleLoadError(
                module_name,
                f"Unknown module '{module_name}'. Available modules: "
                f"{', '.join(self._registry.get_available_names()) or 'none'}",
            )

        return self._instantiate(module_name, self._import_class(module_name))

    def find_modules(self) -> list[Module]:
        """
        Discover every module available to this loader.

        Raises:
            ConfigurationError: If any discovered module cannot be loaded
        """
        modules: list[Module] = []
        for module_name in self._registry.get_available_names():
            try:
                modules.append(self._registry.create_module_instance(module_name))
            except (ValueError, RuntimeError) as e:
                raise ConfigurationError(
                    f"Module discovery failed for '{module_name}': {e}"
                ) from e

        if self._entry_point_group:
            modules.extend(self._load_entry_point_modules())

        self._logger.debug(f"Discovered {len(modules)} modules")
        return modules

    def _load_entry_point_modules(self) -> list[Module]:
        modules: list[Module] = []
        known = self._registry.module_classes()
        try:
            candidates = importlib_metadata.entry_points(group=self._entry_point_group)
        except Exception as e:
            raise ConfigurationError(
                f"Failed to enumerate entry points in group "
                f"'{self._entry_point_group}': {e}"
            ) from e

        for entry_point in candidates:
            try:
                module_class = entry_point.load()
            except Exception as e:
                raise ConfigurationError(
                    f"Failed to load module entry point '{entry_point.name}': {e}"
                ) from e

            # Entry points may re-advertise registered built-ins
            if self._registry.is_name_available(entry_point.name):
                continue
            if module_class in known:
                continue
            known.add(module_class)

            try:
                modules.append(self._instantiate(entry_point.name, module_class))
            except ModuleLoadError as e:
                raise ConfigurationError(str(e)) from e

        return modules

    @staticmethod
    def _import_class(module_name: str) -> type:
        path, _, class_name = module_name.rpartition(".")
        try:
            python_module = importlib.import_module(path)
        except Exception as e:
            raise ModuleLoadError(
                module_name, f"Cannot import '{path}': {e}"
            ) from e

        try:
            return getattr(python_module, class_name)
        except AttributeError as e:
            raise ModuleLoadError(
                module_name, f"'{path}' has no attribute '{class_name}'"
            ) from e

    @staticmethod
    def _instantiate(module_name: str, module_class: object) -> Module:
        if not (isinstance(module_class, type) and issubclass(module_class, Module)):
            raise ModuleLoadError(
                module_name, f"'{module_name}' is not a mapper Module class"
            )
        try:
            return module_class()
        except Exception as e:
            raise ModuleLoadError(
                module_name,
                f"Failed to create instance of module '{module_class.__name__}': {e}",
            ) from e
