"""Process-wide provider of one ObjectMapper per serializer identifier."""

import logging
import threading
from pathlib import Path

from ..config import MapperConfig, load_config
from ..mapper.features import EncodingFormat
from ..mapper.object_mapper import ObjectMapper
from .customizer import MapperCustomizer
from .factory import create_object_mapper
from .loader import ModuleLoader
from .module_registry import register_builtin_modules
from .setup import MapperProviderSetup, ProcessSetup

logger = logging.getLogger(__name__)


class ObjectMapperProvider:
    """
    Builds and caches one ObjectMapper per serializer identifier.

    The process assembles a single provider at startup and hands it to the
    consumers that need a mapper. A customizer supplied through
    MapperProviderSetup in the ProcessSetup amends how mappers are built.
    """

    def __init__(
        self,
        config: MapperConfig | None = None,
        loader: ModuleLoader | None = None,
        setup: ProcessSetup | None = None,
        log: logging.Logger | None = None,
    ):
        """
        Initialize the provider.

        Args:
            config: Configuration snapshot; the reference configuration if omitted
            loader: Module loader; one over the built-in modules if omitted
            setup: Startup options, possibly holding a MapperProviderSetup
            log: Diagnostics logger passed to the mapper factory
        """
        self._logger = logger.getChild(self.__class__.__name__)
        self._config = config if config is not None else load_config()
        self._loader = (
            loader if loader is not None else ModuleLoader(register_builtin_modules())
        )
        self._setup = setup if setup is not None else ProcessSetup()
        self._log = log
        self._object_mappers: dict[int, ObjectMapper] = {}
        self._build_locks: dict[int, threading.Lock] = {}
        self._build_locks_guard = threading.Lock()

    @classmethod
    def from_config_file(
        cls, path: str | Path, setup: ProcessSetup | None = None
    ) -> "ObjectMapperProvider":
        return cls(config=load_config(path), setup=setup)

    def get_or_create(
        self, serializer_identifier: int, encoding: EncodingFormat = EncodingFormat.JSON
    ) -> ObjectMapper:
        """
        Return the mapper published for the identifier, building it if needed.

        The mapper is built at most once per identifier, also when several
        threads ask for it at the same time. The returned mapper is frozen
        and must be shared read-only. A failed build publishes nothing, so a
        later call tries again.

        Args:
            serializer_identifier: The identifier of the consumer using this
                mapper; there is one mapper per identifier
            encoding: Encoding used if the mapper has to be built

        Raises:
            ConfigurationError: If the first build for the identifier fails
        """
        mapper = self._object_mappers.get(serializer_identifier)
        if mapper is not None:
            return mapper

        with self._build_lock(serializer_identifier):
            mapper = self._object_mappers.get(serializer_identifier)
            if mapper is None:
                mapper = self.create(serializer_identifier, encoding).freeze()
                self._object_mappers[serializer_identifier] = mapper
                self._logger.info(
                    f"Published object mapper for serializer identifier "
                    f"{serializer_identifier} ({encoding.value})"
                )
            return mapper

    def create(
        self, serializer_identifier: int, encoding: EncodingFormat = EncodingFormat.JSON
    ) -> ObjectMapper:
        """
        Build a new mapper without caching or publishing it.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        setup = self._setup.get(MapperProviderSetup)
        customizer = setup.customizer if setup is not None else MapperCustomizer()

        try:
            return create_object_mapper(
                serializer_identifier,
                encoding,
                customizer,
                self._config,
                self._loader,
                self._log,
            )
        except Exception as e:
            self._logger.error(
                f"Failed to build object mapper for serializer identifier "
                f"{serializer_identifier}: {e}",
                exc_info=True,
            )
            raise

    def published_identifiers(self) -> list[int]:
        """Identifiers that currently have a published mapper, sorted."""
        return sorted(self._object_mappers)

    def _build_lock(self, serializer_identifier: int) -> threading.Lock:
        with self._build_locks_guard:
            lock = self._build_locks.get(serializer_identifier)
            if lock is None:
                lock = self._build_locks[serializer_identifier] = threading.Lock()
            return lock
