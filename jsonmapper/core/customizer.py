"""Customization hook for object mapper construction."""

from ..mapper.features import DeserializationFeature, EncodingFormat, SerializationFeature
from ..mapper.module import Module
from ..mapper.object_mapper import ObjectMapper


class MapperCustomizer:
    """
    Amend how object mappers are built, per serializer identifier.

    Pass an instance through MapperProviderSetup when the process starts.
    Create a subclass and override the methods to amend the defaults; every
    default is a pass-through.
    """

    def new_object_mapper(
        self, serializer_identifier: int, encoding: EncodingFormat
    ) -> ObjectMapper:
        """
        Create the bare mapper for the given identifier.

        Args:
            serializer_identifier: The identifier of the consumer using this
                mapper; there is one mapper per identifier
            encoding: Encoding format the mapper reads and writes
        """
        return ObjectMapper(encoding)

    def override_configured_serialization_features(
        self,
        serializer_identifier: int,
        configured_features: list[tuple[SerializationFeature, bool]],
    ) -> list[tuple[SerializationFeature, bool]]:
        """
        Amend the serialization features read from `serialization-features`.

        The returned list is what gets applied to the mapper, in order.
        """
        return configured_features

    def override_configured_deserialization_features(
        self,
        serializer_identifier: int,
        configured_features: list[tuple[DeserializationFeature, bool]],
    ) -> list[tuple[DeserializationFeature, bool]]:
        """
        Amend the deserialization features read from `deserialization-features`.

        The returned list is what gets applied to the mapper, in order.
        """
        return configured_features

    def override_configured_modules(
        self, serializer_identifier: int, configured_modules: list[Module]
    ) -> list[Module]:
        """
        Amend the modules loaded from `jackson-modules`.

        The returned list fully replaces the configured one and is
        registered in order.
        """
        return configured_modules
