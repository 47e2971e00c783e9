import abc
import dataclasses
import typing
import warnings

from .config import CONFIG, EmbeddingPolicy, EmbedMode
from .exceptions import InvalidDeclarationError, UnknownOptionError
from .utils import is_collection, pluralize, read_attribute_for_serialization, singularize

if typing.TYPE_CHECKING:  # pragma: nocover
    from .registry import SerializerRegistry
    from .serializable import Serializable

SerializerRef = typing.Union[None, str, typing.Type["Serializable"]]

ASSOCIATION_OPTIONS = frozenset(
    [
        "embed",
        "embed_in_root",
        "include",
        "embed_key",
        "key",
        "root",
        "serializer",
    ]
)


@dataclasses.dataclass(frozen=True)
class Association(metaclass=abc.ABCMeta):
    """
    An :py:class:`Association` describes one relation declared on a serializer.

    Instances are built through :py:meth:`declare`, which fills the unspecified
    options from the embedding policy in effect at declaration time.
    """

    name: str
    embed: EmbedMode
    embed_in_root: bool
    embed_key: str
    key: str
    """
    The key under which ids are rendered.
    """
    embedded_key: str
    """
    The key under which nested documents are rendered.
    """
    root_key: str
    """
    The key of the side collection this association is flattened into.
    """
    serializer: SerializerRef = None

    @property
    def embed_ids(self) -> bool:
        return self.embed.includes_ids

    @property
    def embed_objects(self) -> bool:
        return self.embed.includes_objects

    @classmethod
    @abc.abstractmethod
    def default_key(cls, name: str) -> str:
        ...  # pragma: nocover

    @classmethod
    @abc.abstractmethod
    def default_root_key(cls, embedded_key: str) -> str:
        ...  # pragma: nocover

    @classmethod
    def declare(
        cls, name: str, policy: typing.Optional[EmbeddingPolicy] = None, **options
    ) -> "Association":
        unknown = set(options) - ASSOCIATION_OPTIONS
        if unknown:
            raise UnknownOptionError(name, unknown)
        if policy is None:
            policy = CONFIG.policy

        embed = EmbedMode.coerce(options["embed"]) if "embed" in options else policy.embed

        if "include" in options:
            warnings.warn(
                "the include option is deprecated; use embed_in_root instead",
                DeprecationWarning,
                stacklevel=3,
            )
            if "embed_in_root" in options and bool(options["embed_in_root"]) != bool(
                options["include"]
            ):
                raise InvalidDeclarationError(
                    f"association ({name}) declares contradicting embed_in_root and include options"
                )
        embed_in_root = bool(
            options.get("embed_in_root", options.get("include", policy.embed_in_root))
        )

        embedded_key = options.get("root") or name
        return cls(
            name=name,
            embed=embed,
            embed_in_root=embed_in_root,
            embed_key=options.get("embed_key") or "id",
            key=options.get("key") or cls.default_key(name),
            embedded_key=embedded_key,
            root_key=cls.default_root_key(embedded_key),
            serializer=options.get("serializer"),
        )

    def serializer_from_options(
        self, registry: "SerializerRegistry", namespace: typing.Optional[str] = None
    ) -> typing.Optional[typing.Type["Serializable"]]:
        if isinstance(self.serializer, str):
            return registry.require(self.serializer, namespace)
        else:
            return self.serializer

    def extract_ids(self, related: typing.Any) -> typing.Any:
        if is_collection(related):
            return [read_attribute_for_serialization(elem, self.embed_key) for elem in related]
        elif related is None:
            return None
        else:
            return read_attribute_for_serialization(related, self.embed_key)

    @abc.abstractmethod
    def serializer_class(
        self,
        related: typing.Any,
        registry: "SerializerRegistry",
        namespace: typing.Optional[str] = None,
    ) -> typing.Type["Serializable"]:
        ...  # pragma: nocover

    @abc.abstractmethod
    def serializer_options(
        self,
        serializer_class: typing.Type["Serializable"],
        registry: "SerializerRegistry",
        namespace: typing.Optional[str] = None,
        embedded_in_root: bool = False,
    ) -> typing.Dict[str, typing.Any]:
        ...  # pragma: nocover

    def build_serializer(
        self,
        related: typing.Any,
        registry: "SerializerRegistry",
        scope: typing.Any = None,
        namespace: typing.Optional[str] = None,
        embedded_in_root: bool = False,
    ) -> "Serializable":
        """
        Builds the serializer that renders ``related``.

        :param bool embedded_in_root: whether the output goes to a side collection.
        """
        serializer_class = self.serializer_class(related, registry, namespace)
        options = self.serializer_options(serializer_class, registry, namespace, embedded_in_root)
        options["scope"] = scope
        if namespace is not None:
            options["namespace"] = namespace
        return serializer_class(related, **options)


@dataclasses.dataclass(frozen=True)
class HasOne(Association):
    @classmethod
    def default_key(cls, name: str) -> str:
        return f"{name}_id"

    @classmethod
    def default_root_key(cls, embedded_key: str) -> str:
        return pluralize(embedded_key)

    def serializer_class(
        self,
        related: typing.Any,
        registry: "SerializerRegistry",
        namespace: typing.Optional[str] = None,
    ) -> typing.Type["Serializable"]:
        from .serializable import DefaultSerializer

        return (
            self.serializer_from_options(registry, namespace)
            or registry.serializer_for(related, namespace)
            or DefaultSerializer
        )

    def serializer_options(
        self,
        serializer_class: typing.Type["Serializable"],
        registry: "SerializerRegistry",
        namespace: typing.Optional[str] = None,
        embedded_in_root: bool = False,
    ) -> typing.Dict[str, typing.Any]:
        from .collection import CollectionSerializer

        if issubclass(serializer_class, CollectionSerializer):
            return {"registry": registry}
        else:
            return {"wrap_in_array": embedded_in_root}


@dataclasses.dataclass(frozen=True)
class HasMany(Association):
    @classmethod
    def default_key(cls, name: str) -> str:
        return f"{singularize(name)}_ids"

    @classmethod
    def default_root_key(cls, embedded_key: str) -> str:
        return embedded_key

    def extract_ids(self, related: typing.Any) -> typing.Any:
        if related is None:
            return []
        return super().extract_ids(related)

    def _uses_collection_serializer(
        self, explicit: typing.Optional[typing.Type["Serializable"]]
    ) -> bool:
        from .collection import CollectionSerializer

        return explicit is None or not issubclass(explicit, CollectionSerializer)

    def serializer_class(
        self,
        related: typing.Any,
        registry: "SerializerRegistry",
        namespace: typing.Optional[str] = None,
    ) -> typing.Type["Serializable"]:
        from .collection import CollectionSerializer

        explicit = self.serializer_from_options(registry, namespace)
        if self._uses_collection_serializer(explicit):
            return CollectionSerializer
        else:
            return typing.cast(typing.Type["Serializable"], explicit)

    def serializer_options(
        self,
        serializer_class: typing.Type["Serializable"],
        registry: "SerializerRegistry",
        namespace: typing.Optional[str] = None,
        embedded_in_root: bool = False,
    ) -> typing.Dict[str, typing.Any]:
        explicit = self.serializer_from_options(registry, namespace)
        options: typing.Dict[str, typing.Any] = {"registry": registry}
        if self._uses_collection_serializer(explicit):
            options["each_serializer"] = explicit
        return options
