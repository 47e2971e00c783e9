import collections.abc
import dataclasses
import types
import typing

from .associations import Association, HasMany, HasOne
from .config import EmbeddingPolicy
from .exceptions import InvalidDeclarationError

RootOption = typing.Union[None, bool, str]

AssociationDeclaration = typing.Union[
    str,
    typing.Tuple[str, typing.Mapping[str, typing.Any]],
]

AssociationDeclarations = typing.Union[
    typing.Sequence[AssociationDeclaration],
    typing.Mapping[str, typing.Mapping[str, typing.Any]],
]


def _empty_associations() -> typing.Mapping[str, Association]:
    return types.MappingProxyType({})


@dataclasses.dataclass(frozen=True)
class SerializerConfig:
    """
    A :py:class:`SerializerConfig` holds what a serializer class declares.

    It is immutable; specializations receive a clone built by
    :py:meth:`specialize` that later declarations extend.
    """

    root: RootOption = None
    """
    ``None`` or ``True`` derives the root key from the serializer name, ``False`` disables it.
    """
    attributes: typing.Tuple[str, ...] = ()
    associations: typing.Mapping[str, Association] = dataclasses.field(
        default_factory=_empty_associations
    )
    namespace: typing.Optional[str] = None
    model: typing.Optional[typing.Type] = None

    def specialize(self, namespace: typing.Optional[str] = None) -> "SerializerConfig":
        """
        Returns a copy that a specialized serializer class starts from.

        The model binding is not inherited.
        """
        return dataclasses.replace(
            self,
            associations=types.MappingProxyType(dict(self.associations)),
            namespace=namespace,
            model=None,
        )


class SerializerConfigBuilder:
    _parent: SerializerConfig
    _policy: typing.Optional[EmbeddingPolicy]
    _root: RootOption
    _attributes: typing.List[str]
    _associations: typing.Dict[str, Association]
    _declared: typing.Set[str]
    _namespace: typing.Optional[str]
    _model: typing.Optional[typing.Type]

    def root(self, value: RootOption) -> "SerializerConfigBuilder":
        self._root = value
        return self

    def namespace(self, value: typing.Optional[str]) -> "SerializerConfigBuilder":
        self._namespace = value
        return self

    def model(self, value: typing.Optional[typing.Type]) -> "SerializerConfigBuilder":
        self._model = value
        return self

    def attributes(self, *names: str) -> "SerializerConfigBuilder":
        for name in names:
            if name in self._associations:
                raise InvalidDeclarationError(
                    f"attribute ({name}) is already declared as an association"
                )
            if name not in self._attributes:
                self._attributes.append(name)
        return self

    def _associate(
        self,
        class_: typing.Type[Association],
        names: typing.Iterable[str],
        options: typing.Mapping[str, typing.Any],
    ) -> "SerializerConfigBuilder":
        for name in names:
            if name in self._attributes:
                raise InvalidDeclarationError(
                    f"association ({name}) is already declared as an attribute"
                )
            if name in self._declared:
                raise InvalidDeclarationError(f"association ({name}) is declared more than once")
            self._declared.add(name)
            self._associations[name] = class_.declare(name, policy=self._policy, **options)
        return self

    def has_one(self, *names: str, **options) -> "SerializerConfigBuilder":
        return self._associate(HasOne, names, options)

    def has_many(self, *names: str, **options) -> "SerializerConfigBuilder":
        return self._associate(HasMany, names, options)

    def build(self) -> SerializerConfig:
        return SerializerConfig(
            root=self._root,
            attributes=tuple(self._attributes),
            associations=types.MappingProxyType(dict(self._associations)),
            namespace=self._namespace,
            model=self._model,
        )

    def __init__(
        self,
        parent: typing.Optional[SerializerConfig] = None,
        policy: typing.Optional[EmbeddingPolicy] = None,
    ):
        self._parent = SerializerConfig() if parent is None else parent
        self._policy = policy
        self._root = self._parent.root
        self._attributes = list(self._parent.attributes)
        self._associations = dict(self._parent.associations)
        self._declared = set()
        self._namespace = self._parent.namespace
        self._model = self._parent.model


META_KEYS = frozenset(
    [
        "root",
        "attributes",
        "has_one",
        "has_many",
        "namespace",
        "model",
        "registry",
        "config",
    ]
)


def iter_association_declarations(
    declarations: AssociationDeclarations,
) -> typing.Iterator[typing.Tuple[str, typing.Mapping[str, typing.Any]]]:
    if isinstance(declarations, str):
        raise InvalidDeclarationError(
            f"association declarations must be a sequence or a mapping, got {declarations!r}"
        )
    if isinstance(declarations, collections.abc.Mapping):
        yield from declarations.items()
        return
    for decl in declarations:
        if isinstance(decl, str):
            yield decl, {}
        else:
            name, options = decl
            yield name, options


def meta_attrs(meta: typing.Type) -> typing.Dict[str, typing.Any]:
    attrs = {k: v for k, v in vars(meta).items() if not k.startswith("__")}
    unknown = set(attrs) - META_KEYS
    if unknown:
        raise InvalidDeclarationError(
            f"unknown Meta attribute{'s' if len(unknown) > 1 else ''}: {', '.join(sorted(unknown))}"
        )
    return attrs


def handle_meta(
    meta: typing.Optional[typing.Type],
    parent: SerializerConfig,
    namespace: typing.Optional[str] = None,
    policy: typing.Optional[EmbeddingPolicy] = None,
) -> SerializerConfig:
    """
    Builds the configuration of a serializer class from its ``Meta`` inner class.

    :param meta: the ``Meta`` class, or :py:const:`None` if the serializer declares nothing.
    :param SerializerConfig parent: the configuration of the parent serializer class.
    :param namespace: the namespace derived from where the serializer class is defined.
    :param EmbeddingPolicy policy: the policy unspecified association options are taken from.
    """
    builder = SerializerConfigBuilder(parent.specialize(namespace), policy)
    if meta is None:
        return builder.build()

    attrs = meta_attrs(meta)
    if "root" in attrs:
        builder.root(attrs["root"])
    if "namespace" in attrs:
        builder.namespace(attrs["namespace"])
    if "model" in attrs:
        builder.model(attrs["model"])
    attributes = attrs.get("attributes", ())
    if isinstance(attributes, str):
        attributes = (attributes,)
    builder.attributes(*attributes)
    for name, options in iter_association_declarations(attrs.get("has_one", ())):
        builder.has_one(name, **options)
    for name, options in iter_association_declarations(attrs.get("has_many", ())):
        builder.has_many(name, **options)
    return builder.build()
