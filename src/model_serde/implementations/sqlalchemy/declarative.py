"""
model_serde.implementations.sqlalchemy.declarative module contains a
facade that builds serializers for SQLAlchemy-mapped classes.

Synopsis
--------

.. code-block:: python

   import sqlalchemy as sa
   from sqlalchemy import orm
   from sqlalchemy.ext.declarative import declarative_base
   from model_serde.implementations.sqlalchemy import declarative_with_defaults

   Base = declarative_base()
   decl = declarative_with_defaults()

   @decl
   class Foo(Base):
       __tablename__ = "foos"

       class Meta:
           has_many = [("bars", {"embed": "ids", "embed_in_root": True})]

       id = sa.Column(sa.Integer(), primary_key=True, nullable=False)
       col1 = sa.Column(sa.Integer(), nullable=False)
       bars = orm.relationship("Bar")

   decl.configure()

   decl.serialize(session.get(Foo, 1))

Column properties become attributes, scalar relationships ``has_one`` and
collection relationships ``has_many`` associations.  Anything the ``Meta``
inner class of the mapped class declares replaces what is derived.
"""
import logging
import typing

from sqlalchemy import orm  # type: ignore

from ...collection import CollectionSerializer
from ...config import CONFIG, Config
from ...declarative import iter_association_declarations, meta_attrs
from ...exceptions import SerializerNotFoundError
from ...registry import REGISTRY, SerializerRegistry, namespace_of
from ...serializer import Serializer
from ...types import JSONValue
from ...utils import pluralize, underscore
from .core import (
    column_attribute_names,
    default_extract_properties,
    identity_key_name,
    relationship_properties,
)

logger = logging.getLogger("model_serde.implementations.sqlalchemy")

ExtractPropertiesFn = typing.Callable[
    [orm.Mapper], typing.Iterable[orm.interfaces.MapperProperty]
]


class Declarative:
    """
    The facade class that generates serializers for SQLAlchemy-instrumented classes.
    """

    registry: SerializerRegistry
    config: Config
    base: typing.Type[Serializer]
    _instrumented_classes: typing.List[typing.Type]
    _sa_mapper_to_serializer_map: typing.Dict[orm.Mapper, typing.Type[Serializer]]
    _extract_properties_fn: ExtractPropertiesFn

    def _build_meta(self, sa_mapper: orm.Mapper) -> typing.Type:
        properties = list(self._extract_properties_fn(sa_mapper))
        has_one: typing.Dict[str, typing.Dict[str, typing.Any]] = {}
        has_many: typing.Dict[str, typing.Dict[str, typing.Any]] = {}
        for prop in relationship_properties(properties):
            options = {"embed_key": identity_key_name(prop.mapper)}
            if prop.uselist:
                has_many[prop.key] = options
            else:
                has_one[prop.key] = options

        attrs: typing.Dict[str, typing.Any] = {
            "attributes": column_attribute_names(properties),
            "has_one": has_one,
            "has_many": has_many,
            "namespace": namespace_of(sa_mapper.class_),
            "model": sa_mapper.class_,
            "registry": self.registry,
            "config": self.config,
        }

        meta_class = sa_mapper.class_.__dict__.get("Meta")
        if meta_class is not None:
            overrides = meta_attrs(meta_class)
            for key in ("has_one", "has_many"):
                if key in overrides:
                    derived = has_one if key == "has_one" else has_many
                    overrides[key] = {
                        name: {**derived.get(name, {}), **options}
                        for name, options in iter_association_declarations(overrides[key])
                    }
            attrs.update(overrides)

        return type("Meta", (), attrs)

    def _configure_instrumented_class(self, sa_mapper: orm.Mapper) -> typing.Type[Serializer]:
        if sa_mapper in self._sa_mapper_to_serializer_map:
            return self._sa_mapper_to_serializer_map[sa_mapper]
        name = f"{sa_mapper.class_.__name__}Serializer"
        serializer_class = typing.cast(
            typing.Type[Serializer],
            type(
                name,
                (self.base,),
                {
                    "Meta": self._build_meta(sa_mapper),
                    "__module__": sa_mapper.class_.__module__,
                    "__qualname__": name,
                },
            ),
        )
        logger.debug("built %s for %r", name, sa_mapper.class_)
        self._sa_mapper_to_serializer_map[sa_mapper] = serializer_class
        return serializer_class

    def _do_configure(self) -> None:
        for c in self._instrumented_classes:
            self._configure_instrumented_class(orm.class_mapper(c))

    def configure(self, skip_configure_mappers: bool = False) -> None:
        if not skip_configure_mappers:
            orm.configure_mappers()
        self._do_configure()

    def query_serializer_by_native_class(self, type_: typing.Type) -> typing.Type[Serializer]:
        """
        Returns the serializer generated for a mapped class.

        :raises SerializerNotFoundError: if the class was not registered with this facade.
        """
        try:
            sa_mapper = orm.class_mapper(type_)
        except orm.exc.UnmappedClassError:
            raise SerializerNotFoundError(f"{type_.__name__}Serializer")
        try:
            return self._sa_mapper_to_serializer_map[sa_mapper]
        except KeyError:
            raise SerializerNotFoundError(f"{type_.__name__}Serializer")

    def serialize(self, native: typing.Any, **options: typing.Any) -> JSONValue:
        """
        Renders a mapped object, or a list of them, with the generated serializers.

        :param Any native: an SQLAlchemy-instrumented object or a list of them.
        :param options: options passed to the serializer.
        :return: the document wrapped under its root key.
        """
        serializer_class = self.registry.serializer_for(native)
        if serializer_class is None:
            raise SerializerNotFoundError(f"{type(native).__name__}Serializer")
        if issubclass(serializer_class, CollectionSerializer):
            options.setdefault("registry", self.registry)
            if native:
                options.setdefault("resource_name", pluralize(underscore(type(native[0]).__name__)))
        return serializer_class(native, **options).as_json()

    T = typing.TypeVar("T")

    def __call__(self, instrumented_class: typing.Type[T]) -> typing.Type[T]:
        self._instrumented_classes.append(instrumented_class)
        return instrumented_class

    def __init__(
        self,
        registry: SerializerRegistry,
        config: Config,
        base: typing.Type[Serializer] = Serializer,
        extract_properties_fn: ExtractPropertiesFn = default_extract_properties,
    ):
        self.registry = registry
        self.config = config
        self.base = base
        self._instrumented_classes = []
        self._sa_mapper_to_serializer_map = {}
        self._extract_properties_fn = extract_properties_fn


def declarative_with_defaults(
    registry: typing.Optional[SerializerRegistry] = None,
    config: typing.Optional[Config] = None,
    base: typing.Type[Serializer] = Serializer,
    extract_properties_fn: ExtractPropertiesFn = default_extract_properties,
) -> Declarative:
    return Declarative(
        registry=(REGISTRY if registry is None else registry),
        config=(CONFIG if config is None else config),
        base=base,
        extract_properties_fn=extract_properties_fn,
    )
