"""
:py:mod:`model_serde.serializer` contains :py:class:`Serializer`, the base class of declarative serializers.

Synopsis
--------

.. code-block:: python

   from model_serde import Serializer

   class CommentSerializer(Serializer):
       class Meta:
           attributes = ("id", "body")

   class PostSerializer(Serializer):
       class Meta:
           attributes = ("id", "title", "word_count")
           has_many = [("comments", {"embed": "ids", "embed_in_root": True})]

       def word_count(self):
           return len(self.object.body.split())

   PostSerializer(post).as_json()
   # {
   #     "post": {"id": 1, "title": "...", "word_count": 42, "comment_ids": [7, 8]},
   #     "comments": [{"id": 7, "body": "..."}, {"id": 8, "body": "..."}],
   # }

"""

import collections.abc
import itertools
import logging
import re
import typing
from collections import OrderedDict

from .associations import Association
from .config import CONFIG, Config
from .declarative import SerializerConfig, handle_meta
from .registry import REGISTRY, SerializerRegistry, namespace_of
from .serializable import Serializable, merge_root_collections
from .types import JSONValue, MutableJSONObject, RootCollections
from .utils import UNSPECIFIED, UnspecifiedType, demodulize, read_attribute_for_serialization, underscore

logger = logging.getLogger("model_serde.serializer")

_SERIALIZER_SUFFIX = re.compile(r"_serializer$")

# class attributes set from Meta, never readers
_MANAGED_NAMES = frozenset(["Meta", "registry", "config", "_config", "_readers"])


def read_related(obj: typing.Any, name: str) -> typing.Any:
    if isinstance(obj, collections.abc.Mapping):
        return obj.get(name)
    return getattr(obj, name)


class Serializer(Serializable):
    """
    Base class of declarative serializers.

    Subclasses declare what they render in a ``Meta`` inner class:

    ``attributes``
        names of the attributes to render.
    ``has_one`` / ``has_many``
        associations, given as names, ``(name, options)`` pairs, or a mapping from names to options.
    ``root``
        the root key; ``False`` renders documents without one.
    ``namespace``
        the namespace the serializer is registered in.  Defaults to the classes enclosing it.
    ``model``
        a type whose instances the serializer is in charge of.
    ``registry`` / ``config``
        the :py:class:`SerializerRegistry` and :py:class:`Config` to use instead of the global ones.

    A method or property defined on the serializer takes precedence over the
    attribute of the same name on the object.

    :param object: the object to render.
    :param scope: an arbitrary context object, such as the current viewer.
    :param root: overrides the root key.
    :param str meta_key: the key the meta object is rendered under.
    :param meta: the meta object.
    :param only: names of the only attributes and associations to render.
    :param except_: names of the attributes and associations not to render.
    :param bool wrap_in_array: renders the document as a single-element list.
    :param namespace: the namespace nested serializers are looked up in.
    """

    _config: typing.ClassVar[SerializerConfig] = SerializerConfig()
    _readers: typing.ClassVar[typing.FrozenSet[str]] = frozenset()
    registry: typing.ClassVar[SerializerRegistry] = REGISTRY
    config: typing.ClassVar[Config] = CONFIG

    object: typing.Any
    scope: typing.Any
    root: typing.Union[None, bool, str]
    only: typing.Optional[typing.FrozenSet[str]]
    except_: typing.Optional[typing.FrozenSet[str]]
    wrap_in_array: bool
    _namespace: typing.Optional[str]

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        meta = cls.__dict__.get("Meta")
        if meta is not None:
            if "registry" in vars(meta):
                cls.registry = vars(meta)["registry"]
            if "config" in vars(meta):
                cls.config = vars(meta)["config"]
        cls._config = handle_meta(
            meta,
            parent=cls._config,
            namespace=namespace_of(cls),
            policy=cls.config.policy,
        )
        cls._readers = frozenset(
            name
            for name in itertools.chain(cls._config.attributes, cls._config.associations)
            if name not in _MANAGED_NAMES
            and any(name in vars(klass) for klass in cls.__mro__ if klass not in Serializer.__mro__)
        )
        cls.registry.register(cls, namespace=cls._config.namespace, model=cls._config.model)
        logger.debug(
            "%s configured with attributes %r and associations %r",
            cls.__qualname__,
            cls._config.attributes,
            list(cls._config.associations),
        )

    @classmethod
    def root_name(cls) -> typing.Optional[str]:
        if not cls.__name__:
            return None
        return _SERIALIZER_SUFFIX.sub("", underscore(demodulize(cls.__name__)))

    @classmethod
    def serializer_for(
        cls, obj: typing.Any, namespace: typing.Optional[str] = None
    ) -> typing.Optional[typing.Type[Serializable]]:
        return cls.registry.serializer_for(obj, namespace)

    @classmethod
    def declared_attributes(cls) -> typing.Tuple[str, ...]:
        return cls._config.attributes

    @classmethod
    def declared_associations(cls) -> typing.Mapping[str, Association]:
        return cls._config.associations

    @property
    def namespace(self) -> typing.Optional[str]:
        if self._namespace is not None:
            return self._namespace
        policy_namespace = self.config.policy.namespace
        if policy_namespace is None:
            return None
        return self._config.namespace or policy_namespace

    def json_key(self) -> typing.Optional[str]:
        if self.root is True or self.root is None:
            return self.root_name()
        elif self.root is False:
            return None
        else:
            return self.root

    def read(self, name: str) -> typing.Any:
        if name in self._readers:
            value = getattr(self, name)
            return value() if callable(value) else value
        return read_attribute_for_serialization(self.object, name)

    def read_association(self, association: Association) -> typing.Any:
        if association.name in self._readers:
            value = getattr(self, association.name)
            return value() if callable(value) else value
        return read_related(self.object, association.name)

    def filter(self, keys: typing.Iterable[str]) -> typing.List[str]:
        if self.only is not None:
            return [key for key in keys if key in self.only]
        elif self.except_ is not None:
            return [key for key in keys if key not in self.except_]
        else:
            return list(keys)

    def attributes(self) -> MutableJSONObject:
        return OrderedDict((name, self.read(name)) for name in self.filter(self._config.attributes))

    def included_associations(self) -> typing.Iterator[Association]:
        associations = self._config.associations
        for name in self.filter(associations):
            yield associations[name]

    def build_serializer(
        self, association: Association, embedded_in_root: bool = False
    ) -> Serializable:
        return association.build_serializer(
            self.read_association(association),
            self.registry,
            scope=self.scope,
            namespace=self.namespace,
            embedded_in_root=embedded_in_root,
        )

    def serialize(self, association: Association) -> JSONValue:
        return self.build_serializer(association).serializable_object()

    def serialize_ids(self, association: Association) -> typing.Any:
        return association.extract_ids(self.read_association(association))

    def associations(self) -> MutableJSONObject:
        doc: MutableJSONObject = OrderedDict()
        for association in self.included_associations():
            if association.embed_ids:
                doc[association.key] = self.serialize_ids(association)
            if association.embed_objects:
                doc[association.embedded_key] = self.serialize(association)
        return doc

    def embedded_in_root_associations(self) -> RootCollections:
        side_collections: RootCollections = OrderedDict()
        if self.object is None:
            return side_collections
        for association in self.included_associations():
            if not association.embed_in_root:
                continue
            serializer = self.build_serializer(association, embedded_in_root=True)
            merge_root_collections(side_collections, serializer.embedded_in_root_associations())
            merge_root_collections(
                side_collections, {association.root_key: serializer.serializable_object()}
            )
        return side_collections

    def serializable_object(self) -> JSONValue:
        if self.object is None:
            return [] if self.wrap_in_array else None
        doc = self.attributes()
        doc.update(self.associations())
        return [doc] if self.wrap_in_array else doc

    def serializable_hash(self) -> JSONValue:
        return self.serializable_object()

    def __init__(
        self,
        object: typing.Any,
        scope: typing.Any = None,
        root: typing.Union[UnspecifiedType, None, bool, str] = UNSPECIFIED,
        meta_key: str = "meta",
        meta: typing.Any = None,
        only: typing.Optional[typing.Iterable[str]] = None,
        except_: typing.Optional[typing.Iterable[str]] = None,
        wrap_in_array: bool = False,
        namespace: typing.Optional[str] = None,
    ):
        self.object = object
        self.scope = scope
        self.root = self._config.root if root is UNSPECIFIED else typing.cast(typing.Union[None, bool, str], root)
        self.meta_key = meta_key
        self.meta = meta
        self.only = None if only is None else frozenset(_as_names(only))
        self.except_ = None if except_ is None else frozenset(_as_names(except_))
        self.wrap_in_array = wrap_in_array
        self._namespace = namespace


def _as_names(value: typing.Union[str, typing.Iterable[str]]) -> typing.Iterable[str]:
    return (value,) if isinstance(value, str) else value
