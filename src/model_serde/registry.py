"""
:py:mod:`model_serde.registry` maps runtime objects to the serializer classes in charge of them.

Serializer classes register themselves when they are defined.  An object of
type ``Invoice`` is served by the serializer registered under the name
``InvoiceSerializer``, or by the one declaring ``Meta.model = Invoice``.
Both are looked up in the namespace of the object type first qualified with
the caller's namespace, then alone.
"""

import logging
import typing

from .exceptions import SerializerNotFoundError
from .utils import is_collection

if typing.TYPE_CHECKING:  # pragma: nocover
    from .serializable import Serializable

logger = logging.getLogger("model_serde.registry")

SerializerClass = typing.Type["Serializable"]


def namespace_of(type_: typing.Type) -> typing.Optional[str]:
    """
    Returns the namespace a type is defined in.

    The namespace is either given explicitly by a ``__serde_namespace__``
    class attribute, or made of the classes enclosing the type.  Functions
    enclosing the type do not count.

    >>> class Sales:
    ...     class Invoice:
    ...         pass
    >>> namespace_of(Sales.Invoice)
    'Sales'
    """
    explicit = type_.__dict__.get("__serde_namespace__")
    if explicit is not None:
        return explicit
    segments = type_.__qualname__.split(".")[:-1]
    if "<locals>" in segments:
        segments = segments[len(segments) - segments[::-1].index("<locals>") :]
    return ".".join(segments) or None


def join_namespace(*segments: typing.Optional[str]) -> typing.Optional[str]:
    return ".".join(s for s in segments if s) or None


class SerializerRegistry:
    _by_name: typing.Dict[typing.Tuple[typing.Optional[str], str], SerializerClass]
    _by_model: typing.Dict[typing.Tuple[typing.Optional[str], typing.Type], SerializerClass]

    def register(
        self,
        serializer_class: SerializerClass,
        namespace: typing.Optional[str] = None,
        name: typing.Optional[str] = None,
        model: typing.Optional[typing.Type] = None,
    ) -> SerializerClass:
        """
        Registers a serializer class.

        :param serializer_class: the serializer class.
        :param namespace: the namespace to register the class in.
        :param name: the name to register the class under; defaults to the class name.
        :param model: a type whose instances the serializer is in charge of.
        :return: the serializer class.
        """
        name = serializer_class.__name__ if name is None else name
        if name:
            previous = self._by_name.get((namespace, name))
            if previous is not None and previous is not serializer_class:
                logger.debug("%s in namespace %r replaces %r", name, namespace, previous)
            self._by_name[(namespace, name)] = serializer_class
        if model is not None:
            self._by_model[(namespace, model)] = serializer_class
        return serializer_class

    def lookup(
        self, name: str, namespace: typing.Optional[str] = None
    ) -> typing.Optional[SerializerClass]:
        if "." in name:
            prefix, _, name = name.rpartition(".")
            namespace = join_namespace(namespace, prefix)
        return self._by_name.get((namespace, name))

    def require(self, name: str, namespace: typing.Optional[str] = None) -> SerializerClass:
        """
        Looks up a serializer class by name, in ``namespace`` and then at the top level.

        :raises SerializerNotFoundError: if no class is registered under the name.
        """
        serializer_class = None
        if namespace is not None:
            serializer_class = self.lookup(name, namespace)
        if serializer_class is None:
            serializer_class = self.lookup(name)
        if serializer_class is None:
            raise SerializerNotFoundError(name, namespace)
        return serializer_class

    def _lookup_for_type(
        self, type_: typing.Type, namespace: typing.Optional[str]
    ) -> typing.Optional[SerializerClass]:
        serializer_class = self._by_model.get((namespace, type_))
        if serializer_class is None:
            serializer_class = self._by_name.get((namespace, f"{type_.__name__}Serializer"))
        return serializer_class

    def serializer_for(
        self, obj: typing.Any, namespace: typing.Optional[str] = None
    ) -> typing.Optional[SerializerClass]:
        """
        Returns the serializer class in charge of ``obj``, or :py:const:`None` if there is none.

        :param Any obj: the object to serialize.
        :param namespace: the namespace of the caller.
        """
        if is_collection(obj):
            from .collection import CollectionSerializer

            return CollectionSerializer

        type_ = type(obj)
        type_namespace = namespace_of(type_)
        candidates = [type_namespace]
        if namespace is not None:
            candidates.insert(0, join_namespace(namespace, type_namespace))

        for candidate in candidates:
            serializer_class = self._lookup_for_type(type_, candidate)
            if serializer_class is not None:
                return serializer_class

        logger.debug("no serializer found for %s (namespace=%r)", type_.__qualname__, namespace)
        return None

    def __contains__(self, serializer_class: SerializerClass) -> bool:
        return serializer_class in self._by_name.values()

    def __init__(self):
        self._by_name = {}
        self._by_model = {}


REGISTRY = SerializerRegistry()


def serializer_for(
    obj: typing.Any, namespace: typing.Optional[str] = None
) -> typing.Optional[SerializerClass]:
    return REGISTRY.serializer_for(obj, namespace)
