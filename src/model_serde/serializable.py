import abc
import collections.abc
import dataclasses
import typing
from collections import OrderedDict

from .types import JSONValue, MutableJSONObject, RootCollections
from .utils import UNSPECIFIED, UnspecifiedType


def merge_root_collections(
    into: RootCollections, other: typing.Mapping[str, typing.Any]
) -> RootCollections:
    """
    Merges side collections in ``other`` into ``into``.

    Documents are appended to the collection of the same key unless an equal
    document is already there, so the first occurrence of a document wins
    its position.

    :param into: the side collections to update.
    :param other: the side collections to merge.
    :return: ``into``.
    """
    for key, docs in other.items():
        if docs is None:
            continue
        if not isinstance(docs, collections.abc.Sequence) or isinstance(docs, str):
            docs = [docs]
        bucket = into.setdefault(key, [])
        for doc in docs:
            if doc not in bucket:
                bucket.append(doc)
    return into


class Serializable(metaclass=abc.ABCMeta):
    meta_key: str = "meta"
    meta: typing.Any = None

    @abc.abstractmethod
    def serializable_object(self) -> JSONValue:
        ...  # pragma: nocover

    def json_key(self) -> typing.Optional[str]:
        return None

    def embedded_in_root_associations(self) -> RootCollections:
        return OrderedDict()

    def as_json(self, root: typing.Union[UnspecifiedType, None, bool, str] = UNSPECIFIED) -> JSONValue:
        """
        Renders the document, wrapped under its root key when it has one.

        The wrapped form also carries the meta object and the side collections of
        the associations embedded in root.

        :param root: overrides the root key; ``False`` renders the bare document.
        """
        if root is UNSPECIFIED or root is True:
            json_key = self.json_key()
        else:
            json_key = typing.cast(typing.Optional[str], root) or None

        if json_key is None:
            return self.serializable_object()

        doc: MutableJSONObject = OrderedDict([(json_key, self.serializable_object())])
        if self.meta is not None:
            doc[self.meta_key] = self.meta
        doc.update(self.embedded_in_root_associations())
        return doc


def as_plain_document(obj: typing.Any) -> JSONValue:
    hook = getattr(obj, "__json__", None)
    if hook is not None and callable(hook):
        return hook()
    if isinstance(obj, collections.abc.Mapping):
        return OrderedDict(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj, dict_factory=OrderedDict)
    if hasattr(obj, "__dict__"):
        return OrderedDict((k, v) for k, v in vars(obj).items() if not k.startswith("_"))
    return obj


class DefaultSerializer(Serializable):
    """
    Renders an object for which no serializer is declared.

    Objects providing ``__json__()`` render as what it returns; mappings,
    dataclasses and plain objects render as their public fields.
    """

    object: typing.Any
    wrap_in_array: bool

    def serializable_object(self) -> JSONValue:
        if self.object is None:
            return [] if self.wrap_in_array else None
        doc = as_plain_document(self.object)
        return [doc] if self.wrap_in_array else doc

    serializable_hash = serializable_object

    def __init__(self, object: typing.Any, wrap_in_array: bool = False, **options):
        self.object = object
        self.wrap_in_array = wrap_in_array
