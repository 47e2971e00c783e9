import collections.abc
import typing

from .formatting import (  # noqa
    demodulize,
    english_enumerate,
    pluralize,
    singularize,
    underscore,
)
from .types import UNSPECIFIED, UnspecifiedType  # noqa


def is_collection(value: typing.Any) -> bool:
    """
    Tells if ``value`` should be rendered as a list of documents.

    Strings, bytes and mappings are never treated as collections.
    """
    if isinstance(value, (str, bytes, bytearray, collections.abc.Mapping)):
        return False
    return isinstance(value, (collections.abc.Sequence, collections.abc.Set))


def read_attribute_for_serialization(obj: typing.Any, name: str) -> typing.Any:
    """
    Reads the named attribute of ``obj``.

    Objects may take control of the lookup by defining
    ``read_attribute_for_serialization(name)``; mappings are read by key,
    anything else by attribute access.
    """
    reader = getattr(obj, "read_attribute_for_serialization", None)
    if reader is not None and callable(reader):
        return reader(name)
    if isinstance(obj, collections.abc.Mapping):
        return obj.get(name)
    return getattr(obj, name)
