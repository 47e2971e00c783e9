import typing
from collections import OrderedDict

from .registry import REGISTRY, SerializerRegistry
from .serializable import DefaultSerializer, Serializable, merge_root_collections
from .types import MutableJSONArray, RootCollections
from .utils import UNSPECIFIED, UnspecifiedType


class CollectionSerializer(Serializable):
    """
    Renders a sequence of objects, each with the serializer in charge of it.

    :param objects: the objects to render. :py:const:`None` renders as an empty list.
    :param scope: the context handed to the serializers of the elements.
    :param root: the root key; defaults to ``resource_name``.
    :param str meta_key: the key the meta object is rendered under.
    :param meta: the meta object.
    :param each_serializer: the serializer class to render every element with.
    :param resource_name: the root key used when no root is given.
    :param namespace: the namespace element serializers are looked up in.
    :param SerializerRegistry registry: the registry element serializers are looked up in.
    """

    default_root: typing.ClassVar[typing.Union[None, bool, str]] = None

    objects: typing.Sequence[typing.Any]
    scope: typing.Any
    root: typing.Union[None, bool, str]
    each_serializer: typing.Optional[typing.Type[Serializable]]
    resource_name: typing.Optional[str]
    namespace: typing.Optional[str]
    registry: SerializerRegistry

    @property
    def object(self) -> typing.Sequence[typing.Any]:
        return self.objects

    def json_key(self) -> typing.Optional[str]:
        if self.root is None or self.root is True:
            return self.resource_name
        elif self.root is False:
            return None
        else:
            return self.root

    def serializer_for(self, item: typing.Any) -> Serializable:
        serializer_class = (
            self.each_serializer
            or self.registry.serializer_for(item, self.namespace)
            or DefaultSerializer
        )
        options: typing.Dict[str, typing.Any] = {"scope": self.scope}
        if self.namespace is not None:
            options["namespace"] = self.namespace
        if issubclass(serializer_class, CollectionSerializer):
            options["registry"] = self.registry
        return serializer_class(item, **options)

    def serializable_object(self) -> MutableJSONArray:
        return [self.serializer_for(item).serializable_object() for item in self.objects]

    serializable_array = serializable_object

    def embedded_in_root_associations(self) -> RootCollections:
        side_collections: RootCollections = OrderedDict()
        for item in self.objects:
            merge_root_collections(
                side_collections, self.serializer_for(item).embedded_in_root_associations()
            )
        return side_collections

    def __init__(
        self,
        objects: typing.Optional[typing.Iterable[typing.Any]],
        scope: typing.Any = None,
        root: typing.Union[UnspecifiedType, None, bool, str] = UNSPECIFIED,
        meta_key: str = "meta",
        meta: typing.Any = None,
        each_serializer: typing.Optional[typing.Type[Serializable]] = None,
        resource_name: typing.Optional[str] = None,
        namespace: typing.Optional[str] = None,
        registry: typing.Optional[SerializerRegistry] = None,
    ):
        self.objects = [] if objects is None else list(objects)
        self.scope = scope
        self.root = self.default_root if root is UNSPECIFIED else typing.cast(typing.Union[None, bool, str], root)
        self.meta_key = meta_key
        self.meta = meta
        self.each_serializer = each_serializer
        self.resource_name = resource_name
        self.namespace = namespace
        self.registry = REGISTRY if registry is None else registry
