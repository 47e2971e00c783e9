from .associations import Association, HasMany, HasOne  # noqa
from .collection import CollectionSerializer  # noqa
from .config import CONFIG, Config, EmbeddingPolicy, EmbedMode, setup  # noqa
from .declarative import SerializerConfig, SerializerConfigBuilder  # noqa
from .exceptions import (  # noqa
    InvalidDeclarationError,
    ModelSerdeException,
    SerializerNotFoundError,
    UnknownOptionError,
)
from .registry import REGISTRY, SerializerRegistry, serializer_for  # noqa
from .serializable import DefaultSerializer, Serializable  # noqa
from .serializer import Serializer  # noqa
