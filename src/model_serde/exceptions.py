import abc
import typing

from .utils import english_enumerate


class ModelSerdeException(Exception, metaclass=abc.ABCMeta):
    @property
    @abc.abstractmethod
    def message(self) -> str:
        ...  # pragma: nocover

    def __str__(self) -> str:
        return self.message


class InvalidDeclarationError(ModelSerdeException):
    _message: str

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str):
        super().__init__(message)
        self._message = message


class UnknownOptionError(InvalidDeclarationError):
    name: str
    options: typing.Sequence[str]

    def __init__(self, name: str, options: typing.Iterable[str]):
        self.name = name
        self.options = sorted(options)
        super().__init__(
            f"unknown option{'s' if len(self.options) > 1 else ''} for association "
            f"({name}): {english_enumerate(self.options)}"
        )


class SerializerNotFoundError(ModelSerdeException):
    name: str
    namespace: typing.Optional[str]

    @property
    def message(self) -> str:
        if self.namespace is None:
            return f"no serializer named {self.name} is registered"
        else:
            return f'no serializer named {self.name} is registered in namespace "{self.namespace}"'

    def __init__(self, name: str, namespace: typing.Optional[str] = None):
        super().__init__(name, namespace)
        self.name = name
        self.namespace = namespace
