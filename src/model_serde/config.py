"""
:py:mod:`model_serde.config` holds the process-wide embedding policy.

Synopsis
--------

.. code-block:: python

   from model_serde import EmbedMode, setup

   def configure(policy):
       policy.embed = EmbedMode.IDS
       policy.embed_in_root = True

   setup(configure)

The policy is read when associations are declared, so it has to be set up
before serializer classes are defined.
"""

import dataclasses
import enum
import logging
import threading
import typing
import warnings

from .exceptions import InvalidDeclarationError

logger = logging.getLogger("model_serde.config")


class EmbedMode(enum.Enum):
    IDS = "ids"
    """Associations are rendered as id references"""
    OBJECTS = "objects"
    """Associations are rendered as nested documents"""
    IDS_AND_OBJECTS = "ids_and_objects"
    """Associations are rendered both ways"""

    @property
    def includes_ids(self) -> bool:
        return self in (EmbedMode.IDS, EmbedMode.IDS_AND_OBJECTS)

    @property
    def includes_objects(self) -> bool:
        return self in (EmbedMode.OBJECTS, EmbedMode.IDS_AND_OBJECTS)

    @classmethod
    def coerce(cls, value: typing.Union["EmbedMode", str]) -> "EmbedMode":
        if isinstance(value, EmbedMode):
            return value
        if isinstance(value, str):
            normalized = _EMBED_MODE_ALIASES.get(value, value)
            try:
                return cls(normalized)
            except ValueError:
                pass
        raise InvalidDeclarationError(f"invalid embed mode: {value!r}")


_EMBED_MODE_ALIASES = {
    "id": "ids",
    "object": "objects",
}


@dataclasses.dataclass
class EmbeddingPolicy:
    embed: EmbedMode = EmbedMode.OBJECTS
    """
    Default embedding mode for associations declared without an ``embed`` option.
    """

    embed_in_root: bool = False
    """
    Default for the ``embed_in_root`` association option.
    """

    namespace: typing.Optional[str] = None
    """
    When set, nested serializers are looked up in the namespace of the
    serializer that embeds them (or in this namespace for serializers
    that have none).
    """

    def __setattr__(self, name: str, value: typing.Any) -> None:
        if name == "embed":
            value = EmbedMode.coerce(value)
        super().__setattr__(name, value)


class Config:
    """
    Guards an :py:class:`EmbeddingPolicy` against concurrent setup calls.

    Readers access :py:attr:`policy` without locking; the policy is expected
    to change during application bootstrap only.
    """

    policy: EmbeddingPolicy
    _lock: threading.Lock

    def setup(self, mutator: typing.Callable[[EmbeddingPolicy], None]) -> EmbeddingPolicy:
        """
        Applies ``mutator`` to a copy of the policy while holding the configuration lock.

        The copy replaces the policy once ``mutator`` returns, so a failing
        ``mutator`` leaves the policy untouched.

        :param Callable[[EmbeddingPolicy], None] mutator: a callable that updates the policy in place.
        :return: the updated policy.
        """
        with self._lock:
            policy = dataclasses.replace(self.policy)
            mutator(policy)
            self.policy = policy
            logger.debug("embedding policy updated: %r", policy)
            return self.policy

    def embed(
        self,
        mode: typing.Union[EmbedMode, str],
        embed_in_root: bool = False,
        include: bool = False,
    ) -> EmbeddingPolicy:
        mode = EmbedMode.coerce(mode)
        warnings.warn(
            "embed() is deprecated as the embedding policy is global; use setup() instead:\n"
            "\n"
            "    def configure(policy):\n"
            f"        policy.embed = {mode!s}\n"
            f"        policy.embed_in_root = {bool(embed_in_root or include or self.policy.embed_in_root)}\n"
            "\n"
            "    setup(configure)\n",
            DeprecationWarning,
            stacklevel=2,
        )

        def mutator(policy: EmbeddingPolicy) -> None:
            policy.embed = mode
            if embed_in_root or include:
                policy.embed_in_root = True

        return self.setup(mutator)

    def snapshot(self) -> EmbeddingPolicy:
        return dataclasses.replace(self.policy)

    def reset(self) -> None:
        with self._lock:
            self.policy = EmbeddingPolicy()

    def __init__(self, policy: typing.Optional[EmbeddingPolicy] = None):
        self.policy = EmbeddingPolicy() if policy is None else policy
        self._lock = threading.Lock()


CONFIG = Config()

setup = CONFIG.setup
