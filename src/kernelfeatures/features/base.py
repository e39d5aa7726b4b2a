"""
Named scalar feature contract and kind registry.

A feature kind is a frozen dataclass carrying either a dimension index or a
precomputed value, never both. Kinds do not share a base class; they form a
closed set registered under a stable type tag and are used through the
`MLFeature` protocol.
"""

from typing import Any, ClassVar, Protocol, TypeVar, runtime_checkable

from kernelfeatures.problem import ProblemDescriptor
from kernelfeatures.utils.logging import get_logger

log = get_logger(__name__)


class FeatureContractError(Exception):
    """A feature kind or instance violates the index/value contract."""


@runtime_checkable
class MLFeature(Protocol):
    """A named feature producing one float per problem."""

    TYPE: ClassVar[str]
    HAS_INDEX: ClassVar[bool]
    HAS_VALUE: ClassVar[bool]

    @classmethod
    def type(cls) -> str: ...

    def evaluate(self, problem: ProblemDescriptor) -> float: ...

    def __call__(self, problem: ProblemDescriptor) -> float: ...


K = TypeVar("K")

FEATURE_KINDS: dict[str, type[Any]] = {}


def _type_tag(cls: type[Any]) -> str:
    return cls.TYPE


def _call(self: Any, problem: ProblemDescriptor) -> float:
    return self.evaluate(problem)


def feature_kind(cls: type[K]) -> type[K]:
    """
    Register a feature kind under its ``TYPE`` tag.

    Installs ``type()`` and ``__call__`` so every kind satisfies `MLFeature`.

    Raises:
        FeatureContractError: If the kind does not declare exactly one of
            ``HAS_INDEX``/``HAS_VALUE`` or reuses a registered tag.
    """
    tag = getattr(cls, "TYPE", None)
    if not isinstance(tag, str) or not tag:
        msg = f"Feature kind {cls.__name__} must declare a TYPE tag"
        raise FeatureContractError(msg)

    has_index = getattr(cls, "HAS_INDEX", None)
    has_value = getattr(cls, "HAS_VALUE", None)
    if not isinstance(has_index, bool) or not isinstance(has_value, bool):
        msg = f"Feature kind {tag} must declare boolean HAS_INDEX and HAS_VALUE"
        raise FeatureContractError(msg)
    if has_index == has_value:
        msg = (
            f"Feature kind {tag} must carry exactly one of index or value "
            f"(HAS_INDEX={has_index}, HAS_VALUE={has_value})"
        )
        raise FeatureContractError(msg)

    if tag in FEATURE_KINDS:
        msg = f"Feature kind '{tag}' is already registered"
        raise FeatureContractError(msg)

    cls.type = classmethod(_type_tag)  # type: ignore[attr-defined]
    cls.__call__ = _call  # type: ignore[attr-defined]
    FEATURE_KINDS[tag] = cls
    return cls


def check_index(tag: str, index: Any) -> None:
    """Reject indices that can never address a dimension."""
    if isinstance(index, bool) or not isinstance(index, int):
        msg = f"{tag} index must be an int, got {index!r}"
        raise FeatureContractError(msg)
    if index < 0:
        msg = f"{tag} index must be non-negative, got {index}"
        raise FeatureContractError(msg)


def get_feature_kind(tag: str) -> type[Any]:
    """
    Look up a registered feature kind.

    Args:
        tag: Stable type tag, e.g. ``"FreeSizeA"``.

    Returns:
        The feature kind class.

    Raises:
        KeyError: If no kind is registered under ``tag``.
    """
    if tag not in FEATURE_KINDS:
        available = ", ".join(FEATURE_KINDS)
        msg = f"Unknown feature kind '{tag}'. Available: {available}"
        raise KeyError(msg)
    return FEATURE_KINDS[tag]


def list_feature_kinds() -> list[str]:
    """List registered feature tags in registration order."""
    return list(FEATURE_KINDS)


def create_feature(tag: str, index: int | None = None, value: Any = None) -> MLFeature:
    """
    Instantiate a feature kind generically from its tag.

    Args:
        tag: Feature type tag.
        index: Dimension position, for index-addressed kinds.
        value: Precomputed coefficient, for value-configured kinds.

    Returns:
        The configured feature.

    Raises:
        KeyError: If the tag is unknown.
        FeatureContractError: If the wrong field, both fields, or neither
            field is supplied for the kind.
    """
    kind = get_feature_kind(tag)
    if index is not None and value is not None:
        msg = f"{tag} takes either an index or a value, not both"
        raise FeatureContractError(msg)

    if kind.HAS_INDEX:
        if value is not None:
            msg = f"{tag} is index-addressed and does not take a value"
            raise FeatureContractError(msg)
        if index is None:
            msg = f"{tag} requires an index"
            raise FeatureContractError(msg)
        feature = kind(index=index)
    else:
        if index is not None:
            msg = f"{tag} is value-configured and does not take an index"
            raise FeatureContractError(msg)
        if value is None:
            msg = f"{tag} requires a value"
            raise FeatureContractError(msg)
        feature = kind(value=value)

    log.debug("Created feature", type=tag, index=index, value=value)
    return feature
