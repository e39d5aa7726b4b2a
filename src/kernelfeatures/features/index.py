"""
Index-addressed features.

Each reads one dimension size off the problem by position and widens it to
float. The index is checked for sign at construction; whether it addresses
an existing dimension depends on the problem, so that is only known when
the feature is evaluated.
"""

from dataclasses import dataclass
from typing import ClassVar

from kernelfeatures.features.base import check_index, feature_kind
from kernelfeatures.problem import ProblemDescriptor


@feature_kind
@dataclass(frozen=True)
class FreeSizeA:
    """Size of operand A's free dimension at ``index``."""

    TYPE: ClassVar[str] = "FreeSizeA"
    HAS_INDEX: ClassVar[bool] = True
    HAS_VALUE: ClassVar[bool] = False

    index: int

    def __post_init__(self) -> None:
        check_index(self.TYPE, self.index)

    def evaluate(self, problem: ProblemDescriptor) -> float:
        return float(problem.free_size_a(self.index))


@feature_kind
@dataclass(frozen=True)
class FreeSizeB:
    """Size of operand B's free dimension at ``index``."""

    TYPE: ClassVar[str] = "FreeSizeB"
    HAS_INDEX: ClassVar[bool] = True
    HAS_VALUE: ClassVar[bool] = False

    index: int

    def __post_init__(self) -> None:
        check_index(self.TYPE, self.index)

    def evaluate(self, problem: ProblemDescriptor) -> float:
        return float(problem.free_size_b(self.index))


@feature_kind
@dataclass(frozen=True)
class BoundSize:
    """Size of the bound (reduction) dimension at ``index``."""

    TYPE: ClassVar[str] = "BoundSize"
    HAS_INDEX: ClassVar[bool] = True
    HAS_VALUE: ClassVar[bool] = False

    index: int

    def __post_init__(self) -> None:
        check_index(self.TYPE, self.index)

    def evaluate(self, problem: ProblemDescriptor) -> float:
        return float(problem.bound_size(self.index))
