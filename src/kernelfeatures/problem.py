"""
Contraction problem descriptors.

A contraction problem is a generalized matrix multiply: each operand has
free (non-reduced) dimensions, and the two operands share bound (reduced)
dimensions. Features only read sizes off the descriptor; they never keep
a reference to it.
"""

import math
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt


@runtime_checkable
class ProblemDescriptor(Protocol):
    """Read-only size accessors that features evaluate against."""

    def free_size_a(self, index: int) -> int: ...

    def free_size_b(self, index: int) -> int: ...

    def bound_size(self, index: int) -> int: ...


def _size_at(sizes: tuple[int, ...], index: int, kind: str) -> int:
    """Look up one dimension size, failing on any out-of-range position."""
    # Plain tuple indexing would wrap negative positions around.
    if not 0 <= index < len(sizes):
        msg = f"{kind} index {index} out of range for {len(sizes)} dimension(s)"
        raise IndexError(msg)
    return sizes[index]


class ContractionProblem(BaseModel):
    """
    One contraction problem instance.

    Attributes:
        free_sizes_a: Free dimension sizes of operand A (M-like).
        free_sizes_b: Free dimension sizes of operand B (N-like).
        bound_sizes: Bound (reduction) dimension sizes (K-like).
        batch_sizes: Batch dimension sizes, shared by all operands.
    """

    model_config = ConfigDict(frozen=True)

    free_sizes_a: tuple[NonNegativeInt, ...] = Field(
        description="Free dimension sizes of operand A"
    )
    free_sizes_b: tuple[NonNegativeInt, ...] = Field(
        description="Free dimension sizes of operand B"
    )
    bound_sizes: tuple[NonNegativeInt, ...] = Field(
        default=(), description="Bound (reduction) dimension sizes"
    )
    batch_sizes: tuple[NonNegativeInt, ...] = Field(
        default=(), description="Batch dimension sizes"
    )

    @classmethod
    def from_gemm(cls, m: int, n: int, k: int, batch: int = 1) -> "ContractionProblem":
        """
        Build the descriptor of a (batched) GEMM ``C[b] = A[b] @ B[b]``.

        Args:
            m: Rows of A and C.
            n: Columns of B and C.
            k: Reduction length.
            batch: Number of independent multiplies.

        Returns:
            Problem with one free dimension per operand and one bound dimension.
        """
        return cls(
            free_sizes_a=(m,),
            free_sizes_b=(n,),
            bound_sizes=(k,),
            batch_sizes=(batch,),
        )

    def free_size_a(self, index: int) -> int:
        """Size of operand A's free dimension at ``index``."""
        return _size_at(self.free_sizes_a, index, "free_size_a")

    def free_size_b(self, index: int) -> int:
        """Size of operand B's free dimension at ``index``."""
        return _size_at(self.free_sizes_b, index, "free_size_b")

    def bound_size(self, index: int) -> int:
        """Size of the bound dimension at ``index``."""
        return _size_at(self.bound_sizes, index, "bound_size")

    @property
    def batch_count(self) -> int:
        """Total number of batches (1 when the problem has no batch dimension)."""
        return math.prod(self.batch_sizes)
