"""
Value-configured granularity and occupancy features.

These carry coefficients derived from a candidate kernel (never from the
problem) and combine them with the first free dimension of each operand:

- Tile0Granularity / Tile1Granularity: tile quantization loss along M / N.
- CUGranularity: how evenly whole tiles spread across compute units.
- WavesPerSIMD: estimated waves scheduled per SIMD, reported raw.

Every kind except WavesPerSIMD normalizes its count with
`compute_granularity`, so WavesPerSIMD does not share their (0, 1] range.
"""

import math
from dataclasses import dataclass
from typing import Any, ClassVar

from kernelfeatures.features.base import FeatureContractError, feature_kind
from kernelfeatures.problem import ProblemDescriptor
from kernelfeatures.solution import (
    GranularityScaleFactors,
    compute_granularity,
    snap_whole_count,
)


def _check_tile_value(tag: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        msg = f"{tag} value must be a number (1 / tile extent), got {value!r}"
        raise FeatureContractError(msg)
    if not math.isfinite(value) or value <= 0.0:
        msg = f"{tag} value must be positive and finite, got {value!r}"
        raise FeatureContractError(msg)


def _check_scale_factors(tag: str, value: Any) -> None:
    if not isinstance(value, GranularityScaleFactors):
        kind = type(value).__name__
        msg = f"{tag} value must be GranularityScaleFactors, got {kind}"
        raise FeatureContractError(msg)


def _whole_tiles(problem: ProblemDescriptor, scales: GranularityScaleFactors) -> float:
    """Whole tiles covering the output; partial tiles occupy a full slot."""
    num_tiles_m = problem.free_size_a(0) * scales.mt0_scale  # M / MT0
    num_tiles_n = problem.free_size_b(0) * scales.mt1_scale  # N / MT1
    whole_m = math.ceil(snap_whole_count(num_tiles_m))
    whole_n = math.ceil(snap_whole_count(num_tiles_n))
    return float(whole_m * whole_n)


@feature_kind
@dataclass(frozen=True)
class Tile0Granularity:
    """Tile quantization efficiency along free dimension 0 of operand A."""

    TYPE: ClassVar[str] = "Tile0Granularity"
    HAS_INDEX: ClassVar[bool] = False
    HAS_VALUE: ClassVar[bool] = True

    value: float  # 1 / MT0

    def __post_init__(self) -> None:
        _check_tile_value(self.TYPE, self.value)
        object.__setattr__(self, "value", float(self.value))

    def evaluate(self, problem: ProblemDescriptor) -> float:
        num_tiles = problem.free_size_a(0) * self.value
        return compute_granularity(num_tiles)


@feature_kind
@dataclass(frozen=True)
class Tile1Granularity:
    """Tile quantization efficiency along free dimension 0 of operand B."""

    TYPE: ClassVar[str] = "Tile1Granularity"
    HAS_INDEX: ClassVar[bool] = False
    HAS_VALUE: ClassVar[bool] = True

    value: float  # 1 / MT1

    def __post_init__(self) -> None:
        _check_tile_value(self.TYPE, self.value)
        object.__setattr__(self, "value", float(self.value))

    def evaluate(self, problem: ProblemDescriptor) -> float:
        num_tiles = problem.free_size_b(0) * self.value
        return compute_granularity(num_tiles)


@feature_kind
@dataclass(frozen=True)
class CUGranularity:
    """
    How evenly the tile workload divides across compute units.

    ``dev_sol_scale`` is ``1 / (numCUs / GSU / LSU)``, see
    `cu_granularity_scale_factors`.
    """

    TYPE: ClassVar[str] = "CUGranularity"
    HAS_INDEX: ClassVar[bool] = False
    HAS_VALUE: ClassVar[bool] = True

    value: GranularityScaleFactors

    def __post_init__(self) -> None:
        _check_scale_factors(self.TYPE, self.value)

    def evaluate(self, problem: ProblemDescriptor) -> float:
        # TODO: model batched problems; the problem's batch count is ignored.
        num_batches = 1.0
        tiles_per_cu = (
            num_batches * _whole_tiles(problem, self.value) * self.value.dev_sol_scale
        )
        return compute_granularity(tiles_per_cu)


@feature_kind
@dataclass(frozen=True)
class WavesPerSIMD:
    """
    Estimated waves scheduled per SIMD unit, as a raw magnitude.

    ``dev_sol_scale`` is
    ``(GSU / numCUs) * ceil(wgX * wgY / wavefrontSize) / (2 * simdPerCU)``,
    see `waves_per_simd_scale_factors`.
    """

    TYPE: ClassVar[str] = "WavesPerSIMD"
    HAS_INDEX: ClassVar[bool] = False
    HAS_VALUE: ClassVar[bool] = True

    value: GranularityScaleFactors

    def __post_init__(self) -> None:
        _check_scale_factors(self.TYPE, self.value)

    def evaluate(self, problem: ProblemDescriptor) -> float:
        return _whole_tiles(problem, self.value) * self.value.dev_sol_scale
