"""
Candidate kernel configuration and granularity math.

A candidate kernel covers the output with macro tiles, optionally splits
the reduction across workgroups (global split-U) and within a workgroup
(local split-U), and runs on a device with a fixed number of compute
units. The helpers here reduce that configuration to the scale factors
that occupancy features multiply problem sizes by.
"""

import math
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, PositiveInt

# Wave slots per SIMD that the waves-per-SIMD estimate is normalized to.
WAVES_RESIDENT_PER_SIMD = 2

# Counts this close (relative) to an integer are that integer.
WHOLE_COUNT_REL_TOL = 1e-9


def snap_whole_count(count: float) -> float:
    """Round a finite count sitting within float noise of an integer onto it."""
    nearest = round(count)
    if math.isclose(count, nearest, rel_tol=WHOLE_COUNT_REL_TOL):
        return float(nearest)
    return count


def compute_granularity(raw_count: float) -> float:
    """
    Normalize a fractional unit count to a utilization ratio.

    ``x / ceil(x)``: an exact integer count keeps every unit busy (1.0),
    while a count just above an integer leaves the last unit almost idle
    (close to ``x / (x + 1)``). Products such as ``525 * (1 / 75)`` that
    land one ulp above an integer are snapped onto it first.

    Args:
        raw_count: Number of tiles, tiles per CU, or similar.

    Returns:
        Utilization ratio in (0, 1].

    Raises:
        ValueError: If the count is not a positive finite number.
    """
    if not math.isfinite(raw_count) or raw_count <= 0.0:
        msg = f"Granularity is undefined for unit count {raw_count!r}"
        raise ValueError(msg)
    count = snap_whole_count(raw_count)
    return count / math.ceil(count)


@dataclass(frozen=True)
class GranularityScaleFactors:
    """
    Per-kernel coefficients for occupancy features.

    Attributes:
        mt0_scale: 1 / macro tile extent along free dimension 0 of A.
        mt1_scale: 1 / macro tile extent along free dimension 0 of B.
        dev_sol_scale: Device and solution dependent scale applied to the
            whole-tile count.
    """

    mt0_scale: float
    mt1_scale: float
    dev_sol_scale: float

    def __post_init__(self) -> None:
        for name in ("mt0_scale", "mt1_scale", "dev_sol_scale"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int | float):
                msg = f"{name} must be a number, got {value!r}"
                raise TypeError(msg)
            if not math.isfinite(value) or value <= 0.0:
                msg = f"{name} must be positive and finite, got {value!r}"
                raise ValueError(msg)
            object.__setattr__(self, name, float(value))


class KernelConfig(BaseModel):
    """Tiling and parallelism of one candidate kernel on one device."""

    model_config = ConfigDict(frozen=True)

    macro_tile0: int = Field(ge=1, description="Macro tile extent along M")
    macro_tile1: int = Field(ge=1, description="Macro tile extent along N")
    global_split_u: int = Field(
        default=1, ge=1, description="Reduction split across workgroups"
    )
    local_split_u: int = Field(
        default=1, ge=1, description="Reduction split within a workgroup"
    )
    workgroup: tuple[PositiveInt, PositiveInt] = Field(
        default=(16, 16), description="Workgroup shape (x, y) in threads"
    )
    num_compute_units: int = Field(ge=1, description="Compute units on the device")
    wavefront_size: int = Field(default=64, ge=1, description="Threads per wave")
    simd_per_cu: int = Field(default=4, ge=1, description="SIMD units per CU")

    @property
    def waves_per_workgroup(self) -> int:
        """Number of waves needed to run one workgroup."""
        threads = self.workgroup[0] * self.workgroup[1]
        return math.ceil(threads / self.wavefront_size)


def tile_scale(macro_tile: int) -> float:
    """Coefficient turning a dimension size into a tile count."""
    if macro_tile < 1:
        msg = f"Macro tile extent must be at least 1, got {macro_tile}"
        raise ValueError(msg)
    return 1.0 / macro_tile


def cu_granularity_scale_factors(kernel: KernelConfig) -> GranularityScaleFactors:
    """
    Scale factors for tiles-per-CU granularity.

    The device scale is ``1 / (numCUs / GSU / LSU)``: every split of the
    reduction multiplies the number of workgroups competing for the CUs.
    """
    effective_cus = (
        kernel.num_compute_units / kernel.global_split_u / kernel.local_split_u
    )
    return GranularityScaleFactors(
        mt0_scale=tile_scale(kernel.macro_tile0),
        mt1_scale=tile_scale(kernel.macro_tile1),
        dev_sol_scale=1.0 / effective_cus,
    )


def waves_per_simd_scale_factors(kernel: KernelConfig) -> GranularityScaleFactors:
    """
    Scale factors for the waves-per-SIMD estimate.

    The device scale is
    ``(GSU / numCUs) * ceil(wgX * wgY / wavefrontSize) / (2 * simdPerCU)``.
    """
    dev_sol_scale = (
        (kernel.global_split_u / kernel.num_compute_units)
        * kernel.waves_per_workgroup
        / (WAVES_RESIDENT_PER_SIMD * kernel.simd_per_cu)
    )
    return GranularityScaleFactors(
        mt0_scale=tile_scale(kernel.macro_tile0),
        mt1_scale=tile_scale(kernel.macro_tile1),
        dev_sol_scale=dev_sol_scale,
    )
