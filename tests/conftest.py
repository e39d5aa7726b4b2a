"""Pytest configuration and shared fixtures."""

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog

from kernelfeatures.problem import ContractionProblem
from kernelfeatures.solution import GranularityScaleFactors, KernelConfig


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Drop any logging configuration a test installed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def gemm_problem() -> ContractionProblem:
    """GEMM whose M and N are just past a 64-wide tile boundary."""
    return ContractionProblem.from_gemm(m=130, n=65, k=256)


@pytest.fixture
def aligned_problem() -> ContractionProblem:
    """GEMM whose M and N are exact multiples of 64."""
    return ContractionProblem.from_gemm(m=128, n=64, k=256)


@pytest.fixture
def multi_dim_problem() -> ContractionProblem:
    """Contraction with several free and bound dimensions per operand."""
    return ContractionProblem(
        free_sizes_a=(130, 7, 3),
        free_sizes_b=(65, 11),
        bound_sizes=(256, 4),
        batch_sizes=(2, 3),
    )


@pytest.fixture
def kernel() -> KernelConfig:
    """MT64x64 kernel with global split-U 2 on a 110-CU device."""
    return KernelConfig(
        macro_tile0=64,
        macro_tile1=64,
        global_split_u=2,
        workgroup=(16, 16),
        num_compute_units=110,
    )


@pytest.fixture
def half_scale_factors() -> GranularityScaleFactors:
    """64x64 tiles with a device scale of one half."""
    return GranularityScaleFactors(
        mt0_scale=1 / 64,
        mt1_scale=1 / 64,
        dev_sol_scale=0.5,
    )


@pytest.fixture
def base_config() -> dict[str, Any]:
    """Minimal extraction configuration dictionary."""
    return {
        "project": "mt64x64-test",
        "kernel": {
            "macro_tile0": 64,
            "macro_tile1": 64,
            "global_split_u": 2,
            "num_compute_units": 110,
        },
        "features": [
            {"type": "FreeSizeA", "index": 0},
            {"type": "FreeSizeB", "index": 0},
            {"type": "BoundSize", "index": 0},
            {"type": "Tile0Granularity"},
            {"type": "CUGranularity"},
        ],
    }
