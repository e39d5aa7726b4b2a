"""
Feature vector assembly.

A feature vector is an ordered layout of heterogeneous features evaluated
uniformly against one problem. The layout is fixed when the vector is
built so that column order matches what the downstream model was trained
on.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd

from kernelfeatures.features.base import FeatureContractError, MLFeature
from kernelfeatures.features.granularity import (
    CUGranularity,
    Tile0Granularity,
    Tile1Granularity,
    WavesPerSIMD,
)
from kernelfeatures.features.index import BoundSize, FreeSizeA, FreeSizeB
from kernelfeatures.problem import ProblemDescriptor
from kernelfeatures.solution import (
    KernelConfig,
    cu_granularity_scale_factors,
    tile_scale,
    waves_per_simd_scale_factors,
)
from kernelfeatures.utils.logging import get_logger

log = get_logger(__name__)


def feature_name(feature: MLFeature) -> str:
    """Column name of a feature: its tag, plus the index for index kinds."""
    if feature.HAS_INDEX:
        return f"{feature.type()}_{feature.index}"  # type: ignore[attr-defined]
    return feature.type()


@dataclass(frozen=True)
class FeatureVector:
    """
    Ordered, immutable collection of features.

    Attributes:
        features: Features in output column order.
    """

    features: tuple[MLFeature, ...]

    def __post_init__(self) -> None:
        features = tuple(self.features)
        for position, feature in enumerate(features):
            if not isinstance(feature, MLFeature):
                msg = f"Entry {position} is not a feature: {feature!r}"
                raise FeatureContractError(msg)
        object.__setattr__(self, "features", features)

    def __len__(self) -> int:
        return len(self.features)

    @property
    def names(self) -> list[str]:
        """Column names in layout order; repeats are suffixed with their position."""
        names: list[str] = []
        seen: set[str] = set()
        for position, feature in enumerate(self.features):
            name = feature_name(feature)
            if name in seen:
                name = f"{name}#{position}"
            seen.add(name)
            names.append(name)
        return names

    def evaluate(self, problem: ProblemDescriptor) -> np.ndarray:
        """
        Evaluate every feature against one problem.

        Args:
            problem: Problem descriptor.

        Returns:
            Float64 array with one entry per feature, in layout order.

        Raises:
            IndexError: If an index feature addresses a missing dimension.
            ValueError: If a granularity input is degenerate.
        """
        return np.fromiter(
            (feature.evaluate(problem) for feature in self.features),
            dtype=np.float64,
            count=len(self.features),
        )

    def evaluate_many(self, problems: Iterable[ProblemDescriptor]) -> pd.DataFrame:
        """
        Evaluate the layout against many problems.

        Args:
            problems: Problem descriptors, one output row each.

        Returns:
            DataFrame with one column per feature.
        """
        rows = [self.evaluate(problem) for problem in problems]
        log.debug("Evaluated feature vectors", rows=len(rows), features=len(self))
        matrix = np.vstack(rows) if rows else np.empty((0, len(self)))
        return pd.DataFrame(matrix, columns=self.names)


def default_layout(
    kernel: KernelConfig,
    free_indices: Sequence[int] = (0,),
    bound_indices: Sequence[int] = (0,),
) -> FeatureVector:
    """
    Build the standard feature catalog for one candidate kernel.

    Args:
        kernel: Candidate kernel configuration.
        free_indices: Free dimension positions to expose for both operands.
        bound_indices: Bound dimension positions to expose.

    Returns:
        Sizes first, then tile, CU and wave granularity features.
    """
    features: list[MLFeature] = []
    features.extend(FreeSizeA(index=i) for i in free_indices)
    features.extend(FreeSizeB(index=i) for i in free_indices)
    features.extend(BoundSize(index=i) for i in bound_indices)
    features.append(Tile0Granularity(value=tile_scale(kernel.macro_tile0)))
    features.append(Tile1Granularity(value=tile_scale(kernel.macro_tile1)))
    features.append(CUGranularity(value=cu_granularity_scale_factors(kernel)))
    features.append(WavesPerSIMD(value=waves_per_simd_scale_factors(kernel)))
    return FeatureVector(features=tuple(features))
