"""
Named scalar features for learned kernel selection.

Importing this package registers every built-in feature kind.
"""

from kernelfeatures.features.base import (
    FEATURE_KINDS,
    FeatureContractError,
    MLFeature,
    create_feature,
    feature_kind,
    get_feature_kind,
    list_feature_kinds,
)
from kernelfeatures.features.granularity import (
    CUGranularity,
    Tile0Granularity,
    Tile1Granularity,
    WavesPerSIMD,
)
from kernelfeatures.features.index import BoundSize, FreeSizeA, FreeSizeB
from kernelfeatures.features.vector import FeatureVector, default_layout, feature_name

__all__ = [
    "FEATURE_KINDS",
    "BoundSize",
    "CUGranularity",
    "FeatureContractError",
    "FeatureVector",
    "FreeSizeA",
    "FreeSizeB",
    "MLFeature",
    "Tile0Granularity",
    "Tile1Granularity",
    "WavesPerSIMD",
    "create_feature",
    "default_layout",
    "feature_kind",
    "feature_name",
    "get_feature_kind",
    "list_feature_kinds",
]
