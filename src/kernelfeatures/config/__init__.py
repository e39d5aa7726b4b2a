"""
Configuration management with typed Pydantic models.

Feature layouts and kernel descriptions are loaded from YAML with
environment variable interpolation and base-file inheritance.
"""

from kernelfeatures.config.loader import build_feature_vector, load_config
from kernelfeatures.config.settings import (
    ExtractionConfig,
    FeatureEntryConfig,
    LoggingConfig,
    ScaleFactorsConfig,
)

__all__ = [
    "ExtractionConfig",
    "FeatureEntryConfig",
    "LoggingConfig",
    "ScaleFactorsConfig",
    "build_feature_vector",
    "load_config",
]
