"""
Configuration loading utilities.

Supports environment variable interpolation and config inheritance.
Minimal configs only need: project, and either kernel or features.
"""

import os
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml

from kernelfeatures.config.settings import ExtractionConfig, ScaleFactorsConfig
from kernelfeatures.features import (
    FeatureVector,
    MLFeature,
    create_feature,
    default_layout,
    get_feature_kind,
)
from kernelfeatures.solution import (
    GranularityScaleFactors,
    KernelConfig,
    cu_granularity_scale_factors,
    tile_scale,
    waves_per_simd_scale_factors,
)
from kernelfeatures.utils.logging import get_logger

log = get_logger(__name__)

# How value-configured kinds derive their coefficient from a kernel.
KERNEL_DERIVED_VALUES: dict[str, Callable[[KernelConfig], Any]] = {
    "Tile0Granularity": lambda kernel: tile_scale(kernel.macro_tile0),
    "Tile1Granularity": lambda kernel: tile_scale(kernel.macro_tile1),
    "CUGranularity": cu_granularity_scale_factors,
    "WavesPerSIMD": waves_per_simd_scale_factors,
}


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        return os.environ.get(var_name, default if default is not None else "")

    return re.sub(pattern, replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return _process_config_values(data) if data else {}


def load_config(
    config_path: Path,
    base_path: Path | None = None,
) -> ExtractionConfig:
    """
    Load extraction configuration from YAML file(s).

    Lists (such as ``features``) in the main file replace those of the base
    file; mappings (such as ``kernel``) are merged key by key.

    Args:
        config_path: Path to the main configuration file.
        base_path: Optional base configuration; defaults to a ``base.yaml``
            next to ``config_path`` when one exists.

    Returns:
        Fully validated ExtractionConfig instance.

    Raises:
        ValueError: If the project name is missing.
        pydantic.ValidationError: If any section is invalid.
    """
    if base_path is not None:
        base_data = load_yaml(base_path)
    else:
        potential_base = config_path.parent / "base.yaml"
        if potential_base.exists() and potential_base != config_path:
            base_data = load_yaml(potential_base)
        else:
            base_data = {}

    main_data = load_yaml(config_path)
    merged = _deep_merge(base_data, main_data)

    if not merged.get("project"):
        msg = "Config must specify 'project' name"
        raise ValueError(msg)

    config = ExtractionConfig.model_validate(merged)
    log.debug(
        "Loaded config",
        path=str(config_path),
        project=config.project,
        features=len(config.features),
    )
    return config


def _resolve_value(entry_type: str, value: Any, kernel: KernelConfig | None) -> Any:
    """Turn a configured value into the coefficient its feature kind carries."""
    if isinstance(value, ScaleFactorsConfig):
        return GranularityScaleFactors(
            mt0_scale=value.mt0_scale,
            mt1_scale=value.mt1_scale,
            dev_sol_scale=value.dev_sol_scale,
        )
    if value is not None:
        return value
    if kernel is None:
        msg = f"{entry_type} has no value and no kernel to derive it from"
        raise ValueError(msg)
    if entry_type not in KERNEL_DERIVED_VALUES:
        msg = f"{entry_type} cannot derive its value from a kernel config"
        raise ValueError(msg)
    return KERNEL_DERIVED_VALUES[entry_type](kernel)


def build_feature_vector(config: ExtractionConfig) -> FeatureVector:
    """
    Instantiate the configured feature layout.

    Args:
        config: Extraction configuration.

    Returns:
        Feature vector in configured order, or the default layout for the
        kernel when no features are listed.

    Raises:
        ValueError: If a value cannot be resolved.
        FeatureContractError: If a value has the wrong shape for its kind.
    """
    if not config.features:
        if config.kernel is None:
            msg = "Config without a 'features' list must define 'kernel'"
            raise ValueError(msg)
        log.info("Using default feature layout", project=config.project)
        return default_layout(config.kernel)

    features: list[MLFeature] = []
    for entry in config.features:
        if get_feature_kind(entry.type).HAS_INDEX:
            features.append(create_feature(entry.type, index=entry.index))
        else:
            value = _resolve_value(entry.type, entry.value, config.kernel)
            features.append(create_feature(entry.type, value=value))

    vector = FeatureVector(features=tuple(features))
    log.info("Built feature layout", project=config.project, columns=vector.names)
    return vector
