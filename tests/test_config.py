"""Tests for configuration system."""

from pathlib import Path
from typing import Any

import pydantic
import pytest
import yaml

from kernelfeatures.config import (
    ExtractionConfig,
    FeatureEntryConfig,
    LoggingConfig,
    ScaleFactorsConfig,
    build_feature_vector,
    load_config,
)
from kernelfeatures.features import (
    CUGranularity,
    FeatureContractError,
    Tile0Granularity,
    WavesPerSIMD,
    default_layout,
)
from kernelfeatures.problem import ContractionProblem
from kernelfeatures.solution import (
    GranularityScaleFactors,
    cu_granularity_scale_factors,
    waves_per_simd_scale_factors,
)


def _write_yaml(path: Path, data: dict[str, Any]) -> Path:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestFeatureEntryConfig:
    """Tests for FeatureEntryConfig validation."""

    def test_index_entry(self) -> None:
        """Test a valid index-addressed entry."""
        entry = FeatureEntryConfig(type="FreeSizeB", index=1)
        assert entry.index == 1
        assert entry.value is None

    def test_value_entry_without_value(self) -> None:
        """Test value entries may leave the value to the kernel."""
        entry = FeatureEntryConfig(type="Tile0Granularity")
        assert entry.value is None

    def test_scale_factor_mapping(self) -> None:
        """Test a mapping value parses as scale factors."""
        entry = FeatureEntryConfig(
            type="CUGranularity",
            value={"mt0_scale": 0.015625, "mt1_scale": 0.015625, "dev_sol_scale": 0.5},
        )
        assert isinstance(entry.value, ScaleFactorsConfig)

    def test_unknown_type(self) -> None:
        """Test that unknown tags fail validation."""
        with pytest.raises(pydantic.ValidationError, match="Unknown feature type"):
            FeatureEntryConfig(type="GridSize", index=0)

    def test_index_kind_requires_index(self) -> None:
        """Test that index entries need an index."""
        with pytest.raises(pydantic.ValidationError, match="requires an index"):
            FeatureEntryConfig(type="BoundSize")

    def test_index_kind_rejects_value(self) -> None:
        """Test that index entries refuse values."""
        with pytest.raises(pydantic.ValidationError, match="does not take a value"):
            FeatureEntryConfig(type="FreeSizeA", index=0, value=1.0)

    def test_value_kind_rejects_index(self) -> None:
        """Test that value entries refuse indices."""
        with pytest.raises(pydantic.ValidationError, match="does not take an index"):
            FeatureEntryConfig(type="WavesPerSIMD", index=0)

    def test_negative_index(self) -> None:
        """Test that negative indices fail validation."""
        with pytest.raises(pydantic.ValidationError):
            FeatureEntryConfig(type="FreeSizeA", index=-1)


class TestLoggingConfig:
    """Tests for LoggingConfig."""

    def test_level_normalized(self) -> None:
        """Test level names are upper-cased."""
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_unknown_level(self) -> None:
        """Test that unknown levels fail validation."""
        with pytest.raises(pydantic.ValidationError, match="Unknown log level"):
            LoggingConfig(level="verbose")


class TestExtractionConfig:
    """Tests for ExtractionConfig."""

    def test_valid_config(self, base_config: dict[str, Any]) -> None:
        """Test creating a config from a plain dictionary."""
        config = ExtractionConfig.model_validate(base_config)
        assert config.project == "mt64x64-test"
        assert config.kernel is not None
        assert config.kernel.global_split_u == 2
        assert len(config.features) == 5
        assert config.logging.level == "INFO"

    def test_requires_kernel_or_features(self) -> None:
        """Test that an empty layout needs a kernel for the default."""
        with pytest.raises(pydantic.ValidationError, match="must define 'kernel'"):
            ExtractionConfig(project="empty")

    def test_derived_values_require_kernel(self) -> None:
        """Test value entries without values need a kernel."""
        with pytest.raises(pydantic.ValidationError, match="need 'kernel'"):
            ExtractionConfig.model_validate(
                {"project": "p", "features": [{"type": "Tile1Granularity"}]}
            )

    def test_explicit_values_without_kernel(self) -> None:
        """Test fully specified layouts need no kernel."""
        config = ExtractionConfig.model_validate(
            {
                "project": "p",
                "features": [
                    {"type": "FreeSizeA", "index": 0},
                    {"type": "Tile0Granularity", "value": 0.0078125},
                ],
            }
        )
        assert config.kernel is None


class TestLoadConfig:
    """Tests for config loading from YAML."""

    def test_load_config(self, tmp_path: Path, base_config: dict[str, Any]) -> None:
        """Test loading a config file."""
        path = _write_yaml(tmp_path / "extract.yaml", base_config)
        config = load_config(path)
        assert config.project == "mt64x64-test"
        assert [entry.type for entry in config.features][:3] == [
            "FreeSizeA",
            "FreeSizeB",
            "BoundSize",
        ]

    def test_missing_project(
        self, tmp_path: Path, base_config: dict[str, Any]
    ) -> None:
        """Test that configs without a project fail."""
        del base_config["project"]
        path = _write_yaml(tmp_path / "extract.yaml", base_config)
        with pytest.raises(ValueError, match="project"):
            load_config(path)

    def test_base_inheritance(self, tmp_path: Path) -> None:
        """Test base.yaml supplies defaults the main file overrides."""
        _write_yaml(
            tmp_path / "base.yaml",
            {
                "logging": {"level": "WARNING"},
                "kernel": {"num_compute_units": 120, "simd_per_cu": 4},
            },
        )
        path = _write_yaml(
            tmp_path / "extract.yaml",
            {
                "project": "inherit",
                "kernel": {"macro_tile0": 128, "macro_tile1": 64},
            },
        )
        config = load_config(path)
        assert config.kernel is not None
        assert config.kernel.num_compute_units == 120
        assert config.kernel.macro_tile0 == 128
        assert config.logging.level == "WARNING"

    def test_explicit_base_path(
        self, tmp_path: Path, base_config: dict[str, Any]
    ) -> None:
        """Test a base file outside the config directory."""
        base_dir = tmp_path / "shared"
        base_dir.mkdir()
        base_path = _write_yaml(
            base_dir / "device.yaml", {"logging": {"level": "ERROR"}}
        )
        path = _write_yaml(tmp_path / "extract.yaml", base_config)
        assert load_config(path, base_path=base_path).logging.level == "ERROR"

    def test_env_var_interpolation(
        self,
        tmp_path: Path,
        base_config: dict[str, Any],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test environment variable interpolation with defaults."""
        monkeypatch.setenv("KF_PROJECT", "from-env")
        base_config["project"] = "${KF_PROJECT}"
        base_config["logging"] = {"level": "${KF_UNSET_LEVEL:debug}"}
        path = _write_yaml(tmp_path / "extract.yaml", base_config)
        config = load_config(path)
        assert config.project == "from-env"
        assert config.logging.level == "DEBUG"

    def test_example_config(self, project_root: Path) -> None:
        """Test the shipped example config resolves to the default layout."""
        config = load_config(project_root / "configs" / "mt64x64-gsu2.yaml")
        assert config.project == "mt64x64-gsu2"
        assert config.kernel is not None
        assert config.kernel.num_compute_units == 110

        vector = build_feature_vector(config)
        default = default_layout(config.kernel)
        assert vector.names == default.names
        problem = ContractionProblem.from_gemm(m=130, n=65, k=256)
        assert list(vector.evaluate(problem)) == list(default.evaluate(problem))


class TestBuildFeatureVector:
    """Tests for instantiating configured layouts."""

    def test_values_derived_from_kernel(self, base_config: dict[str, Any]) -> None:
        """Test omitted values come from the kernel section."""
        config = ExtractionConfig.model_validate(base_config)
        assert config.kernel is not None
        vector = build_feature_vector(config)
        assert vector.names == [
            "FreeSizeA_0",
            "FreeSizeB_0",
            "BoundSize_0",
            "Tile0Granularity",
            "CUGranularity",
        ]
        assert vector.features[3] == Tile0Granularity(value=1 / 64)
        assert vector.features[4] == CUGranularity(
            value=cu_granularity_scale_factors(config.kernel)
        )

    def test_explicit_scale_factors(self, base_config: dict[str, Any]) -> None:
        """Test explicit scale factors override the kernel."""
        base_config["features"] = [
            {
                "type": "WavesPerSIMD",
                "value": {"mt0_scale": 0.5, "mt1_scale": 0.25, "dev_sol_scale": 2.0},
            }
        ]
        config = ExtractionConfig.model_validate(base_config)
        (feature,) = build_feature_vector(config).features
        assert feature == WavesPerSIMD(
            value=GranularityScaleFactors(
                mt0_scale=0.5, mt1_scale=0.25, dev_sol_scale=2.0
            )
        )
        assert config.kernel is not None
        assert feature.value != waves_per_simd_scale_factors(config.kernel)

    def test_default_layout_when_no_features(
        self, base_config: dict[str, Any]
    ) -> None:
        """Test an empty feature list selects the default catalog."""
        base_config["features"] = []
        config = ExtractionConfig.model_validate(base_config)
        assert config.kernel is not None
        assert build_feature_vector(config) == default_layout(config.kernel)

    def test_wrong_value_shape(self, base_config: dict[str, Any]) -> None:
        """Test a plain number for an occupancy kind fails at build time."""
        base_config["features"] = [{"type": "CUGranularity", "value": 0.5}]
        config = ExtractionConfig.model_validate(base_config)
        with pytest.raises(FeatureContractError):
            build_feature_vector(config)

    def test_scale_factors_for_tile_kind(self, base_config: dict[str, Any]) -> None:
        """Test a scale factor mapping for a tile kind fails at build time."""
        base_config["features"] = [
            {
                "type": "Tile0Granularity",
                "value": {"mt0_scale": 0.5, "mt1_scale": 0.5, "dev_sol_scale": 1.0},
            }
        ]
        config = ExtractionConfig.model_validate(base_config)
        with pytest.raises(FeatureContractError):
            build_feature_vector(config)
