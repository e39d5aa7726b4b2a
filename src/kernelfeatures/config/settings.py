"""
Typed configuration models using Pydantic.

An extraction config names a project, optionally describes the candidate
kernel, and lists the feature layout in output column order.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from kernelfeatures.features import get_feature_kind, list_feature_kinds
from kernelfeatures.solution import KernelConfig


class ScaleFactorsConfig(BaseModel):
    """Explicit scale factors for an occupancy feature."""

    model_config = ConfigDict(frozen=True)

    mt0_scale: float = Field(gt=0.0, description="1 / macro tile extent along M")
    mt1_scale: float = Field(gt=0.0, description="1 / macro tile extent along N")
    dev_sol_scale: float = Field(gt=0.0, description="Device/solution scale")


class FeatureEntryConfig(BaseModel):
    """
    One entry of the feature layout.

    Index kinds need ``index``. Value kinds take ``value`` or, when it is
    omitted, derive it from the config's kernel section.
    """

    model_config = ConfigDict(frozen=True)

    type: str = Field(description="Feature type tag, e.g. 'FreeSizeA'")
    index: int | None = Field(default=None, ge=0, description="Dimension position")
    value: float | ScaleFactorsConfig | None = Field(
        default=None, description="Precomputed coefficient"
    )

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        """Ensure the tag names a registered feature kind."""
        if v not in list_feature_kinds():
            available = ", ".join(list_feature_kinds())
            msg = f"Unknown feature type {v!r}. Available: {available}"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_mode(self) -> "FeatureEntryConfig":
        """Ensure the entry carries the field its kind is addressed by."""
        kind = get_feature_kind(self.type)
        if kind.HAS_INDEX:
            if self.value is not None:
                msg = f"{self.type} is index-addressed and does not take a value"
                raise ValueError(msg)
            if self.index is None:
                msg = f"{self.type} requires an index"
                raise ValueError(msg)
        elif self.index is not None:
            msg = f"{self.type} is value-configured and does not take an index"
            raise ValueError(msg)
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO", description="Log level name")
    json_output: bool = Field(default=False, description="Emit JSON log lines")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize and check the level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unknown log level: {v!r}"
            raise ValueError(msg)
        return level


class ExtractionConfig(BaseModel):
    """
    Complete feature extraction configuration.

    An empty ``features`` list selects the default layout for ``kernel``.
    """

    model_config = ConfigDict(frozen=True)

    project: str = Field(description="Project identifier (e.g., 'gfx90a-sgemm')")
    kernel: KernelConfig | None = Field(
        default=None, description="Candidate kernel the value features describe"
    )
    features: list[FeatureEntryConfig] = Field(
        default_factory=list, description="Feature layout in column order"
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def validate_kernel_available(self) -> "ExtractionConfig":
        """Ensure every value that must be derived has a kernel to derive from."""
        if self.kernel is not None:
            return self
        if not self.features:
            msg = "Config without a 'features' list must define 'kernel'"
            raise ValueError(msg)
        missing = [
            entry.type
            for entry in self.features
            if get_feature_kind(entry.type).HAS_VALUE and entry.value is None
        ]
        if missing:
            msg = f"Features {', '.join(missing)} need 'kernel' to derive their values"
            raise ValueError(msg)
        return self
