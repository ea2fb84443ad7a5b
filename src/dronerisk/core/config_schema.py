"""Pydantic schema for DRONERISK configuration validation.

Mirrors the YAML structure in config/default.yaml. Used when
``validate=True`` is passed to ``DroneRiskConfig.load()``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import (
    BaseModel,
    Field,
    StrictBool,
    StrictStr,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------


class SystemConfig(BaseModel):
    name: str = "DRONERISK"
    version: str = "0.1.0"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    validate_config: bool = False
    log_file: str | None = None
    log_json: bool = False


class TimeConfig(BaseModel):
    mode: Literal["realtime", "simulated"] = "realtime"
    start_epoch: float = Field(default=1_700_000_000.0, ge=0)


# ---------------------------------------------------------------------------
# Risk
# ---------------------------------------------------------------------------


class ThresholdsConfig(BaseModel):
    high: int = Field(default=50, ge=0)
    medium: int = Field(default=20, ge=0)

    @model_validator(mode="after")
    def _ordered(self) -> ThresholdsConfig:
        if self.medium > self.high:
            raise ValueError("thresholds.medium must not exceed thresholds.high")
        return self


class RiskSchema(BaseModel):
    weights: dict[str, int] | None = None
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)

    @field_validator("weights")
    @classmethod
    def _positive(cls, v: dict[str, int] | None) -> dict[str, int] | None:
        if v is not None:
            bad = [k for k, w in v.items() if w <= 0]
            if bad:
                raise ValueError(f"weights must be positive: {bad}")
        return v


# ---------------------------------------------------------------------------
# Engagement
# ---------------------------------------------------------------------------


class ActionSchema(BaseModel):
    key: str
    label: str | None = None
    success_outcome: str
    success_message: str | None = None
    error_outcome: str = "failed"
    error_message: str | None = None


class StationSchema(BaseModel):
    id: str
    name: str | None = None
    position: list[float] = Field(min_length=2, max_length=2)


class EngagementSchema(BaseModel):
    coverage_radius_m: float = Field(default=30_000.0, ge=0)
    actions: list[ActionSchema] = Field(default_factory=list)
    stations: list[StationSchema] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_ids(self) -> EngagementSchema:
        keys = [a.key for a in self.actions]
        if len(keys) != len(set(keys)):
            raise ValueError("duplicate action keys")
        ids = [s.id for s in self.stations]
        if len(ids) != len(set(ids)):
            raise ValueError("duplicate station ids")
        return self


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


class TargetSchema(BaseModel):
    id: str
    call_sign: str | None = None
    track: list[list[float]] = Field(min_length=1)
    indicators: dict[str, StrictBool] = Field(default_factory=dict)
    outcomes: dict[str, StrictStr] = Field(default_factory=dict)

    @field_validator("track")
    @classmethod
    def _pairs(cls, v: list[list[float]]) -> list[list[float]]:
        for point in v:
            if len(point) != 2:
                raise ValueError(f"track points must be [lat, lon], got {point}")
        return v


# ---------------------------------------------------------------------------
# Export / UI
# ---------------------------------------------------------------------------


class ExportConfig(BaseModel):
    directory: str = "exports"
    entries: bool = False
    compression: bool = False


class UIConfig(BaseModel):
    feedback_dismiss_s: float = Field(default=3.0, gt=0)
    heading_bucket_deg: int = Field(default=15, gt=0, le=360)


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class DroneRiskRootConfig(BaseModel):
    system: SystemConfig = Field(default_factory=SystemConfig)
    time: TimeConfig = Field(default_factory=TimeConfig)
    risk: RiskSchema = Field(default_factory=RiskSchema)
    engagement: EngagementSchema = Field(default_factory=EngagementSchema)
    targets: list[TargetSchema] = Field(default_factory=list)
    export: ExportConfig = Field(default_factory=ExportConfig)
    ui: UIConfig = Field(default_factory=UIConfig)

    model_config = {"extra": "allow"}

    @model_validator(mode="after")
    def _unique_targets(self) -> DroneRiskRootConfig:
        ids = [t.id for t in self.targets]
        if len(ids) != len(set(ids)):
            raise ValueError("duplicate target ids")
        return self


class DroneRiskConfigSchema(BaseModel):
    """Top-level wrapper matching YAML root key ``dronerisk:``."""

    dronerisk: DroneRiskRootConfig

    model_config = {"extra": "allow"}


def validate_config(cfg_dict: dict) -> DroneRiskConfigSchema:
    """Validate a raw config dict (e.g. from OmegaConf) against the schema.

    Raises ``pydantic.ValidationError`` on invalid config.
    """
    return DroneRiskConfigSchema.model_validate(cfg_dict)
