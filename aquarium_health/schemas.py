from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

HealthStatus = Literal["optimal", "requires_attention"]
Severity = Literal["warning", "info"]

# declaration order; validation reports fields in this order
FIELD_ORDER = ("phValue", "tempCelsius", "ammoniaPPM", "fishCount")


class MetricsPayload(BaseModel):
    """Raw tank telemetry. Every field may be absent so the validator can say which ones are."""

    model_config = ConfigDict(extra="ignore")

    phValue: Optional[float] = Field(default=None, strict=True, allow_inf_nan=False, examples=[7.2])
    tempCelsius: Optional[float] = Field(default=None, strict=True, allow_inf_nan=False, examples=[25.5])
    ammoniaPPM: Optional[float] = Field(default=None, strict=True, allow_inf_nan=False, examples=[0.3])
    fishCount: Optional[int] = Field(default=None, strict=True, examples=[35])


class ValidationOutcome(BaseModel):
    is_valid: bool
    missing_or_invalid_fields: List[str] = Field(default_factory=list)


class AnalysisThresholds(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_acceptable_ph: float = 6.5
    max_acceptable_ph: float = 8.5
    min_safe_temperature: float = 22.0
    max_safe_temperature: float = 28.0
    ammonia_danger_level: float = 0.5
    overcrowding_threshold: int = 50

    @model_validator(mode="after")
    def _check_bands(self):
        if self.min_acceptable_ph > self.max_acceptable_ph:
            raise ValueError("min_acceptable_ph must not exceed max_acceptable_ph")
        if self.min_safe_temperature > self.max_safe_temperature:
            raise ValueError("min_safe_temperature must not exceed max_safe_temperature")
        return self


class TankReadings(BaseModel):
    ph: float
    temperature: float
    ammonia: float
    population: int

    @classmethod
    def from_payload(cls, payload: MetricsPayload) -> "TankReadings":
        # only call after validate_completeness() said yes
        return cls(
            ph=payload.phValue,
            temperature=payload.tempCelsius,
            ammonia=payload.ammoniaPPM,
            population=payload.fishCount,
        )


class HealthFinding(BaseModel):
    code: str
    severity: Severity
    reading: float
    limit: str
    message: str


class MetricsProcessed(BaseModel):
    ph: float
    temperature: float
    ammonia: float
    population: int


class AnalysisResult(BaseModel):
    status: Literal["analysis_complete"] = "analysis_complete"
    tankId: Optional[str] = None
    evaluationTimestamp: datetime
    healthStatus: HealthStatus
    warningsDetected: bool
    metricsProcessed: MetricsProcessed


class ErrorDetail(BaseModel):
    message: str
    missingOrInvalidFields: List[str] = Field(default_factory=list)
