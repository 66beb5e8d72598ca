# aquarium_health/services/evaluator.py
import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from aquarium_health.schemas import (
    AnalysisResult,
    AnalysisThresholds,
    HealthFinding,
    MetricsProcessed,
    TankReadings,
)

logger = logging.getLogger(__name__)

OPTIMAL = "optimal"
REQUIRES_ATTENTION = "requires_attention"


def _tank_label(tank_id: Optional[str]) -> str:
    return tank_id or "unspecified"


def _outside(x: float, lo: float, hi: float) -> bool:
    # band is inclusive on both ends
    return x < lo or x > hi


def evaluate(
    readings: TankReadings,
    thresholds: AnalysisThresholds,
    log=None,
    tank_id: Optional[str] = None,
) -> Tuple[str, List[HealthFinding]]:
    """
    Check one set of readings against the threshold bands.

    All four checks always run. pH, temperature and ammonia produce
    warning-severity findings and drive the verdict; the population check
    only ever produces an info-severity density notice.

    `log` is any logger-like sink with info() and warning(); defaults to this
    module's logger.
    """
    log = log or logger
    tank = _tank_label(tank_id)
    t = thresholds
    findings: List[HealthFinding] = []

    log.info("Evaluating water quality for tank %s", tank)
    log.info(
        "Tank %s readings - pH: %s, Temperature: %s°C, Ammonia: %sppm, Fish: %s",
        tank, readings.ph, readings.temperature, readings.ammonia, readings.population,
    )

    # pH
    if _outside(readings.ph, t.min_acceptable_ph, t.max_acceptable_ph):
        findings.append(HealthFinding(
            code="ph_out_of_range",
            severity="warning",
            reading=readings.ph,
            limit=f"{t.min_acceptable_ph}-{t.max_acceptable_ph}",
            message=(
                f"CRITICAL: pH level out of safe range: {readings.ph} "
                f"(safe range: {t.min_acceptable_ph}-{t.max_acceptable_ph})"
            ),
        ))

    # Temperature
    if _outside(readings.temperature, t.min_safe_temperature, t.max_safe_temperature):
        findings.append(HealthFinding(
            code="temperature_out_of_range",
            severity="warning",
            reading=readings.temperature,
            limit=f"{t.min_safe_temperature}-{t.max_safe_temperature}°C",
            message=(
                f"CRITICAL: temperature unsafe: {readings.temperature}°C "
                f"(safe range: {t.min_safe_temperature}-{t.max_safe_temperature}°C)"
            ),
        ))

    # Ammonia: exactly at the danger level is still fine
    if readings.ammonia > t.ammonia_danger_level:
        findings.append(HealthFinding(
            code="ammonia_elevated",
            severity="warning",
            reading=readings.ammonia,
            limit=f">{t.ammonia_danger_level}ppm",
            message=(
                f"ALERT: ammonia levels elevated at {readings.ammonia}ppm "
                f"(threshold: {t.ammonia_danger_level}ppm)"
            ),
        ))

    # Population (advisory)
    if readings.population > t.overcrowding_threshold:
        findings.append(HealthFinding(
            code="high_population_density",
            severity="info",
            reading=readings.population,
            limit=f">{t.overcrowding_threshold} fish",
            message=(
                f"high population density with {readings.population} fish "
                f"(threshold: {t.overcrowding_threshold})"
            ),
        ))

    for f in findings:
        if f.severity == "warning":
            log.warning("Tank %s %s", tank, f.message)
        else:
            log.info("Tank %s has %s", tank, f.message)

    concerns = any(f.severity == "warning" for f in findings)
    return (REQUIRES_ATTENTION if concerns else OPTIMAL), findings


def build_result(tank_id: Optional[str], readings: TankReadings, verdict: str) -> AnalysisResult:
    return AnalysisResult(
        tankId=tank_id,
        evaluationTimestamp=datetime.now(timezone.utc),
        healthStatus=verdict,
        warningsDetected=verdict == REQUIRES_ATTENTION,
        metricsProcessed=MetricsProcessed(
            ph=readings.ph,
            temperature=readings.temperature,
            ammonia=readings.ammonia,
            population=readings.population,
        ),
    )
