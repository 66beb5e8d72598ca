import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from aquarium_health.core.config import Settings, get_settings, get_thresholds
from aquarium_health.core.security import require_function_key
from aquarium_health.schemas import AnalysisResult, AnalysisThresholds, ErrorDetail, TankReadings
from aquarium_health.services.evaluator import build_result, evaluate
from aquarium_health.services.validator import (
    EmptyPayloadError,
    PayloadError,
    PayloadFieldError,
    decode_payload,
    missing_fields_message,
    validate_completeness,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health(settings: Settings = Depends(get_settings)):
    return {"status": "ok", "service": settings.PROJECT_NAME}


def _reject(fields) -> HTTPException:
    detail = ErrorDetail(message=missing_fields_message(fields), missingOrInvalidFields=fields)
    return HTTPException(400, detail.model_dump())


@router.post(
    "/aquarium/analyze",
    response_model=AnalysisResult,
    dependencies=[Depends(require_function_key)],
)
async def analyze(
    request: Request,
    tankId: Optional[str] = Query(default=None),
    thresholds: AnalysisThresholds = Depends(get_thresholds),
):
    tank = tankId or "unspecified"
    logger.info("Beginning water quality analysis for aquarium tank: %s", tank)

    body = await request.body()

    try:
        payload = decode_payload(body)
    except EmptyPayloadError as exc:
        logger.warning("Empty metrics received for tank: %s", tank)
        raise HTTPException(400, ErrorDetail(message=exc.message).model_dump())
    except PayloadFieldError as exc:
        logger.warning("Tank %s metrics incomplete or invalid. Missing/invalid fields: %s", tank, ", ".join(exc.fields))
        raise _reject(exc.fields)
    except PayloadError as exc:
        logger.warning("Unable to parse metrics JSON for tank %s: %s", tank, exc.message)
        raise HTTPException(400, ErrorDetail(message=exc.message).model_dump())

    outcome = validate_completeness(payload)
    if not outcome.is_valid:
        fields = outcome.missing_or_invalid_fields
        logger.warning("Tank %s metrics incomplete or invalid. Missing/invalid fields: %s", tank, ", ".join(fields))
        raise _reject(fields)

    try:
        readings = TankReadings.from_payload(payload)
        verdict, _findings = evaluate(readings, thresholds, log=logger, tank_id=tankId)
        return build_result(tankId, readings, verdict)
    except Exception:
        logger.exception("Analysis failed for tank %s", tank)
        raise HTTPException(500, "Internal server error")
