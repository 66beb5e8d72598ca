# aquarium_health/services/validator.py
import json
from typing import List, Optional, Union

from pydantic import ValidationError

from aquarium_health.schemas import FIELD_ORDER, MetricsPayload, ValidationOutcome


class PayloadError(Exception):
    """Request body could not be turned into a usable MetricsPayload."""

    message = "Invalid metrics payload"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class EmptyPayloadError(PayloadError):
    message = "Metrics payload is required"


class MalformedPayloadError(PayloadError):
    message = "Malformed metrics data"


class InvalidStructureError(PayloadError):
    message = "Invalid JSON structure"


class PayloadFieldError(PayloadError):
    def __init__(self, fields: List[str]):
        self.fields = list(fields)
        super().__init__(missing_fields_message(self.fields))


def missing_fields_message(fields: List[str]) -> str:
    return "Required fields missing or invalid: " + ", ".join(fields)


def validate_completeness(payload: MetricsPayload) -> ValidationOutcome:
    missing: List[str] = []

    if payload.phValue is None or payload.phValue <= 0:
        missing.append("phValue")
    if payload.tempCelsius is None or payload.tempCelsius <= 0:
        missing.append("tempCelsius")
    if payload.ammoniaPPM is None or payload.ammoniaPPM < 0:
        missing.append("ammoniaPPM")
    if payload.fishCount is None or payload.fishCount < 0:
        missing.append("fishCount")

    return ValidationOutcome(is_valid=not missing, missing_or_invalid_fields=missing)


def decode_payload(body: Union[bytes, str]) -> MetricsPayload:
    """
    Typed decode of a raw request body.

    Fails closed: a field with the wrong type is never coerced to a default.
    When any field is mistyped, PayloadFieldError lists it together with every
    other field that is absent or fails its sanity check, in declaration order.
    """
    if not body or not body.strip():
        raise EmptyPayloadError()

    try:
        raw = json.loads(body)
    except ValueError as exc:
        raise MalformedPayloadError() from exc

    if not isinstance(raw, dict):
        raise InvalidStructureError()

    try:
        return MetricsPayload.model_validate(raw)
    except ValidationError as exc:
        mistyped = {str(err["loc"][0]) for err in exc.errors() if err.get("loc")}
        rest = MetricsPayload.model_validate({k: v for k, v in raw.items() if k not in mistyped})
        incomplete = validate_completeness(rest).missing_or_invalid_fields
        fields = [f for f in FIELD_ORDER if f in mistyped or f in incomplete]
        raise PayloadFieldError(fields) from exc
