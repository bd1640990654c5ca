"""Ingress validation: structural filtering of submitted entries. Pure functions, no infrastructure."""

import logging
from typing import Any, List, Mapping, Optional

from event_pipeline.domain.schemas.event import EventEnvelope

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("id", "type", "payload")


def missing_fields(candidate: Any) -> List[str]:
    """Return the required fields absent from candidate. A non-mapping candidate misses all of them."""
    if not isinstance(candidate, Mapping):
        return list(REQUIRED_FIELDS)
    missing = []
    for name in ("id", "type"):
        value = candidate.get(name)
        if not value or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    if candidate.get("payload") is None:
        missing.append("payload")
    return missing


def to_envelope(candidate: Any) -> Optional[EventEnvelope]:
    """
    Structurally valid candidate as an EventEnvelope, or None. Never raises.
    Required fields are the only filter; optional fields are carried raw and checked on rehydration.
    """
    if missing_fields(candidate):
        return None
    return EventEnvelope.model_validate(candidate)


def filter_valid(candidates: List[Any]) -> List[EventEnvelope]:
    """
    Keep entries with a non-empty id, a non-empty type and a non-null payload.
    Everything else is dropped and logged: malformed submissions are a caller bug,
    not a processing failure, so they are neither raised nor dead-lettered.
    Payload schemas are not checked here.
    """
    valid: List[EventEnvelope] = []
    for index, candidate in enumerate(candidates):
        envelope = to_envelope(candidate)
        if envelope is None:
            logger.warning(
                "event_dropped_malformed",
                extra={
                    "index": index,
                    "missing_fields": missing_fields(candidate),
                    "event_id": candidate.get("id") if isinstance(candidate, Mapping) else None,
                },
            )
            continue
        valid.append(envelope)
    logger.info(
        "ingress_filtered",
        extra={"submitted": len(candidates), "valid": len(valid)},
    )
    return valid
