"""Domain validators. Pure validation functions."""

from event_pipeline.domain.validators.ingress_validator import filter_valid, missing_fields, to_envelope

__all__ = [
    "filter_valid",
    "missing_fields",
    "to_envelope",
]
