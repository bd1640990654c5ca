"""
Event construction. The only way to obtain a DomainEvent: id and timestamp are assigned here,
once, and the payload is validated against the schema of its type before the event exists.
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from event_pipeline.domain.events.versioning import EventVersionRegistry, default_registry
from event_pipeline.domain.exceptions import SchemaValidationError, UnknownEventTypeError
from event_pipeline.domain.models.event import CURRENT_EVENT_VERSION, DomainEvent, EventType
from event_pipeline.domain.schemas.payloads import PAYLOAD_SCHEMAS, EventPayload

_TIMESTAMP = TypeAdapter(datetime)


def parse_event_type(value: Union[str, EventType]) -> EventType:
    """Map a type tag to the closed catalogue. Raises UnknownEventTypeError."""
    if isinstance(value, EventType):
        return value
    try:
        return EventType(value)
    except ValueError:
        raise UnknownEventTypeError(str(value)) from None


def coerce_timestamp(value: Any) -> Optional[datetime]:
    """Unix ms, unix seconds, ISO-8601 or datetime to an aware UTC datetime. Raises SchemaValidationError."""
    if value is None:
        return None
    try:
        timestamp = _TIMESTAMP.validate_python(value)
    except ValidationError:
        raise SchemaValidationError(f"Invalid timestamp: {value!r}", fields=["timestamp"]) from None
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp


def _coerce_metadata(value: Any) -> dict:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise SchemaValidationError(
            f"Invalid metadata: expected an object, got {type(value).__name__}",
            fields=["metadata"],
        )
    return dict(value)


def _field_paths(exc: ValidationError) -> List[str]:
    paths = []
    for err in exc.errors():
        path = ".".join(str(part) for part in err["loc"]) or "payload"
        if path not in paths:
            paths.append(path)
    return paths


def validate_payload(event_type: EventType, payload: Any) -> EventPayload:
    """Validate a raw payload for event_type. Raises SchemaValidationError naming offending fields."""
    schema = PAYLOAD_SCHEMAS[event_type]
    if isinstance(payload, schema):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(by_alias=True)
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        fields = _field_paths(exc)
        raise SchemaValidationError(
            f"Invalid payload for {event_type.value}: {', '.join(fields)}",
            fields=fields,
        ) from exc


def create_event(
    event_type: Union[str, EventType],
    payload: Any,
    *,
    correlation_id: Optional[str] = None,
    causation_id: Optional[str] = None,
    metadata: Optional[Mapping[str, Any]] = None,
) -> DomainEvent:
    """Build a new DomainEvent with a fresh id and the current time."""
    kind = parse_event_type(event_type)
    return DomainEvent(
        id=str(uuid.uuid4()),
        type=kind,
        payload=validate_payload(kind, payload),
        timestamp=datetime.now(timezone.utc),
        version=CURRENT_EVENT_VERSION,
        correlation_id=correlation_id,
        causation_id=causation_id,
        metadata=metadata or {},
    )


def rehydrate(
    *,
    event_id: str,
    event_type: str,
    payload: Any,
    timestamp: Any = None,
    version: str = CURRENT_EVENT_VERSION,
    correlation_id: Optional[str] = None,
    causation_id: Optional[str] = None,
    metadata: Any = None,
    versions: Optional[EventVersionRegistry] = None,
) -> DomainEvent:
    """
    Rebuild a DomainEvent received over the wire, keeping its id and timestamp.
    Older payload versions are migrated to the current one before validation.
    """
    kind = parse_event_type(event_type)
    registry = versions or default_registry
    meta = _coerce_metadata(metadata)
    timestamp = coerce_timestamp(timestamp)
    if version != CURRENT_EVENT_VERSION and registry.has_migrations(kind.value) and isinstance(payload, dict):
        payload = registry.migrate_payload(kind.value, payload, version, CURRENT_EVENT_VERSION)
        meta["originalVersion"] = version
        meta["migratedAt"] = int(time.time() * 1000)
        version = CURRENT_EVENT_VERSION
    return DomainEvent(
        id=event_id,
        type=kind,
        payload=validate_payload(kind, payload),
        timestamp=timestamp or datetime.now(timezone.utc),
        version=version,
        correlation_id=correlation_id,
        causation_id=causation_id,
        metadata=meta,
    )


def _factory(event_type: EventType) -> Callable[..., DomainEvent]:
    def factory(
        payload: Any,
        *,
        correlation_id: Optional[str] = None,
        causation_id: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> DomainEvent:
        return create_event(
            event_type,
            payload,
            correlation_id=correlation_id,
            causation_id=causation_id,
            metadata=metadata,
        )

    factory.__name__ = f"create_{event_type.name.lower()}_event"
    factory.__doc__ = f"Create a validated '{event_type.value}' event."
    return factory


create_donation_completed_event = _factory(EventType.DONATION_COMPLETED)

create_campaign_created_event = _factory(EventType.CAMPAIGN_CREATED)
create_campaign_updated_event = _factory(EventType.CAMPAIGN_UPDATED)
create_campaign_deleted_event = _factory(EventType.CAMPAIGN_DELETED)
create_campaign_goal_reached_event = _factory(EventType.CAMPAIGN_GOAL_REACHED)
create_campaign_status_changed_event = _factory(EventType.CAMPAIGN_STATUS_CHANGED)

create_user_registered_event = _factory(EventType.USER_REGISTERED)
create_user_logged_in_event = _factory(EventType.USER_LOGGED_IN)
create_user_profile_updated_event = _factory(EventType.USER_PROFILE_UPDATED)

create_organization_created_event = _factory(EventType.ORGANIZATION_CREATED)
create_organization_verified_event = _factory(EventType.ORGANIZATION_VERIFIED)
create_organization_rejected_event = _factory(EventType.ORGANIZATION_REJECTED)
create_organization_updated_event = _factory(EventType.ORGANIZATION_UPDATED)

create_admin_user_suspended_event = _factory(EventType.ADMIN_USER_SUSPENDED)
create_admin_user_unsuspended_event = _factory(EventType.ADMIN_USER_UNSUSPENDED)
create_admin_user_profile_updated_event = _factory(EventType.ADMIN_USER_PROFILE_UPDATED)
create_admin_user_deleted_event = _factory(EventType.ADMIN_USER_DELETED)
create_admin_user_role_assigned_event = _factory(EventType.ADMIN_USER_ROLE_ASSIGNED)
create_admin_user_role_revoked_event = _factory(EventType.ADMIN_USER_ROLE_REVOKED)

create_admin_campaign_approved_event = _factory(EventType.ADMIN_CAMPAIGN_APPROVED)
create_admin_campaign_rejected_event = _factory(EventType.ADMIN_CAMPAIGN_REJECTED)
create_admin_campaign_paused_event = _factory(EventType.ADMIN_CAMPAIGN_PAUSED)
create_admin_campaign_closed_event = _factory(EventType.ADMIN_CAMPAIGN_CLOSED)

create_admin_role_created_event = _factory(EventType.ADMIN_ROLE_CREATED)
create_admin_role_permissions_updated_event = _factory(EventType.ADMIN_ROLE_PERMISSIONS_UPDATED)
