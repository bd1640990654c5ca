"""Payload schema evolution: registered migrations between versions, shortest path by BFS."""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from event_pipeline.domain.exceptions import EventVersionError

Migration = Callable[[Dict[str, Any]], Dict[str, Any]]


def _key(event_type: Any) -> str:
    # Accepts an EventType member or its wire value.
    return event_type.value if isinstance(event_type, Enum) else str(event_type)


@dataclass(frozen=True)
class VersionStep:
    from_version: str
    to_version: str
    migrate: Migration


class EventVersionRegistry:
    """Holds payload migrations per event type. Pure in-memory; populated at startup."""

    def __init__(self) -> None:
        self._steps: Dict[str, List[VersionStep]] = {}

    def register_migration(
        self,
        event_type: str,
        from_version: str,
        to_version: str,
        migrate: Migration,
    ) -> None:
        self._steps.setdefault(_key(event_type), []).append(
            VersionStep(from_version=from_version, to_version=to_version, migrate=migrate)
        )

    def has_migrations(self, event_type: str) -> bool:
        return bool(self._steps.get(_key(event_type)))

    def migrate_payload(
        self,
        event_type: str,
        payload: Dict[str, Any],
        from_version: str,
        to_version: str,
    ) -> Dict[str, Any]:
        """
        Apply the shortest chain of migrations from from_version to to_version.
        Types without registered migrations, or already at to_version, pass through unchanged.
        Raises EventVersionError when migrations exist but none connect the two versions.
        """
        if from_version == to_version or not self.has_migrations(event_type):
            return payload
        path = self._find_path(_key(event_type), from_version, to_version)
        if path is None:
            raise EventVersionError(
                f"No migration path found from {from_version} to {to_version} for {_key(event_type)}",
                fields=["version"],
            )
        for step in path:
            payload = step.migrate(payload)
        return payload

    def _find_path(self, event_type: str, start: str, target: str) -> Optional[List[VersionStep]]:
        steps = self._steps.get(event_type, [])
        queue: Deque[Tuple[str, List[VersionStep]]] = deque([(start, [])])
        visited = {start}
        while queue:
            version, path = queue.popleft()
            if version == target:
                return path
            for step in steps:
                if step.from_version == version and step.to_version not in visited:
                    visited.add(step.to_version)
                    queue.append((step.to_version, path + [step]))
        return None


default_registry = EventVersionRegistry()
