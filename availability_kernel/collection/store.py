"""
Time-Limited Collection — holds many entities and answers "what is active".

Updated by: refresh() from a loader, or add/upsert/remove
Queried by: whatever decides which content to surface

Behavioral Contract:
- Identifiers are unique within the collection.
- Bounded entities all use naive, or all use timezone-aware, datetimes.
- Mutation is serialized by a single lock; readers work on snapshots.
- A failed refresh leaves the previous contents in place.
"""

import logging
import threading
from datetime import datetime
from typing import (
    Callable,
    Dict,
    FrozenSet,
    Hashable,
    Iterable,
    Iterator,
    List,
    Optional,
    Tuple,
)

from availability_kernel.models.collection import ActiveSetChange
from availability_kernel.models.entity import TimeLimitedEntity
from availability_kernel.models.errors import InvalidArgument, InvalidArgumentReason

logger = logging.getLogger(__name__)

Loader = Callable[[], Iterable[TimeLimitedEntity]]


class TimeLimitedCollection:
    """
    In-memory collection of time-limited entities keyed by identifier.
    The backing source, if any, is reached through `loader`.
    """

    def __init__(
        self,
        entities: Optional[Iterable[TimeLimitedEntity]] = None,
        loader: Optional[Loader] = None,
    ):
        self._lock = threading.RLock()
        self._loader = loader
        self._entities: Dict[Hashable, TimeLimitedEntity] = self._index(
            entities or []
        )
        self._refreshed_at: Optional[datetime] = None

    @staticmethod
    def _check_timezone_kind(
        entity: TimeLimitedEntity, others: Iterable[TimeLimitedEntity]
    ) -> None:
        """All bounded entities must agree on naive vs timezone-aware bounds."""
        aware = entity.timezone_aware
        if aware is None:
            return
        for other in others:
            if other.timezone_aware not in (None, aware):
                raise InvalidArgument(
                    InvalidArgumentReason.MIXED_TIMEZONES,
                    f"Entity {entity.identifier!r} has "
                    f"{'timezone-aware' if aware else 'naive'} bounds, but "
                    f"entity {other.identifier!r} does not.",
                )

    @classmethod
    def _index(
        cls,
        entities: Iterable[TimeLimitedEntity],
    ) -> Dict[Hashable, TimeLimitedEntity]:
        indexed: Dict[Hashable, TimeLimitedEntity] = {}
        for entity in entities:
            if entity.identifier in indexed:
                raise InvalidArgument(
                    InvalidArgumentReason.DUPLICATE_IDENTIFIER,
                    f"Duplicate identifier: {entity.identifier!r}.",
                )
            cls._check_timezone_kind(entity, indexed.values())
            indexed[entity.identifier] = entity
        return indexed

    # --- Contents ---

    @property
    def values(self) -> Tuple[TimeLimitedEntity, ...]:
        """All entities, in insertion order."""
        with self._lock:
            return tuple(self._entities.values())

    @property
    def refreshed_at(self) -> Optional[datetime]:
        """When refresh() last succeeded, or None if it never ran."""
        return self._refreshed_at

    def __iter__(self) -> Iterator[TimeLimitedEntity]:
        return iter(self.values)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entities)

    def __contains__(self, identifier: Hashable) -> bool:
        with self._lock:
            return identifier in self._entities

    def get(self, identifier: Hashable) -> Optional[TimeLimitedEntity]:
        """Get a specific entity by identifier."""
        with self._lock:
            return self._entities.get(identifier)

    def add(self, entity: TimeLimitedEntity) -> None:
        """Add a new entity. Its identifier must not be taken."""
        with self._lock:
            if entity.identifier in self._entities:
                raise InvalidArgument(
                    InvalidArgumentReason.DUPLICATE_IDENTIFIER,
                    f"Duplicate identifier: {entity.identifier!r}.",
                )
            self._check_timezone_kind(entity, self._entities.values())
            self._entities[entity.identifier] = entity

    def upsert(self, entity: TimeLimitedEntity) -> None:
        """Insert an entity, or replace the one with the same identifier."""
        with self._lock:
            self._check_timezone_kind(
                entity,
                (e for e in self._entities.values()
                 if e.identifier != entity.identifier),
            )
            replaced = entity.identifier in self._entities
            self._entities[entity.identifier] = entity
        if replaced:
            logger.info("Replaced entity %r", entity.identifier)

    def remove(self, identifier: Hashable) -> bool:
        """Remove an entity from the collection."""
        with self._lock:
            if identifier in self._entities:
                del self._entities[identifier]
                return True
            return False

    def refresh(self) -> int:
        """
        Replace the contents with whatever the loader returns now.

        The new set is fully validated before it is swapped in. Returns the
        number of entities loaded.
        """
        if self._loader is None:
            raise RuntimeError("No loader configured for this collection.")

        try:
            loaded = self._index(self._loader())
        except InvalidArgument as e:
            logger.warning("Rejected refresh: %s", e.detail)
            raise

        with self._lock:
            self._entities = loaded
            self._refreshed_at = datetime.now().astimezone()

        logger.info("Refreshed collection with %d entities", len(loaded))
        return len(loaded)

    # --- Queries ---

    def active_values(self, now: datetime) -> List[TimeLimitedEntity]:
        """Entities available at `now`, in insertion order."""
        return [e for e in self.values if e.is_available(now)]

    def active_identifiers(self, now: datetime) -> FrozenSet[Hashable]:
        return frozenset(e.identifier for e in self.active_values(now))

    def active_changes(self, old: datetime, now: datetime) -> ActiveSetChange:
        """Which entities switched on or off between `old` and `now`."""
        snapshot = self.values
        then_ids = frozenset(e.identifier for e in snapshot if e.is_available(old))
        now_ids = frozenset(e.identifier for e in snapshot if e.is_available(now))
        return ActiveSetChange(
            old=old,
            now=now,
            activated=now_ids - then_ids,
            deactivated=then_ids - now_ids,
        )

    def active_values_changed(self, old: datetime, now: datetime) -> bool:
        """Whether the active subset at `old` differs from the one at `now`."""
        return self.active_changes(old, now).changed
