"""
Availability Kernel API — FastAPI endpoints.

Exposes the kernel's functionality via a REST API for:
- One-off availability evaluation
- Collection management
- Active-subset queries and diffs
"""

import logging
from datetime import datetime
from typing import List, Optional, Union

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import AwareDatetime, BaseModel

from availability_kernel.collection.store import TimeLimitedCollection
from availability_kernel.models.entity import TimeLimitedEntity
from availability_kernel.models.errors import InvalidArgument, InvalidArgumentReason
from availability_kernel.models.interval import Interval
from availability_kernel.models.policy import AvailabilityPolicy

logger = logging.getLogger(__name__)


# --- Request/Response Models ---

class IntervalRequest(BaseModel):
    start: Optional[AwareDatetime] = None
    end: Optional[AwareDatetime] = None
    activate: Optional[bool] = None


class EntityRequest(BaseModel):
    identifier: Union[int, str]
    intervals: List[IntervalRequest] = []
    policy: AvailabilityPolicy = AvailabilityPolicy()


class EvaluateRequest(EntityRequest):
    at: Optional[AwareDatetime] = None


def _now() -> datetime:
    return datetime.now().astimezone()


def _build_entity(req: EntityRequest) -> TimeLimitedEntity:
    """Validate a request payload into an entity."""
    try:
        intervals = [
            Interval.make(start=i.start, end=i.end, activate=i.activate)
            for i in req.intervals
        ]
        return TimeLimitedEntity.make(intervals, req.identifier, req.policy)
    except InvalidArgument as e:
        logger.info("Rejected entity %r: %s", req.identifier, e.detail)
        raise


def _entity_json(entity: TimeLimitedEntity, at: Optional[datetime] = None) -> dict:
    data = entity.model_dump(mode="json")
    if at is not None:
        data["available"] = entity.is_available(at)
    return data


# --- Application Factory ---

def create_app(collection: Optional[TimeLimitedCollection] = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Availability Kernel API",
        description="Time-limited content availability",
        version="0.1.0",
    )

    entities = collection if collection is not None else TimeLimitedCollection()
    app.state.collection = entities

    @app.exception_handler(InvalidArgument)
    async def invalid_argument(request: Request, exc: InvalidArgument):
        """Validation failures are client errors; duplicates are conflicts."""
        status = 409 if exc.reason == InvalidArgumentReason.DUPLICATE_IDENTIFIER else 422
        return JSONResponse(status_code=status, content={"detail": exc.to_dict()})

    def _lookup(identifier: str) -> TimeLimitedEntity:
        # Path parameters are strings; integer identifiers are tried as well.
        entity = entities.get(identifier)
        if entity is None:
            try:
                entity = entities.get(int(identifier))
            except ValueError:
                pass
        if entity is None:
            raise HTTPException(404, "Entity not found")
        return entity

    # === EVALUATION ===

    @app.post("/evaluate")
    def evaluate(req: EvaluateRequest):
        """Evaluate an entity without storing it."""
        entity = _build_entity(req)
        decision = entity.explain(req.at or _now())
        return decision.model_dump(mode="json")

    # === COLLECTION ===

    @app.get("/entities")
    def list_entities():
        return [e.model_dump(mode="json") for e in entities]

    @app.post("/entities")
    def add_entity(req: EntityRequest):
        entity = _build_entity(req)
        entities.add(entity)
        return {"status": "added", "identifier": entity.identifier}

    @app.post("/entities/refresh")
    def refresh_entities():
        """Reload the collection from its backing source."""
        try:
            count = entities.refresh()
        except RuntimeError as e:
            raise HTTPException(409, str(e))
        return {"status": "refreshed", "count": count}

    @app.get("/entities/active")
    def active_entities(at: Optional[AwareDatetime] = None):
        """Entities available at `at` (default: now)."""
        moment = at or _now()
        return [_entity_json(e, moment) for e in entities.active_values(moment)]

    @app.get("/entities/changes")
    def active_changes(old: AwareDatetime, now: Optional[AwareDatetime] = None):
        """Which entities switched on or off between `old` and `now`."""
        change = entities.active_changes(old, now or _now())
        return {
            "old": change.old.isoformat(),
            "now": change.now.isoformat(),
            "changed": change.changed,
            "activated": sorted(change.activated, key=repr),
            "deactivated": sorted(change.deactivated, key=repr),
        }

    @app.get("/entities/{identifier}")
    def get_entity(identifier: str, at: Optional[AwareDatetime] = None):
        return _entity_json(_lookup(identifier), at)

    @app.delete("/entities/{identifier}")
    def delete_entity(identifier: str):
        entity = _lookup(identifier)
        entities.remove(entity.identifier)
        return {"status": "removed", "identifier": entity.identifier}

    return app
