"""Differences between the active subsets of a collection at two instants."""

from datetime import datetime
from typing import FrozenSet, Hashable

from pydantic import BaseModel, ConfigDict


class ActiveSetChange(BaseModel):
    """Which identifiers became active or inactive between `old` and `now`."""

    model_config = ConfigDict(frozen=True)

    old: datetime
    now: datetime
    activated: FrozenSet[Hashable] = frozenset()
    deactivated: FrozenSet[Hashable] = frozenset()

    @property
    def changed(self) -> bool:
        return bool(self.activated or self.deactivated)
