# blog_engine/services/mutations.py
"""Result types and helpers shared by the mutation services."""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional

from blog_engine.errors import InvalidReferenceError
from blog_engine.models import EntityKind
from blog_engine.store import Store

logger = logging.getLogger(__name__)


@dataclass
class DeleteResult:
    """Outcome of a single delete; `id` is empty when nothing matched."""
    success: bool
    id: str


@dataclass
class BulkResult:
    """Outcome of a bulk operation: the ids that were actually affected."""
    success: bool
    count: int
    ids: List[str] = field(default_factory=list)

    @classmethod
    def from_ids(cls, ids: List[str]) -> "BulkResult":
        return cls(success=bool(ids), count=len(ids), ids=ids)


def require(store: Store, kind: EntityKind, record_id: Optional[str], field_name: str) -> Any:
    """
    Fetch a record a write depends on.

    Raises:
        InvalidReferenceError: if the record does not exist
    """
    record = store.get(kind, record_id)
    if record is None:
        raise InvalidReferenceError(kind.value, record_id, field_name=field_name)
    return record


def adjust_counter(store: Store, kind: EntityKind, record_id: str, counter: str, delta: int) -> Optional[Any]:
    """
    Add `delta` to a denormalized counter on a live record.

    A counter that would go negative is clamped at zero and logged, since it
    means a cascade was missed somewhere.

    Returns:
        The updated record, or None if the record no longer exists
    """
    record = store.get(kind, record_id)
    if record is None:
        return None
    value = getattr(record, counter) + delta
    if value < 0:
        logger.warning(
            "Counter underflow on %s %s.%s (%d%+d); clamping at zero",
            kind.value, record_id, counter, getattr(record, counter), delta,
        )
        value = 0
    return store.put(replace(record, **{counter: value}))


def merge_fields(record: Any, changes: dict, **extra: Any) -> Any:
    """Partial update: apply the fields that were explicitly set, plus `extra`."""
    return replace(record, **{**changes, **extra})
