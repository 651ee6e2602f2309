"""
In-memory entity store.

Holds one ordered collection per entity kind, the per-kind id counters and
the reverse indexes that back every relationship lookup.

Invariants:
    - Collection order is first-insertion order; replacing a record keeps its slot
    - Every reverse index reflects exactly the live records of its kind
    - An id handed out by IdGenerator is never handed out again
    - A transaction that raises leaves records and indexes as they were before it

How to change safely:
    - Add a relationship by registering an index in INDEXES, never by scanning
    - Records are frozen; replace them through put(), never mutate in place
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from blog_engine.models import EntityKind, RECORD_TYPES
from blog_engine.utils import format_timestamp, utcnow

logger = logging.getLogger(__name__)

KeyFunc = Callable[[Any], Iterable[Optional[str]]]

KIND_OF_TYPE = {record_type: kind for kind, record_type in RECORD_TYPES.items()}


def index_key(*parts: Any) -> str:
    """Join key parts (enum members by value) into a single index key."""
    return ":".join(str(getattr(part, "value", part)) for part in parts)


def _attr(name: str) -> KeyFunc:
    return lambda record: (getattr(record, name),)


def _many(name: str) -> KeyFunc:
    return lambda record: getattr(record, name)


def _composite(*names: str) -> KeyFunc:
    def keys(record: Any) -> Tuple[str, ...]:
        values = [getattr(record, name) for name in names]
        if any(value is None for value in values):
            return ()
        return (index_key(*values),)

    return keys


# Reverse indexes per kind: index name -> function yielding the keys a record is filed under
INDEXES: Dict[EntityKind, Dict[str, KeyFunc]] = {
    EntityKind.user: {
        "username": _attr("username"),
    },
    EntityKind.category: {
        "slug": _attr("slug"),
        "parent_id": _attr("parent_id"),
    },
    EntityKind.tag: {
        "slug": _attr("slug"),
    },
    EntityKind.post: {
        "slug": _attr("slug"),
        "author_id": _attr("author_id"),
        "category_id": _attr("category_id"),
        "tag_ids": _many("tag_ids"),
    },
    EntityKind.comment: {
        "post_id": _attr("post_id"),
        "author_id": _attr("author_id"),
        "parent_id": _attr("parent_id"),
    },
    EntityKind.like: {
        "user_id": _attr("user_id"),
        "target": _composite("target_type", "target_id"),
        "user_target": _composite("user_id", "target_type", "target_id"),
    },
    EntityKind.follow: {
        "follower_id": _attr("follower_id"),
        "following_id": _attr("following_id"),
        "pair": _composite("follower_id", "following_id"),
    },
    EntityKind.bookmark: {
        "user_id": _attr("user_id"),
        "post_id": _attr("post_id"),
        "user_post": _composite("user_id", "post_id"),
    },
    EntityKind.notification: {
        "user_id": _attr("user_id"),
        "related_post_id": _attr("related_post_id"),
        "related_user_id": _attr("related_user_id"),
    },
    EntityKind.media: {
        "uploader_id": _attr("uploader_id"),
    },
    EntityKind.audit_log: {
        "user_id": _attr("user_id"),
        "entity": _composite("entity_type", "entity_id"),
    },
}


class IdGenerator:
    """Per-kind monotonically increasing id counters."""

    def __init__(self) -> None:
        self._next: Dict[EntityKind, int] = {kind: 1 for kind in EntityKind}

    def generate(self, kind: EntityKind) -> str:
        value = self._next[kind]
        self._next[kind] = value + 1
        return str(value)

    def observe(self, kind: EntityKind, record_id: str) -> None:
        """Advance the counter past an id that was inserted directly (seed data)."""
        if record_id.isdigit():
            self._next[kind] = max(self._next[kind], int(record_id) + 1)

    def peek(self, kind: EntityKind) -> int:
        return self._next[kind]


class Collection:
    """Ordered id -> record mapping for one entity kind."""

    def __init__(self, kind: EntityKind) -> None:
        self.kind = kind
        self._records: Dict[str, Any] = {}
        self._positions: Dict[str, int] = {}
        self._seq = 0

    def get(self, record_id: str) -> Optional[Any]:
        return self._records.get(record_id)

    def all(self) -> List[Any]:
        return list(self._records.values())

    def position(self, record_id: str) -> int:
        return self._positions[record_id]

    def upsert(self, record: Any) -> Optional[Any]:
        """Insert or replace a record, returning the replaced one."""
        previous = self._records.get(record.id)
        # Reassigning an existing dict key keeps its place in iteration order
        self._records[record.id] = record
        if previous is None:
            self._positions[record.id] = self._seq
            self._seq += 1
        return previous

    def delete(self, record_id: str) -> Optional[Any]:
        previous = self._records.pop(record_id, None)
        if previous is not None:
            del self._positions[record_id]
        return previous

    def restore(self, record: Any, position: int) -> None:
        """Put a record back at an earlier position (rollback only)."""
        self._records[record.id] = record
        self._positions[record.id] = position
        self._records = dict(sorted(self._records.items(), key=lambda item: self._positions[item[0]]))

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._records.values()))


class ReverseIndex:
    """Maps a referenced key to the ids of the records filed under it."""

    def __init__(self, name: str, keys: KeyFunc) -> None:
        self.name = name
        self._keys = keys
        # key -> insertion-ordered set of record ids
        self._refs: Dict[str, Dict[str, None]] = {}
        # record id -> keys it is currently filed under
        self._filed: Dict[str, Tuple[str, ...]] = {}

    def add(self, record: Any) -> None:
        keys = tuple(dict.fromkeys(key for key in self._keys(record) if key is not None))
        self._filed[record.id] = keys
        for key in keys:
            self._refs.setdefault(key, {})[record.id] = None

    def discard(self, record_id: str) -> None:
        for key in self._filed.pop(record_id, ()):
            refs = self._refs.get(key)
            if refs is None:
                continue
            refs.pop(record_id, None)
            if not refs:
                del self._refs[key]

    def ids(self, key: str) -> List[str]:
        return list(self._refs.get(key, ()))

    def count(self, key: str) -> int:
        return len(self._refs.get(key, ()))

    def __contains__(self, key: object) -> bool:
        return key in self._refs


class Store:
    """
    All live records of one engine instance.

    One Store is built per process (or per test) and passed to every
    service function; nothing in the engine keeps module-level state.

    Args:
        clock: Callable returning the current datetime; tests pin it
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self.clock = clock
        self.ids = IdGenerator()
        self._collections: Dict[EntityKind, Collection] = {kind: Collection(kind) for kind in EntityKind}
        self._indexes: Dict[EntityKind, Dict[str, ReverseIndex]] = {
            kind: {name: ReverseIndex(name, keys) for name, keys in INDEXES.get(kind, {}).items()}
            for kind in EntityKind
        }
        self._lock = threading.RLock()
        # (kind, record id, previous record or None, previous position or None)
        self._journal: Optional[List[Tuple[EntityKind, str, Optional[Any], Optional[int]]]] = None

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator["Store"]:
        """
        Run one engine operation as a single critical section.

        Re-entrant: a nested transaction joins the outermost one. If the
        outermost block raises, every record change made inside it is undone
        before the exception propagates.
        """
        with self._lock:
            if self._journal is not None:
                yield self
                return
            self._journal = []
            try:
                yield self
            except Exception:
                self._rollback()
                raise
            finally:
                self._journal = None

    def _rollback(self) -> None:
        journal, self._journal = self._journal or [], None
        if journal:
            logger.warning("Rolling back %d store change(s)", len(journal))
        for kind, record_id, previous, position in reversed(journal):
            collection = self._collections[kind]
            if record_id in collection:
                self._unindex(kind, record_id)
                collection.delete(record_id)
            if previous is not None:
                collection.restore(previous, position)
                self._index(kind, previous)

    def _journal_change(self, kind: EntityKind, record_id: str) -> None:
        if self._journal is None:
            return
        collection = self._collections[kind]
        previous = collection.get(record_id)
        position = collection.position(record_id) if previous is not None else None
        self._journal.append((kind, record_id, previous, position))

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def now(self) -> str:
        return format_timestamp(self.clock())

    def new_id(self, kind: EntityKind) -> str:
        return self.ids.generate(kind)

    def collection(self, kind: EntityKind) -> Collection:
        return self._collections[kind]

    def get(self, kind: EntityKind, record_id: Optional[str]) -> Optional[Any]:
        if record_id is None:
            return None
        return self._collections[kind].get(record_id)

    def all(self, kind: EntityKind) -> List[Any]:
        return self._collections[kind].all()

    def count(self, kind: EntityKind) -> int:
        return len(self._collections[kind])

    def put(self, record: Any) -> Any:
        """Insert a record or replace the live record with the same id."""
        kind = KIND_OF_TYPE[type(record)]
        self._journal_change(kind, record.id)
        self._unindex(kind, record.id)
        self._collections[kind].upsert(record)
        self._index(kind, record)
        self.ids.observe(kind, record.id)
        return record

    def delete(self, kind: EntityKind, record_id: str) -> Optional[Any]:
        """Remove a record and retract it from every index; returns the removed record."""
        if record_id not in self._collections[kind]:
            return None
        self._journal_change(kind, record_id)
        self._unindex(kind, record_id)
        return self._collections[kind].delete(record_id)

    def _index(self, kind: EntityKind, record: Any) -> None:
        for index in self._indexes[kind].values():
            index.add(record)

    def _unindex(self, kind: EntityKind, record_id: str) -> None:
        for index in self._indexes[kind].values():
            index.discard(record_id)

    # ------------------------------------------------------------------
    # Reverse index lookups
    # ------------------------------------------------------------------

    def index(self, kind: EntityKind, name: str) -> ReverseIndex:
        return self._indexes[kind][name]

    def related(self, kind: EntityKind, index_name: str, key: Optional[str]) -> List[Any]:
        """Records of `kind` filed under `key`, in store order."""
        if key is None:
            return []
        collection = self._collections[kind]
        ids = sorted(self._indexes[kind][index_name].ids(key), key=collection.position)
        return [collection.get(record_id) for record_id in ids]

    def related_count(self, kind: EntityKind, index_name: str, key: Optional[str]) -> int:
        if key is None:
            return 0
        return self._indexes[kind][index_name].count(key)

    def first_related(self, kind: EntityKind, index_name: str, key: Optional[str]) -> Optional[Any]:
        records = self.related(kind, index_name, key)
        return records[0] if records else None
