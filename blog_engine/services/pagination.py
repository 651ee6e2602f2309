# blog_engine/services/pagination.py
"""
Offset and cursor (keyset) pagination over an already filtered and sorted sequence.

A cursor is the base64 encoding of a record id. Resuming after a cursor
whose record is no longer in the sequence is an error rather than a silent
restart, so walking pages never skips or repeats a record.
"""

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from blog_engine.config import DEFAULT_PAGE_SIZE
from blog_engine.errors import InvalidCursorError, InvalidInputError


@dataclass
class PageInfo:
    has_next_page: bool
    has_previous_page: bool
    start_cursor: Optional[str]
    end_cursor: Optional[str]
    total_count: int


@dataclass
class Edge:
    node: Any
    cursor: str


@dataclass
class Connection:
    """Paginated envelope: edges plus page metadata."""
    edges: List[Edge] = field(default_factory=list)
    page_info: Optional[PageInfo] = None

    @property
    def nodes(self) -> List[Any]:
        return [edge.node for edge in self.edges]


def encode_cursor(record_id: str) -> str:
    return base64.b64encode(record_id.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> str:
    """
    Decode a cursor back to the record id it was built from.

    Raises:
        InvalidCursorError: if the cursor is not base64-encoded UTF-8
    """
    try:
        return base64.b64decode(cursor.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, UnicodeEncodeError, ValueError):
        raise InvalidCursorError(cursor, "not a valid cursor encoding")


def check_limit(value: Optional[int], field_name: str) -> None:
    if value is not None and value < 0:
        raise InvalidInputError(f"{field_name} must be non-negative, got {value}", field_name=field_name)


def paginate_offset(items: Sequence[Any], limit: Optional[int] = None, offset: Optional[int] = None) -> List[Any]:
    """
    Slice `items[offset : offset + limit]`.

    Args:
        items: Filtered and sorted records
        limit: Page size; None means no limit
        offset: Records to skip (default 0)

    Returns:
        The requested slice as a new list
    """
    check_limit(limit, "limit")
    check_limit(offset, "offset")
    start = offset or 0
    end = None if limit is None else start + limit
    return list(items[start:end])


def paginate_cursor(items: Sequence[Any], first: Optional[int] = None, after: Optional[str] = None) -> Connection:
    """
    Return the `first` records that follow the `after` cursor.

    Args:
        items: Filtered and sorted records (each with an `id`)
        first: Page size (default DEFAULT_PAGE_SIZE)
        after: Cursor of the last record of the previous page

    Returns:
        Connection with edges and page info; total_count is len(items)

    Raises:
        InvalidCursorError: if `after` does not decode to an id present in `items`
    """
    check_limit(first, "first")
    size = DEFAULT_PAGE_SIZE if first is None else first

    start = 0
    if after:
        after_id = decode_cursor(after)
        position = next((i for i, item in enumerate(items) if item.id == after_id), None)
        if position is None:
            raise InvalidCursorError(after, f"record {after_id} is not in the current result set")
        start = position + 1

    page = items[start:start + size]
    edges = [Edge(node=item, cursor=encode_cursor(item.id)) for item in page]

    return Connection(
        edges=edges,
        page_info=PageInfo(
            has_next_page=len(items) > start + size,
            has_previous_page=start > 0,
            start_cursor=edges[0].cursor if edges else None,
            end_cursor=edges[-1].cursor if edges else None,
            total_count=len(items),
        ),
    )
