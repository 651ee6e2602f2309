"""
JSON rendering of engine results.

Records, connections and report dataclasses become plain dicts with
camelCase keys; enum members render as their values.
"""

from dataclasses import fields, is_dataclass
from enum import Enum as PyEnum
from typing import Any, Dict

from pydantic.alias_generators import to_camel


def serialize(value: Any) -> Any:
    if value is None:
        return None
    if is_dataclass(value) and not isinstance(value, type):
        return {to_camel(f.name): serialize(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, PyEnum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [serialize(item) for item in value]
    if isinstance(value, dict):
        return {to_camel(str(key)): serialize(item) for key, item in value.items()}
    return value


def serialize_with(record: Any, **extra: Any) -> Dict[str, Any]:
    """Serialize a record and add computed fields (keys given in snake_case)."""
    data = serialize(record)
    data.update({to_camel(key): serialize(value) for key, value in extra.items()})
    return data


def serialize_thread(thread: Any) -> Dict[str, Any]:
    """
    Render a comment thread as a flat list, parents before their replies.

    Each entry carries its depth and parent id so clients can rebuild the
    tree; nesting the JSON itself would fail on long reply chains.
    """
    return {
        "postId": thread.post_id,
        "totalComments": thread.total_comments,
        "totalReplies": thread.total_replies,
        "maxDepth": thread.max_depth,
        "comments": [
            serialize_with(node.comment, depth=node.depth, reply_count=len(node.replies))
            for node in thread.walk()
        ],
    }
