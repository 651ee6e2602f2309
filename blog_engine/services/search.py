# blog_engine/services/search.py
"""Free-text search across posts, users, comments and tags."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from blog_engine.config import SEARCH_LIMIT_PER_TYPE
from blog_engine.errors import InvalidInputError
from blog_engine.models import Comment, CommentStatus, EntityKind, Post, PostStatus, Tag, User
from blog_engine.store import Store

SEARCH_TYPES = ("posts", "users", "comments", "tags")


@dataclass
class SearchResult:
    posts: List[Post] = field(default_factory=list)
    users: List[User] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)
    tags: List[Tag] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.posts) + len(self.users) + len(self.comments) + len(self.tags)


def _first_matches(records: Iterable[Any], matches: Callable[[Any], bool], limit: int) -> List[Any]:
    found: List[Any] = []
    for record in records:
        if len(found) >= limit:
            break
        if matches(record):
            found.append(record)
    return found


def _contains(needle: str, *values: Optional[str]) -> bool:
    return any(needle in value.lower() for value in values if value)


def search(store: Store, query: str, types: Optional[Sequence[str]] = None, limit: Optional[int] = None) -> SearchResult:
    """
    Case-insensitive substring search.

    Posts match on title or content (published only), users on name or
    username, comments on content (approved only) and tags on name. Each
    type yields at most `limit` matches in store order.

    Args:
        store: Entity store
        query: Text to look for, matched as given (surrounding spaces included)
        types: Subset of SEARCH_TYPES to search (default: all; an empty list searches none)
        limit: Matches per type (default SEARCH_LIMIT_PER_TYPE)

    Returns:
        SearchResult with the matches per type

    Raises:
        InvalidInputError: on an empty query, a negative limit or an unknown type
    """
    if not query or not query.strip():
        raise InvalidInputError("Search query must not be empty", field_name="query")

    needle = query.lower()
    wanted = list(SEARCH_TYPES) if types is None else list(types)
    unknown = [name for name in wanted if name not in SEARCH_TYPES]
    if unknown:
        raise InvalidInputError(
            f"Unknown search type(s): {', '.join(unknown)}; expected any of {', '.join(SEARCH_TYPES)}",
            field_name="types",
        )

    per_type = SEARCH_LIMIT_PER_TYPE if limit is None else limit
    if per_type < 0:
        raise InvalidInputError(f"limit must be non-negative, got {per_type}", field_name="limit")

    matchers: Dict[str, Callable[[Any], bool]] = {
        "posts": lambda p: p.status == PostStatus.published and _contains(needle, p.title, p.content),
        "users": lambda u: _contains(needle, u.name, u.username),
        "comments": lambda c: c.status == CommentStatus.approved and _contains(needle, c.content),
        "tags": lambda t: _contains(needle, t.name),
    }
    kinds = {
        "posts": EntityKind.post,
        "users": EntityKind.user,
        "comments": EntityKind.comment,
        "tags": EntityKind.tag,
    }

    result = SearchResult()
    with store.transaction():
        for name in dict.fromkeys(wanted):
            setattr(result, name, _first_matches(store.collection(kinds[name]), matchers[name], per_type))
    return result
