# blog_engine/services/query.py
"""
Filter and sort engine plus the top-level list and lookup queries.

Every list query runs the same pipeline: candidates (store order, narrowed
through a reverse index when the filter names a foreign key) -> AND of
predicates -> stable sort -> pagination. Pagination is never applied before
sorting.
"""

from operator import attrgetter
from typing import Any, Callable, Dict, List, Optional, Sequence

from blog_engine.models import Category, Comment, EntityKind, Post, Tag, User
from blog_engine.schemas import (
    CommentFilter,
    PostFilter,
    PostSort,
    PostSortField,
    SortDirection,
    UserFilter,
    UserSort,
    UserSortField,
)
from blog_engine.services.pagination import Connection, paginate_cursor, paginate_offset
from blog_engine.store import Store

Predicate = Callable[[Any], bool]
SortKey = Callable[[Any], Any]


# ---------------------------------------------------------------------------
# Pipeline primitives
# ---------------------------------------------------------------------------


def apply_filters(records: Sequence[Any], predicates: Sequence[Predicate]) -> List[Any]:
    if not predicates:
        return list(records)
    return [record for record in records if all(check(record) for check in predicates)]


def stable_sort(records: Sequence[Any], key: SortKey, descending: bool = False) -> List[Any]:
    """
    Sort without disturbing the input order of records whose keys tie.

    `sorted(..., reverse=True)` keeps equal elements in input order, so a
    descending sort is stable too.
    """
    return sorted(records, key=key, reverse=descending)


def newest_first(records: Sequence[Any]) -> List[Any]:
    return stable_sort(records, attrgetter("created_at"), descending=True)


def oldest_first(records: Sequence[Any]) -> List[Any]:
    return stable_sort(records, attrgetter("created_at"))


def _matches_text(needle: str, *values: Optional[str]) -> bool:
    return any(needle in value.lower() for value in values if value)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def post_predicates(post_filter: Optional[PostFilter]) -> List[Predicate]:
    if post_filter is None:
        return []
    f = post_filter
    predicates: List[Predicate] = []

    if f.status is not None:
        predicates.append(lambda p: p.status == f.status)
    if f.visibility is not None:
        predicates.append(lambda p: p.visibility == f.visibility)
    if f.category_id is not None:
        predicates.append(lambda p: p.category_id == f.category_id)
    if f.author_id is not None:
        predicates.append(lambda p: p.author_id == f.author_id)
    if f.tag_ids:
        wanted = set(f.tag_ids)
        predicates.append(lambda p: not wanted.isdisjoint(p.tag_ids))
    if f.search:
        needle = f.search.lower()
        predicates.append(lambda p: _matches_text(needle, p.title, p.content, p.excerpt))
    # Bounds compare fixed-width UTC strings; posts never published match no bound
    if f.published_after is not None:
        predicates.append(lambda p: p.published_at is not None and p.published_at >= f.published_after)
    if f.published_before is not None:
        predicates.append(lambda p: p.published_at is not None and p.published_at <= f.published_before)
    if f.min_view_count is not None:
        predicates.append(lambda p: p.view_count >= f.min_view_count)
    if f.min_like_count is not None:
        predicates.append(lambda p: p.like_count >= f.min_like_count)

    return predicates


def user_predicates(user_filter: Optional[UserFilter]) -> List[Predicate]:
    if user_filter is None:
        return []
    f = user_filter
    predicates: List[Predicate] = []

    if f.role is not None:
        predicates.append(lambda u: u.role == f.role)
    if f.status is not None:
        predicates.append(lambda u: u.status == f.status)
    if f.search:
        needle = f.search.lower()
        predicates.append(lambda u: _matches_text(needle, u.name, u.username, u.email))
    if f.created_after is not None:
        predicates.append(lambda u: u.created_at >= f.created_after)
    if f.created_before is not None:
        predicates.append(lambda u: u.created_at <= f.created_before)

    return predicates


def comment_predicates(comment_filter: Optional[CommentFilter]) -> List[Predicate]:
    if comment_filter is None:
        return []
    f = comment_filter
    predicates: List[Predicate] = []

    if f.post_id is not None:
        predicates.append(lambda c: c.post_id == f.post_id)
    if f.author_id is not None:
        predicates.append(lambda c: c.author_id == f.author_id)
    if f.status is not None:
        predicates.append(lambda c: c.status == f.status)
    if f.top_level_only:
        predicates.append(lambda c: c.parent_id is None)
    elif f.parent_id is not None:
        predicates.append(lambda c: c.parent_id == f.parent_id)

    return predicates


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------

POST_SORT_KEYS: Dict[PostSortField, SortKey] = {
    PostSortField.CREATED_AT: attrgetter("created_at"),
    PostSortField.UPDATED_AT: attrgetter("updated_at"),
    PostSortField.PUBLISHED_AT: lambda p: p.published_at or "",
    PostSortField.VIEW_COUNT: attrgetter("view_count"),
    PostSortField.LIKE_COUNT: attrgetter("like_count"),
    PostSortField.COMMENT_COUNT: attrgetter("comment_count"),
    PostSortField.TITLE: lambda p: p.title.casefold(),
}


def user_sort_key(store: Store, field: UserSortField) -> SortKey:
    if field == UserSortField.NAME:
        return lambda u: u.name.casefold()
    if field == UserSortField.USERNAME:
        return lambda u: u.username.casefold()
    if field == UserSortField.POST_COUNT:
        return lambda u: store.related_count(EntityKind.post, "author_id", u.id)
    if field == UserSortField.FOLLOWER_COUNT:
        return lambda u: store.related_count(EntityKind.follow, "following_id", u.id)
    return attrgetter("created_at")


def sort_posts(posts: Sequence[Post], sort: Optional[PostSort]) -> List[Post]:
    """Sort posts; without an explicit sort the newest post comes first."""
    if sort is None:
        return newest_first(posts)
    return stable_sort(posts, POST_SORT_KEYS[sort.field], descending=sort.direction == SortDirection.DESC)


def sort_users(store: Store, users: Sequence[User], sort: Optional[UserSort]) -> List[User]:
    """Sort users; without an explicit sort store order is kept."""
    if sort is None:
        return list(users)
    return stable_sort(users, user_sort_key(store, sort.field), descending=sort.direction == SortDirection.DESC)


# ---------------------------------------------------------------------------
# Candidates
# ---------------------------------------------------------------------------


def _post_candidates(store: Store, post_filter: Optional[PostFilter]) -> List[Post]:
    if post_filter is not None:
        if post_filter.author_id is not None:
            return store.related(EntityKind.post, "author_id", post_filter.author_id)
        if post_filter.category_id is not None:
            return store.related(EntityKind.post, "category_id", post_filter.category_id)
    return store.all(EntityKind.post)


def _comment_candidates(store: Store, comment_filter: Optional[CommentFilter]) -> List[Comment]:
    if comment_filter is not None:
        if comment_filter.post_id is not None:
            return store.related(EntityKind.comment, "post_id", comment_filter.post_id)
        if comment_filter.parent_id is not None:
            return store.related(EntityKind.comment, "parent_id", comment_filter.parent_id)
        if comment_filter.author_id is not None:
            return store.related(EntityKind.comment, "author_id", comment_filter.author_id)
    return store.all(EntityKind.comment)


def filtered_posts(store: Store, post_filter: Optional[PostFilter] = None, sort: Optional[PostSort] = None) -> List[Post]:
    candidates = _post_candidates(store, post_filter)
    return sort_posts(apply_filters(candidates, post_predicates(post_filter)), sort)


def filtered_users(store: Store, user_filter: Optional[UserFilter] = None, sort: Optional[UserSort] = None) -> List[User]:
    candidates = store.all(EntityKind.user)
    return sort_users(store, apply_filters(candidates, user_predicates(user_filter)), sort)


def filtered_comments(store: Store, comment_filter: Optional[CommentFilter] = None) -> List[Comment]:
    candidates = _comment_candidates(store, comment_filter)
    return newest_first(apply_filters(candidates, comment_predicates(comment_filter)))


# ---------------------------------------------------------------------------
# Single-record lookups
# ---------------------------------------------------------------------------


def get_record(store: Store, kind: EntityKind, record_id: str) -> Optional[Any]:
    with store.transaction():
        return store.get(kind, record_id)


def get_user(store: Store, user_id: Optional[str] = None, username: Optional[str] = None) -> Optional[User]:
    with store.transaction():
        if user_id:
            return store.get(EntityKind.user, user_id)
        if username:
            return store.first_related(EntityKind.user, "username", username)
        return None


def _by_id_or_slug(store: Store, kind: EntityKind, record_id: Optional[str], slug: Optional[str]) -> Optional[Any]:
    with store.transaction():
        if record_id:
            return store.get(kind, record_id)
        if slug:
            return store.first_related(kind, "slug", slug)
        return None


def get_post(store: Store, post_id: Optional[str] = None, slug: Optional[str] = None) -> Optional[Post]:
    return _by_id_or_slug(store, EntityKind.post, post_id, slug)


def get_category(store: Store, category_id: Optional[str] = None, slug: Optional[str] = None) -> Optional[Category]:
    return _by_id_or_slug(store, EntityKind.category, category_id, slug)


def get_tag(store: Store, tag_id: Optional[str] = None, slug: Optional[str] = None) -> Optional[Tag]:
    return _by_id_or_slug(store, EntityKind.tag, tag_id, slug)


# ---------------------------------------------------------------------------
# List queries
# ---------------------------------------------------------------------------


def list_users(
    store: Store,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    user_filter: Optional[UserFilter] = None,
    sort: Optional[UserSort] = None,
) -> List[User]:
    with store.transaction():
        return paginate_offset(filtered_users(store, user_filter, sort), limit, offset)


def list_posts(
    store: Store,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    post_filter: Optional[PostFilter] = None,
    sort: Optional[PostSort] = None,
) -> List[Post]:
    with store.transaction():
        return paginate_offset(filtered_posts(store, post_filter, sort), limit, offset)


def list_comments(
    store: Store,
    comment_filter: Optional[CommentFilter] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[Comment]:
    with store.transaction():
        return paginate_offset(filtered_comments(store, comment_filter), limit, offset)


def list_categories(store: Store, parent_id: Optional[str] = None, roots_only: bool = False) -> List[Category]:
    """Categories ordered by sort_order; optionally only roots or children of one parent."""
    with store.transaction():
        if roots_only:
            categories = [c for c in store.all(EntityKind.category) if c.parent_id is None]
        elif parent_id is not None:
            categories = store.related(EntityKind.category, "parent_id", parent_id)
        else:
            categories = store.all(EntityKind.category)
        return stable_sort(categories, attrgetter("sort_order"))


def list_tags(store: Store, limit: Optional[int] = None, order_by_usage: bool = False) -> List[Tag]:
    with store.transaction():
        tags = store.all(EntityKind.tag)
        if order_by_usage:
            tags = stable_sort(tags, attrgetter("usage_count"), descending=True)
        else:
            tags = stable_sort(tags, lambda t: t.name.casefold())
        return paginate_offset(tags, limit)


def list_notifications(store: Store, user_id: str, unread_only: bool = False, limit: Optional[int] = None) -> List[Any]:
    with store.transaction():
        notifications = store.related(EntityKind.notification, "user_id", user_id)
        if unread_only:
            notifications = [n for n in notifications if not n.read]
        return paginate_offset(newest_first(notifications), limit)


def list_media(store: Store, uploader_id: Optional[str] = None, limit: Optional[int] = None) -> List[Any]:
    with store.transaction():
        if uploader_id is not None:
            media = store.related(EntityKind.media, "uploader_id", uploader_id)
        else:
            media = store.all(EntityKind.media)
        return paginate_offset(newest_first(media), limit)


def list_audit_logs(
    store: Store,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Any]:
    with store.transaction():
        logs = store.all(EntityKind.audit_log)
        if entity_type is not None:
            logs = [log for log in logs if log.entity_type == entity_type]
        if entity_id is not None:
            logs = [log for log in logs if log.entity_id == entity_id]
        return paginate_offset(newest_first(logs), limit)


# ---------------------------------------------------------------------------
# Connections
# ---------------------------------------------------------------------------


def posts_connection(
    store: Store,
    first: Optional[int] = None,
    after: Optional[str] = None,
    post_filter: Optional[PostFilter] = None,
    sort: Optional[PostSort] = None,
) -> Connection:
    with store.transaction():
        return paginate_cursor(filtered_posts(store, post_filter, sort), first, after)


def users_connection(
    store: Store,
    first: Optional[int] = None,
    after: Optional[str] = None,
    user_filter: Optional[UserFilter] = None,
    sort: Optional[UserSort] = None,
) -> Connection:
    """Users connection; without an explicit sort users are ordered by name."""
    with store.transaction():
        users = filtered_users(store, user_filter, sort or UserSort(field=UserSortField.NAME))
        return paginate_cursor(users, first, after)


def comments_connection(
    store: Store,
    first: Optional[int] = None,
    after: Optional[str] = None,
    comment_filter: Optional[CommentFilter] = None,
) -> Connection:
    with store.transaction():
        return paginate_cursor(filtered_comments(store, comment_filter), first, after)
