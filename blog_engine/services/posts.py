# blog_engine/services/posts.py
"""
Post lifecycle mutations.

Keeps tag.usage_count in step with post.tag_ids and cascades post deletion
to comments, likes and bookmarks.
"""

import logging
from dataclasses import replace
from typing import Iterable, List, Optional

from blog_engine.models import EntityKind, Post, PostStatus, TargetType
from blog_engine.schemas import CreatePostInput, UpdatePostInput
from blog_engine.services.comments import remove_comments
from blog_engine.services.mutations import BulkResult, DeleteResult, adjust_counter, merge_fields, require
from blog_engine.store import Store, index_key
from blog_engine.utils import make_excerpt, normalize_timestamp, reading_time, slugify

logger = logging.getLogger(__name__)


def _require_tags(store: Store, tag_ids: Iterable[str]) -> None:
    for tag_id in tag_ids:
        require(store, EntityKind.tag, tag_id, "tag_ids")


def _adjust_tag_usage(store: Store, tag_ids: Iterable[str], delta: int) -> None:
    for tag_id in tag_ids:
        adjust_counter(store, EntityKind.tag, tag_id, "usage_count", delta)


def create_post(store: Store, data: CreatePostInput) -> Post:
    """
    Create a post and count it against each of its tags.

    Args:
        store: Entity store
        data: Validated post input

    Returns:
        The created post

    Raises:
        InvalidReferenceError: if the author, category or a tag does not exist
    """
    with store.transaction():
        require(store, EntityKind.user, data.author_id, "author_id")
        require(store, EntityKind.category, data.category_id, "category_id")
        _require_tags(store, data.tag_ids)

        now = store.now()
        post = store.put(Post(
            id=store.new_id(EntityKind.post),
            title=data.title,
            slug=slugify(data.title),
            excerpt=data.excerpt if data.excerpt is not None else make_excerpt(data.content),
            content=data.content,
            author_id=data.author_id,
            category_id=data.category_id,
            tag_ids=tuple(data.tag_ids),
            status=data.status,
            visibility=data.visibility,
            featured_image_url=data.featured_image_url,
            reading_time_minutes=reading_time(data.content),
            published_at=now if data.status == PostStatus.published else None,
            created_at=now,
            updated_at=now,
        ))
        _adjust_tag_usage(store, post.tag_ids, 1)

    logger.info("Created post %s (%s) by user %s", post.id, post.status.value, post.author_id)
    return post


def update_post(store: Store, post_id: str, data: UpdatePostInput) -> Optional[Post]:
    """
    Partially update a post.

    A new title re-derives the slug and new content the reading time. Tags
    dropped from the post lose one use and added tags gain one. Moving the
    post into the published state stamps published_at.
    """
    with store.transaction():
        post = store.get(EntityKind.post, post_id)
        if post is None:
            return None

        changes = data.model_dump(exclude_none=True)
        now = store.now()

        if "category_id" in changes:
            require(store, EntityKind.category, changes["category_id"], "category_id")
        if "title" in changes:
            changes["slug"] = slugify(changes["title"])
        if "content" in changes:
            changes["reading_time_minutes"] = reading_time(changes["content"])
        if "tag_ids" in changes:
            new_tags = tuple(changes["tag_ids"])
            _require_tags(store, new_tags)
            _adjust_tag_usage(store, [t for t in post.tag_ids if t not in new_tags], -1)
            _adjust_tag_usage(store, [t for t in new_tags if t not in post.tag_ids], 1)
            changes["tag_ids"] = new_tags
        if changes.get("status") == PostStatus.published and post.status != PostStatus.published:
            changes["published_at"] = now

        return store.put(merge_fields(post, changes, updated_at=now))


def _set_status(store: Store, post_id: str, status: PostStatus, now: Optional[str] = None, **fields) -> Optional[Post]:
    with store.transaction():
        post = store.get(EntityKind.post, post_id)
        if post is None:
            return None
        return store.put(replace(post, status=status, updated_at=now or store.now(), **fields))


def publish_post(store: Store, post_id: str) -> Optional[Post]:
    with store.transaction():
        now = store.now()
        return _set_status(store, post_id, PostStatus.published, now=now, published_at=now)


def unpublish_post(store: Store, post_id: str) -> Optional[Post]:
    """Back to draft; the publication date is cleared."""
    return _set_status(store, post_id, PostStatus.draft, published_at=None)


def schedule_post(store: Store, post_id: str, publish_at: str) -> Optional[Post]:
    """
    Mark a post for later publication.

    Raises:
        InvalidInputError: if publish_at is not an ISO-8601 timestamp
    """
    scheduled_at = normalize_timestamp(publish_at, field_name="publish_at")
    return _set_status(store, post_id, PostStatus.scheduled, scheduled_at=scheduled_at)


def archive_post(store: Store, post_id: str) -> Optional[Post]:
    return _set_status(store, post_id, PostStatus.archived)


def increment_view_count(store: Store, post_id: str) -> Optional[Post]:
    """Count one view; updated_at is left alone."""
    with store.transaction():
        return adjust_counter(store, EntityKind.post, post_id, "view_count", 1)


def remove_post(store: Store, post: Post) -> None:
    """
    Delete a post and everything that depends on it.

    Comments (with replies and their likes), likes on the post and bookmarks
    of it are deleted; its tags lose one use; notifications about the post
    keep existing without the post reference. Must run inside a store
    transaction.
    """
    comments = remove_comments(store, store.related(EntityKind.comment, "post_id", post.id))

    likes = store.related(EntityKind.like, "target", index_key(TargetType.post, post.id))
    for like in likes:
        store.delete(EntityKind.like, like.id)

    for bookmark in store.related(EntityKind.bookmark, "post_id", post.id):
        store.delete(EntityKind.bookmark, bookmark.id)

    for notification in store.related(EntityKind.notification, "related_post_id", post.id):
        store.put(replace(notification, related_post_id=None))

    _adjust_tag_usage(store, post.tag_ids, -1)
    store.delete(EntityKind.post, post.id)

    logger.debug("Deleted post %s with %d comment(s) and %d like(s)", post.id, len(comments), len(likes))


def delete_post(store: Store, post_id: str) -> DeleteResult:
    with store.transaction():
        post = store.get(EntityKind.post, post_id)
        if post is None:
            return DeleteResult(success=False, id=post_id)
        remove_post(store, post)
    return DeleteResult(success=True, id=post_id)


def bulk_delete_posts(store: Store, post_ids: List[str]) -> BulkResult:
    """Delete several posts with full cascade; unknown ids are skipped."""
    with store.transaction():
        deleted: List[str] = []
        for post_id in dict.fromkeys(post_ids):
            post = store.get(EntityKind.post, post_id)
            if post is None:
                continue
            remove_post(store, post)
            deleted.append(post_id)

    logger.info("Bulk deleted %d of %d post(s)", len(deleted), len(post_ids))
    return BulkResult.from_ids(deleted)


def bulk_publish_posts(store: Store, post_ids: List[str]) -> BulkResult:
    """
    Publish several posts at once.

    Every existing post gets status published and the same published_at and
    updated_at timestamp. Unknown ids are skipped and not reported.

    Args:
        store: Entity store
        post_ids: Ids to publish, in the order to report them

    Returns:
        BulkResult listing the ids actually published
    """
    with store.transaction():
        now = store.now()
        published: List[str] = []
        for post_id in dict.fromkeys(post_ids):
            post = store.get(EntityKind.post, post_id)
            if post is None:
                continue
            store.put(replace(post, status=PostStatus.published, published_at=now, updated_at=now))
            published.append(post_id)

    logger.info("Bulk published %d of %d post(s)", len(published), len(post_ids))
    return BulkResult.from_ids(published)
