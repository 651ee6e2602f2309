# blog_engine/services/social.py
"""
Likes, follows and bookmarks.

Each of these is unique per (actor, target): repeating a like, follow or
bookmark returns the existing record and changes nothing. Liking adjusts the
target's like_count in the same transaction that creates or removes the Like.
"""

import logging
from typing import Optional

from blog_engine.errors import InvalidInputError
from blog_engine.models import Bookmark, EntityKind, Follow, Like, NotificationType, TargetType
from blog_engine.services.mutations import DeleteResult, adjust_counter, require
from blog_engine.services.notifications import notify
from blog_engine.store import Store, index_key

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Likes
# ---------------------------------------------------------------------------


def _like(store: Store, user_id: str, target_type: TargetType, target_kind: EntityKind, target_id: str) -> Like:
    with store.transaction():
        require(store, EntityKind.user, user_id, "user_id")
        target = require(store, target_kind, target_id, f"{target_kind.value}_id")

        existing = store.first_related(EntityKind.like, "user_target", index_key(user_id, target_type, target_id))
        if existing is not None:
            logger.debug("User %s already likes %s %s", user_id, target_type.value, target_id)
            return existing

        like = store.put(Like(
            id=store.new_id(EntityKind.like),
            user_id=user_id,
            target_type=target_type,
            target_id=target_id,
            created_at=store.now(),
        ))
        adjust_counter(store, target_kind, target_id, "like_count", 1)

        if target_type == TargetType.post:
            notify(
                store,
                user_id=target.author_id,
                notification_type=NotificationType.like,
                title="New like",
                message=f"Someone liked \"{target.title}\"",
                actor_id=user_id,
                related_post_id=target.id,
            )

    return like


def _unlike(store: Store, user_id: str, target_type: TargetType, target_kind: EntityKind, target_id: str) -> DeleteResult:
    with store.transaction():
        like = store.first_related(EntityKind.like, "user_target", index_key(user_id, target_type, target_id))
        if like is None:
            return DeleteResult(success=False, id="")
        store.delete(EntityKind.like, like.id)
        adjust_counter(store, target_kind, target_id, "like_count", -1)
        return DeleteResult(success=True, id=like.id)


def like_post(store: Store, post_id: str, user_id: str) -> Like:
    """
    Like a post and notify its author.

    Raises:
        InvalidReferenceError: if the user or post does not exist
    """
    return _like(store, user_id, TargetType.post, EntityKind.post, post_id)


def unlike_post(store: Store, post_id: str, user_id: str) -> DeleteResult:
    return _unlike(store, user_id, TargetType.post, EntityKind.post, post_id)


def like_comment(store: Store, comment_id: str, user_id: str) -> Like:
    return _like(store, user_id, TargetType.comment, EntityKind.comment, comment_id)


def unlike_comment(store: Store, comment_id: str, user_id: str) -> DeleteResult:
    return _unlike(store, user_id, TargetType.comment, EntityKind.comment, comment_id)


# ---------------------------------------------------------------------------
# Follows
# ---------------------------------------------------------------------------


def follow_user(store: Store, follower_id: str, following_id: str) -> Follow:
    """
    Follow another user and notify them.

    Raises:
        InvalidInputError: on an attempt to follow oneself
        InvalidReferenceError: if either user does not exist
    """
    if follower_id == following_id:
        raise InvalidInputError("Users cannot follow themselves", field_name="following_id")

    with store.transaction():
        follower = require(store, EntityKind.user, follower_id, "follower_id")
        require(store, EntityKind.user, following_id, "following_id")

        existing = store.first_related(EntityKind.follow, "pair", index_key(follower_id, following_id))
        if existing is not None:
            return existing

        follow = store.put(Follow(
            id=store.new_id(EntityKind.follow),
            follower_id=follower_id,
            following_id=following_id,
            created_at=store.now(),
        ))
        notify(
            store,
            user_id=following_id,
            notification_type=NotificationType.follow,
            title="New follower",
            message=f"{follower.name} started following you",
            actor_id=follower_id,
        )

    return follow


def unfollow_user(store: Store, follower_id: str, following_id: str) -> DeleteResult:
    with store.transaction():
        follow = store.first_related(EntityKind.follow, "pair", index_key(follower_id, following_id))
        if follow is None:
            return DeleteResult(success=False, id="")
        store.delete(EntityKind.follow, follow.id)
        return DeleteResult(success=True, id=follow.id)


# ---------------------------------------------------------------------------
# Bookmarks
# ---------------------------------------------------------------------------


def bookmark_post(store: Store, user_id: str, post_id: str, note: Optional[str] = None) -> Bookmark:
    with store.transaction():
        require(store, EntityKind.user, user_id, "user_id")
        require(store, EntityKind.post, post_id, "post_id")

        existing = store.first_related(EntityKind.bookmark, "user_post", index_key(user_id, post_id))
        if existing is not None:
            return existing

        return store.put(Bookmark(
            id=store.new_id(EntityKind.bookmark),
            user_id=user_id,
            post_id=post_id,
            note=note,
            created_at=store.now(),
        ))


def remove_bookmark(store: Store, user_id: str, post_id: str) -> DeleteResult:
    with store.transaction():
        bookmark = store.first_related(EntityKind.bookmark, "user_post", index_key(user_id, post_id))
        if bookmark is None:
            return DeleteResult(success=False, id="")
        store.delete(EntityKind.bookmark, bookmark.id)
        return DeleteResult(success=True, id=bookmark.id)
