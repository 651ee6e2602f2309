# blog_engine/services/users.py
"""User account mutations."""

import logging
from dataclasses import replace
from typing import Optional

from blog_engine.models import EntityKind, TargetType, User, UserPreferences, UserStatus
from blog_engine.schemas import CreateUserInput, UpdatePreferencesInput, UpdateUserInput
from blog_engine.services.mutations import DeleteResult, adjust_counter, merge_fields
from blog_engine.store import Store

logger = logging.getLogger(__name__)

AVATAR_URL_TEMPLATE = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"

TARGET_KINDS = {
    TargetType.post: EntityKind.post,
    TargetType.comment: EntityKind.comment,
}


def create_user(store: Store, data: CreateUserInput) -> User:
    """New accounts start pending with default preferences and a generated avatar."""
    with store.transaction():
        now = store.now()
        user = store.put(User(
            id=store.new_id(EntityKind.user),
            username=data.username,
            email=data.email,
            name=data.name,
            bio=data.bio,
            avatar_url=AVATAR_URL_TEMPLATE.format(seed=data.username),
            role=data.role,
            status=UserStatus.pending,
            preferences=UserPreferences(),
            created_at=now,
            updated_at=now,
        ))

    logger.info("Created user %s (%s)", user.id, user.username)
    return user


def update_user(store: Store, user_id: str, data: UpdateUserInput) -> Optional[User]:
    with store.transaction():
        user = store.get(EntityKind.user, user_id)
        if user is None:
            return None
        return store.put(merge_fields(user, data.model_dump(exclude_none=True), updated_at=store.now()))


def update_preferences(store: Store, user_id: str, data: UpdatePreferencesInput) -> Optional[User]:
    with store.transaction():
        user = store.get(EntityKind.user, user_id)
        if user is None:
            return None
        preferences = replace(user.preferences, **data.model_dump(exclude_none=True))
        return store.put(replace(user, preferences=preferences, updated_at=store.now()))


def _set_status(store: Store, user_id: str, status: UserStatus) -> Optional[User]:
    with store.transaction():
        user = store.get(EntityKind.user, user_id)
        if user is None:
            return None
        return store.put(replace(user, status=status, updated_at=store.now()))


def suspend_user(store: Store, user_id: str) -> Optional[User]:
    return _set_status(store, user_id, UserStatus.suspended)


def activate_user(store: Store, user_id: str) -> Optional[User]:
    return _set_status(store, user_id, UserStatus.active)


def record_login(store: Store, user_id: str) -> Optional[User]:
    with store.transaction():
        user = store.get(EntityKind.user, user_id)
        if user is None:
            return None
        return store.put(replace(user, last_login_at=store.now()))


def delete_user(store: Store, user_id: str) -> DeleteResult:
    """
    Delete a user and the social records that only make sense with them.

    Removes follows in both directions, the user's likes (adjusting the
    liked targets' counters), bookmarks and received notifications.
    Notifications naming the user as actor lose that reference. Authored
    posts, comments and media are kept; their author resolves to None.
    """
    with store.transaction():
        if store.get(EntityKind.user, user_id) is None:
            return DeleteResult(success=False, id=user_id)

        follows = (
            store.related(EntityKind.follow, "follower_id", user_id)
            + store.related(EntityKind.follow, "following_id", user_id)
        )
        for follow in follows:
            store.delete(EntityKind.follow, follow.id)

        likes = store.related(EntityKind.like, "user_id", user_id)
        for like in likes:
            store.delete(EntityKind.like, like.id)
            adjust_counter(store, TARGET_KINDS[like.target_type], like.target_id, "like_count", -1)

        for bookmark in store.related(EntityKind.bookmark, "user_id", user_id):
            store.delete(EntityKind.bookmark, bookmark.id)

        for notification in store.related(EntityKind.notification, "user_id", user_id):
            store.delete(EntityKind.notification, notification.id)

        for notification in store.related(EntityKind.notification, "related_user_id", user_id):
            store.put(replace(notification, related_user_id=None))

        store.delete(EntityKind.user, user_id)

    logger.info("Deleted user %s with %d follow(s) and %d like(s)", user_id, len(follows), len(likes))
    return DeleteResult(success=True, id=user_id)
