# blog_engine/services/notifications.py
"""
Notification service.

Creates notifications for social actions (likes, comments, follows) and
handles read-state management.
"""

import logging
from dataclasses import replace
from typing import Optional

from blog_engine.models import EntityKind, Notification, NotificationType
from blog_engine.schemas import CreateNotificationInput
from blog_engine.services.mutations import DeleteResult, require
from blog_engine.store import Store

logger = logging.getLogger(__name__)


def notify(
    store: Store,
    user_id: str,
    notification_type: NotificationType,
    title: str,
    message: str,
    actor_id: Optional[str] = None,
    related_post_id: Optional[str] = None,
) -> Optional[Notification]:
    """
    Notify a user about something another user did.

    Args:
        store: Entity store
        user_id: Recipient
        notification_type: Kind of event
        title: Short headline
        message: Body text
        actor_id: User who triggered the event (stored as related_user_id)
        related_post_id: Post the event concerns, if any

    Returns:
        Created notification, or None if skipped (self-action or unknown recipient)
    """
    if actor_id is not None and actor_id == user_id:
        logger.debug("Skipping self-notification for user %s", user_id)
        return None

    with store.transaction():
        if store.get(EntityKind.user, user_id) is None:
            logger.debug("Skipping notification for missing user %s", user_id)
            return None

        notification = store.put(Notification(
            id=store.new_id(EntityKind.notification),
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            created_at=store.now(),
            related_post_id=related_post_id,
            related_user_id=actor_id,
        ))

    logger.debug("Created %s notification %s for user %s", notification_type.value, notification.id, user_id)
    return notification


def create_notification(store: Store, data: CreateNotificationInput) -> Notification:
    """Create a notification directly (system messages, mentions)."""
    with store.transaction():
        require(store, EntityKind.user, data.user_id, "user_id")
        if data.related_post_id is not None:
            require(store, EntityKind.post, data.related_post_id, "related_post_id")
        if data.related_user_id is not None:
            require(store, EntityKind.user, data.related_user_id, "related_user_id")

        return store.put(Notification(
            id=store.new_id(EntityKind.notification),
            user_id=data.user_id,
            type=data.type,
            title=data.title,
            message=data.message,
            created_at=store.now(),
            related_post_id=data.related_post_id,
            related_user_id=data.related_user_id,
        ))


def mark_read(store: Store, notification_id: str) -> Optional[Notification]:
    with store.transaction():
        notification = store.get(EntityKind.notification, notification_id)
        if notification is None:
            return None
        return store.put(replace(notification, read=True))


def mark_all_read(store: Store, user_id: str) -> int:
    """
    Mark every unread notification of a user as read.

    Returns:
        Number of notifications that changed state
    """
    with store.transaction():
        count = 0
        for notification in store.related(EntityKind.notification, "user_id", user_id):
            if not notification.read:
                store.put(replace(notification, read=True))
                count += 1
        return count


def delete_notification(store: Store, notification_id: str) -> DeleteResult:
    with store.transaction():
        removed = store.delete(EntityKind.notification, notification_id)
        return DeleteResult(success=removed is not None, id=notification_id)
