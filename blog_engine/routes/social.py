# blog_engine/routes/social.py
"""FastAPI routes for likes, follows, bookmarks and notifications."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from blog_engine.models import Notification
from blog_engine.routes.deps import found, get_store
from blog_engine.schemas import BookmarkInput, CreateNotificationInput, FollowInput, LikeInput
from blog_engine.serializers import serialize, serialize_with
from blog_engine.services import notifications, query, relations, social
from blog_engine.store import Store

router = APIRouter(prefix="/social", tags=["social"])
notifications_router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/posts/{post_id}/like")
def like_post(post_id: str, data: LikeInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    """Like a post; liking again returns the existing like."""
    like = social.like_post(store, post_id, data.user_id)
    return serialize_with(like, user=relations.like_user(store, like), post=relations.like_post(store, like))


@router.delete("/posts/{post_id}/like")
def unlike_post(post_id: str, user_id: str = Query(...), store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(social.unlike_post(store, post_id, user_id))


@router.post("/comments/{comment_id}/like")
def like_comment(comment_id: str, data: LikeInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    like = social.like_comment(store, comment_id, data.user_id)
    return serialize_with(like, user=relations.like_user(store, like), comment=relations.like_comment(store, like))


@router.delete("/comments/{comment_id}/like")
def unlike_comment(comment_id: str, user_id: str = Query(...), store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(social.unlike_comment(store, comment_id, user_id))


@router.post("/follows")
def follow_user(data: FollowInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    follow = social.follow_user(store, data.follower_id, data.following_id)
    return serialize_with(
        follow,
        follower=relations.follow_follower(store, follow),
        following=relations.follow_following(store, follow),
    )


@router.delete("/follows")
def unfollow_user(
    follower_id: str = Query(...),
    following_id: str = Query(...),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    return serialize(social.unfollow_user(store, follower_id, following_id))


@router.post("/bookmarks")
def bookmark_post(data: BookmarkInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    bookmark = social.bookmark_post(store, data.user_id, data.post_id, note=data.note)
    return serialize_with(bookmark, user=relations.bookmark_user(store, bookmark), post=relations.bookmark_post(store, bookmark))


@router.delete("/bookmarks")
def remove_bookmark(
    user_id: str = Query(...),
    post_id: str = Query(...),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    return serialize(social.remove_bookmark(store, user_id, post_id))


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


def _notification_detail(store: Store, notification: Notification) -> Dict[str, Any]:
    return serialize_with(
        notification,
        user=relations.notification_user(store, notification),
        related_post=relations.notification_related_post(store, notification),
        related_user=relations.notification_related_user(store, notification),
    )


@notifications_router.get("")
def list_notifications(
    user_id: str = Query(..., description="Recipient"),
    unread_only: bool = False,
    limit: Optional[int] = Query(None, ge=0),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    """Notifications of a user, newest first, with the recipient, actor and post resolved."""
    return [
        _notification_detail(store, notification)
        for notification in query.list_notifications(store, user_id, unread_only=unread_only, limit=limit)
    ]


@notifications_router.post("", status_code=201)
def create_notification(data: CreateNotificationInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(notifications.create_notification(store, data))


@notifications_router.post("/read-all")
def mark_all_read(user_id: str = Query(...), store: Store = Depends(get_store)) -> Dict[str, int]:
    return {"count": notifications.mark_all_read(store, user_id)}


@notifications_router.post("/{notification_id}/read")
def mark_read(notification_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(notifications.mark_read(store, notification_id), "Notification", notification_id))


@notifications_router.delete("/{notification_id}")
def delete_notification(notification_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(notifications.delete_notification(store, notification_id))
