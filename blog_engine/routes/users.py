# blog_engine/routes/users.py
"""FastAPI routes for users and their relationships."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from blog_engine.models import PostStatus, Role, UserStatus
from blog_engine.routes.deps import found, get_store
from blog_engine.schemas import (
    CreateUserInput,
    SortDirection,
    UpdatePreferencesInput,
    UpdateUserInput,
    UserFilter,
    UserSort,
    UserSortField,
)
from blog_engine.serializers import serialize, serialize_with
from blog_engine.services import query, relations, reports, users
from blog_engine.store import Store

router = APIRouter(prefix="/users", tags=["users"])


def user_filter(
    role: Optional[Role] = Query(None, description="Exact role"),
    status: Optional[UserStatus] = Query(None, description="Exact account status"),
    search: Optional[str] = Query(None, description="Substring of name, username or email"),
    created_after: Optional[str] = Query(None, description="Inclusive lower bound (ISO-8601)"),
    created_before: Optional[str] = Query(None, description="Inclusive upper bound (ISO-8601)"),
) -> UserFilter:
    return UserFilter(
        role=role,
        status=status,
        search=search,
        created_after=created_after,
        created_before=created_before,
    )


def user_sort(
    sort: Optional[UserSortField] = Query(None, description="Sort field"),
    direction: SortDirection = Query(SortDirection.ASC, description="Sort direction"),
) -> Optional[UserSort]:
    return UserSort(field=sort, direction=direction) if sort is not None else None


def user_detail(store: Store, user) -> Dict[str, Any]:
    return serialize_with(
        user,
        post_count=relations.user_post_count(store, user),
        follower_count=relations.user_follower_count(store, user),
        following_count=relations.user_following_count(store, user),
    )


@router.get("")
def list_users(
    limit: Optional[int] = Query(None, ge=0),
    offset: Optional[int] = Query(None, ge=0),
    filters: UserFilter = Depends(user_filter),
    sort: Optional[UserSort] = Depends(user_sort),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    """List users in store order unless a sort is given."""
    return serialize(query.list_users(store, limit=limit, offset=offset, user_filter=filters, sort=sort))


@router.get("/connection")
def users_connection(
    first: Optional[int] = Query(None, ge=0, description="Page size (default 10)"),
    after: Optional[str] = Query(None, description="endCursor of the previous page"),
    filters: UserFilter = Depends(user_filter),
    sort: Optional[UserSort] = Depends(user_sort),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    """Cursor-paginated users, ordered by name unless a sort is given."""
    return serialize(query.users_connection(store, first=first, after=after, user_filter=filters, sort=sort))


@router.get("/by-username/{username}")
def get_user_by_username(username: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    user = found(query.get_user(store, username=username), "User", username)
    return user_detail(store, user)


@router.get("/{user_id}")
def get_user(user_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    user = found(query.get_user(store, user_id=user_id), "User", user_id)
    return user_detail(store, user)


@router.get("/{user_id}/posts")
def get_user_posts(
    user_id: str,
    status: Optional[PostStatus] = None,
    limit: Optional[int] = Query(None, ge=0),
    offset: Optional[int] = Query(None, ge=0),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    user = found(query.get_user(store, user_id=user_id), "User", user_id)
    return serialize(relations.user_posts(store, user, status=status, limit=limit, offset=offset))


@router.get("/{user_id}/comments")
def get_user_comments(
    user_id: str,
    limit: Optional[int] = Query(None, ge=0),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    user = found(query.get_user(store, user_id=user_id), "User", user_id)
    return serialize(relations.user_comments(store, user, limit=limit))


@router.get("/{user_id}/bookmarks")
def get_user_bookmarks(user_id: str, store: Store = Depends(get_store)) -> List[Dict[str, Any]]:
    user = found(query.get_user(store, user_id=user_id), "User", user_id)
    return serialize(relations.user_bookmarks(store, user))


@router.get("/{user_id}/notifications")
def get_user_notifications(
    user_id: str,
    unread_only: bool = False,
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    user = found(query.get_user(store, user_id=user_id), "User", user_id)
    return serialize(relations.user_notifications(store, user, unread_only=unread_only))


@router.get("/{user_id}/followers")
def get_followers(user_id: str, store: Store = Depends(get_store)) -> List[Dict[str, Any]]:
    user = found(query.get_user(store, user_id=user_id), "User", user_id)
    return serialize(relations.user_followers(store, user))


@router.get("/{user_id}/following")
def get_following(user_id: str, store: Store = Depends(get_store)) -> List[Dict[str, Any]]:
    user = found(query.get_user(store, user_id=user_id), "User", user_id)
    return serialize(relations.user_following(store, user))


@router.get("/{user_id}/is-followed-by/{follower_id}")
def is_followed_by(user_id: str, follower_id: str, store: Store = Depends(get_store)) -> Dict[str, bool]:
    user = found(query.get_user(store, user_id=user_id), "User", user_id)
    return {"isFollowedBy": relations.is_followed_by(store, user, follower_id)}


@router.get("/{user_id}/stats")
def get_user_stats(user_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    """Post, comment and follower counts plus summed views and likes."""
    return serialize(found(reports.get_user_stats(store, user_id), "User", user_id))


@router.post("", status_code=201)
def create_user(data: CreateUserInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(users.create_user(store, data))


@router.patch("/{user_id}")
def update_user(user_id: str, data: UpdateUserInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(users.update_user(store, user_id, data), "User", user_id))


@router.patch("/{user_id}/preferences")
def update_preferences(
    user_id: str,
    data: UpdatePreferencesInput,
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    return serialize(found(users.update_preferences(store, user_id, data), "User", user_id))


@router.post("/{user_id}/suspend")
def suspend_user(user_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(users.suspend_user(store, user_id), "User", user_id))


@router.post("/{user_id}/activate")
def activate_user(user_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(users.activate_user(store, user_id), "User", user_id))


@router.delete("/{user_id}")
def delete_user(user_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(users.delete_user(store, user_id))
