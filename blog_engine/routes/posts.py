# blog_engine/routes/posts.py
"""FastAPI routes for posts: listing, lookup, lifecycle and bulk operations."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from blog_engine.models import CommentStatus, PostStatus, Visibility
from blog_engine.routes.deps import found, get_store
from blog_engine.schemas import (
    BulkIdsInput,
    CreatePostInput,
    PostFilter,
    PostSort,
    PostSortField,
    SchedulePostInput,
    SortDirection,
    UpdatePostInput,
)
from blog_engine.serializers import serialize, serialize_thread, serialize_with
from blog_engine.services import posts, query, relations, trending
from blog_engine.store import Store

router = APIRouter(prefix="/posts", tags=["posts"])


def post_filter(
    status: Optional[PostStatus] = Query(None),
    visibility: Optional[Visibility] = Query(None),
    category_id: Optional[str] = Query(None),
    author_id: Optional[str] = Query(None),
    tag_ids: Optional[List[str]] = Query(None, description="Match posts carrying any of these tags"),
    search: Optional[str] = Query(None, description="Substring of title, content or excerpt"),
    published_after: Optional[str] = Query(None, description="Inclusive lower bound (ISO-8601)"),
    published_before: Optional[str] = Query(None, description="Inclusive upper bound (ISO-8601)"),
    min_view_count: Optional[int] = Query(None, ge=0),
    min_like_count: Optional[int] = Query(None, ge=0),
) -> PostFilter:
    return PostFilter(
        status=status,
        visibility=visibility,
        category_id=category_id,
        author_id=author_id,
        tag_ids=tag_ids,
        search=search,
        published_after=published_after,
        published_before=published_before,
        min_view_count=min_view_count,
        min_like_count=min_like_count,
    )


def post_sort(
    sort: Optional[PostSortField] = Query(None, description="Sort field (default: newest first)"),
    direction: SortDirection = Query(SortDirection.ASC, description="Sort direction"),
) -> Optional[PostSort]:
    return PostSort(field=sort, direction=direction) if sort is not None else None


def post_detail(store: Store, post) -> Dict[str, Any]:
    return serialize_with(
        post,
        author=relations.post_author(store, post),
        category=relations.post_category(store, post),
        tags=relations.post_tags(store, post),
    )


@router.get("")
def list_posts(
    limit: Optional[int] = Query(None, ge=0),
    offset: Optional[int] = Query(None, ge=0),
    filters: PostFilter = Depends(post_filter),
    sort: Optional[PostSort] = Depends(post_sort),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    """Filtered, sorted, offset-paginated posts."""
    return serialize(query.list_posts(store, limit=limit, offset=offset, post_filter=filters, sort=sort))


@router.get("/connection")
def posts_connection(
    first: Optional[int] = Query(None, ge=0, description="Page size (default 10)"),
    after: Optional[str] = Query(None, description="endCursor of the previous page"),
    filters: PostFilter = Depends(post_filter),
    sort: Optional[PostSort] = Depends(post_sort),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    """
    Cursor-paginated posts.

    Returns edges with node and cursor plus pageInfo. A cursor whose post
    was deleted or filtered out answers 400 INVALID_CURSOR.
    """
    return serialize(query.posts_connection(store, first=first, after=after, post_filter=filters, sort=sort))


@router.get("/trending")
def get_trending(
    limit: Optional[int] = Query(None, ge=0, description="Number of posts (default 10)"),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    """Published posts ranked by views + 10 x likes."""
    return serialize(trending.get_trending(store, limit=limit))


@router.get("/recommended")
def get_recommended(
    user_id: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=0),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    return serialize(trending.get_recommended(store, user_id=user_id, limit=limit))


@router.get("/by-slug/{slug}")
def get_post_by_slug(slug: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    post = found(query.get_post(store, slug=slug), "Post", slug)
    return post_detail(store, post)


@router.get("/{post_id}")
def get_post(post_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    post = found(query.get_post(store, post_id=post_id), "Post", post_id)
    return post_detail(store, post)


@router.get("/{post_id}/comments")
def get_post_comments(
    post_id: str,
    status: Optional[CommentStatus] = None,
    limit: Optional[int] = Query(None, ge=0),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    """Top-level comments of a post, newest first."""
    post = found(query.get_post(store, post_id=post_id), "Post", post_id)
    return serialize(relations.post_comments(store, post, status=status, limit=limit))


@router.get("/{post_id}/thread")
def get_post_thread(post_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    """Reply tree of a post, flattened parents first, with depth metrics."""
    return serialize_thread(found(relations.comment_thread(store, post_id), "Post", post_id))


@router.get("/{post_id}/related")
def get_related_posts(
    post_id: str,
    limit: Optional[int] = Query(None, ge=0, description="Number of posts (default 5)"),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    post = found(query.get_post(store, post_id=post_id), "Post", post_id)
    return serialize(relations.related_posts(store, post, limit=limit))


@router.get("/{post_id}/is-liked-by/{user_id}")
def is_liked_by(post_id: str, user_id: str, store: Store = Depends(get_store)) -> Dict[str, bool]:
    post = found(query.get_post(store, post_id=post_id), "Post", post_id)
    return {"isLikedBy": relations.post_is_liked_by(store, post, user_id)}


@router.get("/{post_id}/is-bookmarked-by/{user_id}")
def is_bookmarked_by(post_id: str, user_id: str, store: Store = Depends(get_store)) -> Dict[str, bool]:
    post = found(query.get_post(store, post_id=post_id), "Post", post_id)
    return {"isBookmarkedBy": relations.post_is_bookmarked_by(store, post, user_id)}


@router.post("", status_code=201)
def create_post(data: CreatePostInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(posts.create_post(store, data))


@router.post("/bulk-publish")
def bulk_publish(data: BulkIdsInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(posts.bulk_publish_posts(store, data.ids))


@router.post("/bulk-delete")
def bulk_delete(data: BulkIdsInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(posts.bulk_delete_posts(store, data.ids))


@router.patch("/{post_id}")
def update_post(post_id: str, data: UpdatePostInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(posts.update_post(store, post_id, data), "Post", post_id))


@router.post("/{post_id}/publish")
def publish_post(post_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(posts.publish_post(store, post_id), "Post", post_id))


@router.post("/{post_id}/unpublish")
def unpublish_post(post_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(posts.unpublish_post(store, post_id), "Post", post_id))


@router.post("/{post_id}/schedule")
def schedule_post(post_id: str, data: SchedulePostInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(posts.schedule_post(store, post_id, data.publish_at), "Post", post_id))


@router.post("/{post_id}/archive")
def archive_post(post_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(posts.archive_post(store, post_id), "Post", post_id))


@router.post("/{post_id}/view")
def increment_view_count(post_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(posts.increment_view_count(store, post_id), "Post", post_id))


@router.delete("/{post_id}")
def delete_post(post_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(posts.delete_post(store, post_id))
