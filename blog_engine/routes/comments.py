# blog_engine/routes/comments.py
"""FastAPI routes for comments and moderation."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from blog_engine.models import CommentStatus, EntityKind
from blog_engine.routes.deps import found, get_store
from blog_engine.schemas import BulkIdsInput, CommentFilter, CreateCommentInput, UpdateCommentInput
from blog_engine.serializers import serialize, serialize_with
from blog_engine.services import comments, query, relations
from blog_engine.store import Store

router = APIRouter(prefix="/comments", tags=["comments"])


def comment_filter(
    post_id: Optional[str] = Query(None),
    author_id: Optional[str] = Query(None),
    status: Optional[CommentStatus] = Query(None),
    parent_id: Optional[str] = Query(None, description="Only replies to this comment"),
    top_level_only: bool = Query(False, description="Only comments without a parent"),
) -> CommentFilter:
    fields: Dict[str, Any] = {"post_id": post_id, "author_id": author_id, "status": status}
    if top_level_only:
        fields["parent_id"] = None
    elif parent_id is not None:
        fields["parent_id"] = parent_id
    return CommentFilter(**fields)


@router.get("")
def list_comments(
    limit: Optional[int] = Query(None, ge=0),
    offset: Optional[int] = Query(None, ge=0),
    filters: CommentFilter = Depends(comment_filter),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    """Filtered comments, newest first."""
    return serialize(query.list_comments(store, comment_filter=filters, limit=limit, offset=offset))


@router.get("/connection")
def comments_connection(
    first: Optional[int] = Query(None, ge=0, description="Page size (default 10)"),
    after: Optional[str] = Query(None, description="endCursor of the previous page"),
    filters: CommentFilter = Depends(comment_filter),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    return serialize(query.comments_connection(store, first=first, after=after, comment_filter=filters))


@router.get("/{comment_id}")
def get_comment(comment_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    comment = found(query.get_record(store, EntityKind.comment, comment_id), "Comment", comment_id)
    return serialize_with(
        comment,
        author=relations.comment_author(store, comment),
        post=relations.comment_post(store, comment),
        parent=relations.comment_parent(store, comment),
        reply_count=relations.comment_reply_count(store, comment),
    )


@router.get("/{comment_id}/replies")
def get_replies(
    comment_id: str,
    limit: Optional[int] = Query(None, ge=0),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    """Direct replies, oldest first."""
    comment = found(query.get_record(store, EntityKind.comment, comment_id), "Comment", comment_id)
    return serialize(relations.comment_replies(store, comment, limit=limit))


@router.get("/{comment_id}/is-liked-by/{user_id}")
def is_liked_by(comment_id: str, user_id: str, store: Store = Depends(get_store)) -> Dict[str, bool]:
    comment = found(query.get_record(store, EntityKind.comment, comment_id), "Comment", comment_id)
    return {"isLikedBy": relations.comment_is_liked_by(store, comment, user_id)}


@router.post("", status_code=201)
def create_comment(data: CreateCommentInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(comments.create_comment(store, data))


@router.post("/bulk-delete")
def bulk_delete(data: BulkIdsInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(comments.bulk_delete_comments(store, data.ids))


@router.patch("/{comment_id}")
def update_comment(comment_id: str, data: UpdateCommentInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(comments.update_comment(store, comment_id, data.content), "Comment", comment_id))


@router.post("/{comment_id}/approve")
def approve_comment(comment_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(comments.approve_comment(store, comment_id), "Comment", comment_id))


@router.post("/{comment_id}/spam")
def mark_spam(comment_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(comments.mark_comment_as_spam(store, comment_id), "Comment", comment_id))


@router.delete("/{comment_id}")
def delete_comment(comment_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    """Delete a comment together with all of its replies."""
    return serialize(comments.delete_comment(store, comment_id))
