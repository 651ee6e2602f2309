# blog_engine/services/comments.py
"""
Comment mutations.

Every comment write keeps post.comment_count equal to the number of live
comments filed under the post. Deleting a comment removes its whole reply
subtree, so no reply is ever left pointing at a missing parent.
"""

import logging
from dataclasses import replace
from typing import Iterable, List, Optional

from blog_engine.errors import InvalidInputError
from blog_engine.models import Comment, CommentStatus, EntityKind, NotificationType, TargetType
from blog_engine.schemas import CreateCommentInput
from blog_engine.services.mutations import BulkResult, DeleteResult, adjust_counter, require
from blog_engine.services.notifications import notify
from blog_engine.store import Store, index_key

logger = logging.getLogger(__name__)


def create_comment(store: Store, data: CreateCommentInput) -> Comment:
    """
    Add a comment (or reply) to a post; new comments await moderation.

    Raises:
        InvalidReferenceError: if the post, author or parent comment is missing
        InvalidInputError: if the parent comment belongs to another post
    """
    with store.transaction():
        post = require(store, EntityKind.post, data.post_id, "post_id")
        require(store, EntityKind.user, data.author_id, "author_id")
        if data.parent_id is not None:
            parent = require(store, EntityKind.comment, data.parent_id, "parent_id")
            if parent.post_id != data.post_id:
                raise InvalidInputError(
                    f"Parent comment {parent.id} belongs to post {parent.post_id}, not {data.post_id}",
                    field_name="parent_id",
                )

        now = store.now()
        comment = store.put(Comment(
            id=store.new_id(EntityKind.comment),
            post_id=data.post_id,
            author_id=data.author_id,
            parent_id=data.parent_id,
            content=data.content,
            status=CommentStatus.pending,
            created_at=now,
            updated_at=now,
        ))
        adjust_counter(store, EntityKind.post, post.id, "comment_count", 1)

        notify(
            store,
            user_id=post.author_id,
            notification_type=NotificationType.comment,
            title="New comment",
            message=f"Someone commented on \"{post.title}\"",
            actor_id=data.author_id,
            related_post_id=post.id,
        )

    return comment


def update_comment(store: Store, comment_id: str, content: str) -> Optional[Comment]:
    if not content:
        raise InvalidInputError("Comment content must not be empty", field_name="content")
    with store.transaction():
        comment = store.get(EntityKind.comment, comment_id)
        if comment is None:
            return None
        return store.put(replace(comment, content=content, updated_at=store.now()))


def _set_status(store: Store, comment_id: str, status: CommentStatus) -> Optional[Comment]:
    with store.transaction():
        comment = store.get(EntityKind.comment, comment_id)
        if comment is None:
            return None
        return store.put(replace(comment, status=status, updated_at=store.now()))


def approve_comment(store: Store, comment_id: str) -> Optional[Comment]:
    return _set_status(store, comment_id, CommentStatus.approved)


def mark_comment_as_spam(store: Store, comment_id: str) -> Optional[Comment]:
    return _set_status(store, comment_id, CommentStatus.spam)


def _subtree(store: Store, comment: Comment) -> List[Comment]:
    """The comment followed by all of its descendants, depth first."""
    found: List[Comment] = []
    pending = [comment]
    while pending:
        current = pending.pop()
        found.append(current)
        pending.extend(reversed(store.related(EntityKind.comment, "parent_id", current.id)))
    return found


def remove_comments(store: Store, comments: Iterable[Comment]) -> List[str]:
    """
    Delete comments with their reply subtrees, likes and counter contributions.

    Must run inside a store transaction.

    Returns:
        Ids of every comment removed, replies included
    """
    removed: List[str] = []
    for root in comments:
        if store.get(EntityKind.comment, root.id) is None:
            continue
        for comment in _subtree(store, root):
            for like in store.related(EntityKind.like, "target", index_key(TargetType.comment, comment.id)):
                store.delete(EntityKind.like, like.id)
            store.delete(EntityKind.comment, comment.id)
            adjust_counter(store, EntityKind.post, comment.post_id, "comment_count", -1)
            removed.append(comment.id)
    return removed


def delete_comment(store: Store, comment_id: str) -> DeleteResult:
    with store.transaction():
        comment = store.get(EntityKind.comment, comment_id)
        if comment is None:
            return DeleteResult(success=False, id=comment_id)
        removed = remove_comments(store, [comment])

    if len(removed) > 1:
        logger.debug("Deleted comment %s and %d repl(ies)", comment_id, len(removed) - 1)
    return DeleteResult(success=True, id=comment_id)


def bulk_delete_comments(store: Store, comment_ids: List[str]) -> BulkResult:
    """
    Delete several comments; unknown ids are skipped.

    Only the requested ids that existed are reported, even though replies
    beneath them are removed as well.
    """
    with store.transaction():
        deleted: List[str] = []
        for comment_id in dict.fromkeys(comment_ids):
            comment = store.get(EntityKind.comment, comment_id)
            if comment is None:
                continue
            remove_comments(store, [comment])
            deleted.append(comment_id)

    logger.info("Bulk deleted %d of %d comment(s)", len(deleted), len(comment_ids))
    return BulkResult.from_ids(deleted)
