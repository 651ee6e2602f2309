# blog_engine/services/relations.py
"""
Relationship resolution for every entity kind.

Each resolver takes the parent record and answers through the store's
reverse indexes. A related record that no longer exists resolves to None and
is dropped from lists; nothing here raises for a missing target.
"""

from dataclasses import dataclass, field
from operator import attrgetter
from typing import Any, Dict, Iterator, List, Optional

from blog_engine.config import RELATED_POSTS_LIMIT
from blog_engine.models import (
    AuditLog,
    Bookmark,
    Category,
    Comment,
    CommentStatus,
    EntityKind,
    Follow,
    Like,
    Media,
    Notification,
    Post,
    PostStatus,
    Tag,
    TargetType,
    User,
)
from blog_engine.services.pagination import paginate_offset
from blog_engine.services.query import newest_first, oldest_first, stable_sort
from blog_engine.store import Store, index_key


def _existing(records: List[Optional[Any]]) -> List[Any]:
    return [record for record in records if record is not None]


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------


def user_posts(
    store: Store,
    user: User,
    status: Optional[PostStatus] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[Post]:
    with store.transaction():
        posts = store.related(EntityKind.post, "author_id", user.id)
        if status is not None:
            posts = [p for p in posts if p.status == status]
        return paginate_offset(newest_first(posts), limit, offset)


def user_comments(store: Store, user: User, limit: Optional[int] = None) -> List[Comment]:
    with store.transaction():
        comments = store.related(EntityKind.comment, "author_id", user.id)
        return paginate_offset(newest_first(comments), limit)


def user_bookmarks(store: Store, user: User) -> List[Bookmark]:
    with store.transaction():
        return store.related(EntityKind.bookmark, "user_id", user.id)


def user_notifications(store: Store, user: User, unread_only: bool = False) -> List[Notification]:
    with store.transaction():
        notifications = store.related(EntityKind.notification, "user_id", user.id)
        if unread_only:
            notifications = [n for n in notifications if not n.read]
        return newest_first(notifications)


def user_followers(store: Store, user: User) -> List[User]:
    with store.transaction():
        follows = store.related(EntityKind.follow, "following_id", user.id)
        return _existing([store.get(EntityKind.user, f.follower_id) for f in follows])


def user_following(store: Store, user: User) -> List[User]:
    with store.transaction():
        follows = store.related(EntityKind.follow, "follower_id", user.id)
        return _existing([store.get(EntityKind.user, f.following_id) for f in follows])


def user_post_count(store: Store, user: User) -> int:
    with store.transaction():
        return store.related_count(EntityKind.post, "author_id", user.id)


def user_follower_count(store: Store, user: User) -> int:
    with store.transaction():
        return store.related_count(EntityKind.follow, "following_id", user.id)


def user_following_count(store: Store, user: User) -> int:
    with store.transaction():
        return store.related_count(EntityKind.follow, "follower_id", user.id)


def is_followed_by(store: Store, user: User, follower_id: str) -> bool:
    """True when `follower_id` follows `user`."""
    with store.transaction():
        return index_key(follower_id, user.id) in store.index(EntityKind.follow, "pair")


# ---------------------------------------------------------------------------
# Category and tag
# ---------------------------------------------------------------------------


def category_parent(store: Store, category: Category) -> Optional[Category]:
    with store.transaction():
        return store.get(EntityKind.category, category.parent_id)


def category_children(store: Store, category: Category) -> List[Category]:
    with store.transaction():
        children = store.related(EntityKind.category, "parent_id", category.id)
        return stable_sort(children, attrgetter("sort_order"))


def category_posts(
    store: Store,
    category: Category,
    status: Optional[PostStatus] = None,
    limit: Optional[int] = None,
) -> List[Post]:
    with store.transaction():
        posts = store.related(EntityKind.post, "category_id", category.id)
        if status is not None:
            posts = [p for p in posts if p.status == status]
        return paginate_offset(newest_first(posts), limit)


def category_post_count(store: Store, category: Category) -> int:
    """Number of published posts filed under the category."""
    with store.transaction():
        posts = store.related(EntityKind.post, "category_id", category.id)
        return sum(1 for p in posts if p.status == PostStatus.published)


def tag_posts(store: Store, tag: Tag, limit: Optional[int] = None) -> List[Post]:
    with store.transaction():
        posts = store.related(EntityKind.post, "tag_ids", tag.id)
        published = [p for p in posts if p.status == PostStatus.published]
        return paginate_offset(newest_first(published), limit)


# ---------------------------------------------------------------------------
# Post
# ---------------------------------------------------------------------------


def post_author(store: Store, post: Post) -> Optional[User]:
    with store.transaction():
        return store.get(EntityKind.user, post.author_id)


def post_category(store: Store, post: Post) -> Optional[Category]:
    with store.transaction():
        return store.get(EntityKind.category, post.category_id)


def post_tags(store: Store, post: Post) -> List[Tag]:
    """Tags in the order the post lists them; ids of deleted tags are skipped."""
    with store.transaction():
        return _existing([store.get(EntityKind.tag, tag_id) for tag_id in post.tag_ids])


def post_comments(
    store: Store,
    post: Post,
    status: Optional[CommentStatus] = None,
    limit: Optional[int] = None,
) -> List[Comment]:
    """Top-level comments of a post, newest first."""
    with store.transaction():
        comments = [c for c in store.related(EntityKind.comment, "post_id", post.id) if c.parent_id is None]
        if status is not None:
            comments = [c for c in comments if c.status == status]
        return paginate_offset(newest_first(comments), limit)


def related_posts(store: Store, post: Post, limit: Optional[int] = None) -> List[Post]:
    """
    Published posts sharing the category or at least one tag, most liked first.

    Args:
        store: Entity store
        post: Post to find neighbours for (never included in the result)
        limit: Maximum results (default RELATED_POSTS_LIMIT)

    Returns:
        Posts ordered by like_count descending, ties in store order
    """
    with store.transaction():
        candidate_ids = set(store.index(EntityKind.post, "category_id").ids(post.category_id or ""))
        tag_index = store.index(EntityKind.post, "tag_ids")
        for tag_id in post.tag_ids:
            candidate_ids.update(tag_index.ids(tag_id))
        candidate_ids.discard(post.id)

        collection = store.collection(EntityKind.post)
        candidates = [collection.get(pid) for pid in sorted(candidate_ids, key=collection.position)]
        published = [p for p in candidates if p.status == PostStatus.published]
        ranked = stable_sort(published, attrgetter("like_count"), descending=True)
        return paginate_offset(ranked, RELATED_POSTS_LIMIT if limit is None else limit)


def post_is_liked_by(store: Store, post: Post, user_id: str) -> bool:
    with store.transaction():
        return index_key(user_id, TargetType.post, post.id) in store.index(EntityKind.like, "user_target")


def post_is_bookmarked_by(store: Store, post: Post, user_id: str) -> bool:
    with store.transaction():
        return index_key(user_id, post.id) in store.index(EntityKind.bookmark, "user_post")


# ---------------------------------------------------------------------------
# Comment
# ---------------------------------------------------------------------------


def comment_post(store: Store, comment: Comment) -> Optional[Post]:
    with store.transaction():
        return store.get(EntityKind.post, comment.post_id)


def comment_author(store: Store, comment: Comment) -> Optional[User]:
    with store.transaction():
        return store.get(EntityKind.user, comment.author_id)


def comment_parent(store: Store, comment: Comment) -> Optional[Comment]:
    with store.transaction():
        return store.get(EntityKind.comment, comment.parent_id)


def comment_replies(store: Store, comment: Comment, limit: Optional[int] = None) -> List[Comment]:
    """Direct replies, oldest first."""
    with store.transaction():
        replies = store.related(EntityKind.comment, "parent_id", comment.id)
        return paginate_offset(oldest_first(replies), limit)


def comment_reply_count(store: Store, comment: Comment) -> int:
    with store.transaction():
        return store.related_count(EntityKind.comment, "parent_id", comment.id)


def comment_is_liked_by(store: Store, comment: Comment, user_id: str) -> bool:
    with store.transaction():
        return index_key(user_id, TargetType.comment, comment.id) in store.index(EntityKind.like, "user_target")


@dataclass
class CommentNode:
    """One comment of a thread with its replies."""
    comment: Comment
    depth: int
    replies: List["CommentNode"] = field(default_factory=list)


@dataclass
class CommentThread:
    """Reply tree of one post."""
    post_id: str
    roots: List[CommentNode]
    total_comments: int
    total_replies: int
    max_depth: int

    def walk(self) -> Iterator[CommentNode]:
        """Yield every node, parents before their replies, oldest first."""
        pending = list(reversed(self.roots))
        while pending:
            node = pending.pop()
            yield node
            pending.extend(reversed(node.replies))


def comment_thread(store: Store, post_id: str) -> Optional[CommentThread]:
    """
    Build the nested reply tree of a post.

    Roots are the top-level comments, oldest first; each level of replies is
    oldest first as well. A top-level comment has depth 1. Nesting depth is
    unbounded, so the tree is built with an explicit stack.

    Args:
        store: Entity store
        post_id: Post whose comments to arrange

    Returns:
        CommentThread, or None if the post does not exist
    """
    with store.transaction():
        if store.get(EntityKind.post, post_id) is None:
            return None

        comments = store.related(EntityKind.comment, "post_id", post_id)
        children: Dict[Optional[str], List[Comment]] = {}
        for comment in oldest_first(comments):
            children.setdefault(comment.parent_id, []).append(comment)

        roots: List[CommentNode] = []
        max_depth = 0
        pending = [(comment, 1, roots) for comment in reversed(children.get(None, []))]
        while pending:
            comment, depth, siblings = pending.pop()
            node = CommentNode(comment=comment, depth=depth)
            siblings.append(node)
            max_depth = max(max_depth, depth)
            pending.extend((reply, depth + 1, node.replies) for reply in reversed(children.get(comment.id, [])))

        return CommentThread(
            post_id=post_id,
            roots=roots,
            total_comments=len(comments),
            total_replies=len(comments) - len(children.get(None, [])),
            max_depth=max_depth,
        )


# ---------------------------------------------------------------------------
# Join records
# ---------------------------------------------------------------------------


def like_user(store: Store, like: Like) -> Optional[User]:
    with store.transaction():
        return store.get(EntityKind.user, like.user_id)


def like_post(store: Store, like: Like) -> Optional[Post]:
    if like.target_type != TargetType.post:
        return None
    with store.transaction():
        return store.get(EntityKind.post, like.target_id)


def like_comment(store: Store, like: Like) -> Optional[Comment]:
    if like.target_type != TargetType.comment:
        return None
    with store.transaction():
        return store.get(EntityKind.comment, like.target_id)


def follow_follower(store: Store, follow: Follow) -> Optional[User]:
    with store.transaction():
        return store.get(EntityKind.user, follow.follower_id)


def follow_following(store: Store, follow: Follow) -> Optional[User]:
    with store.transaction():
        return store.get(EntityKind.user, follow.following_id)


def bookmark_user(store: Store, bookmark: Bookmark) -> Optional[User]:
    with store.transaction():
        return store.get(EntityKind.user, bookmark.user_id)


def bookmark_post(store: Store, bookmark: Bookmark) -> Optional[Post]:
    with store.transaction():
        return store.get(EntityKind.post, bookmark.post_id)


def notification_user(store: Store, notification: Notification) -> Optional[User]:
    with store.transaction():
        return store.get(EntityKind.user, notification.user_id)


def notification_related_post(store: Store, notification: Notification) -> Optional[Post]:
    with store.transaction():
        return store.get(EntityKind.post, notification.related_post_id)


def notification_related_user(store: Store, notification: Notification) -> Optional[User]:
    with store.transaction():
        return store.get(EntityKind.user, notification.related_user_id)


def media_uploader(store: Store, media: Media) -> Optional[User]:
    with store.transaction():
        return store.get(EntityKind.user, media.uploader_id)


def audit_log_user(store: Store, audit_log: AuditLog) -> Optional[User]:
    with store.transaction():
        return store.get(EntityKind.user, audit_log.user_id)
