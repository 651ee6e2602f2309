# blog_engine/services/reports.py
"""
Read-time aggregate statistics.

Nothing here is maintained incrementally: every figure is computed from the
live records when asked for.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from blog_engine.models import EntityKind, PostStatus
from blog_engine.store import Store


@dataclass
class Stats:
    """Global content statistics."""
    total_users: int
    total_posts: int
    total_comments: int
    total_categories: int
    total_tags: int
    published_posts: int
    draft_posts: int
    total_views: int
    total_likes: int


@dataclass
class UserStats:
    """Activity and reach of one user."""
    post_count: int
    comment_count: int
    follower_count: int
    following_count: int
    total_views: int
    total_likes: int


def get_stats(store: Store) -> Stats:
    with store.transaction():
        posts = store.all(EntityKind.post)
        return Stats(
            total_users=store.count(EntityKind.user),
            total_posts=len(posts),
            total_comments=store.count(EntityKind.comment),
            total_categories=store.count(EntityKind.category),
            total_tags=store.count(EntityKind.tag),
            published_posts=sum(1 for p in posts if p.status == PostStatus.published),
            draft_posts=sum(1 for p in posts if p.status == PostStatus.draft),
            total_views=sum(p.view_count for p in posts),
            total_likes=sum(p.like_count for p in posts),
        )


def get_user_stats(store: Store, user_id: str) -> Optional[UserStats]:
    """
    Statistics for one user.

    Args:
        store: Entity store
        user_id: User to report on

    Returns:
        UserStats, or None for an unknown user
    """
    with store.transaction():
        if store.get(EntityKind.user, user_id) is None:
            return None
        posts = store.related(EntityKind.post, "author_id", user_id)
        return UserStats(
            post_count=len(posts),
            comment_count=store.related_count(EntityKind.comment, "author_id", user_id),
            follower_count=store.related_count(EntityKind.follow, "following_id", user_id),
            following_count=store.related_count(EntityKind.follow, "follower_id", user_id),
            total_views=sum(p.view_count for p in posts),
            total_likes=sum(p.like_count for p in posts),
        )


def category_post_counts(store: Store) -> List[Dict[str, object]]:
    """Published post count per category, in category sort order."""
    with store.transaction():
        categories = sorted(store.all(EntityKind.category), key=lambda c: c.sort_order)
        rows = []
        for category in categories:
            posts = store.related(EntityKind.post, "category_id", category.id)
            rows.append({
                "category_id": category.id,
                "name": category.name,
                "post_count": sum(1 for p in posts if p.status == PostStatus.published),
            })
        return rows
