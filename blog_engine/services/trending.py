# blog_engine/services/trending.py
"""
Feed, trending and recommendation queries.

Trending ranks published posts by a weighted engagement score where one like
counts as much as LIKE_WEIGHT views. Recommendations follow the categories of
a user's bookmarks and fall back to the most liked posts.
"""

import logging
from operator import attrgetter
from typing import List, Optional

from blog_engine.config import FEED_PAGE_SIZE
from blog_engine.models import EntityKind, Post, PostStatus
from blog_engine.services.pagination import paginate_offset
from blog_engine.services.query import stable_sort
from blog_engine.store import Store

logger = logging.getLogger(__name__)

LIKE_WEIGHT = 10
TRENDING_LIMIT = 10
RECOMMENDED_LIMIT = 10


def engagement_score(post: Post) -> int:
    return post.view_count + LIKE_WEIGHT * post.like_count


def _published(posts: List[Post]) -> List[Post]:
    return [p for p in posts if p.status == PostStatus.published]


def get_feed(store: Store, user_id: str, limit: Optional[int] = None, offset: Optional[int] = None) -> List[Post]:
    """
    Published posts by the users `user_id` follows, most recently published first.

    Posts without published_at fall back to created_at for ordering.
    """
    with store.transaction():
        posts: List[Post] = []
        for follow in store.related(EntityKind.follow, "follower_id", user_id):
            posts.extend(store.related(EntityKind.post, "author_id", follow.following_id))

        collection = store.collection(EntityKind.post)
        in_store_order = sorted(posts, key=lambda p: collection.position(p.id))
        ranked = stable_sort(
            _published(in_store_order),
            lambda p: p.published_at or p.created_at,
            descending=True,
        )
        return paginate_offset(ranked, FEED_PAGE_SIZE if limit is None else limit, offset)


def get_trending(store: Store, limit: Optional[int] = None) -> List[Post]:
    """
    Get top published posts by engagement score.

    Args:
        store: Entity store
        limit: Number of posts to return (default TRENDING_LIMIT)

    Returns:
        Posts sorted by score descending, ties in store order
    """
    with store.transaction():
        ranked = stable_sort(_published(store.all(EntityKind.post)), engagement_score, descending=True)
        return paginate_offset(ranked, TRENDING_LIMIT if limit is None else limit)


def get_recommended(store: Store, user_id: Optional[str] = None, limit: Optional[int] = None) -> List[Post]:
    """
    Recommend published posts for a user.

    Picks posts from the categories of the user's bookmarked posts that the
    user has not bookmarked yet. Without a user, or when that yields nothing,
    returns the most liked published posts.
    """
    size = RECOMMENDED_LIMIT if limit is None else limit
    with store.transaction():
        recommended: List[Post] = []

        if user_id:
            bookmarked = {b.post_id for b in store.related(EntityKind.bookmark, "user_id", user_id)}
            categories = set()
            for post_id in bookmarked:
                post = store.get(EntityKind.post, post_id)
                if post is not None and post.category_id is not None:
                    categories.add(post.category_id)
            recommended = [
                p for p in _published(store.all(EntityKind.post))
                if p.category_id in categories and p.id not in bookmarked
            ]

        if not recommended:
            logger.debug("No bookmark-based recommendations for user %s; using most liked posts", user_id)
            recommended = stable_sort(_published(store.all(EntityKind.post)), attrgetter("like_count"), descending=True)

        return paginate_offset(recommended, size)
