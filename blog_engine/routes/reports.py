# blog_engine/routes/reports.py
"""FastAPI routes for search, statistics and the personal feed."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from blog_engine.routes.deps import get_store
from blog_engine.serializers import serialize
from blog_engine.services import reports, search, trending
from blog_engine.store import Store

router = APIRouter(tags=["reports"])


class StatsResponse(BaseModel):
    """Response model for global statistics."""
    totalUsers: int = Field(..., description="Number of users")
    totalPosts: int = Field(..., description="Number of posts")
    totalComments: int = Field(..., description="Number of comments")
    totalCategories: int = Field(..., description="Number of categories")
    totalTags: int = Field(..., description="Number of tags")
    publishedPosts: int = Field(..., description="Posts with status published")
    draftPosts: int = Field(..., description="Posts with status draft")
    totalViews: int = Field(..., description="Sum of view counts over all posts")
    totalLikes: int = Field(..., description="Sum of like counts over all posts")


@router.get("/search")
def search_content(
    q: str = Query(..., description="Case-insensitive text to look for"),
    types: Optional[List[str]] = Query(None, description="Any of posts, users, comments, tags"),
    limit: Optional[int] = Query(None, ge=0, description="Matches per type (default 10)"),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    """
    Search posts, users, comments and tags.

    Returns the matches per type plus the combined total count.
    """
    result = search.search(store, q, types=types, limit=limit)
    return {**serialize(result), "totalCount": result.total_count}


@router.get("/stats", response_model=StatsResponse)
def get_stats(store: Store = Depends(get_store)) -> StatsResponse:
    return StatsResponse(**serialize(reports.get_stats(store)))


@router.get("/stats/categories")
def get_category_post_counts(store: Store = Depends(get_store)) -> List[Dict[str, Any]]:
    """Published posts per category."""
    return serialize(reports.category_post_counts(store))


@router.get("/feed/{user_id}")
def get_feed(
    user_id: str,
    limit: Optional[int] = Query(None, ge=0, description="Page size (default 20)"),
    offset: Optional[int] = Query(None, ge=0),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    """Published posts by the users this user follows, newest first."""
    return serialize(trending.get_feed(store, user_id, limit=limit, offset=offset))
