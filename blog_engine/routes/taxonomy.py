# blog_engine/routes/taxonomy.py
"""FastAPI routes for the category tree and tags."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from blog_engine.models import PostStatus
from blog_engine.routes.deps import found, get_store
from blog_engine.schemas import (
    CreateCategoryInput,
    CreateTagInput,
    MergeTagsInput,
    UpdateCategoryInput,
    UpdateTagInput,
)
from blog_engine.serializers import serialize, serialize_with
from blog_engine.services import query, relations, taxonomy
from blog_engine.store import Store

categories_router = APIRouter(prefix="/categories", tags=["categories"])
tags_router = APIRouter(prefix="/tags", tags=["tags"])


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def category_detail(store: Store, category) -> Dict[str, Any]:
    return serialize_with(
        category,
        parent=relations.category_parent(store, category),
        children=relations.category_children(store, category),
        post_count=relations.category_post_count(store, category),
    )


@categories_router.get("")
def list_categories(
    parent_id: Optional[str] = Query(None, description="Only children of this category"),
    roots_only: bool = Query(False, description="Only top-level categories"),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    return serialize(query.list_categories(store, parent_id=parent_id, roots_only=roots_only))


@categories_router.get("/by-slug/{slug}")
def get_category_by_slug(slug: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    category = found(query.get_category(store, slug=slug), "Category", slug)
    return category_detail(store, category)


@categories_router.get("/{category_id}")
def get_category(category_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    category = found(query.get_category(store, category_id=category_id), "Category", category_id)
    return category_detail(store, category)


@categories_router.get("/{category_id}/posts")
def get_category_posts(
    category_id: str,
    status: Optional[PostStatus] = None,
    limit: Optional[int] = Query(None, ge=0),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    category = found(query.get_category(store, category_id=category_id), "Category", category_id)
    return serialize(relations.category_posts(store, category, status=status, limit=limit))


@categories_router.post("", status_code=201)
def create_category(data: CreateCategoryInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(taxonomy.create_category(store, data))


@categories_router.patch("/{category_id}")
def update_category(
    category_id: str,
    data: UpdateCategoryInput,
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    """Partial update; `parentId: null` moves the category to the root."""
    return serialize(found(taxonomy.update_category(store, category_id, data), "Category", category_id))


@categories_router.delete("/{category_id}")
def delete_category(category_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(taxonomy.delete_category(store, category_id))


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


@tags_router.get("")
def list_tags(
    limit: Optional[int] = Query(None, ge=0),
    order_by_usage: bool = Query(False, description="Most used first instead of by name"),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    return serialize(query.list_tags(store, limit=limit, order_by_usage=order_by_usage))


@tags_router.post("/merge")
def merge_tags(data: MergeTagsInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    """Fold the source tag into the target tag and return the target."""
    merged = taxonomy.merge_tags(store, data.source_id, data.target_id)
    return serialize(found(merged, "Tag", f"{data.source_id} or {data.target_id}"))


@tags_router.get("/by-slug/{slug}")
def get_tag_by_slug(slug: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(query.get_tag(store, slug=slug), "Tag", slug))


@tags_router.get("/{tag_id}")
def get_tag(tag_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(query.get_tag(store, tag_id=tag_id), "Tag", tag_id))


@tags_router.get("/{tag_id}/posts")
def get_tag_posts(
    tag_id: str,
    limit: Optional[int] = Query(None, ge=0),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    """Published posts carrying the tag, newest first."""
    tag = found(query.get_tag(store, tag_id=tag_id), "Tag", tag_id)
    return serialize(relations.tag_posts(store, tag, limit=limit))


@tags_router.post("", status_code=201)
def create_tag(data: CreateTagInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(taxonomy.create_tag(store, data))


@tags_router.patch("/{tag_id}")
def update_tag(tag_id: str, data: UpdateTagInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(taxonomy.update_tag(store, tag_id, data), "Tag", tag_id))


@tags_router.delete("/{tag_id}")
def delete_tag(tag_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(taxonomy.delete_tag(store, tag_id))
