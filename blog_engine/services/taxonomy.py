# blog_engine/services/taxonomy.py
"""Category tree and tag mutations."""

import logging
from dataclasses import replace
from typing import Optional

from blog_engine.errors import InvalidInputError
from blog_engine.models import Category, EntityKind, Tag
from blog_engine.schemas import CreateCategoryInput, CreateTagInput, UpdateCategoryInput, UpdateTagInput
from blog_engine.services.mutations import DeleteResult, merge_fields, require
from blog_engine.store import Store

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def create_category(store: Store, data: CreateCategoryInput) -> Category:
    """New categories sort after every existing one."""
    with store.transaction():
        if data.parent_id is not None:
            require(store, EntityKind.category, data.parent_id, "parent_id")
        return store.put(Category(
            id=store.new_id(EntityKind.category),
            name=data.name,
            slug=data.slug,
            description=data.description,
            parent_id=data.parent_id,
            color=data.color,
            icon=data.icon,
            sort_order=store.count(EntityKind.category) + 1,
            created_at=store.now(),
        ))


def _check_parent(store: Store, category_id: str, parent_id: str) -> None:
    """
    Raises:
        InvalidReferenceError: if the parent does not exist
        InvalidInputError: if the category would become its own ancestor
    """
    if parent_id == category_id:
        raise InvalidInputError("A category cannot be its own parent", field_name="parent_id")
    ancestor = require(store, EntityKind.category, parent_id, "parent_id")
    seen = set()
    while ancestor is not None and ancestor.id not in seen:
        if ancestor.id == category_id:
            raise InvalidInputError(
                f"Moving category {category_id} under {parent_id} would create a cycle",
                field_name="parent_id",
            )
        seen.add(ancestor.id)
        ancestor = store.get(EntityKind.category, ancestor.parent_id)


def update_category(store: Store, category_id: str, data: UpdateCategoryInput) -> Optional[Category]:
    """
    Partially update a category.

    An explicit `parent_id=None` moves the category to the root.
    """
    with store.transaction():
        category = store.get(EntityKind.category, category_id)
        if category is None:
            return None

        changes = data.model_dump(exclude_none=True)
        if "parent_id" in data.model_fields_set:
            if data.parent_id is not None:
                _check_parent(store, category_id, data.parent_id)
            changes["parent_id"] = data.parent_id

        return store.put(merge_fields(category, changes))


def delete_category(store: Store, category_id: str) -> DeleteResult:
    """
    Delete a category.

    Child categories move up to the deleted category's parent and posts
    filed under it become uncategorized.
    """
    with store.transaction():
        category = store.get(EntityKind.category, category_id)
        if category is None:
            return DeleteResult(success=False, id=category_id)

        for child in store.related(EntityKind.category, "parent_id", category_id):
            store.put(replace(child, parent_id=category.parent_id))

        posts = store.related(EntityKind.post, "category_id", category_id)
        for post in posts:
            store.put(replace(post, category_id=None))

        store.delete(EntityKind.category, category_id)

    logger.debug("Deleted category %s; %d post(s) uncategorized", category_id, len(posts))
    return DeleteResult(success=True, id=category_id)


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


def create_tag(store: Store, data: CreateTagInput) -> Tag:
    with store.transaction():
        return store.put(Tag(id=store.new_id(EntityKind.tag), name=data.name, slug=data.slug))


def update_tag(store: Store, tag_id: str, data: UpdateTagInput) -> Optional[Tag]:
    with store.transaction():
        tag = store.get(EntityKind.tag, tag_id)
        if tag is None:
            return None
        return store.put(merge_fields(tag, data.model_dump(exclude_none=True)))


def delete_tag(store: Store, tag_id: str) -> DeleteResult:
    """Delete a tag and drop it from every post that lists it."""
    with store.transaction():
        if store.get(EntityKind.tag, tag_id) is None:
            return DeleteResult(success=False, id=tag_id)

        for post in store.related(EntityKind.post, "tag_ids", tag_id):
            store.put(replace(post, tag_ids=tuple(t for t in post.tag_ids if t != tag_id)))

        store.delete(EntityKind.tag, tag_id)
    return DeleteResult(success=True, id=tag_id)


def merge_tags(store: Store, source_id: str, target_id: str) -> Optional[Tag]:
    """
    Fold the source tag into the target tag.

    Every post listing the source lists the target exactly once afterwards
    (appended when it did not carry it yet). The target's usage_count
    becomes the sum of both prior counts and the source is deleted. The
    whole merge is one transaction: no reader sees a post with both tags
    or a post naming the deleted source.

    Args:
        store: Entity store
        source_id: Tag to fold away
        target_id: Tag that survives

    Returns:
        The updated target tag, or None if either tag does not exist

    Raises:
        InvalidInputError: if source and target are the same tag
    """
    if source_id == target_id:
        raise InvalidInputError("Cannot merge a tag into itself", field_name="target_id")

    with store.transaction():
        source = store.get(EntityKind.tag, source_id)
        target = store.get(EntityKind.tag, target_id)
        if source is None or target is None:
            return None

        posts = store.related(EntityKind.post, "tag_ids", source_id)
        for post in posts:
            tag_ids = [t for t in post.tag_ids if t != source_id]
            if target_id not in tag_ids:
                tag_ids.append(target_id)
            store.put(replace(post, tag_ids=tuple(tag_ids)))

        merged = store.put(replace(target, usage_count=target.usage_count + source.usage_count))
        store.delete(EntityKind.tag, source_id)

    logger.info("Merged tag %s into %s across %d post(s)", source_id, target_id, len(posts))
    return merged
