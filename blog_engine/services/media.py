# blog_engine/services/media.py
from typing import Optional

from blog_engine.models import EntityKind, Media
from blog_engine.schemas import CreateMediaInput, UpdateMediaInput
from blog_engine.services.mutations import DeleteResult, merge_fields, require
from blog_engine.store import Store


def create_media(store: Store, data: CreateMediaInput) -> Media:
    with store.transaction():
        require(store, EntityKind.user, data.uploader_id, "uploader_id")
        return store.put(Media(
            id=store.new_id(EntityKind.media),
            created_at=store.now(),
            **data.model_dump(),
        ))


def update_media(store: Store, media_id: str, data: UpdateMediaInput) -> Optional[Media]:
    """Rename a media item or change its alt text."""
    with store.transaction():
        media = store.get(EntityKind.media, media_id)
        if media is None:
            return None
        return store.put(merge_fields(media, data.model_dump(exclude_none=True)))


def delete_media(store: Store, media_id: str) -> DeleteResult:
    with store.transaction():
        removed = store.delete(EntityKind.media, media_id)
        return DeleteResult(success=removed is not None, id=media_id)
