# blog_engine/routes/media.py
"""FastAPI routes for media uploads and the audit trail."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from blog_engine.models import EntityKind
from blog_engine.routes.deps import found, get_store
from blog_engine.schemas import CreateAuditLogInput, CreateMediaInput, UpdateMediaInput
from blog_engine.serializers import serialize, serialize_with
from blog_engine.services import audit, media, query, relations
from blog_engine.store import Store

router = APIRouter(prefix="/media", tags=["media"])
audit_router = APIRouter(prefix="/audit-logs", tags=["audit"])


@router.get("")
def list_media(
    uploader_id: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=0),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    return serialize(query.list_media(store, uploader_id=uploader_id, limit=limit))


@router.get("/{media_id}")
def get_media(media_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    item = found(query.get_record(store, EntityKind.media, media_id), "Media", media_id)
    return serialize_with(item, uploader=relations.media_uploader(store, item))


@router.post("", status_code=201)
def create_media(data: CreateMediaInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(media.create_media(store, data))


@router.patch("/{media_id}")
def update_media(media_id: str, data: UpdateMediaInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(found(media.update_media(store, media_id, data), "Media", media_id))


@router.delete("/{media_id}")
def delete_media(media_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(media.delete_media(store, media_id))


@audit_router.get("")
def list_audit_logs(
    entity_type: Optional[str] = Query(None),
    entity_id: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=0),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    """Audit entries, newest first."""
    return serialize(query.list_audit_logs(store, entity_type=entity_type, entity_id=entity_id, limit=limit))


@audit_router.post("", status_code=201)
def record_audit(data: CreateAuditLogInput, store: Store = Depends(get_store)) -> Dict[str, Any]:
    return serialize(audit.record_audit(store, data))
