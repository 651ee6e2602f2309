# blog_engine/services/audit.py
"""Append-only audit trail."""

import json
import logging
from dataclasses import asdict
from typing import Any, Optional

from blog_engine.models import AuditLog, EntityKind
from blog_engine.schemas import CreateAuditLogInput
from blog_engine.store import Store

logger = logging.getLogger(__name__)


def snapshot(record: Optional[Any]) -> Optional[str]:
    """JSON snapshot of a record for old_value / new_value."""
    if record is None:
        return None
    return json.dumps(asdict(record), sort_keys=True, default=str)


def record_audit(store: Store, data: CreateAuditLogInput) -> AuditLog:
    """
    Append an entry to the audit log.

    Args:
        store: Entity store
        data: Who did what to which entity, with optional JSON snapshots

    Returns:
        The created AuditLog entry
    """
    with store.transaction():
        entry = store.put(AuditLog(
            id=store.new_id(EntityKind.audit_log),
            user_id=data.user_id,
            action=data.action,
            entity_type=data.entity_type,
            entity_id=data.entity_id,
            created_at=store.now(),
            old_value=data.old_value,
            new_value=data.new_value,
            ip_address=data.ip_address,
            user_agent=data.user_agent,
        ))

    logger.info("Audit %s: %s %s/%s by user %s", entry.id, entry.action, entry.entity_type, entry.entity_id, entry.user_id)
    return entry
