"""Audit logging service.

Entries are written in the caller's session and committed with the change
they describe, so a rolled back operation leaves no audit trail behind.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from restops.models.audit import AuditLog

logger = logging.getLogger("audit")

ACTIONS = {"CREATE", "UPDATE", "DELETE", "WASTE", "SHIFT_CLOSE", "INVOICE_ADD", "PRODUCE", "SALE"}
ENTITIES = {"MENU", "INVENTORY", "EXPENSE", "SHIFT", "INVOICE", "PREP", "SALE", "SUPPLIER"}


def log_action(
    db: Session,
    action: str,
    entity: str,
    details: str = "",
    user_name: Optional[str] = None,
) -> AuditLog:
    """Write an audit log entry.

    Args:
        db: The caller's session. Only flushed here; the caller commits.
        action: One of ``ACTIONS``.
        entity: One of ``ENTITIES``.
        details: Human-readable description of the change.
        user_name: Operator that performed the action, if known.
    """
    if action not in ACTIONS:
        raise ValueError(f"Unknown audit action {action!r}")
    if entity not in ENTITIES:
        raise ValueError(f"Unknown audit entity {entity!r}")

    entry = AuditLog(action=action, entity=entity, details=details, user_name=user_name)
    db.add(entry)
    db.flush()
    logger.info("%s %s: %s", action, entity, details)
    return entry


def recent_entries(db: Session, skip: int = 0, limit: int = 100) -> tuple[list[AuditLog], int]:
    """Newest entries first, with the total number of entries."""
    query = db.query(AuditLog)
    total = query.count()
    rows = query.order_by(AuditLog.timestamp.desc()).offset(skip).limit(limit).all()
    return rows, total
