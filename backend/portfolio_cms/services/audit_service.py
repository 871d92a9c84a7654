"""Audit logging service: records privileged and workflow operations.

Entries are immutable. The service provides a write-only interface for the
application and a read interface for super admins.

Usage in service layer (after the main transaction has committed):
    audit_service.log(db, user_id=actor.id, action="approve", resource_type="portfolio",
                      resource_id=portfolio.id, details={"from": "READY_FOR_REVIEW"})
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import sqlalchemy.exc
from sqlalchemy.orm import Session

from ..models.user import AuditLog

logger = logging.getLogger(__name__)


def log(
    db: Session,
    user_id: Optional[str],
    action: str,
    resource_type: str,
    resource_id: Optional[str] = None,
    details: Optional[dict] = None,
    ip_address: Optional[str] = None,
) -> None:
    """Write an audit log entry. Audit failures are logged but don't break operations."""
    try:
        entry = AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=json.dumps(details) if details else None,
            ip_address=ip_address,
        )
        db.add(entry)
        db.commit()
    except sqlalchemy.exc.SQLAlchemyError as e:
        logger.warning("Failed to write audit log: %s", e)
        db.rollback()


def get_recent(
    db: Session,
    limit: int = 100,
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
) -> list[AuditLog]:
    """Most recent entries, optionally narrowed to one resource type or resource."""
    query = db.query(AuditLog)
    if resource_type:
        query = query.filter(AuditLog.resource_type == resource_type)
    if resource_id:
        query = query.filter(AuditLog.resource_id == resource_id)
    return query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).all()


def purge_old_entries(db: Session, retention_days: int) -> int:
    """Delete audit log entries older than retention_days.

    Returns the number of deleted entries. 0 = keep forever.
    """
    if retention_days <= 0:
        return 0
    cutoff = datetime.now(timezone.utc) - timedelta(days=retention_days)
    count = db.query(AuditLog).filter(AuditLog.created_at < cutoff).delete()
    db.commit()
    if count:
        logger.info(f"Purged {count} audit log entries older than {retention_days} days")
    return count
