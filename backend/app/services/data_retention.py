"""
Retention sweep for anonymous quiz sessions.

Sessions older than the retention period are deleted outright; they carry no
user identity, so there is nothing to anonymize.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models import AnonymousQuizSession

logger = logging.getLogger(__name__)


def retention_cutoff(now: Optional[datetime] = None, period_days: Optional[int] = None) -> datetime:
    days = settings.RETENTION_PERIOD_DAYS if period_days is None else period_days
    return (now or datetime.utcnow()) - timedelta(days=days)


def cleanup_expired_sessions(
    db: Session,
    now: Optional[datetime] = None,
    period_days: Optional[int] = None,
) -> int:
    """Delete sessions older than the retention period. Returns the number deleted."""
    cutoff = retention_cutoff(now, period_days)
    deleted = (
        db.query(AnonymousQuizSession)
        .filter(AnonymousQuizSession.timestamp < cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("Retention sweep removed %d quiz sessions older than %s", deleted, cutoff.isoformat())
    return deleted


def get_retention_stats(
    db: Session,
    now: Optional[datetime] = None,
    period_days: Optional[int] = None,
) -> dict:
    cutoff = retention_cutoff(now, period_days)
    total = db.query(AnonymousQuizSession).count()
    expired = db.query(AnonymousQuizSession).filter(AnonymousQuizSession.timestamp < cutoff).count()
    return {
        "total_quiz_sessions": total,
        "expired_quiz_sessions": expired,
        "retention_period_days": settings.RETENTION_PERIOD_DAYS if period_days is None else period_days,
    }
