"""
Background scheduler for periodic maintenance.

Uses APScheduler to run the quiz session retention sweep once a day.
"""
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session
from app.database import SessionLocal
from app.services.data_retention import cleanup_expired_sessions

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def retention_sweep_job():
    """Delete anonymous quiz sessions past the retention period. Runs daily at 03:00 UTC."""
    logger.info("Running quiz session retention sweep")

    db: Session = SessionLocal()
    try:
        deleted = cleanup_expired_sessions(db)
        logger.info(f"Retention sweep completed: deleted={deleted}")
    except Exception as e:
        db.rollback()
        logger.exception(f"Retention sweep failed: {e}")
    finally:
        db.close()


def start_scheduler():
    """Start the background scheduler. Called from the FastAPI startup event."""
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already running")
        return

    logger.info("Starting background scheduler")
    scheduler = BackgroundScheduler()

    scheduler.add_job(
        retention_sweep_job,
        trigger=CronTrigger(hour=3, minute=0),
        id="quiz_session_retention_sweep",
        name="Delete expired anonymous quiz sessions",
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Background scheduler started with retention sweep job")


def stop_scheduler():
    """Stop the background scheduler. Called from the FastAPI shutdown event."""
    global scheduler

    if scheduler is not None:
        logger.info("Stopping background scheduler")
        scheduler.shutdown()
        scheduler = None
