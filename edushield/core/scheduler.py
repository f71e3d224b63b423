"""APScheduler configuration for the nightly late-fee run."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from edushield.core.config import settings
from edushield.core.database import SessionLocal
from edushield.services.student_fee import StudentFeeService

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: AsyncIOScheduler | None = None


def get_db_session() -> Session:
    """Get a database session for scheduler jobs."""
    return SessionLocal()


def calculate_late_fees_job():
    """
    Re-derive fines and payment status for every overdue fee.
    Runs shortly after midnight every day.
    """
    logger.info("Starting late fee calculation job")

    db = get_db_session()
    try:
        service = StudentFeeService(db)
        count = service.calculate_late_fees()
        db.commit()
        logger.info(f"Late fee job updated {count} fee(s)")
    except Exception as e:
        logger.exception(f"Error calculating late fees: {e}")
        db.rollback()
    finally:
        db.close()


def init_scheduler() -> AsyncIOScheduler:
    """Initialize and configure the scheduler."""
    global scheduler

    scheduler = AsyncIOScheduler(
        timezone=settings.SCHEDULER_TIMEZONE,
        job_defaults={
            "coalesce": True,  # Combine missed runs
            "max_instances": 1,
            "misfire_grace_time": 3600,
        },
    )

    scheduler.add_job(
        calculate_late_fees_job,
        trigger=CronTrigger(hour=0, minute=5),
        id="calculate_late_fees",
        name="Calculate late fees",
        replace_existing=True,
    )

    logger.info(f"Scheduler initialized with late fee job ({settings.SCHEDULER_TIMEZONE})")
    return scheduler


def start_scheduler():
    """Start the scheduler."""
    global scheduler
    if scheduler is None:
        scheduler = init_scheduler()

    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started")


def stop_scheduler():
    """Stop the scheduler gracefully."""
    global scheduler
    if scheduler and scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler stopped")
