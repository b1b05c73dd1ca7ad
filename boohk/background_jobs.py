"""
Background job scheduler for periodic tasks.
Uses APScheduler to sweep expired temp PDFs and expire stale quotations.
"""
import os
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from boohk.database import SessionLocal
from boohk.models import Quotation, CostEstimate
from boohk.services.lifecycle import expire_if_past_valid_until, RESPONDABLE_STATUSES
from boohk.services.temp_pdf import temp_pdf_store, SWEEP_INTERVAL_MINUTES
from boohk.timeutil import utc_now, get_app_tz

logger = logging.getLogger(__name__)

# Local hour of the daily expiry run
EXPIRY_HOUR = int(os.getenv("DOCUMENT_EXPIRY_HOUR", "1"))


class BackgroundJobScheduler:
    """Manages background jobs for the application."""

    def __init__(self):
        self.scheduler = BackgroundScheduler()
        self.temp_pdf_sweep_enabled = os.getenv('TEMP_PDF_SWEEP_ENABLED', 'true').lower() == 'true'
        self.expiry_enabled = os.getenv('DOCUMENT_EXPIRY_ENABLED', 'true').lower() == 'true'

    def register_jobs(self):
        """Add the enabled jobs to the scheduler."""
        if self.temp_pdf_sweep_enabled:
            self.scheduler.add_job(
                func=sweep_temp_pdfs_job,
                trigger=IntervalTrigger(minutes=SWEEP_INTERVAL_MINUTES),
                id='temp_pdf_sweep_job',
                name='Remove expired temporary PDFs',
                replace_existing=True
            )
            logger.info(f"Temp PDF sweep scheduled every {SWEEP_INTERVAL_MINUTES} minutes")

        if self.expiry_enabled:
            self.scheduler.add_job(
                func=expire_documents_job,
                trigger=CronTrigger(hour=EXPIRY_HOUR, minute=0, timezone=get_app_tz()),
                id='document_expiry_job',
                name='Expire quotations and cost estimates past valid_until',
                replace_existing=True
            )
            logger.info(f"Document expiry scheduled daily at {EXPIRY_HOUR:02d}:00")

    def start(self):
        """Start the background job scheduler."""
        if not self.scheduler.running:
            self.register_jobs()
            self.scheduler.start()
            logger.info("Background job scheduler started")

    def stop(self):
        """Stop the background job scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Background job scheduler stopped")


def sweep_temp_pdfs_job(store=None) -> int:
    store = store or temp_pdf_store
    return store.sweep()


def expire_documents_job(db=None) -> int:
    """
    Move sent/viewed quotations and cost estimates past valid_until to expired.

    Returns the number of documents expired.
    """
    logger.info("Starting document expiry job...")
    own_session = db is None
    db = db or SessionLocal()
    now = utc_now()
    expired = 0
    try:
        for model in (Quotation, CostEstimate):
            candidates = db.query(model).filter(
                model.deleted == False,
                model.status.in_(RESPONDABLE_STATUSES),
                model.valid_until.isnot(None),
                model.valid_until < now,
            ).all()
            for doc in candidates:
                if expire_if_past_valid_until(doc, now):
                    expired += 1
        db.commit()
        logger.info(f"Document expiry completed: {expired} expired")
    except Exception as e:
        db.rollback()
        logger.error(f"Document expiry job failed: {str(e)}")
    finally:
        if own_session:
            db.close()
    return expired


# Global scheduler instance
scheduler = BackgroundJobScheduler()
