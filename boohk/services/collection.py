"""
Collection Status Service

Rolls up the collectibles billed against a quotation into a
quotation-level collection status:
- fully_paid: every collectible is paid
- fully_collected: every collectible is paid or collected
- partially_overdue: at least one collectible is overdue
- partially_collected: at least one collectible is paid or collected
- pending_collection: nothing collected yet
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from boohk.models import Collectible, Quotation

logger = logging.getLogger(__name__)

COLLECTED_STATUSES = ("paid", "collected")
PENDING_STATUSES = ("pending", "overdue")


def calculate_collection_status(collectibles: Iterable) -> dict:
    """
    Summarize a set of collectibles.

    Args:
        collectibles: Objects (or dicts) with 'status' and 'total_amount'

    Returns:
        Dictionary with status, progress (0-100), total_collected,
        total_pending and per-status counts
    """
    counts = {"pending": 0, "collected": 0, "overdue": 0, "paid": 0}
    total_collected = Decimal("0")
    total_pending = Decimal("0")
    total = 0

    for collectible in collectibles:
        if isinstance(collectible, dict):
            status = collectible.get("status") or "pending"
            amount = collectible.get("total_amount")
        else:
            status = collectible.status or "pending"
            amount = collectible.total_amount

        amount = Decimal(str(amount or 0))
        total += 1
        if status in counts:
            counts[status] += 1
        if status in COLLECTED_STATUSES:
            total_collected += amount
        elif status in PENDING_STATUSES:
            total_pending += amount

    done = counts["paid"] + counts["collected"]
    progress = int((Decimal(done * 100) / total).quantize(Decimal("1"), rounding=ROUND_HALF_UP)) if total else 0

    if total and counts["paid"] == total:
        status = "fully_paid"
    elif total and done == total:
        status = "fully_collected"
    elif counts["overdue"] > 0:
        status = "partially_overdue"
    elif done > 0:
        status = "partially_collected"
    else:
        status = "pending_collection"

    return {
        "status": status,
        "progress": progress,
        "total_collected": total_collected,
        "total_pending": total_pending,
        "counts": counts,
    }


def update_quotation_collection_status(db: Session, quotation_id: str) -> Optional[dict]:
    """
    Recompute and store a quotation's collection rollup.

    Returns:
        The summary, or None if the quotation has no live collectibles
    """
    collectibles = (
        db.query(Collectible)
        .filter(Collectible.quotation_id == quotation_id, Collectible.deleted == False)
        .all()
    )
    if not collectibles:
        return None

    quotation = db.query(Quotation).filter(Quotation.id == quotation_id).first()
    if not quotation:
        logger.warning(f"Collectibles reference missing quotation {quotation_id}")
        return None

    summary = calculate_collection_status(collectibles)
    quotation.collection_status = summary["status"]
    quotation.collection_progress = summary["progress"]
    quotation.total_collected_amount = summary["total_collected"]
    quotation.total_pending_amount = summary["total_pending"]
    db.commit()

    logger.info(
        f"Quotation {quotation_id} collection status: {summary['status']} "
        f"({summary['progress']}%)"
    )
    return summary


def sync_collection_status_for_collectible(db: Session, collectible_id: str) -> Optional[dict]:
    """Refresh the parent quotation of a collectible. Errors are logged, not raised."""
    try:
        collectible = db.query(Collectible).filter(Collectible.id == collectible_id).first()
        if not collectible or not collectible.quotation_id:
            return None
        return update_quotation_collection_status(db, collectible.quotation_id)
    except Exception as e:
        db.rollback()
        logger.error(f"Error syncing collection status for collectible {collectible_id}: {e}")
        return None
