"""
Sales Document Lifecycle

Status rules shared by quotations and cost estimates:
- draft -> sent when emailed to the client
- sent -> viewed the first time the client opens the public link
- sent/viewed -> accepted or rejected when the client responds
- sent/viewed -> expired once valid_until has passed
- accepted -> reserved when a booking is made (quotations only)
"""

from datetime import datetime
from typing import Optional

from boohk.timeutil import utc_now


class InvalidStatusTransition(ValueError):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change status from '{current}' to '{requested}'")


TRANSITIONS = {
    "draft": {"sent"},
    "sent": {"viewed", "accepted", "rejected", "expired"},
    "viewed": {"accepted", "rejected", "expired"},
    "accepted": {"reserved"},
    "rejected": set(),
    "expired": set(),
    "reserved": set(),
}

RESPONDABLE_STATUSES = ("sent", "viewed")
CLIENT_RESPONSES = {"accept": "accepted", "reject": "rejected"}


def can_transition(current: str, new_status: str) -> bool:
    """Check whether a move is allowed. Staying in place is always allowed."""
    if current == new_status:
        return True
    return new_status in TRANSITIONS.get(current, set())


def apply_transition(doc, new_status: str, allowed_statuses=None, now: Optional[datetime] = None):
    """
    Move a quotation or cost estimate to a new status.

    Args:
        doc: Model instance with a `status` attribute
        new_status: Target status
        allowed_statuses: Statuses valid for this document type (e.g. Quotation.STATUSES)
        now: Timestamp for sent_at/responded_at bookkeeping

    Returns:
        True if the status changed, False if it was already new_status

    Raises:
        InvalidStatusTransition: If the move is not allowed
    """
    if allowed_statuses is not None and new_status not in allowed_statuses:
        raise InvalidStatusTransition(doc.status, new_status)
    if doc.status == new_status:
        return False
    if not can_transition(doc.status, new_status):
        raise InvalidStatusTransition(doc.status, new_status)

    now = now or utc_now()
    doc.status = new_status

    if new_status == "sent":
        doc.sent_at = now
    elif new_status == "viewed":
        doc.viewed_at = now
    elif new_status in ("accepted", "rejected"):
        doc.responded_at = now

    return True


def mark_viewed(doc, now: Optional[datetime] = None) -> bool:
    """Record the first client view. Only a sent document becomes viewed."""
    if doc.status != "sent":
        return False
    return apply_transition(doc, "viewed", now=now)


def expire_if_past_valid_until(doc, now: Optional[datetime] = None) -> bool:
    """Expire a sent/viewed document whose validity window has passed."""
    now = now or utc_now()
    if doc.status not in RESPONDABLE_STATUSES:
        return False
    if doc.valid_until is None or doc.valid_until >= now:
        return False
    return apply_transition(doc, "expired", now=now)


def record_client_response(
    doc, action: str, reason: Optional[str] = None, now: Optional[datetime] = None
) -> str:
    """
    Apply a client's accept/reject decision.

    Returns:
        The new status

    Raises:
        ValueError: If the action is unknown
        InvalidStatusTransition: If the document is not awaiting a response
    """
    new_status = CLIENT_RESPONSES.get((action or "").lower())
    if new_status is None:
        raise ValueError("Action must be 'accept' or 'reject'")
    if doc.status not in RESPONDABLE_STATUSES:
        raise InvalidStatusTransition(doc.status, new_status)

    apply_transition(doc, new_status, now=now)
    if new_status == "rejected":
        doc.rejection_reason = (reason or "").strip() or None
    return new_status
