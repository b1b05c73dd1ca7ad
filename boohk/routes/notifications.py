from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from boohk.auth import require_auth
from boohk.database import get_db
from boohk.models import Notification, User
from boohk.routes.helpers import get_or_404

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    limit: int = 50,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
):
    """Current user's notifications, unread first, newest first."""
    notifications = (
        db.query(Notification)
        .filter(Notification.user_id == user.id)
        .order_by(Notification.is_read.asc(), Notification.created_at.desc())
        .limit(min(max(limit, 1), 200))
        .all()
    )
    unread = db.query(Notification).filter(
        Notification.user_id == user.id, Notification.is_read == False
    ).count()
    return {"notifications": [n.to_dict() for n in notifications], "unreadCount": unread}


@router.post("/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
):
    notification = get_or_404(db, Notification, notification_id, "Notification")
    if notification.user_id != user.id:
        raise HTTPException(status_code=404, detail="Notification not found")

    notification.is_read = True
    db.commit()
    return {"success": True}
