from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from courtbooking.db.session import get_db
from courtbooking.api.deps import get_user_or_404
from courtbooking.models.notification import Notification
from courtbooking.schemas.notification import Notification as NotificationSchema
from courtbooking.schemas.common import PaginatedResponse

router = APIRouter(prefix="/users", tags=["Notifications"])


@router.get("/{user_id}/notifications", response_model=PaginatedResponse[NotificationSchema])
def list_notifications(
    user_id: UUID,
    unread_only: bool = Query(False, description="Return only unread notifications"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Return a user's notifications, newest first."""
    get_user_or_404(db, user_id)

    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read == False)  # noqa: E712

    total = query.count()
    notifications = (
        query.order_by(Notification.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return PaginatedResponse(
        data=notifications,
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )


@router.patch("/{user_id}/notifications/{notification_id}/read", response_model=NotificationSchema)
def mark_read(user_id: UUID, notification_id: UUID, db: Session = Depends(get_db)):
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id,
    ).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification
