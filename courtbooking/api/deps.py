import secrets
from typing import Optional
from uuid import UUID

from fastapi import Header, HTTPException, status
from sqlalchemy.orm import Session, selectinload

from courtbooking.core.config import settings
from courtbooking.models.court import Court
from courtbooking.models.user import User
from courtbooking.schemas.common import ErrorResponse
from courtbooking.utils.booking_rules import CONFLICT_REASONS, RejectionReason, ValidationResult


def _valid_admin_key(key: Optional[str]) -> bool:
    return bool(key) and secrets.compare_digest(key, settings.ADMIN_SECRET_KEY)


def require_admin(x_admin_key: Optional[str] = Header(default=None)) -> None:
    """Gate for /admin routes: the X-Admin-Key header must match ADMIN_SECRET_KEY."""
    if not _valid_admin_key(x_admin_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin key",
        )


def is_admin_request(x_admin_key: Optional[str] = Header(default=None)) -> bool:
    return _valid_admin_key(x_admin_key)


def get_court_or_404(db: Session, court_id: UUID) -> Court:
    court = (
        db.query(Court)
        .options(selectinload(Court.peak_windows), selectinload(Court.blocks))
        .filter(Court.id == court_id)
        .first()
    )
    if not court:
        raise HTTPException(status_code=404, detail="Court not found")
    return court


def get_user_or_404(db: Session, user_id: UUID) -> User:
    user = db.query(User).filter(User.id == user_id, User.is_active == True).first()  # noqa: E712
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def rejection_error(result: ValidationResult) -> HTTPException:
    """Translate a policy rejection into the API's error body."""
    if result.reason in CONFLICT_REASONS:
        code = status.HTTP_409_CONFLICT
    elif result.reason == RejectionReason.NOT_BOOKING_OWNER:
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(
        status_code=code,
        detail=ErrorResponse(error=result.reason.value, message=result.message).model_dump(),
    )
