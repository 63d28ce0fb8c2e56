from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from courtbooking.db.session import get_db
from courtbooking.api.deps import require_admin
from courtbooking.models.user import User
from courtbooking.schemas.user import User as UserSchema, UserCreate
from courtbooking.schemas.common import PaginatedResponse

router = APIRouter(
    prefix="/admin/users",
    tags=["Admin - Users"],
    dependencies=[Depends(require_admin)],
)


@router.post("/", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
def create_user(body: UserCreate, db: Session = Depends(get_db)):
    if db.query(User).filter(User.email == body.email).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    user = User(**body.model_dump())
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.get("/", response_model=PaginatedResponse[UserSchema])
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    query = db.query(User).filter(User.is_active == True)  # noqa: E712
    total = query.count()
    users = query.order_by(User.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return PaginatedResponse(
        data=users,
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )
