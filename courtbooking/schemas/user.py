from typing import Optional
from pydantic import BaseModel, EmailStr, UUID4
from datetime import datetime

from courtbooking.models.user import UserRole


# Shared properties
class UserBase(BaseModel):
    email: EmailStr
    full_name: str
    phone: Optional[str] = None
    role: UserRole = UserRole.MEMBER


# Properties to receive via API on creation (POST /admin/users)
class UserCreate(UserBase):
    pass


class User(UserBase):
    id: UUID4
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


# Compact user for nested responses
class UserSummary(BaseModel):
    id: UUID4
    full_name: str
    email: str

    class Config:
        from_attributes = True
