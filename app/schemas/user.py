from pydantic import BaseModel, EmailStr, Field
from uuid import UUID
from datetime import datetime
from typing import Optional

from app.models.user import UserType, Gender


class UserBase(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)


class UserCreate(UserBase):
    password: str = Field(..., min_length=8)
    user_type: UserType = UserType.STUDENT
    gender: Optional[Gender] = None
    religion: Optional[str] = Field(None, max_length=50)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(UserBase):
    id: UUID
    user_type: UserType
    gender: Optional[str] = None
    religion: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UserSummaryResponse(BaseModel):
    id: UUID
    name: str
    email: str
    gender: Optional[str] = None
    religion: Optional[str] = None

    class Config:
        from_attributes = True


class UserProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    gender: Optional[Gender] = None
    religion: Optional[str] = Field(None, max_length=50)


class UserProfileResponse(BaseModel):
    id: UUID
    name: str
    email: str
    user_type: UserType
    gender: Optional[str] = None
    religion: Optional[str] = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: UUID
    name: str
    email: str
    user_type: UserType
