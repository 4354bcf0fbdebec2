from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import List

from app.models.user import UserType


class ReviewCreate(BaseModel):
    property_id: UUID
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""


class ReviewUpdate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""


class ReviewAuthor(BaseModel):
    id: UUID
    name: str
    user_type: UserType

    class Config:
        from_attributes = True


class ReviewResponse(BaseModel):
    id: UUID
    property_id: UUID
    user_id: UUID
    rating: int
    comment: str
    user: ReviewAuthor
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PropertyReviewsResponse(BaseModel):
    property_id: UUID
    total_reviews: int
    average_rating: float
    reviews: List[ReviewResponse]
