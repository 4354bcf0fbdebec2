from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from app.database import get_db
from app.core.deps import get_current_user, require_user_type
from app.models.property import Property
from app.models.review import Review
from app.models.user import User, UserType
from app.schemas.review import ReviewCreate, ReviewUpdate, ReviewResponse, PropertyReviewsResponse

router = APIRouter()
logger = logging.getLogger(__name__)


def _own_review(db: Session, review_id: UUID, user: User) -> Review:
    review = db.get(Review, review_id)
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    if review.user_id != user.id:
        raise HTTPException(status_code=403, detail="You can only change your own reviews")
    return review


@router.get("/", response_model=PropertyReviewsResponse)
def list_reviews(
    property_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Reviews for a property, newest first, with the average rating"""
    if not db.get(Property, property_id):
        raise HTTPException(status_code=404, detail="Property not found")

    reviews = db.execute(
        select(Review)
        .where(Review.property_id == property_id)
        .order_by(Review.created_at.desc())
    ).scalars().all()
    average = round(sum(r.rating for r in reviews) / len(reviews), 1) if reviews else 0
    return {
        "property_id": property_id,
        "total_reviews": len(reviews),
        "average_rating": average,
        "reviews": reviews,
    }


@router.post("/", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(
    review_in: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user_type(UserType.STUDENT))
):
    """Review a property (students only, once per property)"""
    if not db.get(Property, review_in.property_id):
        raise HTTPException(status_code=404, detail="Property not found")

    review = Review(**review_in.model_dump(), user_id=current_user.id)
    db.add(review)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=400,
            detail="You have already reviewed this property. Please edit your existing review."
        )
    db.refresh(review)
    logger.info(f"[REVIEW] Student {current_user.id} reviewed property {review.property_id}")
    return review


@router.put("/{review_id}", response_model=ReviewResponse)
def update_review(
    review_id: UUID,
    review_update: ReviewUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    review = _own_review(db, review_id, current_user)
    review.rating = review_update.rating
    review.comment = review_update.comment
    db.commit()
    db.refresh(review)
    return review


@router.delete("/{review_id}")
def delete_review(
    review_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    review = _own_review(db, review_id, current_user)
    db.delete(review)
    db.commit()
    return {"message": "Review deleted successfully"}
