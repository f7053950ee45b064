from sqlalchemy import Column, Integer, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import BaseModel


class ReviewRating(BaseModel):
    __tablename__ = 'review_ratings'
    
    review_id = Column(Integer, ForeignKey('reviews.id'), nullable=False, index=True)
    photo_id = Column(Integer, ForeignKey('photos.id'), nullable=False, index=True)
    rated_by = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    
    # Multi-dimensional ratings, 1-5 each
    specificity_score = Column(Integer, nullable=False)  # How detailed and specific
    constructiveness_score = Column(Integer, nullable=False)  # How actionable
    relevance_score = Column(Integer, nullable=False)  # How relevant to the photo
    overall_quality = Column(Float, nullable=False)  # Mean of the three
    
    # Relationships
    review = relationship("Review", back_populates="ratings")
    
    __table_args__ = (
        UniqueConstraint('review_id', 'rated_by', name='uq_rating_review_rater'),
    )
