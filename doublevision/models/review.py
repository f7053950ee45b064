from sqlalchemy import Column, String, Integer, Float, ForeignKey, Enum, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
import enum
from .base import BaseModel


class ModerationStatus(enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Review(BaseModel):
    __tablename__ = 'reviews'
    
    photo_id = Column(Integer, ForeignKey('photos.id'), nullable=False, index=True)
    reviewer_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    
    score = Column(Integer, nullable=False)  # 0-100 scale
    comment = Column(String(5000), nullable=False)
    word_count = Column(Integer, nullable=False)
    
    # Moderation
    moderation_status = Column(Enum(ModerationStatus), default=ModerationStatus.PENDING, nullable=False, index=True)
    ai_analysis = Column(JSON)  # isOffensive, isAiGenerated, isRelevant, confidence, reasoning
    
    # Populated once the photo owner rates the review
    helpfulness_score = Column(Float)
    helpfulness_count = Column(Integer)
    
    # Relationships
    photo = relationship("Photo", back_populates="reviews")
    reviewer = relationship("User", back_populates="reviews_given")
    ratings = relationship("ReviewRating", back_populates="review", lazy='dynamic')
    
    __table_args__ = (
        UniqueConstraint('photo_id', 'reviewer_id', name='uq_review_photo_reviewer'),
    )
