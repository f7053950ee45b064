from sqlalchemy import Column, String, Integer, Float, Boolean, ForeignKey, DateTime, Enum
from sqlalchemy.orm import relationship
import enum
from doublevision.utils.context import utcnow
from .base import BaseModel


class PhotoStatus(enum.Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    ARCHIVED = "archived"


class Photo(BaseModel):
    __tablename__ = 'photos'
    
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    image_url = Column(String(500), nullable=False)
    upload_date = Column(DateTime, default=utcnow, nullable=False, index=True)
    
    # Aggregate review statistics, repairable from approved reviews
    reviews_received = Column(Integer, default=0, nullable=False)
    average_score = Column(Float)  # Undefined until reviews exist
    status = Column(Enum(PhotoStatus), default=PhotoStatus.PENDING, nullable=False, index=True)
    
    # Quality rating
    all_reviews_rated = Column(Boolean, default=False, nullable=False)
    reviews_rated_count = Column(Integer, default=0, nullable=False)
    
    # Relationships
    owner = relationship("User", back_populates="photos")
    assignments = relationship("ReviewAssignment", back_populates="photo", lazy='dynamic')
    reviews = relationship("Review", back_populates="photo", lazy='dynamic')
