from sqlalchemy import Column, String, Integer, DateTime, Enum
from sqlalchemy.orm import relationship
import enum
from doublevision.utils.context import utcnow
from .base import BaseModel


class UserRole(enum.Enum):
    MEMBER = "member"
    ADMIN = "admin"


class User(BaseModel):
    __tablename__ = 'users'
    
    # Basic Info
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    image = Column(String(500))
    role = Column(Enum(UserRole), default=UserRole.MEMBER, nullable=False)
    joined_at = Column(DateTime, default=utcnow, nullable=False)
    
    # Reputation
    elo_rating = Column(Integer, default=1000, nullable=False)
    total_reviews = Column(Integer, default=0, nullable=False)
    photo_count = Column(Integer, default=0, nullable=False)
    last_upload = Column(DateTime)
    
    # Moderation strikes (reset after timeout)
    strikes = Column(Integer, default=0, nullable=False)
    strike_timeout = Column(DateTime)  # When timeout expires, null if not timed out
    last_strike_date = Column(DateTime)
    
    # Relationships
    photos = relationship("Photo", back_populates="owner", lazy='dynamic')
    assignments = relationship("ReviewAssignment", back_populates="user", lazy='dynamic')
    reviews_given = relationship("Review", back_populates="reviewer", lazy='dynamic')
