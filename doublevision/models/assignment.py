from sqlalchemy import Column, Integer, Boolean, ForeignKey, DateTime, Index, text
from sqlalchemy.orm import relationship
from doublevision.utils.context import utcnow
from .base import BaseModel


class ReviewAssignment(BaseModel):
    __tablename__ = 'review_assignments'
    
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    photo_id = Column(Integer, ForeignKey('photos.id'), nullable=False, index=True)
    
    # Status
    completed = Column(Boolean, default=False, nullable=False, index=True)
    
    # Timing
    assigned_at = Column(DateTime, default=utcnow, nullable=False)
    completed_at = Column(DateTime)
    
    # Relationships
    user = relationship("User", back_populates="assignments")
    photo = relationship("Photo", back_populates="assignments")
    
    # At most one active assignment per (user, photo)
    __table_args__ = (
        Index(
            'uq_active_assignment_user_photo', 'user_id', 'photo_id',
            unique=True,
            sqlite_where=text('completed = 0'),
            postgresql_where=text('completed = false')
        ),
    )
