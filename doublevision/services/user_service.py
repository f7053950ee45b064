from typing import Dict, Optional
from doublevision.database import DatabaseManager, get_db
from doublevision.models import User
from doublevision.utils.context import utcnow
from doublevision.utils.logger import get_logger

logger = get_logger(__name__)


class UserService:
    """Service for user reputation and counters"""
    
    def __init__(self):
        self.user_db = DatabaseManager(User)
    
    def get_user(self, user_id: int) -> Optional[User]:
        return self.user_db.get(user_id)
    
    def get_user_profile(self, user_id: int) -> Dict:
        """Get user profile data"""
        user = self.user_db.get(user_id)
        if not user:
            return {'error': 'User not found', 'status': 404}
        
        return {
            'id': user.id,
            'name': user.name,
            'email': user.email,
            'image': user.image,
            'role': user.role.value,
            'eloRating': user.elo_rating,
            'totalReviews': user.total_reviews,
            'photoCount': user.photo_count,
            'strikes': user.strikes,
            'joinedAt': user.joined_at.isoformat(),
            'lastUpload': user.last_upload.isoformat() if user.last_upload else None
        }
    
    def adjust_elo(self, user_id: int, delta: int) -> bool:
        """Atomically add delta to a user's ELO rating"""
        return self.user_db.increment(user_id, elo_rating=int(delta)) > 0
    
    def increment_review_count(self, user_id: int) -> bool:
        return self.user_db.increment(user_id, total_reviews=1) > 0
    
    def record_upload(self, user_id: int, now=None) -> bool:
        """Bump photo count and stamp the upload time"""
        now = now or utcnow()
        with get_db() as db:
            updated = db.query(User).filter(User.id == user_id).update(
                {User.photo_count: User.photo_count + 1, User.last_upload: now},
                synchronize_session=False
            )
        return updated > 0
    
    def can_user_upload_today(self, user_id: int, now=None) -> bool:
        """One photo per UTC calendar day"""
        now = now or utcnow()
        user = self.user_db.get(user_id)
        if not user:
            return False
        if not user.last_upload:
            return True
        return user.last_upload.date() < now.date()
