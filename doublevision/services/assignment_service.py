from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from doublevision.database import DatabaseManager, get_db
from doublevision.models import Photo, Review, ReviewAssignment
from doublevision.models.photo import PhotoStatus
from doublevision.models.review import ModerationStatus
from doublevision.utils.context import RequestContext, utcnow
from config.config import Config
from doublevision.utils.logger import get_logger

logger = get_logger(__name__)


class AssignmentService:
    """Service for distributing photos to reviewers"""
    
    def __init__(self):
        self.assignment_db = DatabaseManager(ReviewAssignment)
        self.photo_db = DatabaseManager(Photo)
    
    def get_pending_assignments(self, user_id: int) -> List[ReviewAssignment]:
        """Incomplete assignments for a user, oldest first"""
        with get_db() as db:
            return db.query(ReviewAssignment).filter(
                ReviewAssignment.user_id == user_id,
                ReviewAssignment.completed == False
            ).order_by(ReviewAssignment.assigned_at.asc(), ReviewAssignment.id.asc()).all()
    
    def assign_photos_to_reviewer(self, user_id: int, count: int,
                                  now: Optional[datetime] = None) -> List[ReviewAssignment]:
        """Assign up to count photos, least-reviewed and oldest first.
        
        Returns as many assignments as there are eligible photos, possibly
        none.
        """
        now = now or utcnow()
        if count <= 0:
            return []
        
        candidates = self._find_candidate_photos(user_id, count * 3)
        logger.info(f"Found {len(candidates)} candidate photos for reviewer {user_id}")
        
        assignments = []
        for photo_id in candidates:
            if len(assignments) >= count:
                break
            
            assignment = self._create_assignment(user_id, photo_id, now)
            if assignment:
                assignments.append(assignment)
        
        logger.info(f"Assigned {len(assignments)} photos to reviewer {user_id}")
        return assignments
    
    def is_photo_assigned_to_user(self, user_id: int, photo_id: int) -> bool:
        """True when an active assignment exists for the pair"""
        return self.assignment_db.exists(user_id=user_id, photo_id=photo_id, completed=False)
    
    def mark_assignment_complete(self, user_id: int, photo_id: int,
                                 now: Optional[datetime] = None) -> bool:
        """Complete the active assignment for the pair; no-op when there is none"""
        now = now or utcnow()
        with get_db() as db:
            updated = db.query(ReviewAssignment).filter(
                ReviewAssignment.user_id == user_id,
                ReviewAssignment.photo_id == photo_id,
                ReviewAssignment.completed == False
            ).update({
                ReviewAssignment.completed: True,
                ReviewAssignment.completed_at: now
            }, synchronize_session=False)
        
        if updated:
            logger.info(f"Assignment of photo {photo_id} to user {user_id} completed")
        return updated > 0
    
    def get_user_assignment_stats(self, user_id: int) -> Dict:
        """Completed vs pending counts for progress display"""
        completed = self.assignment_db.count(user_id=user_id, completed=True)
        pending = self.assignment_db.count(user_id=user_id, completed=False)
        return {
            'completed': completed,
            'pending': pending,
            'total': completed + pending
        }
    
    def has_completed_minimum_reviews(self, user_id: int) -> bool:
        """Gate for viewing feedback on one's own photos"""
        completed = self.assignment_db.count(user_id=user_id, completed=True)
        return completed >= Config.MIN_REVIEWS_FOR_FEEDBACK
    
    def get_assignments_for_user(self, ctx: RequestContext) -> Dict:
        """Pending assignments with photo details, creating a batch when none are pending"""
        assignments = self.get_pending_assignments(ctx.user_id)
        
        if not assignments:
            assignments = self.assign_photos_to_reviewer(
                ctx.user_id, Config.ASSIGNMENTS_PER_BATCH, now=ctx.now
            )
        
        stats = self.get_user_assignment_stats(ctx.user_id)
        
        if not assignments:
            return {
                'assignments': [],
                'stats': stats,
                'message': 'No photos available for review right now. Check back later!'
            }
        
        photo_ids = [a.photo_id for a in assignments]
        with get_db() as db:
            photos = {
                p.id: p for p in db.query(Photo).filter(Photo.id.in_(photo_ids)).all()
            }
        
        results = []
        for assignment in assignments:
            photo = photos.get(assignment.photo_id)
            results.append({
                'assignmentId': assignment.id,
                'photoId': assignment.photo_id,
                'assignedAt': assignment.assigned_at.isoformat(),
                'completed': assignment.completed,
                'photo': {
                    'imageUrl': photo.image_url,
                    'uploadDate': photo.upload_date.isoformat(),
                    'reviewsReceived': photo.reviews_received
                } if photo else None
            })
        
        return {'assignments': results, 'stats': stats}
    
    def _find_candidate_photos(self, user_id: int, limit: int) -> List[int]:
        """Eligible photo ids ordered by load, then upload age"""
        with get_db() as db:
            active = select(
                ReviewAssignment.photo_id.label('photo_id'),
                func.count(ReviewAssignment.id).label('n')
            ).where(
                ReviewAssignment.completed == False
            ).group_by(ReviewAssignment.photo_id).subquery()
            
            live = select(
                Review.photo_id.label('photo_id'),
                func.count(Review.id).label('n')
            ).where(
                Review.moderation_status != ModerationStatus.REJECTED
            ).group_by(Review.photo_id).subquery()
            
            already_assigned = select(ReviewAssignment.photo_id).where(
                ReviewAssignment.user_id == user_id
            )
            already_reviewed = select(Review.photo_id).where(Review.reviewer_id == user_id)
            
            active_count = func.coalesce(active.c.n, 0)
            live_count = func.coalesce(live.c.n, 0)
            
            rows = db.query(Photo.id).outerjoin(
                active, active.c.photo_id == Photo.id
            ).outerjoin(
                live, live.c.photo_id == Photo.id
            ).filter(
                Photo.user_id != user_id,
                Photo.status != PhotoStatus.ARCHIVED,
                Photo.id.not_in(already_assigned),
                Photo.id.not_in(already_reviewed),
                active_count + live_count < Config.REVIEWS_PER_PHOTO
            ).order_by(
                (active_count + live_count).asc(),
                active_count.asc(),
                Photo.upload_date.asc(),
                Photo.id.asc()
            ).limit(limit).all()
            
            return [row[0] for row in rows]
    
    def _photo_load(self, db, photo_id: int) -> int:
        """Live reviewer load: active assignments plus non-rejected reviews"""
        active = db.query(ReviewAssignment).filter(
            ReviewAssignment.photo_id == photo_id,
            ReviewAssignment.completed == False
        ).count()
        live = db.query(Review).filter(
            Review.photo_id == photo_id,
            Review.moderation_status != ModerationStatus.REJECTED
        ).count()
        return active + live
    
    def _create_assignment(self, user_id: int, photo_id: int,
                           now: datetime) -> Optional[ReviewAssignment]:
        """Create an assignment record after re-checking the photo's live load"""
        try:
            with get_db() as db:
                if self._photo_load(db, photo_id) >= Config.REVIEWS_PER_PHOTO:
                    logger.info(f"Photo {photo_id} reached its reviewer quota, skipping")
                    return None
                
                assignment = ReviewAssignment(
                    user_id=user_id,
                    photo_id=photo_id,
                    completed=False,
                    assigned_at=now
                )
                db.add(assignment)
                db.flush()
                db.refresh(assignment)
                return assignment
                
        except IntegrityError:
            logger.warning(f"Photo {photo_id} already actively assigned to user {user_id}")
            return None
