import os
import uuid
from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy import func
from doublevision.database import DatabaseManager, get_db
from doublevision.models import Photo, Review
from doublevision.models.photo import PhotoStatus
from doublevision.models.review import ModerationStatus
from doublevision.services.assignment_service import AssignmentService
from doublevision.services.user_service import UserService
from doublevision.utils.context import RequestContext, utcnow
from config.config import Config
from doublevision.utils.logger import get_logger

logger = get_logger(__name__)


class LocalPhotoStorage:
    """Stores uploaded images on local disk and returns their public URL"""
    
    def __init__(self, folder: str = None, url_prefix: str = '/uploads'):
        self.folder = folder or Config.UPLOAD_FOLDER
        self.url_prefix = url_prefix
    
    def save(self, file, filename: str) -> str:
        os.makedirs(self.folder, exist_ok=True)
        file.save(os.path.join(self.folder, filename))
        return f"{self.url_prefix}/{filename}"


class PhotoService:
    """Service for photo uploads, review statistics and owner feedback"""
    
    def __init__(self, storage=None):
        self.photo_db = DatabaseManager(Photo)
        self.user_service = UserService()
        self.assignment_service = AssignmentService()
        self.storage = storage or LocalPhotoStorage()
    
    def upload_photo(self, ctx: RequestContext, file) -> Dict:
        """Store an uploaded image and create its photo record"""
        if not self.user_service.can_user_upload_today(ctx.user_id, now=ctx.now):
            return {
                'error': "You've already uploaded a photo today. Come back tomorrow!",
                'status': 403
            }
        
        if file is None or not getattr(file, 'filename', None):
            return {'error': 'No photo provided.', 'status': 400}
        
        if file.mimetype not in Config.ALLOWED_IMAGE_TYPES:
            return {'error': 'Invalid file type. Please upload a JPEG, PNG, or WebP image.', 'status': 400}
        
        size = self._file_size(file)
        if size > Config.MAX_UPLOAD_BYTES:
            return {'error': 'File too large. Maximum size is 10MB.', 'status': 400}
        
        extension = file.filename.rsplit('.', 1)[-1].lower() if '.' in file.filename else 'jpg'
        filename = f"{ctx.user_id}-{int(ctx.now.timestamp())}-{uuid.uuid4().hex[:8]}.{extension}"
        image_url = self.storage.save(file, filename)
        
        photo = self.photo_db.create(
            user_id=ctx.user_id,
            image_url=image_url,
            upload_date=ctx.now
        )
        self.user_service.record_upload(ctx.user_id, now=ctx.now)
        
        logger.info(f"User {ctx.user_id} uploaded photo {photo.id}")
        return {
            'photo': {
                'id': photo.id,
                'imageUrl': photo.image_url,
                'uploadDate': photo.upload_date.isoformat()
            }
        }
    
    def increment_photo_review_count(self, photo_id: int, score: int) -> bool:
        """Atomically bump the review counter and fold score into the running average"""
        with get_db() as db:
            updated = db.query(Photo).filter(
                Photo.id == photo_id,
                Photo.status != PhotoStatus.ARCHIVED
            ).update({
                Photo.average_score: (
                    func.coalesce(Photo.average_score, 0.0) * Photo.reviews_received + score
                ) / (Photo.reviews_received + 1),
                Photo.reviews_received: Photo.reviews_received + 1
            }, synchronize_session=False)
            
            db.query(Photo).filter(
                Photo.id == photo_id,
                Photo.status == PhotoStatus.PENDING,
                Photo.reviews_received >= Config.REVIEWS_PER_PHOTO
            ).update({Photo.status: PhotoStatus.REVIEWED}, synchronize_session=False)
        
        return updated > 0
    
    def recalculate_photo_stats(self, photo_id: int) -> Optional[Dict]:
        """Recompute count and average from approved reviews; returns the change if any"""
        with get_db() as db:
            photo = db.query(Photo).filter_by(id=photo_id).first()
            if not photo or photo.status == PhotoStatus.ARCHIVED:
                return None
            return self._repair(db, photo)
    
    def fix_review_counts(self) -> Dict:
        """Repair every photo's review statistics"""
        updates = []
        with get_db() as db:
            photos = db.query(Photo).filter(Photo.status != PhotoStatus.ARCHIVED).all()
            for photo in photos:
                change = self._repair(db, photo)
                if change:
                    updates.append(change)
        
        logger.info(f"Fixed {len(updates)} out of {len(photos)} photos")
        return {
            'message': f"Fixed {len(updates)} out of {len(photos)} photos",
            'updates': updates
        }
    
    def get_photo_feedback(self, ctx: RequestContext, photo_id: int) -> Dict:
        """Owner's view of the approved reviews on one of their photos"""
        photo = self.photo_db.get(photo_id)
        if not photo:
            return {'error': 'Photo not found', 'status': 404}
        
        if photo.user_id != ctx.user_id:
            return {'error': 'You can only view feedback on your own photos', 'status': 403}
        
        if not self.assignment_service.has_completed_minimum_reviews(ctx.user_id):
            return {
                'error': f"Complete {Config.MIN_REVIEWS_FOR_FEEDBACK} reviews to unlock your feedback",
                'status': 403
            }
        
        with get_db() as db:
            reviews = db.query(Review).filter(
                Review.photo_id == photo_id,
                Review.moderation_status == ModerationStatus.APPROVED
            ).order_by(Review.created_at.asc(), Review.id.asc()).all()
        
        return {
            'photo': self.serialize_photo(photo),
            'reviews': [
                {
                    'id': review.id,
                    'score': review.score,
                    'comment': review.comment,
                    'wordCount': review.word_count,
                    'createdAt': review.created_at.isoformat()
                }
                for review in reviews
            ],
            'canRate': len(reviews) == Config.REVIEWS_PER_PHOTO and not photo.all_reviews_rated
        }
    
    def get_user_photo_analytics(self, user_id: int, now: Optional[datetime] = None) -> Dict:
        """Score highlights across a user's photos"""
        now = now or utcnow()
        photos = self._user_photos(user_id)
        
        start_of_month = datetime(now.year, now.month, 1)
        start_of_year = datetime(now.year, 1, 1)
        
        reviewed = [p for p in photos if p.average_score is not None]
        this_month = [p.average_score for p in reviewed if p.upload_date >= start_of_month]
        this_year = [p.average_score for p in reviewed if p.upload_date >= start_of_year]
        latest = photos[0] if photos else None
        
        return {
            'latestPhotoScore': latest.average_score if latest else None,
            'latestPhotoDate': latest.upload_date.isoformat() if latest else None,
            'highestScoreThisMonth': max(this_month) if this_month else None,
            'highestScoreThisYear': max(this_year) if this_year else None,
            'highestScoreAllTime': max(p.average_score for p in reviewed) if reviewed else None,
            'averageScoreOverall': (
                sum(p.average_score for p in reviewed) / len(reviewed) if reviewed else None
            ),
            'totalPhotos': len(photos),
            'totalReviewed': len(reviewed)
        }
    
    def get_user_score_distribution(self, user_id: int) -> Dict:
        """Bucket a user's reviewed photos by average score"""
        distribution = {'excellent': 0, 'good': 0, 'average': 0, 'belowAverage': 0, 'poor': 0}
        
        for photo in self._user_photos(user_id):
            score = photo.average_score
            if score is None:
                continue
            if score >= 90:
                distribution['excellent'] += 1
            elif score >= 75:
                distribution['good'] += 1
            elif score >= 60:
                distribution['average'] += 1
            elif score >= 40:
                distribution['belowAverage'] += 1
            else:
                distribution['poor'] += 1
        
        return distribution
    
    @staticmethod
    def serialize_photo(photo: Photo) -> Dict:
        return {
            'id': photo.id,
            'imageUrl': photo.image_url,
            'uploadDate': photo.upload_date.isoformat(),
            'reviewsReceived': photo.reviews_received,
            'averageScore': photo.average_score,
            'status': photo.status.value,
            'allReviewsRated': photo.all_reviews_rated,
            'reviewsRatedCount': photo.reviews_rated_count
        }
    
    def _user_photos(self, user_id: int) -> List[Photo]:
        with get_db() as db:
            return db.query(Photo).filter(
                Photo.user_id == user_id
            ).order_by(Photo.upload_date.desc(), Photo.id.desc()).all()
    
    def _repair(self, db, photo: Photo) -> Optional[Dict]:
        count, average = db.query(
            func.count(Review.id), func.avg(Review.score)
        ).filter(
            Review.photo_id == photo.id,
            Review.moderation_status == ModerationStatus.APPROVED
        ).one()
        average = float(average) if average is not None else None
        
        if photo.reviews_received == count and photo.average_score == average:
            return None
        
        change = {
            'photoId': photo.id,
            'reviewsBefore': photo.reviews_received,
            'reviewsAfter': count,
            'avgScoreBefore': photo.average_score,
            'avgScoreAfter': average
        }
        photo.reviews_received = count
        photo.average_score = average
        if photo.status == PhotoStatus.PENDING and count >= Config.REVIEWS_PER_PHOTO:
            photo.status = PhotoStatus.REVIEWED
        elif photo.status == PhotoStatus.REVIEWED and count < Config.REVIEWS_PER_PHOTO:
            photo.status = PhotoStatus.PENDING
        
        logger.info(
            f"Repaired photo {photo.id}: reviews {change['reviewsBefore']} -> {count}, "
            f"average {change['avgScoreBefore']} -> {average}"
        )
        return change
    
    @staticmethod
    def _file_size(file) -> int:
        stream = file.stream
        position = stream.tell()
        stream.seek(0, os.SEEK_END)
        size = stream.tell()
        stream.seek(position)
        return size
