from collections import defaultdict
from typing import Dict, List
from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from doublevision.database import DatabaseManager, get_db
from doublevision.models import Photo, Review, ReviewRating, User
from doublevision.models.review import ModerationStatus
from doublevision.schemas import ReviewRatingSubmission, first_error
from doublevision.models.photo import PhotoStatus
from doublevision.schemas.rating import RATING_FIELD_MESSAGES, RATING_TYPE_MESSAGES
from doublevision.services.scoring import overall_quality, quality_elo_change
from doublevision.services.user_service import UserService
from doublevision.utils.context import RequestContext
from doublevision.utils.side_effects import best_effort
from config.config import Config
from doublevision.utils.logger import get_logger

logger = get_logger(__name__)


class ReviewRatingService:
    """Blind quality rating of the five reviews a photo received.

    The owner scores each review on specificity, constructiveness and
    relevance (1-5). Each review's mean quality moves its author's ELO by
    ``round((quality - 3) * 15)``; reviewer identities are revealed only in
    the response to a successful rating.
    """

    def __init__(self):
        self.photo_db = DatabaseManager(Photo)
        self.rating_db = DatabaseManager(ReviewRating)
        self.user_service = UserService()

    def submit_ratings(self, ctx: RequestContext, payload) -> Dict:
        """Rate all five approved reviews on one of the requester's photos"""
        if (not isinstance(payload, dict) or not payload.get('photoId')
                or not isinstance(payload.get('ratings'), list)):
            return {'error': 'Missing photoId or ratings array', 'status': 400}

        if len(payload['ratings']) != Config.REVIEWS_PER_PHOTO:
            return {'error': f"Must rate all {Config.REVIEWS_PER_PHOTO} reviews", 'status': 400}

        try:
            submission = ReviewRatingSubmission.model_validate(payload)
        except ValidationError as e:
            return {'error': first_error(
                e, RATING_FIELD_MESSAGES, 'Invalid rating format', RATING_TYPE_MESSAGES
            ), 'status': 400}

        photo_id = submission.photo_id
        photo = self.photo_db.get(photo_id)
        if not photo:
            return {'error': 'Photo not found', 'status': 404}

        if photo.user_id != ctx.user_id:
            return {'error': 'You can only rate reviews on your own photos', 'status': 403}

        if photo.status == PhotoStatus.ARCHIVED:
            return {'error': 'This photo has been archived and can no longer be rated', 'status': 400}

        reviews = self._approved_reviews(photo_id)
        if len(reviews) != Config.REVIEWS_PER_PHOTO:
            return {
                'error': f"Photo must have exactly {Config.REVIEWS_PER_PHOTO} approved reviews to rate",
                'status': 400
            }

        if photo.all_reviews_rated or self.has_user_rated_photo(ctx.user_id, photo_id):
            return {'error': 'You have already rated reviews for this photo', 'status': 400}

        reviews_by_id = {review.id: review for review in reviews}
        submitted_ids = {entry.review_id for entry in submission.ratings}
        if submitted_ids != set(reviews_by_id):
            logger.error(f"Review ID mismatch for photo {photo_id}: {sorted(reviews_by_id)} vs {sorted(submitted_ids)}")
            return {'error': "Review IDs do not match photo's reviews", 'status': 400}

        try:
            self._create_ratings(ctx, photo_id, submission)
        except IntegrityError:
            return {'error': 'You have already rated reviews for this photo', 'status': 400}

        for entry in submission.ratings:
            best_effort('review helpfulness', self.update_review_helpfulness, entry.review_id)

        # Group ELO deltas by reviewer
        elo_changes = defaultdict(int)
        for entry in submission.ratings:
            review = reviews_by_id[entry.review_id]
            quality = overall_quality(
                entry.specificity_score, entry.constructiveness_score, entry.relevance_score
            )
            elo_changes[review.reviewer_id] += quality_elo_change(quality)

        elo_before = {}
        for reviewer_id, change in elo_changes.items():
            reviewer = self.user_service.get_user(reviewer_id)
            if not reviewer:
                continue
            elo_before[reviewer_id] = reviewer.elo_rating
            result = best_effort('quality elo', self.user_service.adjust_elo, reviewer_id, change)
            if result.ok:
                logger.info(
                    f"Quality rating ELO for reviewer {reviewer_id}: "
                    f"{reviewer.elo_rating} -> {reviewer.elo_rating + change} ({change:+d})"
                )

        self.mark_photo_reviews_as_rated(photo_id, len(submission.ratings))

        return {'reviewers': self._revealed_reviewers(photo_id, elo_changes, elo_before)}

    def get_rated_reviews(self, ctx: RequestContext, photo_id: int) -> Dict:
        """Revealed reviewer view for a photo the requester has already rated"""
        photo = self.photo_db.get(photo_id)
        if not photo:
            return {'error': 'Photo not found', 'status': 404}

        if photo.user_id != ctx.user_id:
            return {'error': 'You can only view ratings on your own photos', 'status': 403}

        if not photo.all_reviews_rated:
            return {'error': 'Reviews for this photo have not been rated yet', 'status': 400}

        return {'reviewers': self._revealed_reviewers(photo_id)}

    def has_user_rated_photo(self, user_id: int, photo_id: int) -> bool:
        return self.rating_db.exists(rated_by=user_id, photo_id=photo_id)

    def update_review_helpfulness(self, review_id: int):
        """Store the mean overall quality of every rating the review received"""
        with get_db() as db:
            average, count = db.query(
                func.avg(ReviewRating.overall_quality), func.count(ReviewRating.id)
            ).filter(ReviewRating.review_id == review_id).one()

            if not count:
                return None

            db.query(Review).filter(Review.id == review_id).update({
                Review.helpfulness_score: float(average),
                Review.helpfulness_count: count
            }, synchronize_session=False)
            return float(average)

    def mark_photo_reviews_as_rated(self, photo_id: int, count: int):
        self.photo_db.update(photo_id, all_reviews_rated=True, reviews_rated_count=count)

    def _approved_reviews(self, photo_id: int) -> List[Review]:
        with get_db() as db:
            return db.query(Review).filter(
                Review.photo_id == photo_id,
                Review.moderation_status == ModerationStatus.APPROVED
            ).order_by(Review.created_at.asc(), Review.id.asc()).all()

    def _create_ratings(self, ctx: RequestContext, photo_id: int, submission: ReviewRatingSubmission):
        """Insert all ratings in a single transaction"""
        with get_db() as db:
            for entry in submission.ratings:
                db.add(ReviewRating(
                    review_id=entry.review_id,
                    photo_id=photo_id,
                    rated_by=ctx.user_id,
                    specificity_score=entry.specificity_score,
                    constructiveness_score=entry.constructiveness_score,
                    relevance_score=entry.relevance_score,
                    overall_quality=overall_quality(
                        entry.specificity_score, entry.constructiveness_score, entry.relevance_score
                    ),
                    created_at=ctx.now
                ))
        logger.info(f"User {ctx.user_id} rated {len(submission.ratings)} reviews on photo {photo_id}")

    def _revealed_reviewers(self, photo_id: int, elo_changes: Dict = None,
                            elo_before: Dict = None) -> List[Dict]:
        elo_changes = elo_changes or {}
        elo_before = elo_before or {}

        with get_db() as db:
            rows = db.query(ReviewRating, Review, User).join(
                Review, ReviewRating.review_id == Review.id
            ).join(
                User, Review.reviewer_id == User.id
            ).filter(
                ReviewRating.photo_id == photo_id
            ).order_by(Review.created_at.asc(), Review.id.asc()).all()

        reviewers = []
        for rating, review, reviewer in rows:
            entry = {
                'reviewId': review.id,
                'reviewerId': reviewer.id,
                'name': reviewer.name,
                'image': reviewer.image,
                'eloRating': reviewer.elo_rating,
                'specificityScore': rating.specificity_score,
                'constructivenessScore': rating.constructiveness_score,
                'relevanceScore': rating.relevance_score,
                'overallQuality': rating.overall_quality,
                'reviewScore': review.score,
                'comment': review.comment,
                'wordCount': review.word_count,
                'aiConfidence': (review.ai_analysis or {}).get('confidence')
            }
            if reviewer.id in elo_changes:
                entry['eloChange'] = elo_changes[reviewer.id]
                entry['eloBefore'] = elo_before.get(reviewer.id)
            reviewers.append(entry)
        return reviewers
