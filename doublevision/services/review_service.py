import math
from typing import Dict, Optional
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from doublevision.database import DatabaseManager
from doublevision.models import Review
from doublevision.models.review import ModerationStatus
from doublevision.schemas import ReviewSubmission, ModerationOutcome, first_error
from doublevision.schemas.review import REVIEW_REQUIRED_FIELDS, REVIEW_FIELD_MESSAGES
from doublevision.services.alert_service import AlertService
from doublevision.services.assignment_service import AssignmentService
from doublevision.services.moderation_service import ModerationService, neutral_analysis
from doublevision.services.photo_service import PhotoService
from doublevision.services.scoring import (
    APPROVED, REJECTED, calculate_new_elo, rejection_reason, should_alert
)
from doublevision.services.strike_service import StrikeService
from doublevision.services.user_service import UserService
from doublevision.utils.context import RequestContext
from doublevision.utils.rate_limit import RateLimiter
from doublevision.utils.side_effects import best_effort
from doublevision.utils.validators import count_words
from config.config import Config
from doublevision.utils.logger import get_logger

logger = get_logger(__name__)


class ReviewService:
    """Review submission pipeline.

    Validates a submission, persists the review with its bookkeeping, then
    runs moderation in the same request. Only the review insert is a core
    effect; strikes, alerts, ELO and counters are best effort and can be
    repaired from review rows.
    """

    def __init__(self, moderation_service: ModerationService = None,
                 alert_service: AlertService = None, rate_limiter: RateLimiter = None):
        self.review_db = DatabaseManager(Review)
        self.assignment_service = AssignmentService()
        self.photo_service = PhotoService()
        self.strike_service = StrikeService()
        self.user_service = UserService()
        self.moderation_service = moderation_service or ModerationService()
        self.alert_service = alert_service or AlertService()
        self.rate_limiter = rate_limiter or RateLimiter(Config.REVIEW_RATE_LIMIT, namespace='review')

    def submit_review(self, ctx: RequestContext, payload) -> Dict:
        """Submit a review for an assigned photo"""
        user_id = ctx.user_id

        # Check if user is timed out due to strikes
        timeout_status = self.strike_service.is_user_timed_out(user_id, now=ctx.now)
        if timeout_status['isTimedOut']:
            timeout_until = timeout_status['timeoutUntil']
            days_remaining = math.ceil((timeout_until - ctx.now).total_seconds() / 86400)
            return {
                'error': (
                    "You are temporarily unable to submit reviews due to repeated "
                    "violations of our community guidelines."
                ),
                'status': 403,
                'timedOut': True,
                'timeoutUntil': timeout_until.isoformat(),
                'strikes': timeout_status['strikes'],
                'daysRemaining': days_remaining
            }

        # Rate limiting
        limit = self.rate_limiter.check(user_id)
        if not limit.allowed:
            return {
                'error': 'Too many requests. Please try again later.',
                'status': 429,
                'resetAt': limit.reset_at.isoformat()
            }

        # Validate body
        if not isinstance(payload, dict) or any(
            payload.get(key) is None or payload.get(key) == '' for key in REVIEW_REQUIRED_FIELDS
        ):
            return {'error': 'Missing required fields: photoId, score, comment', 'status': 400}

        try:
            submission = ReviewSubmission.model_validate(payload)
        except ValidationError as e:
            result = {'error': first_error(e, REVIEW_FIELD_MESSAGES, 'Invalid request body'), 'status': 400}
            if any(err.get('loc', ())[:1] == ('comment',) for err in e.errors()):
                result['wordCount'] = count_words(str(payload.get('comment', '')))
            return result

        photo_id = submission.photo_id
        word_count = count_words(submission.comment)

        # Check if photo is assigned to user
        if not self.assignment_service.is_photo_assigned_to_user(user_id, photo_id):
            return {'error': 'This photo is not assigned to you for review.', 'status': 403}

        # Check if user already reviewed this photo
        if self.review_db.exists(reviewer_id=user_id, photo_id=photo_id):
            return {'error': 'You have already reviewed this photo.', 'status': 403}

        try:
            review = self.review_db.create(
                photo_id=photo_id,
                reviewer_id=user_id,
                score=submission.score,
                comment=submission.comment,
                word_count=word_count,
                moderation_status=ModerationStatus.PENDING,
                created_at=ctx.now
            )
        except IntegrityError:
            logger.warning(f"Concurrent duplicate review by user {user_id} for photo {photo_id}")
            return {'error': 'You have already reviewed this photo.', 'status': 403}

        logger.info(f"[{ctx.request_id}] Review {review.id} created by user {user_id} for photo {photo_id}")

        best_effort('complete assignment', self.assignment_service.mark_assignment_complete,
                    user_id, photo_id, now=ctx.now)
        best_effort('photo review count', self.photo_service.increment_photo_review_count,
                    photo_id, submission.score)
        best_effort('user review count', self.user_service.increment_review_count, user_id)

        moderation = self._moderate(ctx, review, submission.comment, word_count)

        return {
            'review': {
                'id': review.id,
                'score': review.score,
                'wordCount': review.word_count,
                'createdAt': review.created_at.isoformat()
            },
            'message': 'Review submitted successfully!',
            'moderation': moderation.model_dump(by_alias=True, exclude_none=True, mode='json')
        }

    def _moderate(self, ctx: RequestContext, review: Review, comment: str,
                  word_count: int) -> ModerationOutcome:
        """Classify, persist the verdict and apply strike, alert and ELO effects"""
        try:
            analysis = self.moderation_service.analyze(comment)
            status = self.moderation_service.decide(analysis)
            self._store_moderation(review.id, status, analysis)

            logger.info(f"Review {review.id} moderated: {status} ({analysis['confidence']}% confidence)")

            outcome = ModerationOutcome(status=status)

            if status == REJECTED:
                if should_alert(status, analysis['confidence'], self.moderation_service.thresholds):
                    best_effort('moderation alert', self.alert_service.send_moderation_alert, {
                        'reviewId': review.id,
                        'photoId': review.photo_id,
                        'reviewerId': review.reviewer_id,
                        'moderationStatus': status,
                        'reason': rejection_reason(analysis),
                        'confidence': analysis['confidence'],
                        'reasoning': analysis['reasoning'],
                        'reviewText': comment
                    })

                strike = best_effort('strike', self.strike_service.add_strike,
                                     review.reviewer_id, now=ctx.now)
                if strike.ok:
                    outcome.strikes = strike.value['strikes']
                    outcome.is_timed_out = strike.value['isTimedOut']
                    outcome.timeout_until = strike.value.get('timeoutUntil')

                best_effort('photo stats', self.photo_service.recalculate_photo_stats, review.photo_id)

            best_effort('elo update', self._apply_moderation_elo,
                        review.reviewer_id, status == APPROVED, analysis['confidence'], word_count)

            return outcome

        except Exception as e:
            logger.error(f"Failed to moderate review {review.id}: {str(e)}")
            best_effort('fail-open approval', self._store_moderation, review.id, APPROVED,
                        neutral_analysis(0, "Moderation failed - defaulted to approval"))
            return ModerationOutcome(status=APPROVED)

    def _store_moderation(self, review_id: int, status: str, analysis: Dict):
        updated = self.review_db.update(
            review_id,
            moderation_status=ModerationStatus(status),
            ai_analysis=analysis
        )
        if not updated:
            raise ValueError(f"Review {review_id} not found")

    def _apply_moderation_elo(self, reviewer_id: int, approved: bool,
                              confidence: int, word_count: int) -> Optional[int]:
        reviewer = self.user_service.get_user(reviewer_id)
        if not reviewer:
            return None

        current = reviewer.elo_rating
        new_elo = calculate_new_elo(current, approved, confidence, word_count)
        self.user_service.adjust_elo(reviewer_id, new_elo - current)

        change = new_elo - current
        logger.info(f"ELO updated for reviewer {reviewer_id}: {current} -> {new_elo} ({change:+d})")
        return new_elo
