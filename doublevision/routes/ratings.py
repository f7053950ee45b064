from flask import Blueprint, request, jsonify
from doublevision.services.review_rating_service import ReviewRatingService
from doublevision.middleware.auth import require_auth, request_context
from doublevision.utils.logger import get_logger

bp = Blueprint('ratings', __name__)
logger = get_logger(__name__)
rating_service = ReviewRatingService()


@bp.route('', methods=['POST'])
@require_auth
def rate_reviews(current_user):
    """Rate the quality of the reviews on one of your photos"""
    try:
        data = request.get_json(silent=True)
        result = rating_service.submit_ratings(request_context(current_user), data)
        status = result.pop('status', 200)
        return jsonify(result), status

    except Exception as e:
        logger.error(f"Error rating reviews: {str(e)}")
        return jsonify({'error': 'Failed to rate reviews'}), 500


@bp.route('/<int:photo_id>', methods=['GET'])
@require_auth
def get_rated_reviews(photo_id, current_user):
    """Get the revealed reviewers for a photo you already rated"""
    try:
        result = rating_service.get_rated_reviews(request_context(current_user), photo_id)
        status = result.pop('status', 200)
        return jsonify(result), status

    except Exception as e:
        logger.error(f"Error getting rated reviews: {str(e)}")
        return jsonify({'error': 'Failed to get rated reviews'}), 500
