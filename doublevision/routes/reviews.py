from flask import Blueprint, request, jsonify
from doublevision.services.review_service import ReviewService
from doublevision.middleware.auth import require_auth, request_context
from doublevision.utils.logger import get_logger

bp = Blueprint('reviews', __name__)
logger = get_logger(__name__)
review_service = ReviewService()


@bp.route('', methods=['POST'])
@require_auth
def submit_review(current_user):
    """Submit a review for an assigned photo"""
    try:
        data = request.get_json(silent=True)
        result = review_service.submit_review(request_context(current_user), data)
        status = result.pop('status', 201)
        return jsonify(result), status

    except Exception as e:
        logger.error(f"Error submitting review: {str(e)}")
        return jsonify({'error': 'Failed to submit review'}), 500
