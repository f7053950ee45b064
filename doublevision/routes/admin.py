from flask import Blueprint, jsonify
from doublevision.middleware.auth import require_auth, require_admin
from doublevision.services.photo_service import PhotoService
from doublevision.services.strike_service import StrikeService
from doublevision.utils.logger import get_logger

bp = Blueprint('admin', __name__)
logger = get_logger(__name__)
photo_service = PhotoService()
strike_service = StrikeService()


@bp.route('/users/<int:user_id>/reset-strikes', methods=['POST'])
@require_auth
@require_admin
def reset_strikes(current_user, user_id):
    """Clear a user's strikes and timeout"""
    try:
        if not strike_service.reset_strikes(user_id):
            return jsonify({'error': 'User not found'}), 404

        logger.info(f"Admin {current_user['user_id']} reset strikes for user {user_id}")
        return jsonify({'message': 'Strikes reset', 'userId': user_id}), 200

    except Exception as e:
        logger.error(f"Error resetting strikes for user {user_id}: {str(e)}")
        return jsonify({'error': 'Failed to reset strikes'}), 500


@bp.route('/fix-review-counts', methods=['POST'])
@require_auth
@require_admin
def fix_review_counts(current_user):
    """Recompute photo counters from stored reviews"""
    try:
        result = photo_service.fix_review_counts()
        logger.info(f"Admin {current_user['user_id']} repaired review counts: {len(result['updates'])} photos")
        return jsonify(result), 200

    except Exception as e:
        logger.error(f"Error fixing review counts: {str(e)}")
        return jsonify({'error': 'Failed to fix review counts'}), 500
