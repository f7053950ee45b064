from flask import Blueprint, jsonify
from doublevision.services.user_service import UserService
from doublevision.services.strike_service import StrikeService
from doublevision.services.photo_service import PhotoService
from doublevision.middleware.auth import require_auth, request_context
from doublevision.utils.logger import get_logger

bp = Blueprint('users', __name__)
logger = get_logger(__name__)
user_service = UserService()
strike_service = StrikeService()
photo_service = PhotoService()


@bp.route('/profile', methods=['GET'])
@require_auth
def get_profile(current_user):
    """Get current user profile"""
    try:
        profile = user_service.get_user_profile(current_user['user_id'])
        status = profile.pop('status', 200)
        return jsonify(profile), status

    except Exception as e:
        logger.error(f"Error getting profile: {str(e)}")
        return jsonify({'error': 'Failed to get profile'}), 500


@bp.route('/strikes', methods=['GET'])
@require_auth
def get_strikes(current_user):
    """Get strike and timeout status"""
    try:
        ctx = request_context(current_user)
        if not user_service.get_user(ctx.user_id):
            return jsonify({'error': 'User not found'}), 404

        return jsonify(strike_service.get_user_strikes(ctx.user_id, now=ctx.now)), 200

    except Exception as e:
        logger.error(f"Error fetching strikes: {str(e)}")
        return jsonify({'error': 'Failed to fetch strike information'}), 500


@bp.route('/analytics', methods=['GET'])
@require_auth
def get_analytics(current_user):
    """Get photo analytics and score distribution"""
    try:
        ctx = request_context(current_user)
        return jsonify({
            'analytics': photo_service.get_user_photo_analytics(ctx.user_id, now=ctx.now),
            'distribution': photo_service.get_user_score_distribution(ctx.user_id)
        }), 200

    except Exception as e:
        logger.error(f"Error getting analytics: {str(e)}")
        return jsonify({'error': 'Failed to get analytics'}), 500
