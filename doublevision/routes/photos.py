from flask import Blueprint, request, jsonify
from doublevision.services.photo_service import PhotoService
from doublevision.middleware.auth import require_auth, request_context
from doublevision.utils.logger import get_logger

bp = Blueprint('photos', __name__)
logger = get_logger(__name__)
photo_service = PhotoService()


@bp.route('', methods=['POST'])
@require_auth
def upload_photo(current_user):
    """Upload today's photo"""
    try:
        result = photo_service.upload_photo(request_context(current_user), request.files.get('photo'))
        status = result.pop('status', 201)
        return jsonify(result), status

    except Exception as e:
        logger.error(f"Error uploading photo: {str(e)}")
        return jsonify({'error': 'Failed to upload photo'}), 500


@bp.route('/<int:photo_id>/feedback', methods=['GET'])
@require_auth
def get_feedback(photo_id, current_user):
    """Get the anonymized reviews on one of your photos"""
    try:
        result = photo_service.get_photo_feedback(request_context(current_user), photo_id)
        status = result.pop('status', 200)
        return jsonify(result), status

    except Exception as e:
        logger.error(f"Error getting feedback for photo {photo_id}: {str(e)}")
        return jsonify({'error': 'Failed to get feedback'}), 500
