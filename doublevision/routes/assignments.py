from flask import Blueprint, jsonify
from doublevision.services.assignment_service import AssignmentService
from doublevision.middleware.auth import require_auth, request_context
from doublevision.utils.logger import get_logger

bp = Blueprint('assignments', __name__)
logger = get_logger(__name__)
assignment_service = AssignmentService()


@bp.route('', methods=['GET'])
@require_auth
def get_assignments(current_user):
    """Get pending review assignments, topping up the batch when it is empty"""
    try:
        result = assignment_service.get_assignments_for_user(request_context(current_user))
        status = result.pop('status', 200)
        return jsonify(result), status

    except Exception as e:
        logger.error(f"Error fetching assignments: {str(e)}")
        return jsonify({'error': 'Failed to fetch assignments'}), 500
