"""
Health routes.
"""
from datetime import datetime, timezone
from flask import Blueprint, jsonify

from survey_tracker.config import SERVICE_NAME
from survey_tracker.extensions import get_engine

bp = Blueprint('health', __name__)


@bp.route('/health')
@bp.route('/api/health')
def health_check():
    """Liveness plus the active store backend."""
    return jsonify({
        'status': 'ok',
        'service': SERVICE_NAME,
        'store': get_engine().store.backend,
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }), 200
