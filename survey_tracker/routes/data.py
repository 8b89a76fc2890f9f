"""
Data routes — weekly record CRUD, backup restore and period queries.
"""
from flask import Blueprint, jsonify, request

from survey_tracker.errors import InvalidSubmission
from survey_tracker.extensions import get_engine

bp = Blueprint('data', __name__)


def _json_body():
    body = request.get_json(silent=True)
    if body is None:
        raise InvalidSubmission('request body must be JSON')
    return body


@bp.route('/api/data')
def list_data():
    """All weeks, newest submission first."""
    return jsonify([rec.to_dict() for rec in get_engine().list_all()])


@bp.route('/api/data', methods=['POST'])
def save_data():
    """Create or fully replace the week for body.date."""
    result = get_engine().submit(_json_body())
    message = 'Data saved' if result.created else f'Data for {result.record.date} updated'
    return jsonify({
        'success': True,
        'message': message,
        'action': result.action,
        'totalRecords': result.total_records,
    })


@bp.route('/api/data', methods=['DELETE'])
def delete_all_data():
    removed = get_engine().delete_all()
    return jsonify({'success': True, 'message': 'All data deleted', 'deleted': removed})


@bp.route('/api/data/restore', methods=['POST'])
def restore_data():
    """Replace the store with a backup array; malformed entries are skipped."""
    count = get_engine().restore(_json_body())
    return jsonify({'success': True, 'message': f'Restored {count} records', 'count': count})


@bp.route('/api/data/period')
def data_for_period():
    """GET /api/data/period?start=YYYY-MM-DD&end=YYYY-MM-DD"""
    start = request.args.get('start')
    end = request.args.get('end')
    if not start or not end:
        raise InvalidSubmission("query parameters 'start' and 'end' are required")
    records = get_engine().list_period(start, end)
    return jsonify([rec.to_dict() for rec in records])


@bp.route('/api/data/<date>')
def get_data(date):
    return jsonify(get_engine().get_week(date).to_dict())


@bp.route('/api/data/<date>', methods=['DELETE'])
def delete_data(date):
    remaining = get_engine().delete_week(date)
    return jsonify({
        'success': True,
        'message': f'Data for {date} deleted',
        'deleted': 1,
        'remaining': remaining,
    })
