"""
Report routes — stats, per-item history and CSV/JSON downloads.
"""
import json
from datetime import date
from flask import Blueprint, Response, jsonify

from survey_tracker.extensions import get_engine

bp = Blueprint('reports', __name__)


def _attachment(filename):
    return {'Content-Disposition': f'attachment; filename={filename}'}


@bp.route('/api/stats')
def get_stats():
    return jsonify(get_engine().compute_stats().to_dict())


@bp.route('/api/items/<path:name>/history')
def item_history(name):
    """Percent / SPO percent per week for one item, newest first; [] for unknown names."""
    return jsonify(get_engine().item_history(name))


@bp.route('/api/export/json')
def export_json():
    payload = get_engine().export_json()
    filename = f'survey_data_export_{date.today().isoformat()}.json'
    return Response(
        json.dumps(payload, ensure_ascii=False, indent=2),
        content_type='application/json; charset=utf-8',
        headers=_attachment(filename),
    )


@bp.route('/api/export/csv')
def export_csv():
    csv_text = get_engine().export_csv()
    filename = f'survey_data_{date.today().isoformat()}.csv'
    # BOM so spreadsheet tools detect UTF-8
    return Response(
        '\ufeff' + csv_text,
        content_type='text/csv; charset=utf-8',
        headers=_attachment(filename),
    )
