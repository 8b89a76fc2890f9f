#!/usr/bin/env python3
"""
Seed sample survey weeks for verifying the API locally.

Submits one week per Monday going back from today through the same
ReportingEngine the HTTP routes use, so the configured store backend
(STORE_BACKEND / DATA_FILE / DATABASE_URL) receives realistic data.

Usage:
    python scripts/seed_test_data.py            # seed 8 weeks
    python scripts/seed_test_data.py --weeks 4  # seed 4 weeks
    python scripts/seed_test_data.py --clear    # wipe the store first
"""
import sys
import os
import argparse
import random
from datetime import date, datetime, time, timedelta, timezone

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from survey_tracker import create_app
from survey_tracker.extensions import get_engine


# ── Monitored entities ───────────────────────────────────────────────────────

FES = [
    {'name': 'Центральные ЭС',   'total': 18400, 'total_spo': 5200},
    {'name': 'Северные ЭС',      'total': 12950, 'total_spo': 3100},
    {'name': 'Южные ЭС',         'total': 15320, 'total_spo': 4470},
    {'name': 'Восточные ЭС',     'total': 9870,  'total_spo': 2010},
    {'name': 'Западные ЭС',      'total': 11240, 'total_spo': 2890},
    {'name': 'ПС РЭС',           'total': 2100,  'total_spo': 640, 'ps_res': True},
]


def _counts(total, rate):
    survey = min(total, int(total * rate))
    return survey, total - survey, (survey / total if total else 0.0)


def make_week(week_start, rng):
    """Build one {date, timestamp, data} submission body."""
    items = []
    for fes in FES:
        survey, missing, percent = _counts(fes['total'], rng.uniform(0.82, 0.99))
        survey_spo, missing_spo, percent_spo = _counts(fes['total_spo'], rng.uniform(0.70, 0.98))
        items.append({
            'name': fes['name'],
            'total': fes['total'],
            'survey': survey,
            'notInSurvey': missing,
            'percent': percent,
            'totalSpo': fes['total_spo'],
            'surveySpo': survey_spo,
            'spoNotInSurvey': missing_spo,
            'percentSpo': percent_spo,
            'isPsRes': fes.get('ps_res', False),
        })
    captured = datetime.combine(week_start, time(9, 0), tzinfo=timezone.utc)
    return {
        'date': week_start.isoformat(),
        'timestamp': int(captured.timestamp() * 1000),
        'data': items,
    }


def main():
    parser = argparse.ArgumentParser(description='Seed sample survey weeks')
    parser.add_argument('--weeks', type=int, default=8, help='Number of weeks to seed')
    parser.add_argument('--seed', type=int, default=42, help='Random seed for survey rates')
    parser.add_argument('--clear', action='store_true', help='Delete all stored weeks before seeding')
    args = parser.parse_args()

    rng = random.Random(args.seed)
    app = create_app()
    with app.app_context():
        engine = get_engine()
        if args.clear:
            removed = engine.delete_all()
            print(f'Cleared {removed} weeks.')

        today = date.today()
        monday = today - timedelta(days=today.weekday())
        for offset in range(args.weeks):
            week_start = monday - timedelta(weeks=offset)
            result = engine.submit(make_week(week_start, rng))
            print(f'{result.action:8s} {week_start.isoformat()} ({len(result.record.items)} items)')

        stats = engine.compute_stats()
        print(f'\nDone! {stats.total_weeks} weeks stored, {stats.total_item_records} item rows.')


if __name__ == '__main__':
    main()
