"""
Reconciliation & reporting engine.

Turns raw submissions into typed weekly records, upserts them through the
injected RecordStore and derives stats and CSV/JSON exports from the store's
canonical newest-first listing. Submissions fully replace the week for their
date; items are never merged field by field.
"""
import logging
import math
from dataclasses import dataclass
from datetime import date as date_type, datetime, timezone
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any, Dict, List, Optional

from survey_tracker.config import CSV_HEADER, EXPORT_VERSION, PS_RES_NOTE
from survey_tracker.errors import InvalidSubmission, NoData, NotFound
from survey_tracker.models.weekly_record import WeeklyRecord, now_ms, parse_date
from survey_tracker.stores.base import RecordStore

logger = logging.getLogger('services.reporting')


@dataclass
class SubmitResult:
    created: bool
    total_records: int
    record: WeeklyRecord

    @property
    def action(self) -> str:
        return 'created' if self.created else 'updated'


@dataclass
class Stats:
    total_weeks: int = 0
    first_record_date: Optional[str] = None
    last_record_date: Optional[str] = None
    total_item_records: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalWeeks': self.total_weeks,
            'firstRecordDate': self.first_record_date,
            'lastRecordDate': self.last_record_date,
            'totalItemRecords': self.total_item_records,
        }


def format_ru_date(iso_date: str) -> str:
    """2024-01-15 → 15.01.2024"""
    d = date_type.fromisoformat(iso_date)
    return f'{d.day:02d}.{d.month:02d}.{d.year:04d}'


_CENT = Decimal('0.01')
# wide enough to quantize any finite float
_PCT_CONTEXT = Context(prec=400)


def _pct(fraction: float) -> str:
    """Scale to percent with two decimals, halves rounded away from zero."""
    scaled = fraction * 100
    if not math.isfinite(scaled):
        return 'Infinity' if scaled > 0 else '-Infinity'
    return str(Decimal(scaled).quantize(_CENT, rounding=ROUND_HALF_UP, context=_PCT_CONTEXT))


class ReportingEngine:
    """Upsert reconciliation plus read-side reporting over one RecordStore."""

    def __init__(self, store: RecordStore):
        self.store = store

    # ── Writes ────────────────────────────────────────────────────────

    def submit(self, payload: Any) -> SubmitResult:
        """Validate a {date, timestamp?, data} body and upsert it as a whole week."""
        record = WeeklyRecord.from_dict(payload, default_timestamp=now_ms())
        created = self.store.upsert(record)
        total = self.store.count()
        if created:
            logger.info("Added week %s (%d items)", record.date, len(record.items))
        else:
            logger.info("Replaced week %s (%d items)", record.date, len(record.items))
        return SubmitResult(created=created, total_records=total, record=record)

    def delete_all(self) -> int:
        removed = self.store.delete_all()
        logger.info("Deleted all data (%d weeks)", removed)
        return removed

    def delete_week(self, date: str) -> int:
        """Remove one week. Returns how many weeks remain."""
        date = parse_date(date)
        if not self.store.delete(date):
            raise NotFound(f'no data for {date}')
        remaining = self.store.count()
        logger.info("Deleted week %s, %d remaining", date, remaining)
        return remaining

    def restore(self, entries: Any) -> int:
        """
        Replace the store with a backup array.

        Entries without a valid date or with empty/malformed items are skipped,
        not fatal. Returns the number of weeks written.
        """
        if not isinstance(entries, list):
            raise InvalidSubmission('restore payload must be a JSON array')

        valid = []
        stamp = now_ms()
        for index, entry in enumerate(entries):
            try:
                valid.append(WeeklyRecord.from_dict(entry, default_timestamp=stamp))
            except InvalidSubmission as e:
                logger.warning("Restore: skipping entry %d: %s", index, e.message)

        inserted = self.store.restore(valid)
        logger.info("Restored %d of %d entries from backup", inserted, len(entries))
        return inserted

    # ── Reads ─────────────────────────────────────────────────────────

    def list_all(self) -> List[WeeklyRecord]:
        return self.store.get_all()

    def get_week(self, date: str) -> WeeklyRecord:
        date = parse_date(date)
        record = self.store.get(date)
        if record is None:
            raise NotFound(f'no data for {date}')
        return record

    def list_period(self, start: str, end: str) -> List[WeeklyRecord]:
        """Weeks with start <= date <= end, oldest date first."""
        start, end = parse_date(start), parse_date(end)
        if start > end:
            raise InvalidSubmission('start must not be after end')
        records = [rec for rec in self.store.get_all() if start <= rec.date <= end]
        return sorted(records, key=lambda rec: rec.date)

    def item_history(self, name: str) -> List[Dict[str, Any]]:
        """Per-week percentages (×100) for one item name, newest date first."""
        history = []
        for rec in self.store.get_all():
            for item in rec.items:
                if item.name == name:
                    history.append({
                        'date': rec.date,
                        'percent': item.percent * 100,
                        'percentSpo': item.percent_spo * 100,
                    })
        return sorted(history, key=lambda row: row['date'], reverse=True)

    def compute_stats(self) -> Stats:
        records = self.store.get_all()
        if not records:
            return Stats()
        return Stats(
            total_weeks=len(records),
            # Listing is newest first: tail is the first record, head the last
            first_record_date=records[-1].date,
            last_record_date=records[0].date,
            total_item_records=sum(len(rec.items) for rec in records),
        )

    # ── Export ────────────────────────────────────────────────────────

    def _require_records(self) -> List[WeeklyRecord]:
        records = self.store.get_all()
        if not records:
            raise NoData()
        return records

    def export_json(self) -> Dict[str, Any]:
        records = self._require_records()
        return {
            'version': EXPORT_VERSION,
            'exportedAt': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'totalWeeks': len(records),
            'data': [rec.to_dict() for rec in records],
        }

    def export_csv(self) -> str:
        """
        One row per item across all weeks, header first.

        Only the name column is quoted; commas or quotes inside a name are
        not escaped.
        """
        records = self._require_records()
        lines = [','.join(CSV_HEADER)]
        for rec in records:
            formatted_date = format_ru_date(rec.date)
            for item in rec.items:
                row = [
                    formatted_date,
                    f'"{item.name}"',
                    item.total,
                    item.survey,
                    item.not_in_survey,
                    _pct(item.percent),
                    item.total_spo,
                    item.survey_spo,
                    item.spo_not_in_survey,
                    _pct(item.percent_spo),
                    PS_RES_NOTE if item.is_ps_res else '',
                ]
                lines.append(','.join(str(value) for value in row))
        return '\n'.join(lines) + '\n'
