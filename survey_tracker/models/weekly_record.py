"""
WeeklyRecord / SurveyItem — typed shapes for one week's survey submission.

Request bodies and persisted payloads both pass through from_dict(), so
nothing reaches the stores or the reporting engine untyped. Counts and
percentages are taken as supplied; survey + notInSurvey == total is not
checked and percent is never recomputed.
"""
import math
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from survey_tracker.errors import InvalidSubmission


DATE_FORMAT = '%Y-%m-%d'

# weekly_data.timestamp is a signed 64-bit column
TIMESTAMP_MIN = -2 ** 63
TIMESTAMP_MAX = 2 ** 63 - 1


def now_ms() -> int:
    """Current instant in milliseconds since the epoch."""
    return int(time.time() * 1000)


def parse_date(value: Any) -> str:
    """Validate a YYYY-MM-DD string and return it in canonical form."""
    if not isinstance(value, str) or not value:
        raise InvalidSubmission('date must be a YYYY-MM-DD string')
    try:
        return datetime.strptime(value, DATE_FORMAT).date().isoformat()
    except ValueError:
        raise InvalidSubmission(f"invalid date '{value}', expected YYYY-MM-DD")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _count(raw: Dict[str, Any], key: str, required: bool = True) -> int:
    if key not in raw:
        if required:
            raise InvalidSubmission(f"item field '{key}' is required")
        return 0
    value = raw[key]
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise InvalidSubmission(f"item field '{key}' must be a non-negative integer")
    return value


def _fraction(raw: Dict[str, Any], key: str, required: bool = True) -> float:
    if key not in raw:
        if required:
            raise InvalidSubmission(f"item field '{key}' is required")
        return 0.0
    value = raw[key]
    if not _is_number(value):
        raise InvalidSubmission(f"item field '{key}' must be a number")
    try:
        value = float(value)
    except OverflowError:
        raise InvalidSubmission(f"item field '{key}' is out of range")
    if not math.isfinite(value):
        raise InvalidSubmission(f"item field '{key}' must be a number")
    return value


@dataclass
class SurveyItem:
    """One monitored entity's counters for a given week."""
    name: str
    total: int
    survey: int
    not_in_survey: int
    percent: float
    total_spo: int = 0
    survey_spo: int = 0
    spo_not_in_survey: int = 0
    percent_spo: float = 0.0
    is_ps_res: bool = False

    @classmethod
    def from_dict(cls, raw: Any) -> 'SurveyItem':
        if not isinstance(raw, dict):
            raise InvalidSubmission('each data item must be an object')
        name = raw.get('name')
        if not isinstance(name, str) or not name.strip():
            raise InvalidSubmission("item field 'name' must be a non-empty string")
        is_ps_res = raw.get('isPsRes', False)
        if not isinstance(is_ps_res, bool):
            raise InvalidSubmission("item field 'isPsRes' must be a boolean")
        return cls(
            name=name,
            total=_count(raw, 'total'),
            survey=_count(raw, 'survey'),
            not_in_survey=_count(raw, 'notInSurvey'),
            percent=_fraction(raw, 'percent'),
            total_spo=_count(raw, 'totalSpo', required=False),
            survey_spo=_count(raw, 'surveySpo', required=False),
            spo_not_in_survey=_count(raw, 'spoNotInSurvey', required=False),
            percent_spo=_fraction(raw, 'percentSpo', required=False),
            is_ps_res=is_ps_res,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'total': self.total,
            'survey': self.survey,
            'notInSurvey': self.not_in_survey,
            'percent': self.percent,
            'totalSpo': self.total_spo,
            'surveySpo': self.survey_spo,
            'spoNotInSurvey': self.spo_not_in_survey,
            'percentSpo': self.percent_spo,
            'isPsRes': self.is_ps_res,
        }


@dataclass
class WeeklyRecord:
    """One date's full submission. The date is the store key."""
    date: str
    timestamp: int
    items: List[SurveyItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any, default_timestamp: Optional[int] = None) -> 'WeeklyRecord':
        """
        Build a record from its wire shape {date, timestamp?, data: [...]}.

        A missing, non-numeric, non-finite or out-of-range timestamp is replaced by
        ``default_timestamp`` (or the current instant).
        """
        if not isinstance(raw, dict):
            raise InvalidSubmission('record must be a JSON object')
        date = parse_date(raw.get('date'))
        items = raw.get('data')
        if not isinstance(items, list) or not items:
            raise InvalidSubmission("'data' must be a non-empty list of items")

        timestamp = raw.get('timestamp')
        # NaN fails the range check too
        if not _is_number(timestamp) or not TIMESTAMP_MIN <= timestamp <= TIMESTAMP_MAX:
            timestamp = default_timestamp if default_timestamp is not None else now_ms()

        return cls(
            date=date,
            timestamp=int(timestamp),
            items=[SurveyItem.from_dict(item) for item in items],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date,
            'timestamp': self.timestamp,
            'data': [item.to_dict() for item in self.items],
        }


def canonical_order(records: List[WeeklyRecord]) -> List[WeeklyRecord]:
    """Newest submission first; equal timestamps fall back to the later date."""
    return sorted(records, key=lambda rec: (rec.timestamp, rec.date), reverse=True)
