"""
Relational record store — one weekly_data row per date, items in a JSON column.

Every operation runs in its own session. Upsert is SELECT ... FOR UPDATE
followed by UPDATE or INSERT inside one transaction; the unique date column
catches two writers inserting the same new week, and the loser is retried
as an update.
"""
import logging
from contextlib import contextmanager
from datetime import date as date_type
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, StatementError
from sqlalchemy.orm import sessionmaker

from survey_tracker.database import Base
from survey_tracker.errors import CorruptState, InvalidSubmission, StorageUnavailable
from survey_tracker.models.weekly_data import WeeklyData
from survey_tracker.models.weekly_record import WeeklyRecord
from survey_tracker.stores.base import RecordStore

logger = logging.getLogger('stores.sql')

_UNAVAILABLE = (OperationalError, InterfaceError)


class SqlRecordStore(RecordStore):
    backend = 'sql'

    def __init__(self, engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine)
        self._schema_ready = False

    # ── Sessions ──────────────────────────────────────────────────────

    def _ensure_schema(self):
        """CREATE TABLE IF NOT EXISTS on first use. Alembic owns later changes."""
        if self._schema_ready:
            return
        try:
            Base.metadata.create_all(self.engine, tables=[WeeklyData.__table__])
        except _UNAVAILABLE as e:
            logger.error("Cannot initialize weekly_data table", exc_info=True)
            raise StorageUnavailable(f"database unavailable: {e.__class__.__name__}")
        self._schema_ready = True

    @contextmanager
    def _session(self):
        """Yield a session, commit on success, roll back and translate errors otherwise."""
        self._ensure_schema()
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except _UNAVAILABLE as e:
            session.rollback()
            logger.error("Database error", exc_info=True)
            raise StorageUnavailable(f"database unavailable: {e.__class__.__name__}")
        except IntegrityError:
            session.rollback()
            raise
        except (StatementError, OverflowError) as e:
            # DataError and driver conversion failures: the values do not fit the columns
            session.rollback()
            logger.warning("Database rejected values: %s", e)
            raise InvalidSubmission(f"value out of range for storage: {e.__class__.__name__}")
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ── Row mapping ───────────────────────────────────────────────────

    @staticmethod
    def _to_record(row: WeeklyData) -> WeeklyRecord:
        try:
            return WeeklyRecord.from_dict({
                'date': row.date.isoformat(),
                'timestamp': row.timestamp,
                'data': row.data,
            }, default_timestamp=0)
        except (InvalidSubmission, AttributeError) as e:
            logger.error("weekly_data row %s is unreadable", row.id)
            raise CorruptState(f"weekly_data row {row.id} is unreadable: {e}")

    @staticmethod
    def _to_row_values(record: WeeklyRecord):
        return {
            'date': date_type.fromisoformat(record.date),
            'timestamp': record.timestamp,
            'data': [item.to_dict() for item in record.items],
        }

    # ── RecordStore ───────────────────────────────────────────────────

    def get_all(self) -> List[WeeklyRecord]:
        with self._session() as session:
            rows = session.query(WeeklyData).order_by(
                WeeklyData.timestamp.desc(), WeeklyData.date.desc(),
            ).all()
            return [self._to_record(row) for row in rows]

    def get(self, date: str) -> Optional[WeeklyRecord]:
        with self._session() as session:
            row = session.query(WeeklyData).filter_by(date=date_type.fromisoformat(date)).first()
            return self._to_record(row) if row is not None else None

    def _upsert_once(self, record: WeeklyRecord) -> bool:
        values = self._to_row_values(record)
        with self._session() as session:
            row = session.query(WeeklyData).filter_by(
                date=values['date'],
            ).with_for_update().first()

            if row is None:
                session.add(WeeklyData(**values))
                session.flush()
                return True

            row.timestamp = values['timestamp']
            row.data = values['data']
            row.updated_at = func.now()
            return False

    def upsert(self, record: WeeklyRecord) -> bool:
        try:
            return self._upsert_once(record)
        except IntegrityError:
            # Lost an insert race for the same date; the row exists now
            logger.info("Concurrent insert for %s, retrying as update", record.date)
            return self._upsert_once(record)

    def delete_all(self) -> int:
        with self._session() as session:
            return session.query(WeeklyData).delete()

    def delete(self, date: str) -> bool:
        with self._session() as session:
            removed = session.query(WeeklyData).filter_by(date=date_type.fromisoformat(date)).delete()
            return removed > 0

    def restore(self, records: List[WeeklyRecord]) -> int:
        by_date = {}
        for rec in records:
            by_date[rec.date] = rec
        with self._session() as session:
            session.query(WeeklyData).delete()
            for rec in by_date.values():
                session.add(WeeklyData(**self._to_row_values(rec)))
        return len(by_date)

    def count(self) -> int:
        with self._session() as session:
            return session.query(func.count(WeeklyData.id)).scalar() or 0
