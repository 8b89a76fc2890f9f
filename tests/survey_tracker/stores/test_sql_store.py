"""Tests for survey_tracker.stores.sql_store — table mapping and failure modes."""
import datetime
import pytest
from unittest.mock import patch
from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import DataError, IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from survey_tracker.errors import CorruptState, InvalidSubmission, StorageUnavailable
from survey_tracker.models.weekly_data import WeeklyData
from survey_tracker.models.weekly_record import SurveyItem, WeeklyRecord
from survey_tracker.stores.sql_store import SqlRecordStore


def _rec(date, timestamp, name='Западные ЭС'):
    item = SurveyItem(name=name, total=10, survey=9, not_in_survey=1, percent=0.9)
    return WeeklyRecord(date=date, timestamp=timestamp, items=[item])


@pytest.fixture
def db_session(db_engine):
    session = sessionmaker(bind=db_engine)()
    yield session
    session.close()


class TestSchema:

    def test_creates_table_on_first_use(self):
        engine = create_engine(
            'sqlite:///:memory:',
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
        )
        store = SqlRecordStore(engine)
        assert store.get_all() == []
        assert 'weekly_data' in inspect(engine).get_table_names()
        engine.dispose()


class TestRowMapping:

    def test_one_row_per_date_with_json_payload(self, sql_store, db_session):
        sql_store.upsert(_rec('2026-01-12', 1768176000000))
        sql_store.upsert(_rec('2026-01-12', 1768176000001, name='Replaced'))

        rows = db_session.query(WeeklyData).all()
        assert len(rows) == 1
        assert rows[0].date == datetime.date(2026, 1, 12)
        assert rows[0].timestamp == 1768176000001
        assert rows[0].data[0]['name'] == 'Replaced'
        assert rows[0].data[0]['notInSurvey'] == 1

    def test_get_returns_iso_date_string(self, sql_store):
        sql_store.upsert(_rec('2026-01-12', 1))
        assert sql_store.get('2026-01-12').date == '2026-01-12'

    def test_count(self, sql_store):
        sql_store.upsert(_rec('2026-01-05', 1))
        sql_store.upsert(_rec('2026-01-12', 2))
        assert sql_store.count() == 2


class TestInsertRace:

    def test_integrity_error_retried_as_update(self, sql_store):
        sql_store.upsert(_rec('2026-01-12', 1))
        real_upsert_once = sql_store._upsert_once
        calls = []

        def flaky(record):
            calls.append(record.date)
            if len(calls) == 1:
                raise IntegrityError('INSERT', {}, Exception('UNIQUE constraint failed'))
            return real_upsert_once(record)

        with patch.object(sql_store, '_upsert_once', side_effect=flaky):
            created = sql_store.upsert(_rec('2026-01-12', 2, name='Winner'))

        assert created is False
        assert len(calls) == 2
        assert sql_store.get('2026-01-12').items[0].name == 'Winner'


class TestFailureModes:

    def test_operational_error_is_unavailable(self, sql_store):
        error = OperationalError('SELECT', {}, Exception('connection refused'))
        with patch.object(Session, 'query', side_effect=error):
            with pytest.raises(StorageUnavailable):
                sql_store.get_all()

    def test_unreachable_database_is_unavailable(self):
        store = SqlRecordStore(create_engine('sqlite:////nonexistent-dir/sub/db.sqlite'))
        with pytest.raises(StorageUnavailable):
            store.get_all()

    def test_corrupt_payload_is_corrupt_state(self, sql_store, db_session):
        db_session.add(WeeklyData(date=datetime.date(2026, 1, 12), timestamp=1, data={'not': 'a list'}))
        db_session.commit()
        with pytest.raises(CorruptState):
            sql_store.get_all()

    def test_empty_payload_is_corrupt_state(self, sql_store, db_session):
        db_session.add(WeeklyData(date=datetime.date(2026, 1, 12), timestamp=1, data=[]))
        db_session.commit()
        with pytest.raises(CorruptState):
            sql_store.get('2026-01-12')

    def test_failed_write_rolls_back(self, sql_store):
        sql_store.upsert(_rec('2026-01-05', 1))
        with patch.object(SqlRecordStore, '_to_row_values', side_effect=RuntimeError('boom')):
            with pytest.raises(RuntimeError):
                sql_store.restore([_rec('2026-01-12', 2)])
        assert [rec.date for rec in sql_store.get_all()] == ['2026-01-05']

    def test_overflow_is_invalid_submission(self, sql_store):
        with patch.object(Session, 'flush', side_effect=OverflowError('Python int too large to convert to SQLite INTEGER')):
            with pytest.raises(InvalidSubmission):
                sql_store.upsert(_rec('2026-01-12', 1))
        assert sql_store.get_all() == []

    def test_data_error_is_invalid_submission(self, sql_store):
        error = DataError('INSERT', {}, Exception('bigint out of range'))
        with patch.object(Session, 'flush', side_effect=error):
            with pytest.raises(InvalidSubmission):
                sql_store.upsert(_rec('2026-01-12', 1))

    def test_integrity_error_is_not_translated(self, sql_store):
        error = IntegrityError('INSERT', {}, Exception('UNIQUE constraint failed'))
        with patch.object(Session, 'flush', side_effect=error):
            with pytest.raises(IntegrityError):
                sql_store.upsert(_rec('2026-01-12', 1))
