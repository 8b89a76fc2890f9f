"""Shared test fixtures."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from survey_tracker.database import Base
from survey_tracker.stores.file_store import FileRecordStore
from survey_tracker.stores.sql_store import SqlRecordStore


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created."""
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    import survey_tracker.models.weekly_data
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(db_engine):
    return SqlRecordStore(db_engine)


@pytest.fixture
def file_store(tmp_path):
    return FileRecordStore(str(tmp_path / 'data' / 'data.json'))


@pytest.fixture(params=['file', 'sql'])
def store(request):
    """Each test using this fixture runs once per backend."""
    return request.getfixturevalue(f'{request.param}_store')


@pytest.fixture
def app(store):
    """Flask test app."""
    from survey_tracker import create_app
    app = create_app(store=store)
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def make_item():
    """Factory fixture — wire-shaped survey item dict."""
    def _make(**overrides):
        item = dict(
            name='Test',
            total=100,
            survey=80,
            notInSurvey=20,
            percent=0.8,
            totalSpo=50,
            surveySpo=40,
            spoNotInSurvey=10,
            percentSpo=0.8,
            isPsRes=False,
        )
        item.update(overrides)
        return item
    return _make


@pytest.fixture
def make_week(make_item):
    """Factory fixture — wire-shaped {date, timestamp, data} submission."""
    def _make(date='2026-01-12', timestamp=1768176000000, items=None):
        body = {'date': date, 'data': items if items is not None else [make_item()]}
        if timestamp is not None:
            body['timestamp'] = timestamp
        return body
    return _make
