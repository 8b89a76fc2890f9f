"""Tests for survey_tracker.stores.file_store — disk layout and failure modes."""
import json
import os
import pytest
from unittest.mock import patch

from survey_tracker.errors import CorruptState, StorageUnavailable
from survey_tracker.models.weekly_record import SurveyItem, WeeklyRecord
from survey_tracker.stores.file_store import FileRecordStore


def _rec(date, timestamp):
    item = SurveyItem(name='Южные ЭС', total=10, survey=9, not_in_survey=1, percent=0.9)
    return WeeklyRecord(date=date, timestamp=timestamp, items=[item])


class TestInitialization:

    def test_creates_directory_and_empty_array(self, tmp_path):
        path = tmp_path / 'nested' / 'data.json'
        store = FileRecordStore(str(path))
        assert store.get_all() == []
        assert json.loads(path.read_text(encoding='utf-8')) == []

    def test_zero_byte_file_is_initialized(self, tmp_path):
        path = tmp_path / 'data.json'
        path.write_text('', encoding='utf-8')
        assert FileRecordStore(str(path)).get_all() == []
        assert json.loads(path.read_text(encoding='utf-8')) == []

    def test_file_truncated_after_startup_is_corrupt(self, tmp_path):
        path = tmp_path / 'data.json'
        store = FileRecordStore(str(path))
        store.upsert(_rec('2026-01-05', 1))
        path.write_bytes(b'')

        with pytest.raises(CorruptState):
            store.get_all()
        with pytest.raises(CorruptState):
            store.upsert(_rec('2026-01-12', 2))
        assert path.stat().st_size == 0


class TestLayout:

    def test_file_holds_ordered_array_of_wire_records(self, tmp_path):
        path = tmp_path / 'data.json'
        store = FileRecordStore(str(path))
        store.upsert(_rec('2026-01-05', 1))
        store.upsert(_rec('2026-01-12', 2))

        raw = json.loads(path.read_text(encoding='utf-8'))
        assert [entry['date'] for entry in raw] == ['2026-01-12', '2026-01-05']
        assert raw[0]['data'][0]['notInSurvey'] == 1

    def test_non_ascii_names_written_verbatim(self, tmp_path):
        path = tmp_path / 'data.json'
        FileRecordStore(str(path)).upsert(_rec('2026-01-05', 1))
        assert 'Южные ЭС' in path.read_text(encoding='utf-8')

    def test_no_temp_files_left_behind(self, tmp_path):
        store = FileRecordStore(str(tmp_path / 'data.json'))
        store.upsert(_rec('2026-01-05', 1))
        assert os.listdir(tmp_path) == ['data.json']

    def test_failed_write_keeps_previous_content(self, tmp_path):
        path = tmp_path / 'data.json'
        store = FileRecordStore(str(path))
        store.upsert(_rec('2026-01-05', 1))
        before = path.read_text(encoding='utf-8')

        with patch('survey_tracker.stores.file_store.os.replace', side_effect=OSError('disk full')):
            with pytest.raises(StorageUnavailable):
                store.upsert(_rec('2026-01-12', 2))

        assert path.read_text(encoding='utf-8') == before
        assert os.listdir(tmp_path) == ['data.json']


class TestFailureModes:

    def test_invalid_json_is_corrupt(self, tmp_path):
        path = tmp_path / 'data.json'
        path.write_text('[{"date": ', encoding='utf-8')
        with pytest.raises(CorruptState):
            FileRecordStore(str(path)).get_all()

    def test_non_array_is_corrupt(self, tmp_path):
        path = tmp_path / 'data.json'
        path.write_text('{"date": "2026-01-05"}', encoding='utf-8')
        with pytest.raises(CorruptState):
            FileRecordStore(str(path)).get_all()

    def test_malformed_entry_is_corrupt(self, tmp_path):
        path = tmp_path / 'data.json'
        path.write_text('[{"date": "2026-01-05", "timestamp": 1, "data": []}]', encoding='utf-8')
        with pytest.raises(CorruptState):
            FileRecordStore(str(path)).get_all()

    def test_corrupt_file_is_not_overwritten_by_upsert(self, tmp_path):
        path = tmp_path / 'data.json'
        path.write_text('not json', encoding='utf-8')
        with pytest.raises(CorruptState):
            FileRecordStore(str(path)).upsert(_rec('2026-01-05', 1))
        assert path.read_text(encoding='utf-8') == 'not json'

    def test_unreadable_file_is_unavailable(self, tmp_path):
        store = FileRecordStore(str(tmp_path / 'data.json'))
        store.get_all()
        with patch('builtins.open', side_effect=PermissionError('denied')):
            with pytest.raises(StorageUnavailable):
                store.get_all()

    def test_uncreatable_directory_is_unavailable(self, tmp_path):
        store = FileRecordStore(str(tmp_path / 'sub' / 'data.json'))
        with patch('survey_tracker.stores.file_store.os.makedirs', side_effect=OSError('read-only')):
            with pytest.raises(StorageUnavailable):
                store.get_all()
