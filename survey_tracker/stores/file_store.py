"""
Flat-file record store — the whole store is one JSON array on disk.

Writes go to a temp file in the same directory and are swapped in with
os.replace(), so a concurrent reader sees either the old array or the new one.
A threading.Lock serializes read-modify-write cycles within the process.
"""
import json
import logging
import os
import tempfile
import threading
from typing import List, Optional

from survey_tracker.errors import CorruptState, InvalidSubmission, StorageUnavailable
from survey_tracker.models.weekly_record import WeeklyRecord, canonical_order
from survey_tracker.stores.base import RecordStore

logger = logging.getLogger('stores.file')


class FileRecordStore(RecordStore):
    backend = 'file'

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        self._initialized = False

    # ── Disk I/O ──────────────────────────────────────────────────────

    def _initialize(self):
        """Create the parent directory and an empty array file if absent.

        Runs once per store; a file emptied afterwards is read as corrupt.
        """
        if self._initialized:
            return
        try:
            directory = os.path.dirname(os.path.abspath(self.path))
            os.makedirs(directory, exist_ok=True)
            if not os.path.exists(self.path) or os.path.getsize(self.path) == 0:
                self._write([])
                logger.info("Created new data file %s", self.path)
            self._initialized = True
        except OSError as e:
            raise StorageUnavailable(f"cannot initialize data file {self.path}: {e}")

    def _read(self) -> List[WeeklyRecord]:
        self._initialize()
        try:
            with open(self.path, encoding='utf-8') as f:
                content = f.read()
        except OSError as e:
            raise StorageUnavailable(f"cannot read data file {self.path}: {e}")

        try:
            raw = json.loads(content)
        except ValueError:
            logger.error("Data file %s is not valid JSON", self.path)
            raise CorruptState(f"data file {self.path} is not valid JSON")
        if not isinstance(raw, list):
            raise CorruptState(f"data file {self.path} does not hold a JSON array")

        try:
            # Persisted entries always carry a timestamp; 0 only guards hand-edited files
            return [WeeklyRecord.from_dict(entry, default_timestamp=0) for entry in raw]
        except InvalidSubmission as e:
            logger.error("Data file %s holds a malformed record: %s", self.path, e.message)
            raise CorruptState(f"data file {self.path} holds a malformed record: {e.message}")

    def _write(self, records: List[WeeklyRecord]):
        directory = os.path.dirname(os.path.abspath(self.path))
        payload = [rec.to_dict() for rec in canonical_order(records)]
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.data-', suffix='.json')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(payload, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except OSError as e:
            raise StorageUnavailable(f"cannot write data file {self.path}: {e}")

    # ── RecordStore ───────────────────────────────────────────────────

    def get_all(self) -> List[WeeklyRecord]:
        with self._lock:
            return canonical_order(self._read())

    def get(self, date: str) -> Optional[WeeklyRecord]:
        with self._lock:
            for rec in self._read():
                if rec.date == date:
                    return rec
        return None

    def upsert(self, record: WeeklyRecord) -> bool:
        with self._lock:
            records = self._read()
            kept = [rec for rec in records if rec.date != record.date]
            created = len(kept) == len(records)
            kept.append(record)
            self._write(kept)
        return created

    def delete_all(self) -> int:
        with self._lock:
            removed = len(self._read())
            self._write([])
        return removed

    def delete(self, date: str) -> bool:
        with self._lock:
            records = self._read()
            kept = [rec for rec in records if rec.date != date]
            if len(kept) == len(records):
                return False
            self._write(kept)
        return True

    def restore(self, records: List[WeeklyRecord]) -> int:
        by_date = {}
        for rec in records:
            by_date[rec.date] = rec
        with self._lock:
            self._initialize()
            self._write(list(by_date.values()))
        return len(by_date)
