"""
Record store contract.

Every backend implements RecordStore. The reporting engine only sees this
interface, so the flat-file and relational variants are interchangeable per
deployment.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from survey_tracker.models.weekly_record import WeeklyRecord


class RecordStore(ABC):
    """
    Durable storage for weekly records, keyed by date.

    Implementations must:
      - return full listings newest-timestamp first
      - create their file/table transparently on first use
      - replace a record atomically on upsert (readers never see half a week)
      - raise StorageUnavailable / CorruptState instead of reporting an empty store
    """
    backend: str = ''

    @abstractmethod
    def get_all(self) -> List[WeeklyRecord]:
        """All records, timestamp descending. Empty list when none exist."""
        ...

    @abstractmethod
    def get(self, date: str) -> Optional[WeeklyRecord]:
        """Record for ``date`` or None."""
        ...

    @abstractmethod
    def upsert(self, record: WeeklyRecord) -> bool:
        """Insert or fully replace the record for ``record.date``. Returns True when created."""
        ...

    @abstractmethod
    def delete_all(self) -> int:
        """Remove every record and return how many were removed."""
        ...

    @abstractmethod
    def delete(self, date: str) -> bool:
        """Remove the record for ``date``. Returns False when there was none."""
        ...

    @abstractmethod
    def restore(self, records: List[WeeklyRecord]) -> int:
        """
        Replace the whole store with ``records`` in one step.

        Later entries win when two share a date. Returns the stored count.
        """
        ...

    def count(self) -> int:
        """Number of stored weeks."""
        return len(self.get_all())
