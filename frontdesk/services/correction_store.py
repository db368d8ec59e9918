from abc import ABC, abstractmethod
from typing import Dict, Optional

from frontdesk.models.calendar_models import CorrectionRecord


class CorrectionStore(ABC):
    @abstractmethod
    def get(self, booking_uid: str) -> Optional[CorrectionRecord]:
        raise NotImplementedError

    @abstractmethod
    def put(self, record: CorrectionRecord) -> None:
        raise NotImplementedError


class InMemoryCorrectionStore(CorrectionStore):
    """
    Keeps corrections for the lifetime of the process only. Everything is
    lost on restart; swap in a durable CorrectionStore if that matters.
    """

    def __init__(self) -> None:
        self._records: Dict[str, CorrectionRecord] = {}

    def get(self, booking_uid: str) -> Optional[CorrectionRecord]:
        return self._records.get(booking_uid)

    def put(self, record: CorrectionRecord) -> None:
        self._records[record.original_uid] = record

    def __len__(self) -> int:
        return len(self._records)
