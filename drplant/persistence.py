import json
import logging
from typing import List

import pandas as pd

from .models import DiagnosisRecord
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

HISTORY_KEY = "drplant_history_v1"
HISTORY_LIMIT = 10

HistoryLog = List[DiagnosisRecord]


def dump_history(log: HistoryLog) -> str:
    return json.dumps([r.to_json() for r in log], ensure_ascii=False)


def parse_history(content: str) -> HistoryLog:
    """
    Parse a persisted history array.
    Raises ValueError (json.JSONDecodeError included) on anything malformed;
    one bad entry invalidates the whole log.
    """
    data = json.loads(content)
    if not isinstance(data, list):
        raise ValueError(f"History must be a JSON array, got {type(data).__name__}")
    return [DiagnosisRecord.from_json(item) for item in data]


class HistoryStore:
    """
    Bounded, most-recent-first log of saved diagnoses.

    Every operation takes the caller's current log and returns a new list;
    mutations write the full log back to storage before returning.
    Unknown ids are never an error.
    """

    def __init__(self, storage: KeyValueStorage, key: str = HISTORY_KEY, limit: int = HISTORY_LIMIT):
        self.storage = storage
        self.key = key
        self.limit = limit

    def load(self) -> HistoryLog:
        content = self.storage.get(self.key)
        if not content:
            return []
        try:
            log = parse_history(content)
        except (ValueError, TypeError, RecursionError) as e:
            logger.warning("Failed to load history, starting empty: %s", e)
            return []
        return log[: self.limit]

    def _persist(self, log: HistoryLog) -> HistoryLog:
        self.storage.set(self.key, dump_history(log))
        return log

    def insert(self, record: DiagnosisRecord, current_log: HistoryLog) -> HistoryLog:
        # No dedupe by id: the view only offers saving when is_saved() is False
        return self._persist([record, *current_log][: self.limit])

    def remove(self, record_id: str, current_log: HistoryLog) -> HistoryLog:
        return self._persist([r for r in current_log if r.id != record_id])

    def update_notes(self, record_id: str, notes: str, current_log: HistoryLog) -> HistoryLog:
        if not self.is_saved(record_id, current_log):
            return current_log
        return self._persist([r.with_notes(notes) if r.id == record_id else r for r in current_log])

    @staticmethod
    def is_saved(record_id: str, current_log: HistoryLog) -> bool:
        return any(r.id == record_id for r in current_log)


def export_csv(log: HistoryLog) -> str:
    """Summarise the history as CSV, one row per saved diagnosis."""
    rows = [
        {
            "id": r.id,
            "analyzed_at": r.fields.get("analyzed_at", ""),
            "plant_name": r.plant_name,
            "disease_name": r.disease_name,
            "confidence": r.confidence,
            "is_healthy": r.is_healthy,
            "user_notes": r.user_notes or "",
        }
        for r in log
    ]
    columns = ["id", "analyzed_at", "plant_name", "disease_name", "confidence", "is_healthy", "user_notes"]
    return pd.DataFrame(rows, columns=columns).to_csv(index=False)
