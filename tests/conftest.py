from types import SimpleNamespace

import pytest

from drplant.models import DiagnosisRecord
from drplant.persistence import HistoryStore
from drplant.storage import MemoryStorage


def make_record(n, **fields) -> DiagnosisRecord:
    payload = {"disease_name": f"Disease {n}", "confidence": 90, "plant_name": "Tomato"}
    payload.update(fields)
    return DiagnosisRecord(id=f"rec-{n}", fields=payload)


class FakeCompletions:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(*replies):
    completions = FakeCompletions(replies)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return HistoryStore(storage)
