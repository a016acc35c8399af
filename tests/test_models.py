import pytest

from drplant.models import DiagnosisRecord


def test_to_json_omits_unset_optionals():
    record = DiagnosisRecord(id="a", fields={"disease_name": "Rust"})
    assert record.to_json() == {"id": "a", "disease_name": "Rust"}


def test_reserved_keys_never_leak_from_fields():
    record = DiagnosisRecord(id="a", fields={"id": "other", "user_notes": "x", "disease_name": "Rust"})
    assert record.to_json() == {"id": "a", "disease_name": "Rust"}


def test_from_json_splits_reserved_keys():
    record = DiagnosisRecord.from_json(
        {"id": "a", "disease_name": "Rust", "image_url": "data:image/png;base64,AA", "user_notes": "n"}
    )
    assert record.fields == {"disease_name": "Rust"}
    assert record.image_url == "data:image/png;base64,AA"
    assert record.user_notes == "n"


@pytest.mark.parametrize("data", [{}, {"id": ""}, {"id": 3}, ["id"]])
def test_from_json_rejects_missing_id(data):
    with pytest.raises(ValueError):
        DiagnosisRecord.from_json(data)


def test_with_notes_returns_copy():
    record = DiagnosisRecord(id="a", fields={"disease_name": "Rust"})
    noted = record.with_notes("water less")
    assert record.user_notes is None
    assert noted.user_notes == "water less"
    assert noted.fields is record.fields


def test_convenience_properties():
    record = DiagnosisRecord(id="a", fields={"disease_name": "Blight", "confidence": 87, "is_healthy": False})
    assert record.disease_name == "Blight"
    assert record.confidence == 87.0
    assert record.plant_name == ""
    assert not record.is_healthy
    assert DiagnosisRecord(id="b", fields={"confidence": "high"}).confidence is None
