import json

import pytest

from drplant.vision import DiagnosisError, PlantDiagnoser, normalize_diagnosis, to_data_uri

from conftest import fake_client

REPLY = {
    "plant_name": "Tomato",
    "is_healthy": False,
    "disease_name": "Early blight",
    "confidence": 92,
    "description": "Concentric brown rings on older leaves.",
    "symptoms": ["brown spots", "yellowing"],
    "treatment": {"organic": ["copper spray"], "chemical": ["chlorothalonil"]},
    "prevention": ["crop rotation"],
}


def test_analyze_returns_record_with_fresh_id():
    client = fake_client(json.dumps(REPLY), json.dumps(REPLY))
    diagnoser = PlantDiagnoser(client, "gemini-2.5-flash")
    first = diagnoser.analyze("AAAA")
    second = diagnoser.analyze("AAAA")
    assert first.id != second.id
    assert first.disease_name == "Early blight"
    assert first.confidence == 92.0
    assert first.fields["treatment"] == {"organic": ["copper spray"], "chemical": ["chlorothalonil"]}
    assert first.fields["model"] == "gemini-2.5-flash"
    assert "analyzed_at" in first.fields
    assert first.image_url is None
    assert first.user_notes is None


def test_analyze_sends_image_as_data_uri():
    client = fake_client(json.dumps(REPLY))
    PlantDiagnoser(client, "m").analyze("AAAA")
    call = client.chat.completions.calls[0]
    assert call["model"] == "m"
    parts = call["messages"][0]["content"]
    assert parts[0]["type"] == "text"
    assert parts[1] == {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,AAAA"}}


def test_analyze_accepts_fenced_reply():
    reply = "Here is the diagnosis:\n```json\n" + json.dumps(REPLY) + "\n```"
    record = PlantDiagnoser(fake_client(reply), "m").analyze("data:image/png;base64,AAAA")
    assert record.plant_name == "Tomato"


@pytest.mark.parametrize("reply", ["", "I cannot see a plant.", "[1, 2, 3]"])
def test_unparseable_reply_raises(reply):
    with pytest.raises(DiagnosisError):
        PlantDiagnoser(fake_client(reply), "m").analyze("AAAA")


def test_sdk_error_becomes_diagnosis_error():
    with pytest.raises(DiagnosisError) as exc_info:
        PlantDiagnoser(fake_client(ConnectionError("boom")), "m").analyze("AAAA")
    assert isinstance(exc_info.value.__cause__, ConnectionError)


def test_empty_image_raises():
    with pytest.raises(DiagnosisError):
        PlantDiagnoser(fake_client(), "m").analyze("")


def test_normalize_fills_gaps():
    fields = normalize_diagnosis({"disease_name": "healthy", "confidence": "0.8", "symptoms": "none visible"})
    assert fields["is_healthy"] is True
    assert fields["confidence"] == 80.0
    assert fields["symptoms"] == ["none visible"]
    assert fields["treatment"] == {"organic": [], "chemical": []}
    assert fields["prevention"] == []


def test_normalize_unknown_disease_when_unhealthy():
    fields = normalize_diagnosis({"is_healthy": False, "confidence": 250})
    assert fields["disease_name"] == "Unknown"
    assert fields["confidence"] == 100.0


def test_to_data_uri_keeps_existing_uri():
    assert to_data_uri("data:image/png;base64,AA") == "data:image/png;base64,AA"
    assert to_data_uri("AA") == "data:image/jpeg;base64,AA"
