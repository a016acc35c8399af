import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from openai import OpenAI

from .models import DiagnosisRecord
from .utils import as_str_list, clamp_confidence, extract_json_object

logger = logging.getLogger(__name__)

DIAGNOSIS_PROMPT = """
You are an expert agronomist and plant pathologist. Examine the plant in the image
and respond with a single valid JSON object and NOTHING else, using exactly these keys:
- plant_name: common name of the plant (string)
- is_healthy: true if no disease, pest or deficiency is visible (boolean)
- disease_name: the disease, pest or deficiency found, or "Healthy" (string)
- confidence: your confidence in the diagnosis from 0 to 100 (number)
- description: one short paragraph explaining the diagnosis (string)
- symptoms: visible symptoms (list of strings)
- treatment: {"organic": [list of strings], "chemical": [list of strings]}
- prevention: preventive measures (list of strings)
Do not use markdown or code fences.
"""


class DiagnosisError(Exception):
    """The image could not be turned into a diagnosis, whatever the cause."""


def to_data_uri(image: str, default_mime: str = "image/jpeg") -> str:
    if image.startswith("data:"):
        return image
    return f"data:{default_mime};base64,{image}"


def normalize_diagnosis(parsed: Dict[str, Any]) -> Dict[str, Any]:
    treatment = parsed.get("treatment")
    if not isinstance(treatment, dict):
        treatment = {}
    disease_name = str(parsed.get("disease_name") or "").strip()
    is_healthy = parsed.get("is_healthy")
    if not isinstance(is_healthy, bool):
        is_healthy = disease_name.lower() in ("", "healthy", "none")
    return {
        "plant_name": str(parsed.get("plant_name") or "").strip(),
        "is_healthy": is_healthy,
        "disease_name": disease_name or ("Healthy" if is_healthy else "Unknown"),
        "confidence": clamp_confidence(parsed.get("confidence")),
        "description": str(parsed.get("description") or "").strip(),
        "symptoms": as_str_list(parsed.get("symptoms")),
        "treatment": {
            "organic": as_str_list(treatment.get("organic")),
            "chemical": as_str_list(treatment.get("chemical")),
        },
        "prevention": as_str_list(parsed.get("prevention")),
    }


def run_vision_inference(client: OpenAI, model: str, prompt: str, image: str) -> str:
    """Send one image with an instruction and return the raw reply text."""
    messages = [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": to_data_uri(image)}},
            ],
        }
    ]
    response = client.chat.completions.create(
        model=model,
        messages=messages,
        temperature=0.2,
    )
    return response.choices[0].message.content or ""


class PlantDiagnoser:
    def __init__(self, client: OpenAI, model: str, prompt: str = DIAGNOSIS_PROMPT):
        self.client = client
        self.model = model
        self.prompt = prompt

    def analyze(self, image: str) -> DiagnosisRecord:
        """
        Diagnose a plant photo given as a data URI or bare base64 (JPEG assumed).
        Raises DiagnosisError on any failure.
        """
        if not image:
            raise DiagnosisError("No image to analyze")
        try:
            content = run_vision_inference(self.client, self.model, self.prompt, image)
        except Exception as e:
            logger.exception("Vision request to %s failed", self.model)
            raise DiagnosisError(f"Vision request failed: {e}") from e

        parsed = extract_json_object(content)
        if parsed is None:
            logger.error("Unparseable diagnosis reply from %s: %.200r", self.model, content)
            raise DiagnosisError("The model reply did not contain a diagnosis")

        fields = normalize_diagnosis(parsed)
        fields["analyzed_at"] = datetime.now(timezone.utc).isoformat(timespec="seconds")
        fields["model"] = self.model
        return DiagnosisRecord(id=uuid.uuid4().hex, fields=fields)
