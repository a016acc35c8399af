import json
from typing import Any, Optional

_DECODER = json.JSONDecoder()


def safe_json_load(s: str) -> Optional[dict]:
    try:
        parsed = json.loads(s)
    except (TypeError, ValueError, RecursionError):
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_json_object(text: str) -> Optional[dict]:
    """
    Parse a model reply as a JSON object.
    Tries the whole text first, then the first {...} object that decodes
    (replies often come wrapped in prose or ``` fences).
    """
    if not text:
        return None
    parsed = safe_json_load(text.strip())
    if parsed is not None:
        return parsed
    start = text.find("{")
    while start != -1:
        try:
            obj, _ = _DECODER.raw_decode(text, start)
        except (ValueError, RecursionError):
            obj = None
        if isinstance(obj, dict):
            return obj
        start = text.find("{", start + 1)
    return None


def as_str_list(value: Any) -> list:
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    if isinstance(value, str) and value.strip():
        return [value.strip()]
    return []


def clamp_confidence(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # Some models answer with a 0-1 probability
    if 0 < number <= 1:
        number *= 100
    return max(0.0, min(100.0, number))
