from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

RESERVED_KEYS = ("id", "image_url", "user_notes")


@dataclass(frozen=True)
class DiagnosisRecord:
    id: str
    fields: Dict[str, Any] = field(default_factory=dict)  # diagnosis payload, opaque to the history store
    image_url: Optional[str] = None  # data URI, attached when saved
    user_notes: Optional[str] = None

    @property
    def disease_name(self) -> str:
        return str(self.fields.get("disease_name") or "")

    @property
    def plant_name(self) -> str:
        return str(self.fields.get("plant_name") or "")

    @property
    def confidence(self) -> Optional[float]:
        value = self.fields.get("confidence")
        return float(value) if isinstance(value, (int, float)) else None

    @property
    def is_healthy(self) -> bool:
        return bool(self.fields.get("is_healthy", False))

    def with_notes(self, notes: Optional[str]) -> "DiagnosisRecord":
        return replace(self, user_notes=notes)

    def with_image(self, image_url: Optional[str]) -> "DiagnosisRecord":
        return replace(self, image_url=image_url)

    def to_json(self) -> dict:
        # Flat object; optional keys are left out rather than written as null
        data = {"id": self.id}
        data.update({k: v for k, v in self.fields.items() if k not in RESERVED_KEYS})
        if self.image_url is not None:
            data["image_url"] = self.image_url
        if self.user_notes is not None:
            data["user_notes"] = self.user_notes
        return data

    @classmethod
    def from_json(cls, data: dict) -> "DiagnosisRecord":
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
        id_ = data.get("id")
        if not isinstance(id_, str) or not id_:
            raise ValueError("Diagnosis record without a string id")
        image_url = data.get("image_url")
        user_notes = data.get("user_notes")
        return cls(
            id=id_,
            fields={k: v for k, v in data.items() if k not in RESERVED_KEYS},
            image_url=image_url if isinstance(image_url, str) else None,
            user_notes=user_notes if isinstance(user_notes, str) else None,
        )
