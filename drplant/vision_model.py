import os
from dataclasses import dataclass
from typing import Dict, List

import requests
from openai import OpenAI


VISION_MARKERS = ("vision", "vl", "llava", "gemini", "gpt-4o", "gpt-4.1", "gpt-5", "pixtral", "claude")


@dataclass(frozen=True)
class ProviderConfig:
    name: str
    base_url: str
    api_key: str


def get_provider_config(config: Dict[str, dict], selected_provider: str) -> ProviderConfig:
    """Resolve a provider entry from config.json; the key itself is read from the environment."""
    if selected_provider not in config:
        raise KeyError(f"Unknown provider {selected_provider!r}; configured: {', '.join(config)}")
    entry = config[selected_provider]
    env_key = entry.get("env_key", "")
    api_key = os.getenv(env_key) if env_key else None
    if not api_key:
        raise ValueError(f"Missing API key for {selected_provider}. Set env variable: {env_key or '(env_key not configured)'}")
    return ProviderConfig(name=selected_provider, base_url=entry["base_url"].rstrip("/"), api_key=api_key)


def init_client(provider: ProviderConfig, timeout: float = 60.0) -> OpenAI:
    return OpenAI(api_key=provider.api_key, base_url=provider.base_url, timeout=timeout)


def fetch_models(base: str, key: str, timeout: float = 15.0) -> List[str]:
    headers = {"Authorization": f"Bearer {key}"}
    response = requests.get(f"{base.rstrip('/')}/models", headers=headers, timeout=timeout)
    response.raise_for_status()
    models = response.json().get("data", [])
    return [m["id"] for m in models if isinstance(m, dict) and "id" in m]


def filter_vision_models(all_models: List[str]) -> List[str]:
    return [m for m in all_models if any(marker in m.lower() for marker in VISION_MARKERS)]
