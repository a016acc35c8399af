from typing import Literal

from .storage import KeyValueStorage

THEME_KEY = "drplant_theme"
THEMES = ("dark", "light")

Theme = Literal["dark", "light"]


def load_theme(storage: KeyValueStorage, default: Theme = "light") -> Theme:
    saved = storage.get(THEME_KEY)
    if saved in THEMES:
        return saved
    return default


def save_theme(storage: KeyValueStorage, theme: str) -> None:
    if theme not in THEMES:
        raise ValueError(f"Unknown theme {theme!r}, expected one of {', '.join(THEMES)}")
    storage.set(THEME_KEY, theme)


def toggle_theme(storage: KeyValueStorage, current: Theme) -> Theme:
    new: Theme = "light" if current == "dark" else "dark"
    save_theme(storage, new)
    return new


# Minimal dark palette for the Streamlit page; the light theme is Streamlit's default
DARK_CSS = """
<style>
.stApp { background-color: #0f172a; color: #e2e8f0; }
.stApp h1, .stApp h2, .stApp h3, .stApp p, .stApp label, .stApp li { color: #e2e8f0; }
section[data-testid="stSidebar"] { background-color: #1e293b; }
</style>
"""
