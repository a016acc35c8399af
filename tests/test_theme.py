import pytest

from drplant.storage import MemoryStorage
from drplant.theme import THEME_KEY, load_theme, save_theme, toggle_theme


def test_load_theme_defaults_when_unset():
    assert load_theme(MemoryStorage()) == "light"
    assert load_theme(MemoryStorage(), default="dark") == "dark"


def test_load_theme_ignores_unknown_value():
    assert load_theme(MemoryStorage({THEME_KEY: "purple"})) == "light"


def test_save_and_toggle():
    storage = MemoryStorage()
    save_theme(storage, "dark")
    assert storage.get(THEME_KEY) == "dark"
    assert toggle_theme(storage, "dark") == "light"
    assert load_theme(storage, default="dark") == "light"


def test_save_theme_rejects_unknown():
    with pytest.raises(ValueError):
        save_theme(MemoryStorage(), "sepia")
