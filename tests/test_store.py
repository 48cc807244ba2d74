import json

import pytest

from mandelview import (
    DEFAULT_SETTINGS,
    JsonFileStore,
    MemoryStore,
    Palette,
    RenderSettings,
    SettingsStore,
    Viewport,
    ViewStateStore,
)


def test_empty_store_has_no_viewport():
    assert ViewStateStore(MemoryStore()).load() is None


def test_viewport_round_trips_exactly():
    store = ViewStateStore(MemoryStore())
    viewport = Viewport(-0.7453218765432101, 0.1130009, -0.74531, 0.113012)
    store.save(viewport)
    assert store.load() == viewport


def test_viewport_is_stored_as_decimal_text():
    backing = MemoryStore()
    ViewStateStore(backing).save(Viewport(-2.0, -1.25, 0.5, 1.25))
    assert backing.values == {"x_min": "-2.0", "y_min": "-1.25", "x_max": "0.5", "y_max": "1.25"}


def test_malformed_viewport_falls_back():
    backing = MemoryStore({"x_min": "-2", "y_min": "oops", "x_max": "0.5", "y_max": "1.25"})
    with pytest.warns(UserWarning):
        assert ViewStateStore(backing).load() is None


def test_non_finite_viewport_falls_back():
    backing = MemoryStore({"x_min": "nan", "y_min": "0", "x_max": "1", "y_max": "1"})
    with pytest.warns(UserWarning):
        assert ViewStateStore(backing).load() is None


def test_settings_default_when_missing():
    assert SettingsStore(MemoryStore()).load() == DEFAULT_SETTINGS


def test_settings_round_trip():
    store = SettingsStore(MemoryStore())
    settings = RenderSettings(max_iterations=64, palette=Palette.from_hex(["#112233", "#445566", "#778899"]))
    store.save(settings)
    assert store.load() == settings


def test_invalid_stored_settings_fall_back_to_defaults():
    backing = MemoryStore({"iterations": "-4", "color_interior": "#000000"})
    with pytest.warns(UserWarning):
        assert SettingsStore(backing).load() == DEFAULT_SETTINGS


def test_json_file_store_persists_between_instances(tmp_path):
    path = tmp_path / "state" / "view.json"
    ViewStateStore(JsonFileStore(path)).save(Viewport(-1.0, -0.5, 0.0, 0.5))
    SettingsStore(JsonFileStore(path)).save(RenderSettings(max_iterations=77))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["x_min"] == "-1.0"
    assert data["iterations"] == "77"

    assert ViewStateStore(JsonFileStore(path)).load() == Viewport(-1.0, -0.5, 0.0, 0.5)
    assert SettingsStore(JsonFileStore(path)).load().max_iterations == 77


def test_json_file_store_missing_file_is_empty(tmp_path):
    assert JsonFileStore(tmp_path / "absent.json").get("x_min") is None


def test_json_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "view.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStore(path)
    with pytest.warns(UserWarning):
        assert store.get("x_min") is None
    with pytest.warns(UserWarning):
        store.set("x_min", "1.5")
    assert store.get("x_min") == "1.5"


def test_viewport_without_height_falls_back():
    backing = MemoryStore({"x_min": "-1.0", "y_min": "0.5", "x_max": "0.5", "y_max": "0.5"})
    with pytest.warns(UserWarning):
        assert ViewStateStore(backing).load() is None
