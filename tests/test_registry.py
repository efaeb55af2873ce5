"""Settings and operation registry tests."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Mapping

import pytest

from imagedirective.config.settings import BUILTIN_OPERATIONS, AppConfig
from imagedirective.operations.resize import Resize
from imagedirective.registry.operation_registry import OperationLoadError, OperationRegistry
from imagedirective.registry.settings_registry import SettingsRegistry


class CountingPresets(dict):
    """Preset source recording how often each key is resolved."""

    def __init__(self, *args, delay: float = 0.0, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.delay = delay
        self.lookups: list[str] = []
        self._lock = threading.Lock()

    def get(self, key, default=None):
        with self._lock:
            self.lookups.append(key)
        time.sleep(self.delay)
        return super().get(key, default)


def test_unknown_operation_settings_are_empty_and_stable():
    registry = SettingsRegistry(AppConfig())

    first = registry.get_operation_settings("Unknown")
    second = registry.get_operation_settings("Unknown")

    assert isinstance(first, Mapping)
    assert dict(first) == {}
    assert first is second


def test_operation_settings_are_frozen():
    config = AppConfig(operation_settings={"Resize": {"MaxWidth": "640"}})
    registry = SettingsRegistry(config)

    settings = registry.get_operation_settings("Resize")
    config.operation_settings["Resize"]["MaxWidth"] = "1"

    assert settings["MaxWidth"] == "640"
    assert registry.get_operation_settings("Resize")["MaxWidth"] == "640"
    with pytest.raises(TypeError):
        settings["MaxWidth"] = "2"  # type: ignore[index]


def test_preset_resolved_once():
    presets = CountingPresets({"thumb": "width=100"})
    registry = SettingsRegistry(AppConfig(presets=presets))

    assert registry.get_preset("thumb") == "width=100"
    assert registry.get_preset("thumb") == "width=100"
    assert registry.get_preset("missing") is None
    assert registry.get_preset("missing") is None
    assert presets.lookups == ["thumb", "missing"]


def test_clear_forces_fresh_resolution():
    presets = CountingPresets({"thumb": "width=100"})
    registry = SettingsRegistry(AppConfig(presets=presets))

    registry.get_preset("thumb")
    registry.clear()
    registry.get_preset("thumb")

    assert presets.lookups == ["thumb", "thumb"]


def test_concurrent_first_lookup_resolves_once():
    presets = CountingPresets({"thumb": "width=100&height=100"}, delay=0.01)
    registry = SettingsRegistry(AppConfig(presets=presets))
    workers = 16
    barrier = threading.Barrier(workers)

    def lookup(_: int):
        barrier.wait()
        return registry.get_preset("thumb")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(lookup, range(workers)))

    assert set(results) == {"width=100&height=100"}
    assert presets.lookups == ["thumb"]


def test_preset_names_sorted():
    registry = SettingsRegistry(AppConfig(presets={"b": "width=1", "a": "width=2"}))

    assert registry.preset_names() == ["a", "b"]


def test_automatic_discovery_finds_builtin_operations():
    registry = OperationRegistry(AppConfig())

    assert registry.names() == ["Alpha", "Flip", "Resize", "Rotate"]
    assert registry.warnings == []


def test_operations_built_once():
    registry = OperationRegistry(AppConfig())

    assert registry.operations is registry.operations


def test_settings_attached_by_type_name():
    config = AppConfig(operation_settings={"Resize": {"MaxWidth": "640", "RestrictTo": "width=100"}})
    registry = OperationRegistry(config)

    resize = registry.get("Resize")

    assert isinstance(resize, Resize)
    assert resize.settings["MaxWidth"] == "640"
    assert resize.limits.max_width == 640
    assert dict(registry.get("Flip").settings) == {}


def test_explicit_list_keeps_declared_order():
    config = AppConfig(
        auto_load_operations=False,
        operation_types=[
            "imagedirective.operations.flip.Flip",
            "imagedirective.operations.resize.Resize",
        ],
    )

    assert OperationRegistry(config).names() == ["Flip", "Resize"]


@pytest.mark.parametrize(
    "type_name",
    [
        "imagedirective.operations.missing.Nope",
        "imagedirective.operations.resize.Nope",
        "imagedirective.operations.resize_geometry.ResizePlan",
        "imagedirective.operations.base.ImageOperation",
        "Resize",
    ],
)
def test_unresolvable_explicit_type_is_fatal(type_name):
    config = AppConfig(auto_load_operations=False, operation_types=[type_name])
    registry = OperationRegistry(config)

    with pytest.raises(OperationLoadError) as excinfo:
        _ = registry.operations

    assert type_name in str(excinfo.value)
    assert excinfo.value.type_name == type_name
    assert isinstance(excinfo.value, ImportError)


def test_discovery_failure_falls_back_to_explicit_list():
    config = AppConfig(discovery_packages=["imagedirective.no_such_package"])
    registry = OperationRegistry(config)

    names = registry.names()

    assert names == [type_name.rsplit(".", 1)[1] for type_name in BUILTIN_OPERATIONS]
    assert registry.warnings
    assert "discovery failed" in registry.warnings[0]


def test_discovery_entry_that_is_a_module_falls_back():
    registry = OperationRegistry(AppConfig(discovery_packages=["imagedirective.operations.resize"]))

    assert registry.names() == [type_name.rsplit(".", 1)[1] for type_name in BUILTIN_OPERATIONS]
    assert "not a package" in registry.warnings[0]


def test_module_raising_at_import_falls_back(tmp_path, monkeypatch):
    package = tmp_path / "broken_operations"
    package.mkdir()
    (package / "__init__.py").write_text("", encoding="utf-8")
    (package / "exploding.py").write_text("raise RuntimeError('boom at import')\n", encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    registry = OperationRegistry(AppConfig(discovery_packages=["broken_operations"]))

    names = registry.names()

    assert names == [type_name.rsplit(".", 1)[1] for type_name in BUILTIN_OPERATIONS]
    assert "boom at import" in registry.warnings[0]


def test_fallback_still_fails_fast_on_bad_explicit_entry():
    config = AppConfig(
        discovery_packages=["imagedirective.no_such_package"],
        operation_types=["imagedirective.operations.rotate.Missing"],
    )

    with pytest.raises(OperationLoadError):
        OperationRegistry(config).names()


def test_duplicate_type_names_are_ignored():
    config = AppConfig(
        auto_load_operations=False,
        operation_types=[
            "imagedirective.operations.resize.Resize",
            "imagedirective.operations.resize.Resize",
        ],
    )
    registry = OperationRegistry(config)

    assert registry.names() == ["Resize"]
    assert registry.warnings


def test_get_unknown_operation():
    registry = OperationRegistry(AppConfig())

    with pytest.raises(KeyError):
        registry.get("Sharpen")
