"""Configuration helpers for the imagedirective project."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

ENV_PREFIX = "IMAGEDIRECTIVE_"

BUILTIN_OPERATIONS: tuple[str, ...] = (
    "imagedirective.operations.resize.Resize",
    "imagedirective.operations.rotate.Rotate",
    "imagedirective.operations.flip.Flip",
    "imagedirective.operations.alpha.Alpha",
)

DEFAULT_OPERATION_SETTINGS: dict[str, dict[str, str]] = {
    "Resize": {"MaxWidth": "5000", "MaxHeight": "5000"},
}


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    auto_load_operations: bool = True
    operation_types: list[str] = field(default_factory=lambda: list(BUILTIN_OPERATIONS))
    discovery_packages: list[str] = field(default_factory=lambda: ["imagedirective.operations"])
    operation_settings: dict[str, dict[str, str]] = field(default_factory=dict)
    presets: dict[str, str] = field(default_factory=dict)
    log_dir: Path = Path("logs")
    log_level: str = "INFO"
    metadata: dict[str, Any] = field(default_factory=dict)


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip()


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    return default


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _collect_prefixed(prefix: str) -> dict[str, str]:
    """Return environment entries under ``prefix`` with the prefix removed."""
    collected: dict[str, str] = {}
    for key, value in os.environ.items():
        if key.startswith(prefix) and len(key) > len(prefix):
            collected[key[len(prefix):]] = value
    return collected


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    operation_settings: dict[str, dict[str, str]] = {
        name: dict(values) for name, values in DEFAULT_OPERATION_SETTINGS.items()
    }
    for compound, value in _collect_prefixed(f"{ENV_PREFIX}SETTING__").items():
        if "__" not in compound:
            continue
        operation_name, key = compound.split("__", 1)
        if operation_name and key:
            operation_settings.setdefault(operation_name, {})[key] = value

    presets = {
        name: value
        for name, value in _collect_prefixed(f"{ENV_PREFIX}PRESET__").items()
        if name
    }

    operations_override = os.getenv(f"{ENV_PREFIX}OPERATIONS")
    operation_types = _split_list(operations_override) if operations_override else list(BUILTIN_OPERATIONS)

    log_dir = Path(os.getenv(f"{ENV_PREFIX}LOG_DIR", "logs")).expanduser()

    metadata: dict[str, Any] = {"env_path": str(env_path)}
    return AppConfig(
        auto_load_operations=_parse_bool(os.getenv(f"{ENV_PREFIX}AUTO_LOAD"), True),
        operation_types=operation_types,
        operation_settings=operation_settings,
        presets=presets,
        log_dir=log_dir,
        log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
        metadata=metadata,
    )
