"""Per-operation settings and named presets."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from imagedirective.config.settings import AppConfig
from imagedirective.utils.cache import LazyCache

_EMPTY: Mapping[str, str] = MappingProxyType({})


class SettingsRegistry:
    """Read-mostly store of operation settings and presets.

    Built once per process from an :class:`AppConfig`. Each key is resolved
    from the configuration on first lookup and frozen afterwards; concurrent
    first lookups of one key resolve it exactly once.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self._operation_settings: LazyCache[str, Mapping[str, str]] = LazyCache()
        self._presets: LazyCache[str, Optional[str]] = LazyCache()

    def get_operation_settings(self, name: str) -> Mapping[str, str]:
        """Return the frozen settings for ``name``; empty when none are declared."""
        return self._operation_settings.get_or_create(name, self._resolve_operation_settings)

    def get_preset(self, name: str) -> Optional[str]:
        """Return the directive text stored under preset ``name``, if any."""
        return self._presets.get_or_create(name, self._resolve_preset)

    def preset_names(self) -> list[str]:
        return sorted(self.config.presets)

    def clear(self) -> None:
        """Drop resolved entries so the next lookups re-read the configuration."""
        self._operation_settings.clear()
        self._presets.clear()

    def _resolve_operation_settings(self, name: str) -> Mapping[str, str]:
        values = self.config.operation_settings.get(name)
        if not values:
            return _EMPTY
        return MappingProxyType({str(key): str(value) for key, value in values.items()})

    def _resolve_preset(self, name: str) -> Optional[str]:
        return self.config.presets.get(name)
