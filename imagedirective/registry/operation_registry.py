"""Discovery and instantiation of directive operations."""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
import threading
from typing import Iterable, List, Optional, Sequence

from imagedirective.config.settings import AppConfig
from imagedirective.operations.base import ImageOperation
from imagedirective.registry.settings_registry import SettingsRegistry

logger = logging.getLogger(__name__)


class OperationLoadError(ImportError):
    """An explicitly configured operation type could not be resolved."""

    def __init__(self, type_name: str, detail: Optional[str] = None) -> None:
        message = f"Couldn't load image operation: {type_name}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.type_name = type_name


def _is_operation_type(candidate: object) -> bool:
    return (
        inspect.isclass(candidate)
        and issubclass(candidate, ImageOperation)
        and not inspect.isabstract(candidate)
    )


class OperationRegistry:
    """Ordered collection of operation instances with their settings attached.

    When ``config.auto_load_operations`` is set, every module of the configured
    discovery packages is imported and its concrete :class:`ImageOperation`
    subclasses are collected. Any failure during that scan falls back to
    the explicit ``config.operation_types`` list, whose entries must all
    resolve.
    """

    def __init__(self, config: AppConfig, settings: Optional[SettingsRegistry] = None) -> None:
        self.config = config
        self.settings = settings or SettingsRegistry(config)
        self.warnings: list[str] = []
        self._operations: Optional[tuple[ImageOperation, ...]] = None
        self._lock = threading.Lock()

    @property
    def operations(self) -> tuple[ImageOperation, ...]:
        """Return the operations, loading them on first access."""
        if self._operations is None:
            with self._lock:
                if self._operations is None:
                    self._operations = self._load()
        return self._operations

    def names(self) -> List[str]:
        return [operation.name for operation in self.operations]

    def get(self, name: str) -> ImageOperation:
        """Retrieve an operation by type name."""
        for operation in self.operations:
            if operation.name == name:
                return operation
        raise KeyError(f"Image operation '{name}' not registered")

    # Internal helpers ---------------------------------------------------------
    def _load(self) -> tuple[ImageOperation, ...]:
        if self.config.auto_load_operations:
            try:
                types = self._discover_types(self.config.discovery_packages)
            except Exception as exc:  # noqa: BLE001
                message = f"Automatic operation discovery failed, using configured list: {exc}"
                logger.warning(message)
                self.warnings.append(message)
                types = self._resolve_types(self.config.operation_types)
        else:
            types = self._resolve_types(self.config.operation_types)

        operations = self._instantiate(types)
        logger.info("Loaded image operations: %s", ", ".join(op.name for op in operations) or "<none>")
        return operations

    def _discover_types(self, package_names: Sequence[str]) -> List[type]:
        found: List[type] = []
        for package_name in package_names:
            package = importlib.import_module(package_name)
            if not hasattr(package, "__path__"):
                raise ImportError(f"'{package_name}' is a module, not a package")
            module_names = sorted(info.name for info in pkgutil.iter_modules(package.__path__))
            for module_name in module_names:
                module = importlib.import_module(f"{package_name}.{module_name}")
                for _, member in inspect.getmembers(module, _is_operation_type):
                    if member.__module__ == module.__name__:
                        found.append(member)
        return found

    def _resolve_types(self, type_names: Iterable[str]) -> List[type]:
        return [self._resolve_type(type_name) for type_name in type_names]

    def _resolve_type(self, type_name: str) -> type:
        module_name, _, class_name = type_name.strip().rpartition(".")
        if not module_name or not class_name:
            raise OperationLoadError(type_name, "expected 'package.module.ClassName'")
        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            raise OperationLoadError(type_name, str(exc)) from exc

        operation_type = getattr(module, class_name, None)
        if operation_type is None:
            raise OperationLoadError(type_name, f"module '{module_name}' has no attribute '{class_name}'")
        if not _is_operation_type(operation_type):
            raise OperationLoadError(type_name, "not a concrete ImageOperation")
        return operation_type

    def _instantiate(self, types: Iterable[type]) -> tuple[ImageOperation, ...]:
        operations: List[ImageOperation] = []
        seen: set[str] = set()
        for operation_type in types:
            name = operation_type.__name__
            if name in seen:
                message = f"Duplicate image operation '{name}' from {operation_type.__module__} ignored"
                logger.warning(message)
                self.warnings.append(message)
                continue
            seen.add(name)
            operations.append(operation_type(settings=self.settings.get_operation_settings(name)))
        return tuple(operations)
