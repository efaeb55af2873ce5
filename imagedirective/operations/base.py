"""Base types shared by every directive operation."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Generic, Mapping, Optional, TypeVar

from imagedirective.drawing.surface import DrawingBackend

P = TypeVar("P")


class OperationStatus(str, Enum):
    """Outcome of applying a single operation."""

    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True)
class OperationResult:
    """Image produced by an operation together with how it got there.

    ``SKIPPED`` and ``FAILED`` results always carry the input image unchanged.
    """

    image: Any
    status: OperationStatus = OperationStatus.APPLIED
    reason: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.status is OperationStatus.APPLIED


@dataclass(slots=True)
class OperationContext:
    """Per-request collaborators handed to ``ImageOperation.apply``."""

    backend: DrawingBackend


class ImageOperation(ABC, Generic[P]):
    """A pluggable image transform driven by its own slice of the directive.

    Instances are shared between concurrent requests: everything derived from
    a directive travels in the parameters returned by :meth:`parse`, never on
    the instance.
    """

    pattern: ClassVar[re.Pattern[str]]

    def __init__(self, settings: Optional[Mapping[str, str]] = None) -> None:
        self._settings: Mapping[str, str] = MappingProxyType(dict(settings or {}))

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def settings(self) -> Mapping[str, str]:
        return self._settings

    @abstractmethod
    def parse(self, matched: str) -> P:
        """Build typed parameters from the merged substrings this operation matched."""

    @abstractmethod
    def apply(self, image: Any, parameters: P, context: OperationContext) -> OperationResult:
        """Transform ``image`` and report the outcome."""

    def skip(self, image: Any, reason: str) -> OperationResult:
        return OperationResult(image=image, status=OperationStatus.SKIPPED, reason=reason)

    def __repr__(self) -> str:
        return f"{self.name}(settings={dict(self._settings)!r})"
