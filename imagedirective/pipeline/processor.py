"""Apply a directive to an image."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from imagedirective.config.settings import AppConfig
from imagedirective.drawing.surface import DrawingBackend, PillowDrawingBackend
from imagedirective.operations.base import OperationContext, OperationResult, OperationStatus
from imagedirective.pipeline.directive import PipelineStep, build_pipeline, expand_presets
from imagedirective.registry.operation_registry import OperationRegistry
from imagedirective.registry.settings_registry import SettingsRegistry

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StepOutcome:
    """How one pipeline step ended."""

    name: str
    order: int
    status: OperationStatus
    reason: Optional[str] = None


@dataclass(slots=True)
class ProcessingResult:
    """Final image, the steps the directive resolved to and how each ended."""

    image: Any
    steps: List[PipelineStep] = field(default_factory=list)
    outcomes: List[StepOutcome] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return any(outcome.status is OperationStatus.APPLIED for outcome in self.outcomes)

    @property
    def failures(self) -> List[StepOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is OperationStatus.FAILED]


class DirectiveProcessor:
    """Facade tying the registries, the directive parser and the backend together.

    The processor keeps no per-request state, so one instance serves
    concurrent calls to :meth:`process`.
    """

    def __init__(
        self,
        config: AppConfig,
        settings: Optional[SettingsRegistry] = None,
        registry: Optional[OperationRegistry] = None,
        backend: Optional[DrawingBackend] = None,
    ) -> None:
        self.config = config
        self.settings = settings or (registry.settings if registry is not None else SettingsRegistry(config))
        self.registry = registry or OperationRegistry(config, settings=self.settings)
        self.backend: DrawingBackend = backend or PillowDrawingBackend()

    def expand(self, directive: str) -> str:
        """Return ``directive`` with its presets substituted."""
        return expand_presets(directive or "", self.settings.get_preset)

    def pipeline(self, directive: str) -> List[PipelineStep]:
        """Return the ordered steps ``directive`` asks for."""
        return build_pipeline(self.expand(directive), self.registry.operations)

    def process(self, image: Any, directive: str) -> ProcessingResult:
        """Run every step of ``directive`` against ``image``.

        The caller keeps ownership of ``image``; it is never disposed. Surfaces
        produced along the way are disposed as soon as a later step replaces
        them.
        """
        context = OperationContext(backend=self.backend)
        working = image
        outcomes: List[StepOutcome] = []
        steps = self.pipeline(directive)

        for step in steps:
            try:
                result = step.operation.apply(working, step.parameters, context)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Operation %s failed; keeping the previous image", step.name)
                result = OperationResult(image=working, status=OperationStatus.FAILED, reason=str(exc))

            if result.image is not working:
                if working is not image:
                    self.backend.dispose(working)
                working = result.image

            if not result.applied:
                logger.debug("%s %s: %s", step.name, result.status.value, result.reason)
            outcomes.append(StepOutcome(step.name, step.order, result.status, result.reason))

        return ProcessingResult(image=working, steps=steps, outcomes=outcomes)
