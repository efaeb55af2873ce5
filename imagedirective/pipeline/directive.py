"""Split a directive into an ordered list of operation steps.

Each operation runs its own pattern over the directive. Everything it matches
is concatenated and parsed by that operation alone, and the position of its
first match decides where it sits in the pipeline. Operations with disjoint
patterns can therefore share one directive without knowing about each other.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from operator import attrgetter
from typing import Callable, Generic, Iterable, List, Optional, TypeVar

from imagedirective.operations.base import ImageOperation

P = TypeVar("P")

MAX_ORDER = sys.maxsize

PRESET_PATTERN = re.compile(r"preset=([\w-]+)")


@dataclass(frozen=True, slots=True)
class DirectiveMatch:
    """What one operation recognised in a directive."""

    name: str
    matched: str = ""
    order: int = MAX_ORDER

    @property
    def present(self) -> bool:
        return self.order != MAX_ORDER


@dataclass(frozen=True)
class PipelineStep(Generic[P]):
    """An operation paired with the parameters it parsed for this request."""

    operation: ImageOperation[P]
    parameters: P
    order: int

    @property
    def name(self) -> str:
        return self.operation.name


def match_directive(operation: ImageOperation, directive: str) -> DirectiveMatch:
    """Merge every match of ``operation.pattern`` and record where the first begins."""
    matches = [match for match in operation.pattern.finditer(directive) if match.group(0)]
    if not matches:
        return DirectiveMatch(name=operation.name)
    return DirectiveMatch(
        name=operation.name,
        matched="".join(match.group(0) for match in matches),
        order=matches[0].start(),
    )


def build_pipeline(directive: str, operations: Iterable[ImageOperation]) -> List[PipelineStep]:
    """Return the steps for ``directive`` sorted by first occurrence.

    Operations that match nowhere are left out. Equal positions keep the
    order in which ``operations`` lists them.
    """
    steps: List[PipelineStep] = []
    for operation in operations:
        match = match_directive(operation, directive)
        if not match.present:
            continue
        steps.append(PipelineStep(operation=operation, parameters=operation.parse(match.matched), order=match.order))
    steps.sort(key=attrgetter("order"))
    return steps


def expand_presets(directive: str, resolve: Callable[[str], Optional[str]]) -> str:
    """Replace ``preset=<name>`` tokens with the directive text they stand for."""

    def _substitute(match: re.Match[str]) -> str:
        return resolve(match.group(1)) or ""

    return PRESET_PATTERN.sub(_substitute, directive)
