"""Callback implementations for the Gradio playground."""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from typing import Any, Optional

from imagedirective.config.settings import AppConfig
from imagedirective.operations.base import OperationStatus
from imagedirective.pipeline.directive import build_pipeline
from imagedirective.pipeline.processor import DirectiveProcessor, ProcessingResult

_STATUS_LABELS = {
    OperationStatus.APPLIED: "已应用",
    OperationStatus.SKIPPED: "已跳过",
    OperationStatus.FAILED: "失败",
}


def _describe_parameters(parameters: Any) -> str:
    if not is_dataclass(parameters):
        return repr(parameters)
    parts = []
    for key, value in asdict(parameters).items():
        if hasattr(value, "value"):
            value = value.value
        parts.append(f"{key}={value}")
    return ", ".join(parts)


def _summarize(result: ProcessingResult) -> str:
    if not result.outcomes:
        return "指令未匹配任何操作，已返回原图。"
    lines = []
    for outcome in result.outcomes:
        line = f"- `{outcome.name}`（位置 {outcome.order}）：{_STATUS_LABELS[outcome.status]}"
        if outcome.reason:
            line += f"，{outcome.reason}"
        lines.append(line)
    width, height = result.image.size
    lines.append(f"\n输出尺寸：{width}×{height}")
    return "\n".join(lines)


def build_callbacks(
    config: AppConfig,
    processor: Optional[DirectiveProcessor] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions."""

    def _ensure_processor() -> DirectiveProcessor:
        if processor is None:
            raise RuntimeError("图像处理服务未配置")
        return processor

    def on_apply_directive(image: Any, directive: str) -> tuple[Optional[Any], str]:
        if image is None:
            return None, "处理失败：请先上传图像。"
        service = _ensure_processor()
        try:
            result = service.process(image, (directive or "").strip())
        except Exception as exc:  # noqa: BLE001
            return None, f"处理失败：{exc}"
        return result.image, _summarize(result)

    def on_preview_pipeline(directive: str) -> str:
        service = _ensure_processor()
        try:
            expanded = service.expand((directive or "").strip())
            steps = build_pipeline(expanded, service.registry.operations)
        except Exception as exc:  # noqa: BLE001
            return f"解析失败：{exc}"
        if not steps:
            return "指令未匹配任何操作。"
        lines = [f"展开后的指令：`{expanded}`", ""]
        for index, step in enumerate(steps, start=1):
            lines.append(f"{index}. `{step.name}`（位置 {step.order}）：{_describe_parameters(step.parameters)}")
        return "\n".join(lines)

    def on_select_preset(name: str) -> str:
        if not name:
            return ""
        service = _ensure_processor()
        return service.settings.get_preset(name) or ""

    return {
        "on_apply_directive": on_apply_directive,
        "on_preview_pipeline": on_preview_pipeline,
        "on_select_preset": on_select_preset,
    }
