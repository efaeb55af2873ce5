"""Gradio UI callback tests."""

from __future__ import annotations

import pytest
from PIL import Image

from imagedirective.config.settings import AppConfig
from imagedirective.pipeline.processor import DirectiveProcessor
from imagedirective.ui import callbacks


class FailingProcessor:
    """Processor stub raising on every call."""

    def process(self, image, directive):
        raise RuntimeError("后端异常")

    def expand(self, directive):
        raise RuntimeError("后端异常")


def build_callbacks(processor=None, config: AppConfig | None = None):
    config = config or AppConfig(presets={"thumb": "width=64&height=64&mode=crop"})
    if processor is None:
        processor = DirectiveProcessor(config)
    return callbacks.build_callbacks(config, processor=processor)


def test_on_apply_directive_requires_image():
    image, message = build_callbacks()["on_apply_directive"](None, "width=10")

    assert image is None
    assert "请先上传图像" in message


def test_on_apply_directive_success():
    source = Image.new("RGB", (200, 100), (255, 0, 0))

    image, message = build_callbacks()["on_apply_directive"](source, " width=100&height=100&mode=crop ")

    assert image.size == (100, 100)
    assert "`Resize`" in message
    assert "已应用" in message
    assert "100×100" in message


def test_on_apply_directive_reports_skipped_steps():
    source = Image.new("RGB", (50, 50))

    image, message = build_callbacks()["on_apply_directive"](source, "width=200&upscale=false")

    assert image is source
    assert "已跳过" in message
    assert "upscaling" in message


def test_on_apply_directive_without_matches():
    source = Image.new("RGB", (50, 50))

    image, message = build_callbacks()["on_apply_directive"](source, "quality=90")

    assert image is source
    assert "未匹配" in message


def test_on_apply_directive_handles_exception():
    image, message = build_callbacks(processor=FailingProcessor())["on_apply_directive"](
        Image.new("RGB", (4, 4)), "width=2"
    )

    assert image is None
    assert "处理失败" in message


def test_on_apply_directive_without_processor():
    cb = callbacks.build_callbacks(AppConfig())["on_apply_directive"]

    with pytest.raises(RuntimeError):
        cb(Image.new("RGB", (4, 4)), "width=2")


def test_on_preview_pipeline_lists_steps_in_order():
    message = build_callbacks()["on_preview_pipeline"]("rotate=90&width=10&flip=both")

    assert message.index("`Rotate`") < message.index("`Resize`") < message.index("`Flip`")
    assert "angle=90.0" in message
    assert "mode=pad" in message


def test_on_preview_pipeline_expands_presets():
    message = build_callbacks()["on_preview_pipeline"]("preset=thumb")

    assert "width=64&height=64&mode=crop" in message
    assert "mode=crop" in message


def test_on_preview_pipeline_handles_exception():
    message = build_callbacks(processor=FailingProcessor())["on_preview_pipeline"]("width=1")

    assert "解析失败" in message


def test_on_select_preset():
    cb = build_callbacks()["on_select_preset"]

    assert cb("thumb") == "width=64&height=64&mode=crop"
    assert cb("unknown") == ""
    assert cb("") == ""


def test_preview_and_apply_expand_nested_presets_alike():
    config = AppConfig(presets={"outer": "preset=inner", "inner": "width=64"})
    cb = build_callbacks(config=config)
    source = Image.new("RGB", (128, 128))

    preview = cb["on_preview_pipeline"]("preset=outer")
    image, message = cb["on_apply_directive"](source, "preset=outer")

    assert "未匹配" in preview
    assert "`Resize`" not in preview
    assert image is source
    assert "未匹配" in message
