"""Gradio layout for trying directives against an uploaded image."""

from __future__ import annotations

from typing import Any, Optional, Sequence

try:
    import gradio as gr
except ImportError:  # pragma: no cover
    gr = None  # type: ignore

from imagedirective.config.settings import AppConfig
from imagedirective.pipeline.processor import DirectiveProcessor
from imagedirective.ui.callbacks import build_callbacks

_EXAMPLE_DIRECTIVES: Sequence[str] = (
    "width=300&height=200&mode=crop&anchor=top",
    "width=300&height=300&mode=pad&bgcolor=fff",
    "width=400&mode=max&height=400",
    "rotate=15&width=200&height=200&mode=pad",
    "flip=horizontal&alpha=60",
)


def _preset_choices(processor: DirectiveProcessor) -> Sequence[str]:
    return [""] + processor.settings.preset_names()


def build_app(config: AppConfig, processor: Optional[DirectiveProcessor] = None) -> Any:
    """Compose and return the Gradio application."""
    if gr is None:
        raise RuntimeError("Gradio 未安装，请先执行依赖安装。")

    processor = processor or DirectiveProcessor(config)
    callbacks_map = build_callbacks(config, processor=processor)
    preset_choices = _preset_choices(processor)

    with gr.Blocks(title="Image Directive Playground") as demo:
        gr.Markdown("## 图像指令处理")
        gr.Markdown("可用操作：" + "、".join(f"`{name}`" for name in processor.registry.names()))

        with gr.Row():
            with gr.Column():
                source_image = gr.Image(label="原始图像", type="pil", image_mode="RGBA")
                directive = gr.Textbox(
                    label="处理指令",
                    lines=2,
                    placeholder="例如 width=300&height=200&mode=crop",
                )
                preset_select = gr.Dropdown(
                    label="预设",
                    choices=preset_choices,
                    value="",
                )
                gr.Examples(examples=[[item] for item in _EXAMPLE_DIRECTIVES], inputs=[directive])
                with gr.Row():
                    preview_btn = gr.Button("解析指令")
                    apply_btn = gr.Button("应用", variant="primary")

            with gr.Column():
                output_image = gr.Image(label="处理结果", type="pil", image_mode="RGBA")
                pipeline_info = gr.Markdown("")
                status = gr.Markdown("准备就绪。")

        preset_select.change(
            fn=callbacks_map["on_select_preset"],
            inputs=[preset_select],
            outputs=[directive],
        )

        preview_btn.click(
            fn=callbacks_map["on_preview_pipeline"],
            inputs=[directive],
            outputs=[pipeline_info],
        )

        apply_btn.click(
            fn=callbacks_map["on_apply_directive"],
            inputs=[source_image, directive],
            outputs=[output_image, status],
        )

    return demo
