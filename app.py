"""Application entry point for the imagedirective playground."""

from __future__ import annotations

from typing import Optional

from imagedirective.config.settings import load_config
from imagedirective.ui.layout import build_app
from imagedirective.utils.logging import setup_logging


def main(config_path: Optional[str] = None) -> None:
    """Load configuration and launch the Gradio interface."""
    config = load_config(config_path)
    setup_logging(config)
    app = build_app(config)
    app.queue()
    app.launch(share=False, inbrowser=False)


if __name__ == "__main__":
    main()
