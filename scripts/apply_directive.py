"""Apply a directive to an image file from the command line."""

from __future__ import annotations

import argparse
from pathlib import Path

from PIL import Image

from imagedirective.config.settings import load_config
from imagedirective.pipeline.processor import DirectiveProcessor
from imagedirective.utils.logging import setup_logging


def run(source: Path, output: Path, directive: str, config_path: str | None = None) -> int:
    config = load_config(config_path)
    logger = setup_logging(config)
    processor = DirectiveProcessor(config)

    with Image.open(source) as image:
        image.load()
        result = processor.process(image, directive)
        for outcome in result.outcomes:
            logger.info("%s at %d: %s %s", outcome.name, outcome.order, outcome.status.value, outcome.reason or "")

        final = result.image
        if output.suffix.lower() in (".jpg", ".jpeg") and final.mode in ("RGBA", "LA", "P"):
            final = final.convert("RGB")
        output.parent.mkdir(parents=True, exist_ok=True)
        final.save(output)

    print("已保存:", output.resolve())
    return 1 if result.failures else 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply an image directive to a file.")
    parser.add_argument("source", type=Path)
    parser.add_argument("output", type=Path)
    parser.add_argument("directive", help="e.g. width=300&height=200&mode=crop")
    parser.add_argument("--config", default=None, help="Path to a .env file")
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    raise SystemExit(run(args.source, args.output, args.directive, args.config))
