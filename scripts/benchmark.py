"""Benchmark script for measuring directive processing throughput."""

from __future__ import annotations

import argparse
import time

from PIL import Image

from imagedirective.config.settings import AppConfig
from imagedirective.pipeline.processor import DirectiveProcessor


def run_benchmark(directive: str, size: int, iterations: int) -> float:
    """Return the mean seconds per ``process`` call."""
    processor = DirectiveProcessor(AppConfig())
    source = Image.new("RGBA", (size, size), (200, 120, 40, 255))
    processor.process(source, directive)

    started = time.perf_counter()
    for _ in range(iterations):
        result = processor.process(source, directive)
        if result.image is not source:
            result.image.close()
    return (time.perf_counter() - started) / iterations


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Benchmark directive processing.")
    parser.add_argument("--directive", default="width=256&height=256&mode=crop")
    parser.add_argument("--size", type=int, default=1024)
    parser.add_argument("--iterations", type=int, default=20)
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    mean = run_benchmark(args.directive, args.size, args.iterations)
    print(f"{args.directive}: {mean * 1000:.2f} ms per image ({args.size}x{args.size})")
