#!/usr/bin/env python3
"""
Reorder-Signal Demo — generate a catalog, train, and print the decisions.

Usage:
  python scripts/run_demo.py
  python scripts/run_demo.py --count 200 --epochs 30 --seed 7
  python scripts/run_demo.py --generate-only --no-delay
"""

import argparse
import asyncio
import os
import random
import sys
import time

# Add backend to path so imports work
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ShelfSignal reorder-signal demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--count", type=int, default=None, help="Products to generate (default: BATCH_SIZE)")
    parser.add_argument("--epochs", type=int, default=None, help="Training epochs (default: EPOCHS)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for the synthetic catalog")
    parser.add_argument("--no-delay", action="store_true", help="Skip the simulated fetch latency")
    parser.add_argument("--generate-only", action="store_true", help="Stop after the data is loaded")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    return parser


def _print_warnings(ctx) -> None:
    for note in ctx.warnings:
        print(f"⚠️  {note}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    from core.config import get_settings
    from core.logging import configure_logging
    from ml.pipeline import PipelineRunner, RunStatus
    from ml.presentation import render_table, view_from_context

    overrides = {}
    if args.epochs is not None:
        overrides["epochs"] = args.epochs
    if args.no_delay:
        overrides["fetch_delay_seconds"] = 0.0
    if args.seed is not None:
        overrides["random_seed"] = args.seed
    settings = get_settings().model_copy(update=overrides)

    configure_logging(level=args.log_level or settings.log_level, json_logs=args.json_logs or settings.log_json)

    runner = PipelineRunner(settings=settings)
    rng = random.Random(settings.random_seed)

    start = time.time()
    ctx = asyncio.run(runner.generate_async(args.count, rng=rng))
    if args.generate_only:
        print(render_table(view_from_context(ctx, epochs=settings.epochs)))
        _print_warnings(ctx)
        return 0

    ctx = runner.train()
    print(render_table(view_from_context(ctx, epochs=settings.epochs)))
    _print_warnings(ctx)
    print(f"\nFinished in {time.time() - start:.1f}s")

    if ctx.status is RunStatus.FAILED:
        print(f"\n❌ Run failed: {ctx.error}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
