"""Command-line interface for anomalyzer."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from .config import Method, load_config
from .engine import Anomalyzer
from .logging_utils import configure_logging, log_event
from .series import load_series

logger = logging.getLogger(__name__)


def cmd_score(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    series = load_series(args.series, value_column=args.value_column)
    if args.history < 0:
        raise ValueError("--history must be >= 0")
    history, stream = series[: args.history], series[args.history :]

    anomalyzer = Anomalyzer(config, history, seed=args.seed)
    rows = []
    for offset, value in enumerate(stream):
        probability = anomalyzer.push(float(value))
        row = {"index": int(args.history + offset), "value": float(value), "probability": probability}
        log_event(logger, "push", level=logging.DEBUG, json_logs=args.json_logs or None, **row)
        rows.append(row)
    log_event(
        logger,
        "score",
        json_logs=args.json_logs or None,
        series=str(args.series),
        history=int(history.size),
        pushed=len(rows),
        max_probability=max((r["probability"] for r in rows), default=None),
    )

    if args.json:
        print(json.dumps(rows, indent=2))
        return
    if not rows:
        print(f"{anomalyzer.eval():.6f}")
        return
    for row in rows:
        print(f"{row['index']}\t{row['value']:g}\t{row['probability']:.6f}")


def cmd_validate(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    if args.json:
        print(json.dumps(config.as_dict(), indent=2))
    else:
        for key, value in config.as_dict().items():
            print(f"{key}: {value}")


def cmd_methods(args: argparse.Namespace) -> None:
    for method in Method:
        print(method.value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="anomalyzer", description="Windowed anomaly probabilities for numeric series")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON logs")
    sub = parser.add_subparsers(dest="command", required=True)

    score = sub.add_parser("score", help="Stream a series through an anomalyzer and print probabilities")
    score.add_argument("config", help="Anomalyzer config (YAML or JSON)")
    score.add_argument("series", help="Series file (JSON, JSONL, CSV or one value per line)")
    score.add_argument("--history", type=int, default=0, help="Leading values used as initial history")
    score.add_argument("--seed", type=int, help="Seed for permutation-based methods")
    score.add_argument("--value-column", help="Column/key holding the values for CSV or JSONL input")
    score.add_argument("--json", action="store_true", help="Emit results as JSON")
    score.set_defaults(func=cmd_score)

    validate = sub.add_parser("validate", help="Validate a config file and print the normalized settings")
    validate.add_argument("config", help="Anomalyzer config (YAML or JSON)")
    validate.add_argument("--json", action="store_true", help="Emit config as JSON")
    validate.set_defaults(func=cmd_validate)

    methods = sub.add_parser("methods", help="List available methods")
    methods.set_defaults(func=cmd_methods)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, json_logs=args.json_logs or None)
    try:
        args.func(args)
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
