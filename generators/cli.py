"""CLI entry point for the synthetic catalog operation generator.

Usage:
    python -m generators --seed 42 --format log --output file --output-file logs/product-management.log
    python -m generators --config generators/configs/default_operations.yaml --format jsonl
"""

import argparse
import sys
from pathlib import Path

import yaml

from src.pipeline.log_parser import format_operation_line

from .operation_generator import OperationGenerator


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Synthetic catalog operation generator")
    parser.add_argument("--config", type=str, default=None, help="Path to YAML config file")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducibility")
    parser.add_argument(
        "--format",
        type=str,
        default="log",
        choices=["log", "jsonl"],
        help="Log lines as the catalog service writes them, or JSON records",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="stdout",
        choices=["stdout", "file"],
        help="Output destination",
    )
    parser.add_argument("--output-file", type=str, default=None, help="Output file path")

    args = parser.parse_args(argv)

    config = {}
    if args.config:
        with open(args.config) as f:
            config = yaml.safe_load(f) or {}

    gen = OperationGenerator(config=config, seed=args.seed)
    records = gen.generate()

    if args.format == "log":
        lines = [format_operation_line(r) for r in records]
    else:
        lines = [r.model_dump_json(by_alias=True) for r in records]

    if args.output == "stdout":
        for line in lines:
            print(line)
    else:
        output_path = args.output_file or "logs/product-management.log"
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")
        print(f"Wrote {len(lines)} operations to {output_path}", file=sys.stderr)

    print(f"Generated {len(records)} operations", file=sys.stderr)
