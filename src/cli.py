"""Batch entry point for log parsing, profile extraction and simulation.

Usage:
    python -m src.cli extract logs/product-management.log --output-dir extracted-profiles
    python -m src.cli parse logs/product-management.log
    python -m src.cli simulate --seed 42 --log-file logs/product-management.log
"""

import argparse
import asyncio
import sys
from pathlib import Path

import structlog

from src.config import settings
from src.domains.profiling.classifier import ProfileClassifier
from src.domains.profiling.config import ProfilingConfig
from src.domains.profiling.export import ProfileExporter
from src.domains.profiling.extractor import ProfileExtractor
from src.pipeline.log_parser import LogParser, format_operation_line
from src.shared.logging import setup_logging

logger = structlog.get_logger()


def _extract(args: argparse.Namespace, config: ProfilingConfig) -> int:
    paths = args.logs or settings.log_paths
    extractor = ProfileExtractor(config=config)
    result = extractor.extract_from_logs(paths)

    logger.info(
        "extraction_complete",
        profiles=len(result.profiles),
        **result.parse_stats.model_dump(),
    )

    exit_code = 0
    if not args.no_export:
        output_dir = args.output_dir or settings.extracted_profiles_dir
        exporter = ProfileExporter(output_dir, suffix="extracted")
        report = exporter.export_all(result.profiles.values())
        if report.failed:
            exit_code = 1

    print(result.report)
    return exit_code


def _parse(args: argparse.Namespace) -> int:
    parser = LogParser()
    for record in parser.parse_records(args.logs or settings.log_paths):
        print(record.model_dump_json(by_alias=True))
    logger.info("parse_complete", **parser.stats.model_dump())
    return 0


async def _simulate(args: argparse.Namespace, config: ProfilingConfig) -> int:
    # Imported lazily: the generators package is only needed for simulation
    from generators.operation_generator import OperationGenerator

    records = OperationGenerator(seed=args.seed).generate()
    classifier = ProfileClassifier(config=config)
    for record in records:
        await classifier.ingest(record)

    if args.log_file:
        path = Path(args.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("".join(format_operation_line(r) + "\n" for r in records), encoding="utf-8")
        logger.info("simulation_log_written", path=str(path), lines=len(records))

    if args.export:
        ProfileExporter(args.output_dir or settings.profiles_dir).export_all(
            classifier.all_profiles()
        )

    print(classifier.generate_summary_report())
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Catalog user profiling batch jobs")
    sub = parser.add_subparsers(dest="command", required=True)

    extract = sub.add_parser("extract", help="Parse logs and rebuild user profiles")
    extract.add_argument("logs", nargs="*", help="Log files (defaults to LOG_PATHS)")
    extract.add_argument("--output-dir", type=str, default=None, help="Export directory")
    extract.add_argument("--no-export", action="store_true", help="Only print the report")

    parse = sub.add_parser("parse", help="Print parsed operation records as JSON lines")
    parse.add_argument("logs", nargs="*", help="Log files (defaults to LOG_PATHS)")

    simulate = sub.add_parser("simulate", help="Run persona scenarios through the classifier")
    simulate.add_argument("--seed", type=int, default=42, help="Random seed for reproducibility")
    simulate.add_argument("--log-file", type=str, default=None, help="Also write log lines here")
    simulate.add_argument("--export", action="store_true", help="Export live profiles as JSON")
    simulate.add_argument("--output-dir", type=str, default=None, help="Export directory")

    args = parser.parse_args(argv)
    setup_logging(settings.log_level, settings.log_format)
    config = ProfilingConfig.from_env()

    if args.command == "extract":
        return _extract(args, config)
    if args.command == "parse":
        return _parse(args)
    return asyncio.run(_simulate(args, config))


if __name__ == "__main__":
    sys.exit(main())
