"""Command line interface for extracting contacts from call sheets."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import ConfigurationError, ExtractionConfig, config_from_environment, config_from_file_data, load_configuration
from .ingestion import UnsupportedFileTypeError, export_results, load_documents
from .orchestrator import DocumentInput, ExtractionOrchestrator


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description="Extract structured contacts from call sheet text")
    parser.add_argument("inputs", nargs="+", help="Text (.txt/.md) or sheet (.csv/.tsv) files to process")
    parser.add_argument(
        "-o",
        "--output",
        required=True,
        help="Where to write the contacts (.csv, .tsv, .xlsx or .json)",
    )
    parser.add_argument("--config", help="Path to an extraction configuration file (YAML or JSON)")
    parser.add_argument("--threshold", type=float, default=None, help="Minimum confidence for returned contacts")
    parser.add_argument(
        "--multi-pass",
        action="store_true",
        default=None,
        help="Run the linking pass that joins facts split across nearby lines",
    )
    parser.add_argument(
        "--role-preference",
        action="append",
        dest="role_preferences",
        default=None,
        help="Role to up-weight (may be given several times)",
    )
    parser.add_argument("--document-type", default=None, help="documentType metadata (e.g. call_sheet)")
    parser.add_argument("--production-type", default=None, help="productionType metadata (e.g. film)")
    parser.add_argument(
        "--auto-classify",
        action="store_true",
        help="Guess document and production type from keywords when not given",
    )
    parser.add_argument(
        "--mode",
        choices=["sequential", "concurrent"],
        default="sequential",
        help="Whether to process documents sequentially or concurrently",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Maximum number of workers to use in concurrent mode",
    )
    parser.add_argument(
        "--raise-on-error",
        action="store_true",
        help="Propagate extraction exceptions instead of recording them in the output",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _build_config(args: argparse.Namespace) -> tuple[ExtractionConfig, dict]:
    file_data: dict = {}
    config = ExtractionConfig()
    if args.config:
        file_data = load_configuration(args.config)
        config = config_from_file_data(file_data)
    config = config_from_environment(base=config)
    config = config.merged(
        confidence_threshold=args.threshold,
        use_multi_pass=args.multi_pass,
        role_preferences=args.role_preferences,
    )
    return config, file_data


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    try:
        config, file_data = _build_config(args)
        documents = load_documents(args.inputs)
    except (ConfigurationError, UnsupportedFileTypeError, OSError) as exc:
        logging.error("%s", exc)
        return 1

    metadata = {}
    if args.document_type:
        metadata["documentType"] = args.document_type
    if args.production_type:
        metadata["productionType"] = args.production_type

    orchestrator = ExtractionOrchestrator(
        config,
        file_config=file_data,
        auto_classify=args.auto_classify,
        concurrent=args.mode == "concurrent",
        max_workers=args.max_workers,
        raise_on_error=args.raise_on_error,
    )
    results = orchestrator.extract_many(
        DocumentInput(text=document.text, metadata=metadata or None, source=document.name) for document in documents
    )
    export_results(results, args.output)
    logging.info(
        "Extracted %s contacts from %s documents",
        sum(len(result.contacts) for result in results),
        len(documents),
    )
    logging.info("Contacts written to %s", Path(args.output).resolve())
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
