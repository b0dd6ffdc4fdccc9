"""Command line entry point.

Examples:
    Single file:
        retail-ingest --input ./exports/Stores.xlsx --outdir ./out

    Batch (folder):
        retail-ingest --input-dir ./exports --recursive --outdir ./out \\
            --archive-name weekly --no-brands

    Type detection only:
        retail-ingest --input-dir ./exports --detect-only
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from retail_ingest.batch import collect_input_files, detect_files, run_batch
from retail_ingest.config import DEFAULT_ARCHIVE_NAME, CsvGenerationOptions
from retail_ingest.exceptions import ConfigError, RetailIngestError
from retail_ingest.etl.cleaning_utils import format_date

logger = logging.getLogger(__name__)


@dataclass
class Args:
    input: Optional[Path]
    input_dir: Optional[Path]
    outdir: Path
    recursive: bool
    archive_name: str
    run_date: Optional[date]
    disabled: list[str]
    workers: int
    detect_only: bool
    quiet: bool

    def options(self) -> CsvGenerationOptions:
        return CsvGenerationOptions.from_mapping({name: False for name in self.disabled})


def _run_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid run date {value!r}; expected YYYY-MM-DD")


def parse_args(argv: Optional[Sequence[str]] = None) -> Args:
    p = argparse.ArgumentParser(
        description="Convert retail template spreadsheets into normalized CSV tables"
    )
    g = p.add_mutually_exclusive_group(required=True)
    g.add_argument("--input", type=Path, help="Single .xlsx/.xls file")
    g.add_argument("--input-dir", type=Path, help="Folder with .xlsx/.xls files")
    p.add_argument("--outdir", type=Path, default=Path.cwd(), help="Where to write the archive")
    p.add_argument("--recursive", action="store_true", help="Recurse input-dir")
    p.add_argument(
        "--archive-name",
        default=DEFAULT_ARCHIVE_NAME,
        help="Archive base name; the run date is appended",
    )
    p.add_argument("--run-date", type=_run_date, default=None, help="YYYY-MM-DD (default: today)")
    for table in CsvGenerationOptions.side_tables():
        p.add_argument(
            f"--no-{table}",
            dest="disabled",
            action="append_const",
            const=table,
            help=f"Do not emit the {table} table",
        )
    p.add_argument("--workers", type=int, default=1, help="Files converted in parallel")
    p.add_argument("--detect-only", action="store_true", help="Only print detected file types")
    p.add_argument("--quiet", action="store_true", help="Less logging")
    a = p.parse_args(argv)
    return Args(
        input=a.input,
        input_dir=a.input_dir,
        outdir=a.outdir,
        recursive=a.recursive,
        archive_name=a.archive_name,
        run_date=a.run_date,
        disabled=a.disabled or [],
        workers=a.workers,
        detect_only=a.detect_only,
        quiet=a.quiet,
    )


def _input_files(args: Args) -> list[Path]:
    if args.input is not None:
        if not args.input.is_file():
            raise ConfigError(f"Input file not found: {args.input}")
        return [args.input]
    return collect_input_files(args.input_dir, args.recursive)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line; returns the process exit code."""
    args = parse_args(argv)
    try:
        return _run(args)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130


def _run(args: Args) -> int:
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        files = _input_files(args)
        if args.detect_only:
            for path, detection, error in detect_files(files, max_workers=max(args.workers, 4)):
                suffix = f" ({error})" if error else ""
                print(f"{path.name}: {detection.file_type.label}{suffix}")
            return 0

        run_date = args.run_date or date.today()
        result = run_batch(
            files,
            args.outdir,
            archive_name=args.archive_name,
            options=args.options(),
            run_date=run_date,
            max_workers=args.workers,
        )
    except RetailIngestError as e:
        logger.error("%s", e)
        return 1

    for outcome in result.outcomes:
        tables = ", ".join(f.name for f in outcome.csv_files) or "no tables"
        state = tables if outcome.ok else f"error: {outcome.error}"
        print(f"{outcome.path.name} [{outcome.file_type.label}]: {state}")
    if result.archive_path is not None:
        print(f"Wrote {result.archive_path} for run date {format_date(run_date)}")
    return 0 if result.succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
