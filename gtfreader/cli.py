"""
MIT License

Command-line interface for gtfreader.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from .core.table import records_to_frame
from .io.gtf import GTFError, GTFRecord, filter_records, open_gtf
from .io.tsv import TABLE_FORMATS, write_text, write_table
from .util.logging import get_logger, set_verbose

LOGGER = get_logger()


@dataclass
class ReaderConfig:
    gtf: str
    features: List[str] = field(default_factory=list)
    strict: bool = False
    emit: str = "text"
    out: Optional[str] = None
    verbose: bool = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gtfreader", description="Parse and dump GTF records")
    parser.add_argument("gtf", help="GTF file to read")
    parser.add_argument(
        "--feature",
        dest="features",
        action="append",
        default=[],
        help="Only keep records of this feature type (repeatable)",
    )
    parser.add_argument("--strict", action="store_true", help="Fail on irregular score or frame text")
    parser.add_argument("--emit", choices=["text", *TABLE_FORMATS], default="text")
    parser.add_argument("--out", help="Output path (default: stdout for text)")
    parser.add_argument("--verbose", action="store_true", help="Log skipped lines")
    return parser


def config_from_args(args: argparse.Namespace) -> ReaderConfig:
    if args.emit != "text" and not args.out:
        raise SystemExit(f"--emit {args.emit} requires --out")
    return ReaderConfig(
        gtf=args.gtf,
        features=list(args.features),
        strict=args.strict,
        emit=args.emit,
        out=args.out,
        verbose=args.verbose,
    )


def format_record(index: int, record: GTFRecord) -> Iterator[str]:
    """Render one record as the ``Sequence N:`` text block."""
    score = f"{record.score:g}" if record.has_score() else "."
    frame = str(record.frame) if record.has_frame() else "."
    yield f"Sequence {index}:"
    yield " ".join(
        [
            record.seqname,
            record.source,
            record.feature,
            str(record.start),
            str(record.end),
            score,
            record.strand,
            frame,
        ]
    )
    for key, value in record.attributes.items():
        yield f"{key}: {value}"
    yield ""


def render_text(records: Iterable[GTFRecord]) -> Iterator[str]:
    for index, record in enumerate(records, start=1):
        yield from format_record(index, record)


def run(config: ReaderConfig) -> int:
    set_verbose(config.verbose)
    try:
        with open_gtf(config.gtf, strict=config.strict) as reader:
            records = list(reader)
    except GTFError as error:
        sys.stderr.write(f"Error with file {config.gtf}: {error}\n")
        return 1
    LOGGER.info(
        "Read %d records from %s (%d lines skipped)",
        len(records),
        config.gtf,
        reader.skipped,
    )

    if config.features:
        wanted = set(config.features)
        records = filter_records(records, lambda rec: rec.feature in wanted)
        LOGGER.info("%d records match features %s", len(records), ",".join(config.features))

    if config.emit == "text":
        if config.out:
            write_text(render_text(records), config.out)
        else:
            for line in render_text(records):
                sys.stdout.write(line + "\n")
    else:
        write_table(records_to_frame(records), Path(config.out), fmt=config.emit)
    if config.out:
        LOGGER.info("Output written to %s", config.out)
    return 0


def dispatch(args: argparse.Namespace) -> None:
    config = config_from_args(args)
    status = run(config)
    if status:
        raise SystemExit(status)


__all__ = ["ReaderConfig", "build_parser", "config_from_args", "format_record", "run", "dispatch"]
