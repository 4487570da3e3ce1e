"""
MIT License

GTF (Gene Transfer Format) record parsing.

Lines are sanitized (trailing ``#`` comment removed, spaces and tabs trimmed),
checked against one fixed line grammar and decoded into :class:`GTFRecord`
objects. Lines that fail the grammar are skipped, never partially decoded.

Known limitation: a ``#`` inside a quoted attribute value still starts a
comment, so ``note "a#b";`` loses everything from the ``#`` onwards.

A missing score is stored as :data:`NO_SCORE` (positive infinity), so a score
column that literally reads ``inf`` or ``infinity`` is indistinguishable from
``.`` and ``has_score()`` reports no score for it.

Bytes that are not valid in the reader encoding are kept as surrogate escapes
instead of aborting the file.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Callable, Dict, Iterable, Iterator, List, Optional

from ..util.logging import get_logger

LOGGER = get_logger()

NO_SCORE = math.inf
NO_FRAME = -1

VALID_LINE_RE = re.compile(
    r"^\S+\t\S+\t\S+\t\d+\t\d+\t\S+\t\S+\t\S+([\s\t]\S+[\s\t]\S+;)*",
    re.ASCII,
)

_FLOAT_PREFIX_RE = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)",
    re.ASCII | re.IGNORECASE,
)
_FRAME_RE = re.compile(r"[+-]?\d+", re.ASCII)
_KEY_RE = re.compile(r"\s*(\S+)", re.ASCII)
_FIELD_SEP_RE = re.compile(r"[ \t\n\r\f\v]+")

DECODE_ERRORS = "surrogateescape"

_BLANKS = " \t"


class GTFError(Exception):
    """Base class for GTF parsing errors."""


class GTFOpenError(GTFError):
    """The GTF source could not be opened."""


class GTFDecodeError(GTFError, ValueError):
    """A field of a well-formed line could not be decoded (strict mode only)."""


@dataclass
class GTFRecord:
    """One decoded GTF line."""

    seqname: str
    source: str
    feature: str
    start: int
    end: int
    score: float = NO_SCORE
    strand: str = "."
    frame: int = NO_FRAME
    attributes: Dict[str, str] = field(default_factory=dict)

    def has_score(self) -> bool:
        return self.score != NO_SCORE

    def has_frame(self) -> bool:
        return self.frame != NO_FRAME

    def has_attribute(self, key: str) -> bool:
        return key in self.attributes

    @property
    def length(self) -> int:
        """Inclusive span in bases, 0 for inverted coordinates."""
        return max(0, self.end - self.start + 1)


def trim(text: str) -> str:
    return text.strip(_BLANKS)


def sanitize_line(line: str) -> str:
    """Drop everything from the first ``#`` and trim spaces and tabs."""
    hashpos = line.find("#")
    if hashpos != -1:
        line = line[:hashpos]
    return trim(line)


def sanitize_attr_value(value: str) -> str:
    """Trim a raw attribute value and strip one layer of double quotes."""
    value = trim(value)
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def valid_line(line: str) -> bool:
    return VALID_LINE_RE.match(line) is not None


def parse_attributes(text: str) -> Dict[str, str]:
    """
    Decode the trailing ``key "value";`` section of a GTF line.

    Each key is the next whitespace-delimited token; its value is everything
    after it up to the next ``;`` (or the end of the text). Duplicate keys
    keep the last value.
    """
    out: Dict[str, str] = {}
    pos = 0
    while True:
        match = _KEY_RE.match(text, pos)
        if match is None:
            break
        key = match.group(1)
        stop = text.find(";", match.end())
        if stop == -1:
            raw = text[match.end() :]
            pos = len(text)
        else:
            raw = text[match.end() : stop]
            pos = stop + 1
        out[key] = sanitize_attr_value(raw)
    return out


def decode_score(text: str, strict: bool = False) -> float:
    """
    Decode the score column.

    ``.`` maps to :data:`NO_SCORE`. Otherwise the longest leading numeric
    prefix is used and text without one decodes to ``0.0``, unless ``strict``
    is set, in which case anything but a complete number raises.
    """
    if text == ".":
        return NO_SCORE
    match = _FLOAT_PREFIX_RE.match(text)
    if strict and (match is None or match.end() != len(text)):
        raise GTFDecodeError(f"Invalid score: {text!r}")
    if match is None:
        return 0.0
    return float(match.group(0))


def decode_frame(text: str, strict: bool = False) -> int:
    if text == ".":
        return NO_FRAME
    if _FRAME_RE.fullmatch(text):
        return int(text)
    if strict:
        raise GTFDecodeError(f"Invalid frame: {text!r}")
    return NO_FRAME


def decode_line(line: str, strict: bool = False) -> GTFRecord:
    """
    Decode a sanitized line that already passed :func:`valid_line`.

    Parameters
    ----------
    line:
        Sanitized GTF line.
    strict:
        Raise :class:`GTFDecodeError` for irregular score or frame text
        instead of falling back to ``0.0`` / :data:`NO_FRAME`.
    """
    parts = _FIELD_SEP_RE.split(line, maxsplit=8)
    seqname, source, feature, start, end, score, strand, frame = parts[:8]
    attrs = parts[8] if len(parts) > 8 else ""
    return GTFRecord(
        seqname=seqname,
        source=source,
        feature=feature,
        start=int(start),
        end=int(end),
        score=decode_score(score, strict=strict),
        strand=strand[0],
        frame=decode_frame(frame, strict=strict),
        attributes=parse_attributes(attrs),
    )


def parse_line(line: str, strict: bool = False) -> Optional[GTFRecord]:
    """Sanitize, validate and decode a raw line; ``None`` when it is skipped."""
    clean = sanitize_line(line.rstrip("\r\n"))
    if not valid_line(clean):
        return None
    return decode_line(clean, strict=strict)


class GTFReader:
    """
    Pull records one at a time from a line source.

    ``next_record()`` returns ``None`` once the source is exhausted; invalid
    lines are skipped and counted in ``skipped``. Iterating the reader yields
    the same records lazily.
    """

    def __init__(
        self,
        lines: Iterable[str | bytes],
        strict: bool = False,
        encoding: str = "utf-8",
        name: str = "<stream>",
    ) -> None:
        self._lines = iter(lines)
        self._handle: Optional[IO[str]] = None
        self.strict = strict
        self.encoding = encoding
        self.name = name
        self.lines_read = 0
        self.records_read = 0
        self.skipped = 0

    @classmethod
    def from_path(
        cls,
        path: str | Path,
        strict: bool = False,
        encoding: str = "utf-8",
    ) -> "GTFReader":
        """Open ``path`` for reading; raises :class:`GTFOpenError` on failure."""
        gtf_path = Path(path)
        try:
            handle = gtf_path.open("r", encoding=encoding, errors=DECODE_ERRORS)
        except OSError as exc:
            raise GTFOpenError(f"Error opening GTF file {gtf_path}: {exc.strerror or exc}") from exc
        reader = cls(handle, strict=strict, encoding=encoding, name=str(gtf_path))
        reader._handle = handle
        return reader

    def _next_line(self) -> Optional[str]:
        raw = next(self._lines, None)
        if raw is None:
            return None
        self.lines_read += 1
        if isinstance(raw, bytes):
            raw = raw.decode(self.encoding, errors=DECODE_ERRORS)
        return raw.rstrip("\r\n")

    def next_record(self) -> Optional[GTFRecord]:
        while True:
            line = self._next_line()
            if line is None:
                self.close()
                return None
            line = sanitize_line(line)
            if not valid_line(line):
                if line:
                    LOGGER.debug("Skipping malformed line %d in %s", self.lines_read, self.name)
                self.skipped += 1
                continue
            record = decode_line(line, strict=self.strict)
            self.records_read += 1
            return record

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            self._lines = iter(())

    def __iter__(self) -> Iterator[GTFRecord]:
        return self

    def __next__(self) -> GTFRecord:
        record = self.next_record()
        if record is None:
            raise StopIteration
        return record

    def __enter__(self) -> "GTFReader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def open_gtf(path: str | Path, strict: bool = False, encoding: str = "utf-8") -> GTFReader:
    """Open a GTF file as a :class:`GTFReader`, usable as a context manager."""
    return GTFReader.from_path(path, strict=strict, encoding=encoding)


def filter_records(
    records: Iterable[GTFRecord],
    predicate: Callable[[GTFRecord], bool],
) -> List[GTFRecord]:
    """Return the records matching ``predicate`` in their original order."""
    return [record for record in records if predicate(record)]


class GTFFile:
    """
    Load a whole GTF file into memory.

    Usage::

        gtf = GTFFile("genes.gtf").load()
        exons = gtf.filter(lambda rec: rec.feature == "exon")
    """

    def __init__(self, filename: str | Path | None = None, strict: bool = False) -> None:
        self.filename = Path(filename) if filename else None
        self.strict = strict
        self.records: List[GTFRecord] = []

    def set_filename(self, filename: str | Path) -> None:
        self.filename = Path(filename)

    def load(self) -> "GTFFile":
        if self.filename is None:
            raise GTFOpenError("No GTF filename set")
        with open_gtf(self.filename, strict=self.strict) as reader:
            records = list(reader)
        self.records = records
        LOGGER.info(
            "Loaded %d records from %s (%d lines skipped)",
            len(records),
            self.filename,
            reader.skipped,
        )
        return self

    def filter(self, predicate: Callable[[GTFRecord], bool]) -> List[GTFRecord]:
        return filter_records(self.records, predicate)

    def count(self) -> int:
        return len(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[GTFRecord]:
        return iter(self.records)


def read_gtf(path: str | Path, strict: bool = False) -> List[GTFRecord]:
    """Load a GTF file into memory."""
    return GTFFile(path, strict=strict).load().records


__all__ = [
    "NO_SCORE",
    "NO_FRAME",
    "VALID_LINE_RE",
    "GTFError",
    "GTFOpenError",
    "GTFDecodeError",
    "GTFRecord",
    "sanitize_line",
    "sanitize_attr_value",
    "valid_line",
    "parse_attributes",
    "decode_score",
    "decode_frame",
    "decode_line",
    "parse_line",
    "GTFReader",
    "open_gtf",
    "filter_records",
    "GTFFile",
    "read_gtf",
]
