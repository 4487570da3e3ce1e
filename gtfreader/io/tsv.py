"""
MIT License

Writers for CLI output: record tables and the plain-text dump.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pandas as pd

from .gtf import DECODE_ERRORS

_SEPARATORS = {"tsv": "\t", "csv": ","}
TABLE_FORMATS = (*_SEPARATORS, "jsonl")


def _target(path: str | Path) -> Path:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    return out_path


def write_table(df: pd.DataFrame, path: str | Path, fmt: str = "tsv") -> Path:
    """
    Write a record table as TSV, CSV or JSONL.

    Missing scores and frames become empty cells, or ``null`` in JSONL.
    """
    if fmt not in TABLE_FORMATS:
        raise ValueError(f"Unsupported format: {fmt}")
    out_path = _target(path)
    if fmt == "jsonl":
        text = "" if df.empty else df.to_json(orient="records", lines=True).rstrip("\n") + "\n"
        out_path.write_text(text, encoding="utf-8", errors=DECODE_ERRORS)
    else:
        df.to_csv(out_path, sep=_SEPARATORS[fmt], index=False, errors=DECODE_ERRORS)
    return out_path


def write_text(lines: Iterable[str], path: str | Path) -> Path:
    """Write the text dump, one entry per line."""
    out_path = _target(path)
    out_path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8", errors=DECODE_ERRORS)
    return out_path


__all__ = ["TABLE_FORMATS", "write_table", "write_text"]
