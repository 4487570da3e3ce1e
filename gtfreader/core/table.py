"""
MIT License

Tabular views of decoded GTF records.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

import numpy as np
import pandas as pd

from ..io.gtf import NO_FRAME, GTFRecord

FIXED_COLUMNS = [
    "seqname",
    "source",
    "feature",
    "start",
    "end",
    "score",
    "strand",
    "frame",
]


def attribute_columns(records: Iterable[GTFRecord]) -> List[str]:
    """Collect attribute keys in first-seen order."""

    seen: Dict[str, None] = {}
    for record in records:
        for key in record.attributes:
            seen.setdefault(key, None)
    return list(seen)


def records_to_frame(records: Iterable[GTFRecord], expand_attributes: bool = True) -> pd.DataFrame:
    """
    Build a DataFrame with one row per record.

    Missing scores become ``NaN`` and missing frames ``<NA>``. With
    ``expand_attributes`` every attribute key gets its own column (empty
    string where a record lacks it); otherwise the raw mapping is kept in an
    ``attributes`` column.
    """

    records = list(records)
    columns = list(FIXED_COLUMNS)
    extra = attribute_columns(records) if expand_attributes else ["attributes"]
    clashes = set(extra) & set(FIXED_COLUMNS)
    renamed = {key: f"attr_{key}" if key in clashes else key for key in extra}
    columns.extend(renamed[key] for key in extra)
    if not records:
        return pd.DataFrame(columns=columns)

    rows = []
    for record in records:
        row = {
            "seqname": record.seqname,
            "source": record.source,
            "feature": record.feature,
            "start": record.start,
            "end": record.end,
            "score": record.score if record.has_score() else np.nan,
            "strand": record.strand,
            "frame": record.frame if record.frame != NO_FRAME else pd.NA,
        }
        if expand_attributes:
            for key in extra:
                row[renamed[key]] = record.attributes.get(key, "")
        else:
            row["attributes"] = dict(record.attributes)
        rows.append(row)
    df = pd.DataFrame(rows, columns=columns)
    df["start"] = df["start"].astype(np.int64)
    df["end"] = df["end"].astype(np.int64)
    df["score"] = df["score"].astype(float)
    df["frame"] = df["frame"].astype("Int64")
    return df


__all__ = ["FIXED_COLUMNS", "attribute_columns", "records_to_frame"]
