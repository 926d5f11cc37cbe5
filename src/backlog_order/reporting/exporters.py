"""CSV exporter for validated backlogs."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Callable

import pandas as pd

from backlog_order.backlog.models import ValidationResult

BACKLOG_EXPORT_COLUMNS = [
    "rank",
    "id",
    "title",
    "work_item_type",
    "area_path",
    "iteration_path",
    "parent_id",
    "predecessors",
    "successors",
    "is_valid",
    "invalid_predecessors",
    "invalid_successors",
    "url",
]


def generate_export_path(output_dir: str | Path | None = None) -> Path:
    """Create an empty, uniquely named CSV file and return its path."""

    directory = None
    if output_dir is not None:
        directory = Path(output_dir)
        directory.mkdir(parents=True, exist_ok=True)
    handle, name = tempfile.mkstemp(
        prefix="backlog_order_", suffix=".csv", dir=directory
    )
    os.close(handle)
    return Path(name)


def backlog_frame(
    result: ValidationResult, link_for: Callable[[int], str]
) -> pd.DataFrame:
    rows: list[dict[str, object]] = []
    for item in result.all_items:
        row = item.as_dict()
        if row["parent_id"] is None:
            row["parent_id"] = ""
        row["url"] = link_for(item.item_id)
        rows.append(row)
    return pd.DataFrame(rows, columns=BACKLOG_EXPORT_COLUMNS, dtype=object)


def export_backlog_csv(
    result: ValidationResult,
    link_for: Callable[[int], str],
    *,
    output_path: str | Path | None = None,
    output_dir: str | Path | None = None,
) -> Path:
    """Write one row per backlog item in rank order."""

    if output_path is None:
        target = generate_export_path(output_dir)
    else:
        target = Path(output_path)
        target.parent.mkdir(parents=True, exist_ok=True)
    backlog_frame(result, link_for).to_csv(target, index=False)
    return target
