"""Console rendering of backlog ordering violations."""

from __future__ import annotations

from typing import Callable

from backlog_order.backlog.models import ValidationResult, format_id_set

_COLUMNS = (
    "rank",
    "id",
    "title",
    "invalid_predecessors",
    "invalid_successors",
    "area_path",
    "url",
)
_MAX_TITLE_WIDTH = 48


def _truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def violation_rows(
    result: ValidationResult, link_for: Callable[[int], str]
) -> list[dict[str, str]]:
    return [
        {
            "rank": str(item.rank),
            "id": str(item.item_id),
            "title": _truncate(item.title, _MAX_TITLE_WIDTH),
            "invalid_predecessors": format_id_set(item.invalid_predecessors),
            "invalid_successors": format_id_set(item.invalid_successors),
            "area_path": item.area_path,
            "url": link_for(item.item_id),
        }
        for item in result.flagged_items
    ]


def format_violation_report(
    result: ValidationResult, link_for: Callable[[int], str]
) -> str:
    """Render the warning table; empty string when nothing is flagged."""

    if result.passed:
        return ""

    rows = violation_rows(result, link_for)
    widths = {
        column: max(len(column), *(len(row[column]) for row in rows))
        for column in _COLUMNS
    }
    lines = [
        (
            f"WARN: {len(result.flagged_items)} of {len(result.all_items)} backlog "
            "item(s) are ordered against their dependencies"
        ),
        "  ".join(column.ljust(widths[column]) for column in _COLUMNS).rstrip(),
        "  ".join("-" * widths[column] for column in _COLUMNS),
    ]
    for row in rows:
        lines.append(
            "  ".join(row[column].ljust(widths[column]) for column in _COLUMNS).rstrip()
        )
    return "\n".join(lines)
