"""Fetch, enrich, validate, and export a team backlog in one sequential run."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from backlog_order.backlog.builder import assign_ranks, build_backlog_items
from backlog_order.backlog.models import BacklogItem, ValidationResult, WorkItemDetail
from backlog_order.backlog.validator import validate
from backlog_order.config import ValidatorConfig
from backlog_order.reporting.console import format_violation_report
from backlog_order.reporting.exporters import export_backlog_csv
from backlog_order.tracker.client import AzureBoardsClient

ProgressCallback = Callable[[str], None]


@dataclass(frozen=True)
class BacklogRunReport:
    """Outcome of one validation run."""

    config: ValidatorConfig
    result: ValidationResult
    export_path: Path

    @property
    def passed(self) -> bool:
        return self.result.passed

    def as_dict(self) -> dict[str, object]:
        return {
            **self.config.as_dict(),
            "export_path": str(self.export_path),
            **self.result.as_dict(),
        }

    def to_json(self) -> str:
        return json.dumps(self.as_dict(), sort_keys=True)

    def to_text(self) -> str:
        return format_violation_report(self.result, self.config.work_item_link)


def _emit(progress: Optional[ProgressCallback], message: str) -> None:
    if progress is not None:
        progress(message)


def fetch_backlog(
    client: AzureBoardsClient,
    config: ValidatorConfig,
    *,
    progress: Optional[ProgressCallback] = None,
) -> tuple[BacklogItem, ...]:
    """Fetch the ranked backlog, then each item's detail strictly in rank order."""

    references = client.fetch_backlog_references(config.backlog_level)
    assign_ranks(references)
    total = len(references)
    _emit(
        progress,
        f"fetched {total} backlog item(s) for {config.project}/{config.team}",
    )

    details: dict[int, WorkItemDetail] = {}
    for rank, reference in enumerate(references, start=1):
        details[reference.item_id] = client.fetch_work_item(reference.item_id)
        _emit(progress, f"[{rank}/{total}] fetched {reference.item_id}")
    items = build_backlog_items(references, details)
    in_backlog = {item.item_id for item in items}
    for item in items:
        for predecessor_id in sorted(item.predecessors - in_backlog):
            _emit(
                progress,
                f"predecessor {predecessor_id} of {item.item_id} is not in the backlog",
            )
    return items


def run_backlog_validation(
    config: ValidatorConfig,
    *,
    client: AzureBoardsClient | None = None,
    output_path: str | Path | None = None,
    progress: Optional[ProgressCallback] = None,
) -> BacklogRunReport:
    """Run the full backlog ordering check and export every item to CSV."""

    if client is None:
        with AzureBoardsClient(config) as owned_client:
            items = fetch_backlog(owned_client, config, progress=progress)
    else:
        items = fetch_backlog(client, config, progress=progress)

    result = validate(items)
    export_path = export_backlog_csv(
        result,
        config.work_item_link,
        output_path=output_path,
        output_dir=config.output_dir,
    )
    _emit(progress, f"exported {len(result.all_items)} item(s) to {export_path}")
    return BacklogRunReport(config=config, result=result, export_path=export_path)
