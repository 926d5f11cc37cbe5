"""Typed parsing of Azure Boards backlog and work item payloads."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from backlog_order.backlog.models import WorkItemDetail, WorkItemReference
from backlog_order.errors import ContractViolation

PREDECESSOR_RELATION = "System.LinkTypes.Dependency-Reverse"

_FIELD_MAP = {
    "System.Title": "title",
    "System.AreaPath": "area_path",
    "System.IterationPath": "iteration_path",
    "System.Parent": "parent_id",
    "System.WorkItemType": "work_item_type",
}


def _as_item_id(value: object, *, key: str) -> int:
    if isinstance(value, bool):
        raise ContractViolation(
            "source_schema_drift", key=key, detail="work item id must be an integer"
        )
    try:
        parsed = int(str(value).strip())
    except ValueError as exc:
        raise ContractViolation(
            "source_schema_drift",
            key=key,
            detail=f"work item id must be an integer, got {value!r}",
        ) from exc
    if parsed < 1:
        raise ContractViolation(
            "source_schema_drift", key=key, detail="work item id must be >= 1"
        )
    return parsed


def related_item_id(url: str) -> int:
    """Extract the related item id from the trailing segment of a link URL."""

    trailing = str(url).split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]
    return _as_item_id(trailing, key=str(url))


def parse_backlog_references(payload: Mapping[str, Any]) -> tuple[WorkItemReference, ...]:
    """Parse a backlog level ``workItems`` response, keeping rank order."""

    rows = payload.get("workItems")
    if not isinstance(rows, list):
        raise ContractViolation(
            "source_schema_drift",
            key="workItems",
            detail="backlog response must contain a workItems list",
        )

    references: list[WorkItemReference] = []
    for position, row in enumerate(rows, start=1):
        target = row.get("target") if isinstance(row, Mapping) else None
        if not isinstance(target, Mapping) or target.get("id") is None:
            raise ContractViolation(
                "source_schema_drift",
                key=f"workItems[{position}].target.id",
                detail="backlog row is missing its target work item id",
            )
        references.append(
            WorkItemReference(
                item_id=_as_item_id(target["id"], key=f"workItems[{position}].target.id")
            )
        )
    return tuple(references)


def parse_work_item_detail(payload: Mapping[str, Any]) -> WorkItemDetail:
    """Map a work item payload onto ``WorkItemDetail``.

    Only the fields in ``_FIELD_MAP`` are read; every other field name is
    listed in ``ignored_fields``. Only predecessor links are kept.
    """

    if payload.get("id") is None:
        raise ContractViolation(
            "source_schema_drift", key="id", detail="work item payload is missing id"
        )
    item_id = _as_item_id(payload["id"], key="id")

    fields = payload.get("fields") or {}
    if not isinstance(fields, Mapping):
        raise ContractViolation(
            "source_schema_drift",
            key=f"{item_id}.fields",
            detail="fields must be a mapping",
        )
    values: dict[str, Any] = {}
    ignored: list[str] = []
    for name, value in fields.items():
        attribute = _FIELD_MAP.get(name)
        if attribute is None:
            ignored.append(str(name))
            continue
        values[attribute] = value

    parent_id: Optional[int] = None
    if values.get("parent_id") is not None:
        parent_id = _as_item_id(values["parent_id"], key=f"{item_id}.System.Parent")

    predecessor_ids: set[int] = set()
    for relation in payload.get("relations") or []:
        if not isinstance(relation, Mapping):
            continue
        if relation.get("rel") != PREDECESSOR_RELATION:
            continue
        predecessor_ids.add(related_item_id(str(relation.get("url", ""))))

    return WorkItemDetail(
        item_id=item_id,
        title=str(values.get("title") or ""),
        area_path=str(values.get("area_path") or ""),
        iteration_path=str(values.get("iteration_path") or ""),
        parent_id=parent_id,
        work_item_type=str(values.get("work_item_type") or ""),
        predecessor_ids=frozenset(predecessor_ids),
        ignored_fields=tuple(sorted(ignored)),
    )
