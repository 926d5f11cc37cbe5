"""Typed records for ranked backlog items and validation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


def format_id_set(ids: frozenset[int]) -> str:
    """Stable string form of an id set, e.g. ``{3, 7}`` or ``{}``."""

    return "{" + ", ".join(str(item) for item in sorted(ids)) + "}"


@dataclass(frozen=True)
class WorkItemReference:
    """Backlog row returned by the tracking service, in rank order."""

    item_id: int


@dataclass(frozen=True)
class WorkItemDetail:
    """Recognized fields and dependency links of one work item."""

    item_id: int
    title: str = ""
    area_path: str = ""
    iteration_path: str = ""
    parent_id: Optional[int] = None
    work_item_type: str = ""
    predecessor_ids: frozenset[int] = field(default_factory=frozenset)
    ignored_fields: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class BacklogItem:
    """Ranked backlog item annotated with dependency and validity state."""

    item_id: int
    rank: int
    title: str = ""
    area_path: str = ""
    iteration_path: str = ""
    parent_id: Optional[int] = None
    work_item_type: str = ""
    predecessors: frozenset[int] = field(default_factory=frozenset)
    successors: frozenset[int] = field(default_factory=frozenset)
    is_valid: bool = True
    invalid_predecessors: frozenset[int] = field(default_factory=frozenset)
    invalid_successors: frozenset[int] = field(default_factory=frozenset)

    def as_dict(self) -> dict[str, object]:
        return {
            "rank": self.rank,
            "id": self.item_id,
            "title": self.title,
            "work_item_type": self.work_item_type,
            "area_path": self.area_path,
            "iteration_path": self.iteration_path,
            "parent_id": self.parent_id,
            "predecessors": format_id_set(self.predecessors),
            "successors": format_id_set(self.successors),
            "is_valid": self.is_valid,
            "invalid_predecessors": format_id_set(self.invalid_predecessors),
            "invalid_successors": format_id_set(self.invalid_successors),
        }


@dataclass(frozen=True)
class ValidationResult:
    """Flagged subset and full annotated backlog, both in rank order."""

    flagged_items: tuple[BacklogItem, ...]
    all_items: tuple[BacklogItem, ...]

    @property
    def passed(self) -> bool:
        return not self.flagged_items

    @property
    def flagged_ids(self) -> frozenset[int]:
        return frozenset(item.item_id for item in self.flagged_items)

    def as_dict(self) -> dict[str, object]:
        return {
            "passed": self.passed,
            "checked_items": len(self.all_items),
            "violation_count": len(self.flagged_items),
            "flagged_ids": sorted(self.flagged_ids),
        }
