"""Ranked backlog records, builders, and the dependency ordering check."""

from backlog_order.backlog.builder import (
    assign_ranks,
    build_backlog_items,
    rank_index,
)
from backlog_order.backlog.models import (
    BacklogItem,
    ValidationResult,
    WorkItemDetail,
    WorkItemReference,
)
from backlog_order.backlog.validator import validate

__all__ = [
    "BacklogItem",
    "ValidationResult",
    "WorkItemDetail",
    "WorkItemReference",
    "assign_ranks",
    "build_backlog_items",
    "rank_index",
    "validate",
]
