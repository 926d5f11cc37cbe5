"""Dependency ordering check for ranked backlog items."""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from backlog_order.backlog.builder import rank_index
from backlog_order.backlog.models import BacklogItem, ValidationResult


def validate(backlog_items: Sequence[BacklogItem]) -> ValidationResult:
    """Flag predecessor/successor pairs where the predecessor is ranked later.

    Only pairs with both ends in ``backlog_items`` are compared. The input is
    not modified; annotated copies are returned in rank order.
    """

    ranks = rank_index(backlog_items)
    invalid_predecessors: dict[int, set[int]] = {item_id: set() for item_id in ranks}
    invalid_successors: dict[int, set[int]] = {item_id: set() for item_id in ranks}

    for item in backlog_items:
        for predecessor_id in item.predecessors:
            predecessor_rank = ranks.get(predecessor_id)
            if predecessor_rank is None:
                continue
            if predecessor_rank > item.rank:
                invalid_successors[predecessor_id].add(item.item_id)
                invalid_predecessors[item.item_id].add(predecessor_id)

    annotated = tuple(
        replace(
            item,
            is_valid=not (
                invalid_predecessors[item.item_id] or invalid_successors[item.item_id]
            ),
            invalid_predecessors=frozenset(invalid_predecessors[item.item_id]),
            invalid_successors=frozenset(invalid_successors[item.item_id]),
        )
        for item in backlog_items
    )
    return ValidationResult(
        flagged_items=tuple(item for item in annotated if not item.is_valid),
        all_items=annotated,
    )
