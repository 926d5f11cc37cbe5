"""Builder functions turning tracker payloads into ranked backlog items."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from backlog_order.backlog.models import BacklogItem, WorkItemDetail, WorkItemReference
from backlog_order.errors import ContractViolation


def _rank_lookup(item_ids: Iterable[int]) -> dict[int, int]:
    ranks: dict[int, int] = {}
    for position, item_id in enumerate(item_ids, start=1):
        if item_id in ranks:
            raise ContractViolation(
                "duplicate_backlog_item",
                key=str(item_id),
                detail=f"item appears at ranks {ranks[item_id]} and {position}",
            )
        ranks[item_id] = position
    return ranks


def assign_ranks(references: Sequence[WorkItemReference]) -> dict[int, int]:
    """Map each fetched item id to its 1-based rank, rejecting duplicates."""

    return _rank_lookup(reference.item_id for reference in references)


def rank_index(items: Sequence[BacklogItem]) -> dict[int, int]:
    """Map item ids to ranks, checking ranks form the sequence ``1..N``."""

    ranks = _rank_lookup(item.item_id for item in items)
    for item in items:
        if item.rank != ranks[item.item_id]:
            raise ContractViolation(
                "invalid_rank_sequence",
                key=str(item.item_id),
                detail=f"rank={item.rank} but position={ranks[item.item_id]}",
            )
    return ranks


def build_backlog_items(
    references: Sequence[WorkItemReference],
    details: Mapping[int, WorkItemDetail],
) -> tuple[BacklogItem, ...]:
    """Combine ranked references with their fetched details.

    Predecessors are recorded on the dependent item whether or not they are
    part of the backlog. Successor edges are recorded only on predecessors that
    are themselves in the backlog.
    """

    ranks = assign_ranks(references)
    successors: dict[int, set[int]] = {item_id: set() for item_id in ranks}
    for reference in references:
        detail = details.get(reference.item_id)
        if detail is None:
            raise ContractViolation(
                "missing_work_item_detail",
                key=str(reference.item_id),
                detail="no detail payload was fetched for this backlog item",
            )
        for predecessor_id in detail.predecessor_ids:
            if predecessor_id in successors:
                successors[predecessor_id].add(reference.item_id)

    items: list[BacklogItem] = []
    for reference in references:
        detail = details[reference.item_id]
        items.append(
            BacklogItem(
                item_id=reference.item_id,
                rank=ranks[reference.item_id],
                title=detail.title,
                area_path=detail.area_path,
                iteration_path=detail.iteration_path,
                parent_id=detail.parent_id,
                work_item_type=detail.work_item_type,
                predecessors=frozenset(detail.predecessor_ids),
                successors=frozenset(successors[reference.item_id]),
            )
        )
    return tuple(items)
