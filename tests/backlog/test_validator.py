from __future__ import annotations

import pytest

from backlog_order.backlog.models import BacklogItem
from backlog_order.backlog.validator import validate
from backlog_order.errors import ContractViolation


def _items(
    order: list[int], predecessors: dict[int, set[int]] | None = None
) -> tuple[BacklogItem, ...]:
    links = predecessors or {}
    successors: dict[int, set[int]] = {item_id: set() for item_id in order}
    for item_id, preds in links.items():
        for pred in preds:
            if pred in successors:
                successors[pred].add(item_id)
    return tuple(
        BacklogItem(
            item_id=item_id,
            rank=rank,
            title=f"Item {item_id}",
            predecessors=frozenset(links.get(item_id, set())),
            successors=frozenset(successors[item_id]),
        )
        for rank, item_id in enumerate(order, start=1)
    )


def test_validate_returns_no_flags_without_dependency_links() -> None:
    result = validate(_items([1, 2, 3, 4]))

    assert result.passed
    assert result.flagged_items == ()
    assert [item.rank for item in result.all_items] == [1, 2, 3, 4]
    assert all(item.is_valid for item in result.all_items)


def test_validate_flags_predecessor_ranked_after_successor() -> None:
    a, b, c = 101, 102, 103
    result = validate(_items([a, b, c], {c: {a}, b: {c}}))

    assert result.flagged_ids == {b, c}
    assert [item.item_id for item in result.flagged_items] == [b, c]
    by_id = {item.item_id: item for item in result.all_items}
    assert by_id[c].invalid_successors == {b}
    assert by_id[c].invalid_predecessors == frozenset()
    assert by_id[b].invalid_predecessors == {c}
    assert by_id[b].invalid_successors == frozenset()
    assert by_id[a].is_valid


def test_validate_ignores_predecessor_outside_backlog() -> None:
    a, d = 201, 999
    result = validate(_items([a, 202], {a: {d}}))

    assert result.passed
    item = result.all_items[0]
    assert item.predecessors == {d}
    assert item.is_valid
    assert d not in {entry.item_id for entry in result.all_items}


def test_validate_never_flags_self_reference() -> None:
    result = validate(_items([5, 6], {5: {5}, 6: {6}}))
    assert result.passed


@pytest.mark.parametrize(
    ("order", "expect_flag"),
    [
        ([10, 20], False),
        ([20, 10], True),
    ],
)
def test_validate_flags_pair_iff_predecessor_rank_is_greater(
    order: list[int], expect_flag: bool
) -> None:
    result = validate(_items(order, {20: {10}}))
    assert (result.flagged_ids == {10, 20}) is expect_flag
    if not expect_flag:
        assert result.flagged_ids == frozenset()


def test_validate_is_idempotent_and_leaves_input_untouched() -> None:
    items = _items([1, 2, 3, 4], {1: {3, 4}, 2: {1}, 3: {9}})

    first = validate(items)
    second = validate(items)
    rerun = validate(first.all_items)

    assert first == second
    assert rerun == first
    assert all(item.is_valid for item in items)
    assert first.flagged_ids == {1, 3, 4}
    by_id = {item.item_id: item for item in first.all_items}
    assert by_id[1].invalid_predecessors == {3, 4}
    assert by_id[3].invalid_successors == {1}
    assert by_id[4].invalid_successors == {1}


def test_validate_rejects_duplicate_backlog_items() -> None:
    items = (
        BacklogItem(item_id=7, rank=1),
        BacklogItem(item_id=7, rank=2),
    )
    with pytest.raises(ContractViolation, match="reason_code=duplicate_backlog_item"):
        validate(items)


def test_validate_rejects_non_contiguous_ranks() -> None:
    items = (
        BacklogItem(item_id=1, rank=1),
        BacklogItem(item_id=2, rank=3),
    )
    with pytest.raises(ContractViolation, match="reason_code=invalid_rank_sequence"):
        validate(items)
