"""Tests for the per-item priority scorer."""

import pytest

from foodbank_ai.priority import PriorityScorer, priority_items_to_dataframe, top_priority_items
from foodbank_ai.records import CrisisState, ItemStatus


def test_score_formula(make_item):
    """100 - 10 x (quantity / demand)."""
    scorer = PriorityScorer()
    assert scorer.score(make_item("protein", 40), {"protein": 10}) == pytest.approx(60.0)


def test_score_clamped(make_item):
    scorer = PriorityScorer()
    assert scorer.score(make_item("protein", 5000), {"protein": 10}) == 0.0
    assert scorer.score(make_item("protein", 0), {"protein": 10}) == 100.0


def test_zero_demand_scores_maximal(make_item):
    assert PriorityScorer().score(make_item("grain", 50), {"grain": 0}) == 100.0


def test_unknown_category_uses_fallback_rate(make_item):
    scorer = PriorityScorer()
    assert scorer.score(make_item("snacks", 40), {"protein": 80}) == pytest.approx(60.0)
    assert scorer.score(make_item(None, 40), {"protein": 80}) == pytest.approx(60.0)


def test_crisis_raises_priority(make_item, reference_date):
    crisis = CrisisState(active=True, demand_multiplier=2.0)
    ranked = PriorityScorer().rank([make_item("protein", 40)], {"protein": 10}, crisis, reference_date)
    assert ranked[0].priority == pytest.approx(80.0)


def test_crisis_below_one_matches_no_crisis(make_item, reference_date):
    item = make_item("protein", 40)
    crisis = CrisisState(active=True, demand_multiplier=0.5)
    scorer = PriorityScorer()

    assert scorer.score(item, {"protein": 10}, crisis) == pytest.approx(60.0)
    ranked = scorer.rank([item], {"protein": 10}, crisis, reference_date)
    assert ranked[0].priority == pytest.approx(60.0)


def test_rank_descending_and_stable(make_item, reference_date):
    items = [
        make_item("protein", 50, name="plenty"),
        make_item("protein", 10, name="first tie"),
        make_item("protein", 10, name="second tie"),
        make_item("protein", 0, name="empty"),
        make_item("protein", 10, name="gone", status=ItemStatus.DELETED),
    ]
    ranked = PriorityScorer().rank(items, {"protein": 10}, None, reference_date)

    assert [p.item.name for p in ranked] == ["empty", "first tie", "second tie", "plenty"]
    assert all(0 <= p.priority <= 100 for p in ranked)


def test_top_and_high_priority_count(make_item, reference_date):
    items = [make_item("protein", q) for q in (0, 1, 2, 3, 4, 5, 50)]
    scorer = PriorityScorer()
    ranked = scorer.rank(items, {"protein": 1}, None, reference_date)

    assert len(scorer.top(ranked)) == 5
    assert len(scorer.top(ranked, 2)) == 2
    # scores 100, 90, 80, ... ; only strictly above 80 count
    assert scorer.high_priority_count(ranked) == 2

    top = top_priority_items(items, {"protein": 1}, None, reference_date, n=3)
    assert [p.priority for p in top] == [100.0, 90.0, 80.0]


def test_days_until_expiration_attached(make_item, reference_date):
    ranked = PriorityScorer().rank([make_item(best_by="2026-02-03")], None, None, reference_date)
    assert ranked[0].days_until_expiration == 2


def test_dataframe_keeps_rank_order(make_item, reference_date):
    ranked = PriorityScorer().rank(
        [make_item("protein", 50), make_item("protein", 5)], {"protein": 10}, None, reference_date
    )
    df = priority_items_to_dataframe(ranked)
    assert list(df["rank"]) == [1, 2]
    assert list(df["priority"]) == [95.0, 50.0]
