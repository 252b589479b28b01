"""Tests for outreach brief assembly and concurrent generation."""

import pytest

from foodbank_ai.composer import (
    CrisisSummary,
    OutreachComposer,
    OutreachDraft,
    UrgencyTier,
    outreach_results_to_dataframe,
    parse_draft,
)
from foodbank_ai.config import Config
from foodbank_ai.constants import BODY_PLACEHOLDER, SUBJECT_PLACEHOLDER
from foodbank_ai.crisis import CrisisSignal
from foodbank_ai.records import CrisisState, DonationRecord, ItemStatus
from foodbank_ai.segmentation import SupplierSegmenter
from foodbank_ai.supply_gap import SupplyGapAnalyzer, SupplyStatus

from .conftest import StubWriter


@pytest.fixture
def protein_gap(make_item):
    return SupplyGapAnalyzer().analyze([make_item("protein", 10)], {"protein": 5})["protein"]


@pytest.fixture
def candidates(make_supplier, reference_date):
    suppliers = [make_supplier(f"s{i}", "2026-01-25", ["protein"]) for i in range(7)]
    return SupplierSegmenter().suppliers_for_category(suppliers, "protein", reference_date)


def test_batch_capped_and_ordered(candidates, protein_gap, stub_writer):
    """Seven candidates yield five results in candidate order."""
    results = OutreachComposer(stub_writer).compose("protein", protein_gap, candidates)

    assert [r.supplier_id for r in results] == ["s0", "s1", "s2", "s3", "s4"]
    assert all(r.generated for r in results)
    assert len(stub_writer.briefs) == 5


def test_failure_isolated_to_one_supplier(candidates, protein_gap):
    writer = StubWriter(fail_for={"s2"})
    results = OutreachComposer(writer).compose("protein", protein_gap, candidates)

    assert [r.supplier_id for r in results] == ["s0", "s1", "s2", "s3", "s4"]
    failed = results[2]
    assert not failed.generated
    assert failed.subject == SUBJECT_PLACEHOLDER
    assert failed.body == BODY_PLACEHOLDER
    assert "service unavailable" in failed.error
    assert all(r.generated for i, r in enumerate(results) if i != 2)


def test_slow_call_times_out(candidates, protein_gap):
    writer = StubWriter(slow_for={"s1"}, delay=2.0)
    results = OutreachComposer(writer, timeout_seconds=0.3).compose("protein", protein_gap, candidates)

    assert len(results) == 5
    assert not results[1].generated
    assert "timed out" in results[1].error
    assert results[0].generated and results[4].generated


def test_large_batch_of_slow_calls_all_complete(candidates, protein_gap):
    """Every call runs at once, so calls under the deadline never time out."""
    config = Config()
    config.outreach.max_suppliers = 7
    writer = StubWriter(slow_for={f"s{i}" for i in range(7)}, delay=0.3)
    results = OutreachComposer(writer, config, timeout_seconds=1.5).compose(
        "protein", protein_gap, candidates
    )

    assert [r.supplier_id for r in results] == [f"s{i}" for i in range(7)]
    assert all(r.generated for r in results)


def test_custom_batch_size(candidates, protein_gap, stub_writer):
    config = Config()
    config.outreach.max_suppliers = 2
    results = OutreachComposer(stub_writer, config).compose("protein", protein_gap, candidates)
    assert len(results) == 2


def test_no_candidates(protein_gap, stub_writer):
    assert OutreachComposer(stub_writer).compose("protein", protein_gap, []) == []
    assert stub_writer.briefs == []


def test_brief_contents(make_item, make_supplier, reference_date, protein_gap):
    donation = DonationRecord(date="2026-01-15", items=("Chicken",), quantity=100, unit="lbs")
    supplier = make_supplier("farm", "2026-01-25", ["protein"], history=[donation])
    leads = SupplierSegmenter().suppliers_for_category([supplier], "protein", reference_date)
    items = [
        make_item("protein", 5, name="Chicken Breast"),
        make_item("protein", 5, name="Chicken Breast"),
        make_item("protein", 5, name="Ground Beef"),
        make_item("protein", 5, name="Spoiled Ham", status=ItemStatus.DELETED),
        make_item("dairy", 5, name="Milk"),
    ]
    crisis = CrisisState(active=True, crisis_type="winter_storm", severity="high",
                         demand_multiplier=2.5)

    brief = OutreachComposer(StubWriter()).build_briefs("protein", protein_gap, leads, crisis, items)[0]

    assert brief.urgency == UrgencyTier.URGENT
    assert brief.status == SupplyStatus.CRITICAL
    assert brief.days_of_supply == 2.0
    assert brief.specific_items == ("Chicken Breast", "Ground Beef")
    assert brief.last_donation == donation
    assert brief.crisis.event_type == "winter storm"
    assert brief.crisis.demand_increase_pct == 150
    assert brief.to_dict()["last_donation_summary"] == "100 lbs of Chicken on 2026-01-15"


def test_brief_without_stock_or_crisis(candidates, protein_gap):
    brief = OutreachComposer(StubWriter()).build_briefs("protein", protein_gap, candidates)[0]
    assert brief.specific_items == ("protein",)
    assert brief.crisis is None
    assert brief.last_donation is None


def test_crisis_signal_accepted(candidates, protein_gap):
    signal = CrisisSignal(is_crisis=True, event_type="flood", severity="medium", demand_multiplier=2.0)
    brief = OutreachComposer(StubWriter()).build_briefs("protein", protein_gap, candidates, signal)[0]
    assert brief.crisis == CrisisSummary("flood", "medium", 2.0, 100, "")


def test_urgency_follows_status(make_item, candidates):
    gaps = SupplyGapAnalyzer().analyze([make_item("dairy", 200), make_item("grain", 500)],
                                       {"dairy": 50, "grain": 50})
    composer = OutreachComposer(StubWriter())
    assert composer.build_briefs("dairy", gaps["dairy"], candidates)[0].urgency == UrgencyTier.IMPORTANT
    assert composer.build_briefs("grain", gaps["grain"], candidates)[0].urgency == UrgencyTier.GENERAL


def test_parse_draft_shapes():
    assert parse_draft({"subject": " Hi ", "body": "Text"}) == ("Hi", "Text", [])
    assert parse_draft(OutreachDraft(subject="S", body="B")) == ("S", "B", [])
    assert parse_draft("SUBJECT: Urgent need\n\nBODY:\nPlease help.\nThanks") == (
        "Urgent need", "Please help.\nThanks", []
    )


def test_parse_draft_placeholders():
    subject, body, errors = parse_draft({"subject": "", "body": None})
    assert (subject, body) == (SUBJECT_PLACEHOLDER, BODY_PLACEHOLDER)
    assert errors == ["missing subject", "missing body"]

    subject, body, errors = parse_draft("Just some text without labels")
    assert subject == SUBJECT_PLACEHOLDER
    assert body == "Just some text without labels"

    assert parse_draft(42)[:2] == (SUBJECT_PLACEHOLDER, BODY_PLACEHOLDER)


def test_incomplete_reply_marked_not_generated(candidates, protein_gap):
    writer = StubWriter(reply={"subject": "Help needed", "body": "  "})
    results = OutreachComposer(writer).compose("protein", protein_gap, candidates)
    assert all(r.subject == "Help needed" for r in results)
    assert all(r.body == BODY_PLACEHOLDER for r in results)
    assert not any(r.generated for r in results)


def test_results_dataframe(candidates, protein_gap, stub_writer):
    results = OutreachComposer(stub_writer).compose("protein", protein_gap, candidates)
    df = outreach_results_to_dataframe(results)
    assert list(df["supplier_id"]) == ["s0", "s1", "s2", "s3", "s4"]
    assert set(df["lead_status"]) == {"hot"}
    assert outreach_results_to_dataframe([]).empty
