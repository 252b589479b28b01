"""Tests for the raw-record normalization pass."""

import pytest

from foodbank_ai.errors import MissingDataError
from foodbank_ai.normalization import (
    ValidationResult,
    active_items,
    normalize_crisis,
    normalize_demand_profile,
    normalize_inventory,
    normalize_snapshot,
    normalize_suppliers,
)
from foodbank_ai.records import (
    CrisisState,
    HandlingType,
    ItemStatus,
    PerishabilityTier,
)


def test_inventory_map_with_legacy_spellings(raw_snapshot):
    """Map keys become ids and every legacy spelling resolves."""
    items = normalize_inventory(raw_snapshot["inventory"])
    by_id = {item.item_id: item for item in items}

    assert set(by_id) == {"inv1", "inv2", "inv3", "inv4", "inv5"}
    assert by_id["inv1"].category == "protein"
    assert by_id["inv1"].unit == "lbs"
    assert by_id["inv1"].handling_type == HandlingType.REFRIGERATED
    assert by_id["inv1"].perishability_tier == PerishabilityTier.MEDIUM
    assert by_id["inv2"].name == "Canned Beans"
    assert by_id["inv2"].best_by_date == "2026-08-01"
    assert by_id["inv5"].status == ItemStatus.DELETED


def test_inventory_list_input():
    items = normalize_inventory([{"itemId": "x1", "name": "Apples", "category": "Fruit",
                                  "quantity": "12"}])
    assert items[0].item_id == "x1"
    assert items[0].category == "fruit"
    assert items[0].quantity == 12.0


def test_malformed_fields_degrade_with_warnings():
    """Bad fields are repaired, never fatal."""
    result = ValidationResult()
    items = normalize_inventory({
        "a": {"name": "Mystery", "quantity": 5},
        "b": {"name": "Negative", "category": "grain", "quantity": -3},
        "c": {"name": "Bad qty", "category": "grain", "quantity": "lots"},
        "d": {"name": "Bad date", "category": "dairy", "quantity": 1, "bestByDate": "soon"},
    }, result)

    by_id = {item.item_id: item for item in items}
    assert by_id["a"].category is None
    assert by_id["b"].quantity == 0.0
    assert by_id["c"].quantity == 0.0
    assert by_id["d"].best_by_date is None
    assert result.is_valid
    assert len(result.warnings) == 4


def test_list_valued_date_treated_as_missing():
    result = ValidationResult()
    items = normalize_inventory({
        "a": {"name": "Milk", "category": "dairy", "quantity": 4,
              "bestByDate": ["2026-02-03", "2026-02-04"]},
        "b": {"name": "Yogurt", "category": "dairy", "quantity": 2, "bestByDate": "2026-02-03"},
    }, result)

    by_id = {item.item_id: item for item in items}
    assert by_id["a"].best_by_date is None
    assert by_id["b"].best_by_date == "2026-02-03"
    assert result.is_valid


def test_non_mapping_records_are_skipped():
    result = ValidationResult()
    items = normalize_inventory({"ok": {"name": "Rice", "category": "grain", "quantity": 1},
                                 "bad": "not a record"}, result)
    assert [i.item_id for i in items] == ["ok"]
    assert not result.is_valid
    assert len(result.errors) == 1

    summary = result.to_dict()
    assert summary["skipped"] == ["Skipping inventory record 'bad': not a mapping"]
    assert summary["counts"] == {"inventory_count": 1}


def test_missing_collections_raise():
    with pytest.raises(MissingDataError) as excinfo:
        normalize_inventory(None)
    assert excinfo.value.collection == "inventory"
    assert "Inventory data not found" in str(excinfo.value)

    with pytest.raises(MissingDataError):
        normalize_suppliers(None)


def test_empty_collections_are_valid():
    assert normalize_inventory({}) == []
    assert normalize_suppliers([]) == []


def test_active_items_drops_deleted(raw_snapshot):
    items = active_items(normalize_inventory(raw_snapshot["inventory"]))
    assert "inv5" not in {item.item_id for item in items}


def test_suppliers_with_legacy_spellings(raw_snapshot):
    suppliers = {s.supplier_id: s for s in normalize_suppliers(raw_snapshot["suppliers"])}

    assert suppliers["sup1"].preferred_categories == ("protein", "dairy")
    assert suppliers["sup1"].last_donation.items == ("Chicken",)
    assert suppliers["sup1"].response_rate == 0.8
    assert suppliers["sup2"].name == "Grain Co-op"
    assert suppliers["sup2"].email == "grain@coop.org"
    assert suppliers["sup2"].preferred_categories == ("grain",)
    assert suppliers["sup2"].last_contact_date == "2025-06-01"
    assert suppliers["sup3"].last_contact_date is None
    assert suppliers["sup3"].preferred_categories == ()


def test_demand_profile_repairs_bad_rates():
    result = ValidationResult()
    profile = normalize_demand_profile({"Protein": 80, "dairy": -5, "fruit": "n/a", "grain": 0},
                                       result)
    assert profile == {"protein": 80.0, "dairy": 0.0, "fruit": 0.0, "grain": 0.0}
    assert len(result.warnings) == 3
    assert normalize_demand_profile(None) is None


def test_crisis_multiplier_floor_and_default():
    assert normalize_crisis({"active": True, "projectedDemandIncrease": 0.5}).demand_multiplier == 1.0
    assert normalize_crisis({"active": True}).demand_multiplier == 2.0
    assert normalize_crisis({"active": "false", "projectedDemandIncrease": 3}).effective_multiplier == 1.0
    assert normalize_crisis(None) == CrisisState()


def test_stored_crisis_fields():
    crisis = normalize_crisis({"active": True, "type": "winter_storm", "severity": "HIGH",
                               "description": "Storm", "projectedDemandIncrease": 2.5,
                               "startDate": "2026-01-30"})
    assert crisis.active
    assert crisis.crisis_type == "winter_storm"
    assert crisis.severity == "high"
    assert crisis.demand_multiplier == 2.5
    assert crisis.start_date == "2026-01-30"


def test_snapshot(raw_snapshot):
    result = ValidationResult()
    snapshot = normalize_snapshot(raw_snapshot, result)

    assert len(snapshot.inventory) == 5
    assert len(snapshot.suppliers) == 3
    assert snapshot.demand_profile == {"protein": 80.0, "dairy": 50.0, "grain": 90.0}
    assert not snapshot.crisis.active
    assert len(snapshot.distributions) == 2
    assert result.info["inventory_count"] == 5


def test_snapshot_without_analytics(raw_snapshot):
    del raw_snapshot["analytics"]
    snapshot = normalize_snapshot(raw_snapshot)
    assert snapshot.demand_profile is None
    assert not snapshot.crisis.active
