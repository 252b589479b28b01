"""
Shared fixtures for the FoodBank AI test suite.

Every test runs against the fixed reference date 2026-02-01 so that day
counts are deterministic.
"""

import threading
import time

import pandas as pd
import pytest

from foodbank_ai.records import InventoryItem, ItemStatus, Supplier

REFERENCE_DATE = "2026-02-01"


@pytest.fixture
def reference_date():
    return pd.Timestamp(REFERENCE_DATE)


@pytest.fixture
def make_item():
    """Factory for canonical inventory items."""
    counter = {'n': 0}

    def _make(category="protein", quantity=10.0, best_by=None, name=None,
              status=ItemStatus.AVAILABLE, weight=0.0, item_id=None):
        counter['n'] += 1
        return InventoryItem(
            item_id=item_id or f"item-{counter['n']}",
            name=name or f"{category or 'misc'} item {counter['n']}",
            category=category,
            quantity=quantity,
            best_by_date=best_by,
            status=status,
            weight=weight,
        )

    return _make


@pytest.fixture
def make_supplier():
    """Factory for canonical suppliers."""
    def _make(supplier_id, last_contact=None, preferred=(), name=None, history=None):
        return Supplier(
            supplier_id=supplier_id,
            name=name or f"Supplier {supplier_id}",
            email=f"{supplier_id}@example.org",
            preferred_categories=tuple(preferred),
            last_contact_date=last_contact,
            donation_history=list(history or []),
        )

    return _make


@pytest.fixture
def raw_snapshot():
    """Data-store snapshot in the realtime store's map layout with legacy spellings."""
    return {
        "inventory": {
            "inv1": {"name": "Chicken Breast", "foodCategory": "protein", "quantity": 60,
                     "unitType": "lbs", "bestByDate": "2026-02-03", "weight": 60,
                     "handlingType": "refrigerated"},
            "inv2": {"item_name": "Canned Beans", "category": "protein", "quantity": 40,
                     "perish_date": "2026-08-01", "weight": 40},
            "inv3": {"name": "Whole Milk", "foodCategory": "dairy", "quantity": 400,
                     "bestByDate": "2026-02-02", "weight": 200},
            "inv4": {"name": "Rice", "foodCategory": "grain", "quantity": 900,
                     "bestByDate": "2026-12-01", "weight": 300},
            "inv5": {"name": "Old Bread", "foodCategory": "grain", "quantity": 500,
                     "status": "deleted"},
        },
        "suppliers": {
            "sup1": {"name": "Fresh Farms", "email": "hello@freshfarms.org", "type": "farm",
                     "preferredCategories": ["protein", "dairy"],
                     "lastContactDate": "2026-01-20", "responseRate": 0.8,
                     "donationHistory": [{"date": "2026-01-15", "items": ["Chicken"],
                                          "quantity": 100, "unit": "lbs"}]},
            "sup2": {"supplier_name": "Grain Co-op", "contact_email": "grain@coop.org",
                     "preferred_donation_categories": ["grain"],
                     "last_contact_date": "2025-06-01"},
            "sup3": {"name": "Corner Grocery", "email": "corner@grocery.com",
                     "preferredCategories": []},
        },
        "analytics": {
            "averageDailyDemand": {"protein": 80, "dairy": 50, "grain": 90},
            "currentCrisis": {"active": False},
        },
        "distributions": {
            "d1": {"timestamp": "2026-01-30T10:00:00", "recipientName": "A", "householdSize": 3},
            "d2": {"timestamp": "2026-01-31T09:00:00", "recipientName": "B", "householdSize": 2},
        },
    }


class StubWriter:
    """
    Deterministic text-generation capability.

    ``fail_for`` supplier ids raise, ``slow_for`` ids sleep ``delay``
    seconds before answering.
    """

    def __init__(self, fail_for=(), slow_for=(), delay=0.0, reply=None):
        self.fail_for = set(fail_for)
        self.slow_for = set(slow_for)
        self.delay = delay
        self.reply = reply
        self.briefs = []
        self._lock = threading.Lock()

    def __call__(self, brief):
        with self._lock:
            self.briefs.append(brief)
        if brief.supplier_id in self.fail_for:
            raise RuntimeError(f"service unavailable for {brief.supplier_id}")
        if brief.supplier_id in self.slow_for:
            time.sleep(self.delay)
        if self.reply is not None:
            return self.reply
        return {
            "subject": f"{brief.target_category} request for {brief.supplier_name}",
            "body": f"Dear {brief.supplier_name}, we have {brief.days_of_supply} days left.",
        }


@pytest.fixture
def stub_writer():
    return StubWriter()
