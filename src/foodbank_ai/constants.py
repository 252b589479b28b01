"""
System-Wide Constants
=====================
Centralized location for category vocabularies, default demand rates,
thresholds and placeholder strings.

Design Principles:
- All magic numbers should be defined here
- Thresholds are configurable through Config; these are the defaults
- Field-name aliases describe the raw data-store shapes accepted at the boundary
"""

from typing import Dict, List

# =============================================================================
# CATEGORIES
# =============================================================================

FOOD_CATEGORIES: List[str] = [
    "protein",
    "grain",
    "fruit",
    "dairy",
    "vegetable",
    "prepared",
    "canned",   # legacy category still present in older records
    "other",
]

# Average units distributed per day when no demand profile is supplied.
DEFAULT_DAILY_DEMAND: Dict[str, float] = {
    "protein": 80,
    "dairy": 50,
    "fruit": 60,
    "grain": 90,
    "vegetable": 70,
    "prepared": 20,
    "other": 10,
    "canned": 25,
}

# Rate used for a category missing from the demand profile
FALLBACK_DAILY_DEMAND = 10.0

# =============================================================================
# THRESHOLDS
# =============================================================================

SUPPLY_STATUS_THRESHOLDS = {
    "critical": 3.0,   # days of supply < 3 = CRITICAL
    "low": 5.0,        # days of supply < 5 = LOW
}

EXPIRATION_ALERT_THRESHOLDS = {
    "critical": 1,     # <= 1 day
    "urgent": 3,       # <= 3 days
    "watch": 7,        # <= 7 days
}

LEAD_TIER_THRESHOLDS = {
    "hot": 30,         # contacted within 30 days
    "warm": 90,        # contacted within 90 days
}

# Sentinel returned for missing/invalid dates; keeps the item out of
# every urgency window.
FAR_FUTURE_DAYS = 999

# Multiplier assumed for an active crisis that does not state one
DEFAULT_CRISIS_MULTIPLIER = 2.0

# A category below this share of total weight flags an imbalanced pantry
IMBALANCE_SHARE_PCT = 15.0

# =============================================================================
# OUTREACH
# =============================================================================

SUBJECT_PLACEHOLDER = "[Subject missing]"
BODY_PLACEHOLDER = "[Body missing]"

# =============================================================================
# RAW FIELD ALIASES
# =============================================================================
# Canonical field -> spellings seen in the data store, first match wins.

INVENTORY_FIELD_ALIASES: Dict[str, List[str]] = {
    "item_id": ["itemId", "item_id", "id"],
    "name": ["name", "item_name", "itemName"],
    "category": ["foodCategory", "category", "food_category"],
    "quantity": ["quantity", "qty"],
    "unit": ["unitType", "unit", "unit_type"],
    "best_by_date": ["bestByDate", "perish_date", "perishDate", "best_by_date"],
    "perishability_tier": ["perishabilityTier", "perishability_tier"],
    "handling_type": ["handlingType", "handling_type"],
    "funding_source": ["fundingSource", "funding_source"],
    "recipient_eligibility": ["recipientEligibility", "recipient_eligibility"],
    "family_max": ["familyMax", "family_max"],
    "weight": ["weight"],
    "lot_number": ["lotNumber", "lot_number"],
    "supplier_id": ["supplierId", "donorId", "supplier_id", "donor_id"],
    "receipt_date": ["receiptDate", "receipt_date"],
    "status": ["status"],
}

SUPPLIER_FIELD_ALIASES: Dict[str, List[str]] = {
    "supplier_id": ["supplierId", "supplier_id", "id"],
    "name": ["name", "supplier_name", "supplierName"],
    "supplier_type": ["type", "supplierType", "supplier_type"],
    "email": ["email", "contact_email", "contactEmail"],
    "preferred_categories": ["preferredCategories", "preferred_donation_categories",
                             "preferred_categories"],
    "last_contact_date": ["lastContactDate", "last_contact_date"],
    "response_rate": ["responseRate", "response_rate"],
    "donation_history": ["donationHistory", "donation_history"],
}

CRISIS_FIELD_ALIASES: Dict[str, List[str]] = {
    "active": ["active", "isActive", "is_crisis", "isCrisis"],
    "crisis_type": ["type", "event_type", "eventType", "crisis_type"],
    "description": ["description", "reasoning"],
    "severity": ["severity"],
    "start_date": ["startDate", "start_date"],
    "end_date": ["endDate", "end_date"],
    "demand_multiplier": ["projectedDemandIncrease", "demand_multiplier",
                          "demandMultiplier"],
}

# =============================================================================
# SAMPLE NEWS SCENARIOS
# =============================================================================
# Headline sets for demo runs of the crisis classifier.

SAMPLE_HEADLINES: Dict[str, List[Dict[str, str]]] = {
    "normal": [
        {"title": "South Bend Mayor Announces New Park",
         "snippet": "City plans to open community green space next spring"},
        {"title": "Local High School Wins Basketball Championship",
         "snippet": "Eagles defeat rivals in overtime thriller"},
        {"title": "New Restaurant Opens Downtown",
         "snippet": "Farm-to-table eatery celebrates grand opening"},
    ],
    "winter_storm": [
        {"title": "WEATHER ALERT: Major Winter Storm Warning for South Bend",
         "snippet": "National Weather Service issues warning for 12-18 inches of snow, "
                    "high winds expected Friday-Saturday"},
        {"title": "Residents Urged to Stock Up as Storm Approaches",
         "snippet": "Emergency officials recommend having 3 days of supplies, "
                    "avoid travel during storm"},
        {"title": "School Districts Announce Closures",
         "snippet": "Multiple counties canceling classes Friday due to severe weather forecast"},
    ],
    "economic_crisis": [
        {"title": "Major Employer Announces Layoffs",
         "snippet": "AM General to cut 500 jobs at South Bend plant, affecting hundreds of families"},
        {"title": "Food Pantries See Surge in Demand",
         "snippet": "Local charities report 40% increase in families seeking assistance"},
        {"title": "Economic Anxiety Grows in Region",
         "snippet": "Manufacturing sector downturn impacts community"},
    ],
}
