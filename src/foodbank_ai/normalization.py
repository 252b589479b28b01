"""
Record Normalization
====================
Single validation pass that turns raw data-store snapshots into
canonical records.

Design Principles:
- Never silently fail - every repaired field is logged as a warning
- One bad record never aborts the batch
- Legacy field spellings (foodCategory, supplier_name, ...) are resolved
  here and nowhere else
- Return structured validation results

Accepted raw shapes:
- ``{id: record}`` maps (realtime store snapshot) or plain lists
- Records that are already canonical pass through untouched
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np

from .constants import (
    CRISIS_FIELD_ALIASES,
    DEFAULT_CRISIS_MULTIPLIER,
    INVENTORY_FIELD_ALIASES,
    SUPPLIER_FIELD_ALIASES,
)
from .errors import MissingDataError
from .records import (
    CrisisState,
    DistributionRecord,
    DonationRecord,
    HandlingType,
    InventoryItem,
    ItemStatus,
    NO_CRISIS,
    PerishabilityTier,
    Snapshot,
    Supplier,
)
from .temporal import to_iso_date
from .utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """
    What one normalization pass dropped or repaired.

    ``skipped`` records were unusable and left out of the snapshot;
    ``repairs`` are fields that were defaulted or coerced. Only a skipped
    record marks the pass invalid. ``info`` carries record counts per
    collection.
    """
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    info: Dict[str, Any] = field(default_factory=dict)

    def skip_record(self, collection: str, key: Any) -> None:
        message = f"Skipping {collection} record {key!r}: not a mapping"
        self.errors.append(message)
        self.is_valid = False
        logger.error(message)

    def note_repair(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning(message)

    def count(self, collection: str, n: int) -> None:
        self.info[f"{collection}_count"] = n

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "skipped": self.errors,
            "repairs": self.warnings,
            "counts": self.info,
        }


# =============================================================================
# FIELD HELPERS
# =============================================================================

def _records(raw: Any) -> List[Tuple[Optional[str], Any]]:
    """Flatten a map-or-list collection into (key, record) pairs."""
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        return [(str(key), value) for key, value in raw.items()]
    return [(None, value) for value in raw]


def _pick(record: Mapping, aliases: Iterable[str], default: Any = None) -> Any:
    for alias in aliases:
        value = record.get(alias)
        if value is not None and value != "":
            return value
    return default


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not np.isfinite(number):
        return None
    return number


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', 'yes', '1', 'active')
    return bool(value)


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _clean_category(value: Any) -> Optional[str]:
    text = _clean_text(value)
    return text.lower() if text else None


def _perishability(value: Any, handling: HandlingType) -> PerishabilityTier:
    text = _clean_category(value)
    lookup = {
        'high_48h': PerishabilityTier.HIGH,
        'high': PerishabilityTier.HIGH,
        'medium_7d': PerishabilityTier.MEDIUM,
        'medium': PerishabilityTier.MEDIUM,
        'low_30d': PerishabilityTier.LOW,
        'low': PerishabilityTier.LOW,
        'shelf_stable': PerishabilityTier.SHELF_STABLE,
    }
    if text in lookup:
        return lookup[text]

    # Derived from handling when the record carries no tier
    if handling == HandlingType.REFRIGERATED:
        return PerishabilityTier.MEDIUM
    if handling == HandlingType.FROZEN:
        return PerishabilityTier.LOW
    return PerishabilityTier.SHELF_STABLE


def _handling(value: Any) -> HandlingType:
    text = _clean_category(value)
    if text == 'frozen':
        return HandlingType.FROZEN
    if text == 'refrigerated':
        return HandlingType.REFRIGERATED
    return HandlingType.NON_PERISHABLE


def _status(value: Any) -> ItemStatus:
    text = _clean_category(value)
    if text == 'deleted':
        return ItemStatus.DELETED
    if text == 'distributed':
        return ItemStatus.DISTRIBUTED
    return ItemStatus.AVAILABLE


# =============================================================================
# INVENTORY
# =============================================================================

def normalize_item(
    raw: Mapping,
    key: Optional[str] = None,
    result: Optional[ValidationResult] = None
) -> InventoryItem:
    """
    Normalize one raw inventory record.

    Missing category stays None (the item is excluded from category
    grouping), missing/invalid dates become None (treated as far future),
    bad or negative quantities become 0.
    """
    result = result if result is not None else ValidationResult()
    aliases = INVENTORY_FIELD_ALIASES

    item_id = _clean_text(_pick(raw, aliases['item_id'], key)) or f"item-{id(raw)}"

    category = _clean_category(_pick(raw, aliases['category']))
    if category is None:
        result.note_repair(f"Item {item_id} has no category; excluded from category grouping")

    raw_quantity = _pick(raw, aliases['quantity'])
    quantity = _to_float(raw_quantity)
    if quantity is None:
        result.note_repair(f"Item {item_id} has invalid quantity {raw_quantity!r}; using 0")
        quantity = 0.0
    elif quantity < 0:
        result.note_repair(f"Item {item_id} has negative quantity {quantity}; using 0")
        quantity = 0.0

    raw_best_by = _pick(raw, aliases['best_by_date'])
    best_by = to_iso_date(raw_best_by)
    if raw_best_by is not None and best_by is None:
        result.note_repair(f"Item {item_id} has unparseable best-by date {raw_best_by!r}")

    handling = _handling(_pick(raw, aliases['handling_type']))

    return InventoryItem(
        item_id=item_id,
        name=_clean_text(_pick(raw, aliases['name'])) or 'item',
        category=category,
        quantity=quantity,
        unit=_clean_text(_pick(raw, aliases['unit'])) or 'units',
        best_by_date=best_by,
        perishability_tier=_perishability(_pick(raw, aliases['perishability_tier']), handling),
        handling_type=handling,
        funding_source=_clean_text(_pick(raw, aliases['funding_source'])),
        recipient_eligibility=_clean_text(_pick(raw, aliases['recipient_eligibility'])),
        family_max=max(0.0, _to_float(_pick(raw, aliases['family_max'])) or 0.0),
        weight=max(0.0, _to_float(_pick(raw, aliases['weight'])) or 0.0),
        lot_number=_clean_text(_pick(raw, aliases['lot_number'])),
        supplier_id=_clean_text(_pick(raw, aliases['supplier_id'])),
        receipt_date=to_iso_date(_pick(raw, aliases['receipt_date'])),
        status=_status(_pick(raw, aliases['status'])),
    )


def normalize_inventory(
    raw: Any,
    result: Optional[ValidationResult] = None
) -> List[InventoryItem]:
    """
    Normalize an inventory collection (map or list) into canonical items.

    Deleted items are kept; use active_items() to drop them.

    Raises
    ------
    MissingDataError
        If the collection itself is None
    """
    if raw is None:
        raise MissingDataError("inventory")

    result = result if result is not None else ValidationResult()
    items: List[InventoryItem] = []

    for key, record in _records(raw):
        if isinstance(record, InventoryItem):
            items.append(record)
            continue
        if not isinstance(record, Mapping):
            result.skip_record("inventory", key)
            continue
        items.append(normalize_item(record, key, result))

    result.count("inventory", len(items))
    return items


def active_items(items: Iterable[InventoryItem]) -> List[InventoryItem]:
    """Items that are not deleted, in input order."""
    return [item for item in items if item.is_active]


# =============================================================================
# SUPPLIERS
# =============================================================================

def _normalize_donation(raw: Any) -> Optional[DonationRecord]:
    if isinstance(raw, DonationRecord):
        return raw
    if not isinstance(raw, Mapping):
        return None

    items = raw.get('items')
    if isinstance(items, str):
        items = [items]
    if not items:
        single = _clean_text(raw.get('itemName') or raw.get('item_name'))
        items = [single] if single else []

    return DonationRecord(
        date=to_iso_date(raw.get('date')),
        items=tuple(str(i) for i in items),
        quantity=max(0.0, _to_float(raw.get('quantity')) or 0.0),
        unit=_clean_text(raw.get('unit')) or 'units',
    )


def normalize_supplier(
    raw: Mapping,
    key: Optional[str] = None,
    result: Optional[ValidationResult] = None
) -> Supplier:
    """Normalize one raw supplier record."""
    result = result if result is not None else ValidationResult()
    aliases = SUPPLIER_FIELD_ALIASES

    supplier_id = _clean_text(_pick(raw, aliases['supplier_id'], key)) or f"supplier-{id(raw)}"

    preferred = _pick(raw, aliases['preferred_categories'], [])
    if isinstance(preferred, str):
        preferred = [preferred]
    preferred_categories = tuple(
        c for c in (_clean_category(p) for p in preferred) if c
    )

    raw_contact = _pick(raw, aliases['last_contact_date'])
    last_contact = to_iso_date(raw_contact)
    if raw_contact is not None and last_contact is None:
        result.note_repair(f"Supplier {supplier_id} has unparseable last contact date {raw_contact!r}")

    response_rate = _to_float(_pick(raw, aliases['response_rate']))
    if response_rate is None:
        response_rate = 0.0
    response_rate = float(np.clip(response_rate, 0.0, 1.0))

    history = [
        donation for donation in (
            _normalize_donation(entry)
            for entry in (_pick(raw, aliases['donation_history'], []) or [])
        )
        if donation is not None
    ]

    return Supplier(
        supplier_id=supplier_id,
        name=_clean_text(_pick(raw, aliases['name'])) or supplier_id,
        email=_clean_text(_pick(raw, aliases['email'])),
        supplier_type=_clean_text(_pick(raw, aliases['supplier_type'])),
        preferred_categories=preferred_categories,
        last_contact_date=last_contact,
        response_rate=response_rate,
        donation_history=history,
    )


def normalize_suppliers(
    raw: Any,
    result: Optional[ValidationResult] = None
) -> List[Supplier]:
    """
    Normalize a supplier collection (map or list).

    Raises
    ------
    MissingDataError
        If the collection itself is None
    """
    if raw is None:
        raise MissingDataError("suppliers")

    result = result if result is not None else ValidationResult()
    suppliers: List[Supplier] = []

    for key, record in _records(raw):
        if isinstance(record, Supplier):
            suppliers.append(record)
            continue
        if not isinstance(record, Mapping):
            result.skip_record("supplier", key)
            continue
        suppliers.append(normalize_supplier(record, key, result))

    result.count("supplier", len(suppliers))
    return suppliers


# =============================================================================
# ANALYTICS (DEMAND PROFILE + CRISIS)
# =============================================================================

def normalize_demand_profile(
    raw: Optional[Mapping],
    result: Optional[ValidationResult] = None
) -> Optional[Dict[str, float]]:
    """
    Normalize a category -> daily demand mapping.

    Non-numeric or negative rates become 0, which the analyzers treat as
    maximal scarcity. Returns None when no profile was given.
    """
    if raw is None:
        return None

    result = result if result is not None else ValidationResult()
    profile: Dict[str, float] = {}

    for category, rate in raw.items():
        name = _clean_category(category)
        if name is None:
            continue
        value = _to_float(rate)
        if value is None or value < 0:
            result.note_repair(f"Demand rate for {name} is invalid ({rate!r}); using 0")
            value = 0.0
        elif value == 0:
            result.note_repair(f"Demand rate for {name} is 0; category will report as CRITICAL")
        profile[name] = value

    return profile


def normalize_crisis(
    raw: Any,
    result: Optional[ValidationResult] = None
) -> CrisisState:
    """
    Normalize a stored crisis record.

    Multipliers below 1.0 are raised to 1.0; an active crisis without a
    multiplier uses DEFAULT_CRISIS_MULTIPLIER.
    """
    if raw is None:
        return NO_CRISIS
    if isinstance(raw, CrisisState):
        return raw
    if not isinstance(raw, Mapping):
        return NO_CRISIS

    result = result if result is not None else ValidationResult()
    aliases = CRISIS_FIELD_ALIASES

    active = _to_bool(_pick(raw, aliases['active'], False))
    raw_multiplier = _pick(raw, aliases['demand_multiplier'])
    multiplier = _to_float(raw_multiplier)

    if multiplier is None:
        if active and raw_multiplier is not None:
            result.note_repair(
                f"Crisis multiplier {raw_multiplier!r} is invalid; "
                f"using {DEFAULT_CRISIS_MULTIPLIER}"
            )
        multiplier = DEFAULT_CRISIS_MULTIPLIER if active else 1.0
    elif multiplier < 1.0:
        result.note_repair(f"Crisis multiplier {multiplier} is below 1.0; using 1.0")
        multiplier = 1.0

    return CrisisState(
        active=active,
        crisis_type=_clean_text(_pick(raw, aliases['crisis_type'])) or ('unknown' if active else 'none'),
        description=_clean_text(_pick(raw, aliases['description'])) or '',
        severity=_clean_category(_pick(raw, aliases['severity'])) or ('medium' if active else 'low'),
        start_date=to_iso_date(_pick(raw, aliases['start_date'])),
        end_date=to_iso_date(_pick(raw, aliases['end_date'])),
        demand_multiplier=multiplier,
    )


def normalize_analytics(
    raw: Optional[Mapping],
    result: Optional[ValidationResult] = None
) -> Tuple[Optional[Dict[str, float]], CrisisState]:
    """Split an analytics record into (demand profile, crisis state)."""
    if raw is None:
        return None, NO_CRISIS

    profile = raw.get('averageDailyDemand', raw.get('average_daily_demand'))
    crisis = raw.get('currentCrisis', raw.get('current_crisis'))
    return normalize_demand_profile(profile, result), normalize_crisis(crisis, result)


def normalize_distributions(raw: Any) -> List[DistributionRecord]:
    """Normalize historical distribution records (read-only view)."""
    records: List[DistributionRecord] = []
    for key, record in _records(raw):
        if isinstance(record, DistributionRecord):
            records.append(record)
            continue
        if not isinstance(record, Mapping):
            continue
        household = _to_float(record.get('householdSize', record.get('household_size')))
        records.append(DistributionRecord(
            distribution_id=_clean_text(
                record.get('distributionId', record.get('distribution_id', key))
            ) or '',
            timestamp=_clean_text(record.get('timestamp')),
            recipient_name=_clean_text(
                record.get('recipientName', record.get('recipient_name'))
            ) or '',
            household_size=int(household or 0),
            items=tuple(i for i in (record.get('items') or []) if isinstance(i, Mapping)),
        ))
    return records


def normalize_snapshot(
    raw: Mapping,
    result: Optional[ValidationResult] = None
) -> Snapshot:
    """
    Normalize a whole data-store snapshot.

    Expected keys: ``inventory``, ``suppliers`` (both required),
    ``analytics`` and ``distributions`` (optional).
    """
    result = result if result is not None else ValidationResult()

    inventory = normalize_inventory(raw.get('inventory'), result)
    suppliers = normalize_suppliers(raw.get('suppliers'), result)
    profile, crisis = normalize_analytics(raw.get('analytics'), result)

    logger.info(
        f"Snapshot normalized: {len(inventory)} items, {len(suppliers)} suppliers, "
        f"{len(result.warnings)} warnings"
    )

    return Snapshot(
        inventory=inventory,
        suppliers=suppliers,
        demand_profile=profile,
        crisis=crisis,
        distributions=normalize_distributions(raw.get('distributions')),
    )
