"""
Canonical Record Types
======================
Fully-populated record shapes that every analytic component consumes.

Raw data-store snapshots are converted into these types exactly once
(see normalization.py); downstream code never branches on field presence.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ItemStatus(Enum):
    """Lifecycle status of an inventory item"""
    AVAILABLE = "available"
    DISTRIBUTED = "distributed"
    DELETED = "deleted"


class PerishabilityTier(Enum):
    """How quickly an item spoils"""
    HIGH = "high_48h"
    MEDIUM = "medium_7d"
    LOW = "low_30d"
    SHELF_STABLE = "shelf_stable"


class HandlingType(Enum):
    """Storage requirement"""
    FROZEN = "frozen"
    REFRIGERATED = "refrigerated"
    NON_PERISHABLE = "non_perishable"


@dataclass
class InventoryItem:
    """
    A single lot of food on hand.

    Attributes
    ----------
    item_id : str
        Unique identifier
    name : str
        Display name
    category : str, optional
        Food category; None when the source record had none
    quantity : float
        Units on hand (never negative)
    best_by_date : str, optional
        ISO date; None when missing or unparseable
    status : ItemStatus
        Deleted items are kept for audit but skipped by analytics
    """
    item_id: str
    name: str
    category: Optional[str]
    quantity: float
    unit: str = "units"
    best_by_date: Optional[str] = None
    perishability_tier: PerishabilityTier = PerishabilityTier.SHELF_STABLE
    handling_type: HandlingType = HandlingType.NON_PERISHABLE
    funding_source: Optional[str] = None
    recipient_eligibility: Optional[str] = None
    family_max: float = 0.0
    weight: float = 0.0
    lot_number: Optional[str] = None
    supplier_id: Optional[str] = None
    receipt_date: Optional[str] = None
    status: ItemStatus = ItemStatus.AVAILABLE

    @property
    def is_active(self) -> bool:
        return self.status != ItemStatus.DELETED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'item_id': self.item_id,
            'name': self.name,
            'category': self.category,
            'quantity': self.quantity,
            'unit': self.unit,
            'best_by_date': self.best_by_date,
            'perishability_tier': self.perishability_tier.value,
            'handling_type': self.handling_type.value,
            'funding_source': self.funding_source,
            'recipient_eligibility': self.recipient_eligibility,
            'family_max': self.family_max,
            'weight': self.weight,
            'lot_number': self.lot_number,
            'supplier_id': self.supplier_id,
            'receipt_date': self.receipt_date,
            'status': self.status.value,
        }


@dataclass(frozen=True)
class DonationRecord:
    """One past donation from a supplier"""
    date: Optional[str]
    items: Tuple[str, ...] = ()
    quantity: float = 0.0
    unit: str = "units"

    def describe(self) -> str:
        items = ', '.join(self.items) if self.items else 'items'
        quantity = f"{self.quantity:g}"
        when = f" on {self.date}" if self.date else ""
        return f"{quantity} {self.unit} of {items}{when}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date,
            'items': list(self.items),
            'quantity': self.quantity,
            'unit': self.unit,
        }


@dataclass
class Supplier:
    """
    A donor or vendor that can be asked for food.

    ``donation_history`` is most-recent-first; ``last_contact_date`` is
    None when the supplier has never been contacted.
    """
    supplier_id: str
    name: str
    email: Optional[str] = None
    supplier_type: Optional[str] = None
    preferred_categories: Tuple[str, ...] = ()
    last_contact_date: Optional[str] = None
    response_rate: float = 0.0
    donation_history: List[DonationRecord] = field(default_factory=list)

    @property
    def last_donation(self) -> Optional[DonationRecord]:
        return self.donation_history[0] if self.donation_history else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'supplier_id': self.supplier_id,
            'name': self.name,
            'email': self.email,
            'supplier_type': self.supplier_type,
            'preferred_categories': list(self.preferred_categories),
            'last_contact_date': self.last_contact_date,
            'response_rate': self.response_rate,
            'donation_history': [d.to_dict() for d in self.donation_history],
        }


@dataclass(frozen=True)
class CrisisState:
    """
    Current crisis configuration.

    When active, every category's demand is scaled by ``demand_multiplier``
    (always >= 1.0).
    """
    active: bool = False
    crisis_type: str = "none"
    description: str = ""
    severity: str = "low"
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    demand_multiplier: float = 1.0

    def __post_init__(self):
        # a crisis never lowers demand
        object.__setattr__(self, "demand_multiplier", max(1.0, float(self.demand_multiplier)))

    @property
    def effective_multiplier(self) -> float:
        return self.demand_multiplier if self.active else 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'active': self.active,
            'crisis_type': self.crisis_type,
            'description': self.description,
            'severity': self.severity,
            'start_date': self.start_date,
            'end_date': self.end_date,
            'demand_multiplier': self.demand_multiplier,
        }


NO_CRISIS = CrisisState()


@dataclass(frozen=True)
class DistributionRecord:
    """A historical hand-out to a household (read-only)"""
    distribution_id: str
    timestamp: Optional[str]
    recipient_name: str = ""
    household_size: int = 0
    items: Tuple[Dict[str, Any], ...] = ()


@dataclass
class Snapshot:
    """Normalized view of the data store at one moment"""
    inventory: List[InventoryItem]
    suppliers: List[Supplier]
    demand_profile: Optional[Dict[str, float]]
    crisis: CrisisState = NO_CRISIS
    distributions: List[DistributionRecord] = field(default_factory=list)
