"""
Supplier Segmentation
=====================
Classify suppliers into engagement tiers by contact recency.

Lead Tiers:
- HOT: contacted within the last 30 days
- WARM: 31-90 days since last contact
- COLD: more than 90 days, or never contacted

The tier is always recomputed from the last contact date and the
injected reference date; it is never stored on the supplier.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from .config import Config, DEFAULT_CONFIG
from .records import Supplier
from .temporal import days_since
from .utils.logger import get_logger

logger = get_logger(__name__)


class LeadTier(Enum):
    """Supplier engagement tier"""
    HOT = "hot"
    WARM = "warm"
    COLD = "cold"


TIER_ORDER = {LeadTier.HOT: 0, LeadTier.WARM: 1, LeadTier.COLD: 2}


def classify_lead(
    last_contact_date: Any,
    reference_date: Any,
    hot_days: int = 30,
    warm_days: int = 90
) -> LeadTier:
    """
    Tier for a supplier last contacted on ``last_contact_date``.

    Total over all inputs: a missing or unparseable date is COLD.

    Examples
    --------
    >>> classify_lead("2026-01-02", "2026-02-01")
    <LeadTier.HOT: 'hot'>
    >>> classify_lead(None, "2026-02-01")
    <LeadTier.COLD: 'cold'>
    """
    elapsed = days_since(last_contact_date, reference_date)
    if elapsed is None:
        return LeadTier.COLD
    if elapsed <= hot_days:
        return LeadTier.HOT
    if elapsed <= warm_days:
        return LeadTier.WARM
    return LeadTier.COLD


@dataclass(frozen=True)
class SupplierLead:
    """A supplier together with its current tier"""
    supplier: Supplier
    tier: LeadTier
    days_since_contact: Optional[int]

    def to_dict(self) -> Dict[str, Any]:
        record = self.supplier.to_dict()
        record['lead_tier'] = self.tier.value
        record['days_since_contact'] = self.days_since_contact
        return record


class SupplierSegmenter:
    """
    Segment suppliers and pick outreach candidates.

    Usage
    -----
    >>> segmenter = SupplierSegmenter()
    >>> candidates = segmenter.suppliers_for_category(suppliers, 'protein', today)
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or DEFAULT_CONFIG

    def lead(self, supplier: Supplier, reference_date: Any) -> SupplierLead:
        """Attach the current tier to a supplier."""
        return SupplierLead(
            supplier=supplier,
            tier=classify_lead(
                supplier.last_contact_date,
                reference_date,
                self.config.outreach.hot_days,
                self.config.outreach.warm_days
            ),
            days_since_contact=days_since(supplier.last_contact_date, reference_date),
        )

    def segment(
        self,
        suppliers: Iterable[Supplier],
        reference_date: Any
    ) -> Dict[str, List[SupplierLead]]:
        """
        Group suppliers into ``hot``/``warm``/``cold`` lists.

        Each list keeps input order.
        """
        segments: Dict[str, List[SupplierLead]] = {tier.value: [] for tier in LeadTier}
        for supplier in suppliers:
            lead = self.lead(supplier, reference_date)
            segments[lead.tier.value].append(lead)

        logger.info(
            f"Segmented suppliers: {len(segments['hot'])} hot, "
            f"{len(segments['warm'])} warm, {len(segments['cold'])} cold"
        )
        return segments

    def suppliers_for_category(
        self,
        suppliers: Iterable[Supplier],
        category: str,
        reference_date: Any
    ) -> List[SupplierLead]:
        """
        Candidates for a target category, HOT before WARM before COLD.

        A supplier qualifies when its preferred categories include
        ``category`` or when it lists no preference at all. Order within
        a tier follows input order.
        """
        target = category.strip().lower()
        qualifying = [
            self.lead(s, reference_date)
            for s in suppliers
            if not s.preferred_categories or target in s.preferred_categories
        ]
        candidates = sorted(qualifying, key=lambda lead: TIER_ORDER[lead.tier])

        logger.info(f"{len(candidates)} supplier candidates for {target}")
        return candidates


def segment_suppliers(
    suppliers: Iterable[Supplier],
    reference_date: Any,
    config: Optional[Config] = None
) -> Dict[str, List[SupplierLead]]:
    """Functional shortcut for SupplierSegmenter.segment()."""
    return SupplierSegmenter(config).segment(suppliers, reference_date)


def suppliers_for_category(
    suppliers: Iterable[Supplier],
    category: str,
    reference_date: Any,
    config: Optional[Config] = None
) -> List[SupplierLead]:
    """Functional shortcut for SupplierSegmenter.suppliers_for_category()."""
    return SupplierSegmenter(config).suppliers_for_category(suppliers, category, reference_date)
