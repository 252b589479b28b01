"""
Supply Gap Analyzer
===================
Aggregate inventory by category and measure how many days it will last.

Days of Supply:
    days_of_supply = total quantity / effective daily demand
    effective daily demand = baseline demand x crisis multiplier (if active)

Status Bands:
- CRITICAL: fewer than 3 days of supply
- LOW: fewer than 5 days of supply
- OK: 5 days or more

Scarcity by default: a category with no inventory, or with zero
effective demand, reports 0 days of supply and CRITICAL status. Missing
data is never mistaken for sufficiency.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from .config import Config, DEFAULT_CONFIG
from .records import CrisisState, InventoryItem, NO_CRISIS
from .utils.logger import get_logger

logger = get_logger(__name__)


class SupplyStatus(Enum):
    """Days-of-supply classification"""
    CRITICAL = "CRITICAL"
    LOW = "LOW"
    OK = "OK"


def days_of_supply(quantity: float, daily_demand: float) -> float:
    """Quantity divided by daily demand; 0 when demand is not positive."""
    if daily_demand <= 0:
        return 0.0
    return quantity / daily_demand


def classify_supply_status(
    days: float,
    critical_days: float = 3.0,
    low_days: float = 5.0
) -> SupplyStatus:
    """Map days of supply to exactly one status band."""
    if days < critical_days:
        return SupplyStatus.CRITICAL
    if days < low_days:
        return SupplyStatus.LOW
    return SupplyStatus.OK


@dataclass(frozen=True)
class SupplyGapRecord:
    """
    Supply position of one category.

    Attributes
    ----------
    category : str
        Food category
    total_quantity : float
        Units on hand across active items
    baseline_daily_demand : float
        Demand from the profile (or fallback rate)
    effective_daily_demand : float
        Baseline scaled by the active crisis multiplier
    days_of_supply : float
        Full precision; use ``reported_days_of_supply`` for display
    status : SupplyStatus
        CRITICAL / LOW / OK
    item_count : int
        Number of items contributing
    """
    category: str
    total_quantity: float
    baseline_daily_demand: float
    effective_daily_demand: float
    days_of_supply: float
    status: SupplyStatus
    item_count: int

    @property
    def reported_days_of_supply(self) -> float:
        return round(self.days_of_supply, 1)

    @property
    def gap_percentage(self) -> float:
        """How far below the 3-day floor the category sits, 0-100."""
        gap = (3.0 - self.days_of_supply) / 3.0 * 100
        return min(100.0, max(0.0, gap))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'category': self.category,
            'total_quantity': round(self.total_quantity, 1),
            'baseline_daily_demand': self.baseline_daily_demand,
            'effective_daily_demand': self.effective_daily_demand,
            'days_of_supply': self.reported_days_of_supply,
            'status': self.status.value,
            'item_count': self.item_count,
            'gap_percentage': round(self.gap_percentage, 1),
        }


class SupplyGapAnalyzer:
    """
    Compute per-category supply gaps.

    Usage
    -----
    >>> analyzer = SupplyGapAnalyzer()
    >>> gaps = analyzer.analyze(items, {'protein': 5}, crisis)
    >>> gaps['protein'].status
    <SupplyStatus.CRITICAL: 'CRITICAL'>
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or DEFAULT_CONFIG

    def analyze(
        self,
        items: Sequence[InventoryItem],
        demand_profile: Optional[Dict[str, float]] = None,
        crisis: Optional[CrisisState] = None
    ) -> Dict[str, SupplyGapRecord]:
        """
        Build one SupplyGapRecord per category.

        Every category in the demand profile is reported, in profile
        order, even with no stock. Stocked categories that the profile
        does not list follow in name order and use the fallback rate.
        Deleted items and items without a category are ignored.

        Parameters
        ----------
        items : Sequence[InventoryItem]
            Canonical inventory items
        demand_profile : dict, optional
            Category -> baseline daily demand. Defaults to the built-in rates.
        crisis : CrisisState, optional
            Active crisis scales every category's demand uniformly

        Returns
        -------
        Dict[str, SupplyGapRecord]
            Records keyed by category
        """
        profile = demand_profile if demand_profile is not None else self.config.analysis.default_daily_demand
        multiplier = (crisis or NO_CRISIS).effective_multiplier

        totals = self._aggregate(items)

        categories = list(profile.keys())
        extras = sorted(c for c in totals.index if c not in profile)
        categories.extend(extras)

        records: Dict[str, SupplyGapRecord] = {}
        for category in categories:
            baseline = self.config.demand_for(category, profile)
            effective = baseline * multiplier

            if category in totals.index:
                quantity = float(totals.loc[category, 'total_quantity'])
                count = int(totals.loc[category, 'item_count'])
            else:
                quantity, count = 0.0, 0

            days = days_of_supply(quantity, effective)
            records[category] = SupplyGapRecord(
                category=category,
                total_quantity=quantity,
                baseline_daily_demand=baseline,
                effective_daily_demand=effective,
                days_of_supply=days,
                status=classify_supply_status(
                    days,
                    self.config.analysis.critical_days,
                    self.config.analysis.low_days
                ),
                item_count=count,
            )

        critical = sum(1 for r in records.values() if r.status == SupplyStatus.CRITICAL)
        logger.info(
            f"Supply gaps computed for {len(records)} categories "
            f"({critical} CRITICAL, crisis multiplier {multiplier:g})"
        )
        if extras:
            logger.warning(f"Categories missing from demand profile use fallback rate: {extras}")

        return records

    def _aggregate(self, items: Iterable[InventoryItem]) -> pd.DataFrame:
        """Sum quantity and count items per category."""
        rows = [
            {'category': item.category, 'quantity': item.quantity}
            for item in items
            if item.is_active and item.category is not None
        ]
        if not rows:
            return pd.DataFrame(columns=['total_quantity', 'item_count'])

        df = pd.DataFrame(rows)
        return df.groupby('category').agg(
            total_quantity=('quantity', 'sum'),
            item_count=('quantity', 'size'),
        )


def critical_categories(
    records: Union[Dict[str, SupplyGapRecord], Iterable[SupplyGapRecord]],
    threshold: float = 3.0
) -> List[SupplyGapRecord]:
    """
    Categories below ``threshold`` days of supply, most urgent first.

    Sorted by full-precision days of supply, ties broken by category
    name, so the order is total and re-applying the filter is a no-op.
    """
    values = records.values() if isinstance(records, dict) else records
    below = [r for r in values if r.days_of_supply < threshold]
    return sorted(below, key=lambda r: (r.days_of_supply, r.category))


@dataclass
class CategoryDistribution:
    """Share of total inventory weight held by each category"""
    shares: Dict[str, float] = field(default_factory=dict)
    total_weight: float = 0.0
    imbalanced: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'shares': self.shares,
            'total_weight': round(self.total_weight, 1),
            'imbalanced': self.imbalanced,
        }


def category_distribution(
    items: Iterable[InventoryItem],
    categories: Iterable[str],
    imbalance_share_pct: float = 15.0
) -> CategoryDistribution:
    """
    Percentage of total weight per category (one decimal).

    The pantry is flagged imbalanced when any listed category holds less
    than ``imbalance_share_pct`` of the weight.
    """
    active = [i for i in items if i.is_active]
    total_weight = sum(i.weight for i in active)

    shares: Dict[str, float] = {}
    for category in categories:
        weight = sum(i.weight for i in active if i.category == category)
        share = weight / total_weight * 100 if total_weight > 0 else 0.0
        shares[category] = round(share, 1)

    return CategoryDistribution(
        shares=shares,
        total_weight=total_weight,
        imbalanced=any(share < imbalance_share_pct for share in shares.values()),
    )


def supply_gaps_to_dataframe(
    records: Union[Dict[str, SupplyGapRecord], Iterable[SupplyGapRecord]]
) -> pd.DataFrame:
    """
    Convert supply gap records to a DataFrame for reporting.

    Sorted most urgent first.
    """
    values = list(records.values() if isinstance(records, dict) else records)
    if len(values) == 0:
        return pd.DataFrame()

    df = pd.DataFrame([r.to_dict() for r in values])
    df['_days'] = [r.days_of_supply for r in values]
    df = df.sort_values(['_days', 'category'], kind='mergesort').drop(columns=['_days'])
    return df.reset_index(drop=True)
