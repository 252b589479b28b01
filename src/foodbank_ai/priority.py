"""
Priority Scorer
===============
Rank individual items by distribution urgency.

Scoring Logic:
    item_days = item quantity / baseline daily demand of its category
    priority  = clamp(100 - 10 x (item_days / crisis multiplier), 0, 100)

Lower days of supply means higher priority. The item's own quantity is
used as a local approximation of category scarcity; it is not the
aggregated SupplyGapRecord. Categories missing from the profile (or
items without a category) use the fallback demand rate, and zero demand
scores as maximal scarcity (100).

Ranking is descending by score and stable for equal scores, so the
same inputs always produce the same order.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .config import Config, DEFAULT_CONFIG
from .records import CrisisState, InventoryItem, NO_CRISIS
from .supply_gap import days_of_supply
from .temporal import days_until
from .utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PriorityItem:
    """An item with its urgency score"""
    item: InventoryItem
    priority: float
    item_days_of_supply: float
    daily_demand: float
    days_until_expiration: int

    def to_dict(self) -> Dict[str, Any]:
        record = self.item.to_dict()
        record.update({
            'priority': round(self.priority, 1),
            'item_days_of_supply': round(self.item_days_of_supply, 2),
            'daily_demand': self.daily_demand,
            'days_until_expiration': self.days_until_expiration,
        })
        return record


class PriorityScorer:
    """
    Score and rank active inventory items.

    Usage
    -----
    >>> scorer = PriorityScorer()
    >>> ranked = scorer.rank(items, {'protein': 80}, crisis, reference_date)
    >>> top = scorer.top(ranked)
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or DEFAULT_CONFIG

    def score(
        self,
        item: InventoryItem,
        demand_profile: Dict[str, float],
        crisis: Optional[CrisisState] = None
    ) -> float:
        """Priority score of one item, clamped to [0, 100]."""
        demand = self.config.demand_for(item.category, demand_profile)
        item_days = days_of_supply(item.quantity, demand)
        return self._clamped_score(item_days, (crisis or NO_CRISIS).effective_multiplier)

    @staticmethod
    def _clamped_score(item_days: float, multiplier: float) -> float:
        raw = 100.0 - 10.0 * (item_days / multiplier)
        return float(np.clip(raw, 0.0, 100.0))

    def rank(
        self,
        items: Sequence[InventoryItem],
        demand_profile: Optional[Dict[str, float]] = None,
        crisis: Optional[CrisisState] = None,
        reference_date: Any = None
    ) -> List[PriorityItem]:
        """
        Rank active items by descending priority.

        Parameters
        ----------
        items : Sequence[InventoryItem]
            Canonical items; deleted ones are skipped
        demand_profile : dict, optional
            Category -> baseline daily demand. Defaults to the built-in rates.
        crisis : CrisisState, optional
            Active crisis divides item days of supply by its multiplier
        reference_date : date-like, optional
            Used only to attach days-until-expiration for display

        Returns
        -------
        List[PriorityItem]
            Stable descending order
        """
        profile = demand_profile if demand_profile is not None else self.config.analysis.default_daily_demand
        multiplier = (crisis or NO_CRISIS).effective_multiplier

        scored: List[PriorityItem] = []
        for item in items:
            if not item.is_active:
                continue
            demand = self.config.demand_for(item.category, profile)
            item_days = days_of_supply(item.quantity, demand)
            scored.append(PriorityItem(
                item=item,
                priority=self._clamped_score(item_days, multiplier),
                item_days_of_supply=item_days,
                daily_demand=demand,
                days_until_expiration=days_until(item.best_by_date, reference_date),
            ))

        # sorted() is stable: equal scores keep input order
        ranked = sorted(scored, key=lambda p: -p.priority)

        logger.info(
            f"Ranked {len(ranked)} items "
            f"({self.high_priority_count(ranked)} above {self.config.analysis.high_priority_score:g})"
        )
        return ranked

    def top(self, ranked: List[PriorityItem], n: Optional[int] = None) -> List[PriorityItem]:
        """First ``n`` ranked items (default from config, 5)."""
        limit = self.config.analysis.top_n_priority if n is None else n
        return ranked[:max(0, limit)]

    def high_priority_count(
        self,
        ranked: List[PriorityItem],
        threshold: Optional[float] = None
    ) -> int:
        """Number of items scoring strictly above ``threshold`` (default 80)."""
        limit = self.config.analysis.high_priority_score if threshold is None else threshold
        return sum(1 for p in ranked if p.priority > limit)


def top_priority_items(
    items: Sequence[InventoryItem],
    demand_profile: Optional[Dict[str, float]] = None,
    crisis: Optional[CrisisState] = None,
    reference_date: Any = None,
    n: int = 5,
    config: Optional[Config] = None
) -> List[PriorityItem]:
    """Functional shortcut: rank items and keep the first ``n``."""
    scorer = PriorityScorer(config)
    return scorer.top(scorer.rank(items, demand_profile, crisis, reference_date), n)


def priority_items_to_dataframe(ranked: List[PriorityItem]) -> pd.DataFrame:
    """Convert a ranking to a DataFrame, keeping rank order."""
    if len(ranked) == 0:
        return pd.DataFrame()

    df = pd.DataFrame([p.to_dict() for p in ranked])
    df.insert(0, 'rank', range(1, len(df) + 1))
    return df
