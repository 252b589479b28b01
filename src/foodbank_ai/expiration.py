"""
Expiration Risk Scanner
=======================
Flag items nearing spoilage.

The outreach-oriented view returns items with 0 < days remaining <=
threshold. Items already past their best-by date belong to the disposal
workflow and are left out unless ``include_expired`` is set. Items with
no usable date carry the far-future sentinel and never appear.

Alert Levels (dashboard badges):
- CRITICAL: 1 day or less (including expired)
- URGENT: 2-3 days
- WATCH: 4-7 days
- OK: more than 7 days
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List

import pandas as pd

from .constants import EXPIRATION_ALERT_THRESHOLDS, FAR_FUTURE_DAYS
from .records import InventoryItem
from .temporal import days_until
from .utils.logger import get_logger

logger = get_logger(__name__)


class ExpirationAlert(Enum):
    """Badge level for days until expiration"""
    CRITICAL = "critical"
    URGENT = "urgent"
    WATCH = "watch"
    OK = "ok"


def expiration_alert_level(days: int) -> ExpirationAlert:
    """Map days until expiration to an alert level."""
    if days <= EXPIRATION_ALERT_THRESHOLDS['critical']:
        return ExpirationAlert.CRITICAL
    if days <= EXPIRATION_ALERT_THRESHOLDS['urgent']:
        return ExpirationAlert.URGENT
    if days <= EXPIRATION_ALERT_THRESHOLDS['watch']:
        return ExpirationAlert.WATCH
    return ExpirationAlert.OK


@dataclass(frozen=True)
class ExpiringItem:
    """An item together with its days until expiration"""
    item: InventoryItem
    days_until_expiration: int

    @property
    def alert(self) -> ExpirationAlert:
        return expiration_alert_level(self.days_until_expiration)

    def to_dict(self) -> Dict[str, Any]:
        record = self.item.to_dict()
        record['days_until_expiration'] = self.days_until_expiration
        record['alert'] = self.alert.value
        return record


class ExpirationRiskScanner:
    """
    Find items that will spoil soon.

    Usage
    -----
    >>> scanner = ExpirationRiskScanner(threshold_days=3)
    >>> expiring = scanner.scan(items, reference_date)
    """

    def __init__(self, threshold_days: int = 3, include_expired: bool = False):
        """
        Parameters
        ----------
        threshold_days : int
            Upper bound (inclusive) on days remaining
        include_expired : bool
            If True the lower bound is dropped and already-expired items
            are returned as well
        """
        self.threshold_days = threshold_days
        self.include_expired = include_expired

    def scan(self, items: Iterable[InventoryItem], reference_date: Any) -> List[ExpiringItem]:
        """
        Items inside the expiration window, soonest first.

        Ties keep input order.
        """
        window: List[ExpiringItem] = []

        for item in items:
            if not item.is_active:
                continue
            days = days_until(item.best_by_date, reference_date)
            if days >= FAR_FUTURE_DAYS or days > self.threshold_days:
                continue
            if days <= 0 and not self.include_expired:
                continue
            window.append(ExpiringItem(item=item, days_until_expiration=days))

        window.sort(key=lambda e: e.days_until_expiration)

        logger.info(
            f"{len(window)} items expiring within {self.threshold_days} days"
            f"{' (expired included)' if self.include_expired else ''}"
        )
        return window


def expiring_items(
    items: Iterable[InventoryItem],
    reference_date: Any,
    threshold: int = 3,
    include_expired: bool = False
) -> List[ExpiringItem]:
    """Functional shortcut for ExpirationRiskScanner.scan()."""
    return ExpirationRiskScanner(threshold, include_expired).scan(items, reference_date)


def count_expiring(
    items: Iterable[InventoryItem],
    reference_date: Any,
    threshold: int = 3
) -> int:
    """
    Dashboard "expiring" metric: active items with days remaining <=
    threshold, already-expired items included.
    """
    return sum(
        1 for item in items
        if item.is_active and days_until(item.best_by_date, reference_date) <= threshold
    )


def expiring_items_to_dataframe(expiring: List[ExpiringItem]) -> pd.DataFrame:
    """Convert expiring items to a DataFrame for reporting."""
    if len(expiring) == 0:
        return pd.DataFrame()

    columns = ['item_id', 'name', 'category', 'quantity', 'unit',
               'best_by_date', 'days_until_expiration', 'alert']
    df = pd.DataFrame([e.to_dict() for e in expiring])
    return df[columns].reset_index(drop=True)
