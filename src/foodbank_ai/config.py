"""
FoodBank AI - Configuration Module
===================================

Centralized configuration for the analytics and outreach engine.
Thresholds come from constants; text-generation settings come from
the environment (a local .env file is honoured).
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, Optional

from dotenv import load_dotenv

from .constants import (
    DEFAULT_DAILY_DEMAND,
    FALLBACK_DAILY_DEMAND,
    SUPPLY_STATUS_THRESHOLDS,
    LEAD_TIER_THRESHOLDS,
    IMBALANCE_SHARE_PCT,
)

load_dotenv()


def _int_env(key: str, default: int) -> int:
    val = os.environ.get(key)
    if val is None or val == "":
        return default
    try:
        return max(1, int(val))
    except ValueError:
        return default


def _float_env(key: str, default: float) -> float:
    val = os.environ.get(key)
    if val is None or val == "":
        return default
    try:
        return max(0.0, float(val))
    except ValueError:
        return default


@dataclass
class AnalysisConfig:
    """Thresholds for supply gaps, expiration and prioritisation"""
    default_daily_demand: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_DAILY_DEMAND)
    )
    fallback_daily_demand: float = FALLBACK_DAILY_DEMAND

    # Days-of-supply status bands
    critical_days: float = SUPPLY_STATUS_THRESHOLDS['critical']
    low_days: float = SUPPLY_STATUS_THRESHOLDS['low']

    # Expiration window for the outreach view
    expiring_threshold_days: int = 3

    # Priority ranking
    top_n_priority: int = 5
    high_priority_score: float = 80.0

    imbalance_share_pct: float = IMBALANCE_SHARE_PCT


@dataclass
class OutreachConfig:
    """Supplier segmentation and batch settings"""
    hot_days: int = LEAD_TIER_THRESHOLDS['hot']
    warm_days: int = LEAD_TIER_THRESHOLDS['warm']

    max_suppliers: int = field(default_factory=lambda: _int_env("FOODBANK_MAX_SUPPLIERS", 5))

    organization_name: str = field(
        default_factory=lambda: os.environ.get(
            "FOODBANK_ORGANIZATION", "South Bend Community Food Bank"
        )
    )


@dataclass
class LLMConfig:
    """Chat model settings for the text-generation adapter"""
    model: str = field(
        default_factory=lambda: os.environ.get("FOODBANK_LLM_MODEL", "gpt-4o-mini")
    )
    api_key: Optional[str] = field(
        default_factory=lambda: os.environ.get("FOODBANK_LLM_API_KEY")
        or os.environ.get("OPENAI_API_KEY")
    )
    base_url: Optional[str] = field(
        default_factory=lambda: os.environ.get("FOODBANK_LLM_BASE_URL") or None
    )
    outreach_temperature: float = 0.4
    crisis_temperature: float = 0.1
    timeout_seconds: float = field(
        default_factory=lambda: _float_env("FOODBANK_LLM_TIMEOUT", 60.0)
    )
    max_tokens: int = 1024


@dataclass
class Config:
    """
    Master configuration for FoodBank AI

    Usage:
        config = Config()
        config.outreach.max_suppliers = 3
    """

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    outreach: OutreachConfig = field(default_factory=OutreachConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)

    output_path: Path = field(default_factory=lambda: Path.cwd() / 'outputs')

    def __post_init__(self):
        if isinstance(self.output_path, str):
            self.output_path = Path(self.output_path)

    def demand_for(self, category: Optional[str], profile: Dict[str, float]) -> float:
        """Baseline daily demand for a category, with fallback to the default rate"""
        if category is not None and category in profile:
            return profile[category]
        return self.analysis.fallback_daily_demand


# Default configuration instance
DEFAULT_CONFIG = Config()
