"""
FoodBank AI - Inventory Analytics & Outreach Decisioning Engine
================================================================

Decision engine for a food bank: measures how long each food category
will last, flags items close to spoilage, ranks items for distribution
and prepares supplier outreach for the categories running short.

Modules:
- config: Configuration management
- normalization: Raw data-store records to canonical records
- supply_gap: Days of supply and status per category
- expiration: Items nearing their best-by date
- priority: Per-item distribution urgency
- segmentation: Hot / warm / cold supplier leads
- crisis: Crisis signal resolution
- composer: Outreach briefs and generated emails
- text_generation: Chat-model backed capabilities (optional)
- engine: Service facade

Usage:
    from foodbank_ai import FoodBankEngine

    engine = FoodBankEngine(reference_date="2026-02-01")
    analysis = engine.analyze_inventory(inventory, demand_profile)
"""

__version__ = "1.0.0"
__author__ = "FoodBank AI Team"

from .config import Config, DEFAULT_CONFIG
from .errors import MissingDataError
from .records import CrisisState, InventoryItem, Supplier, Snapshot
from .normalization import ValidationResult, normalize_snapshot
from .supply_gap import SupplyGapAnalyzer, SupplyGapRecord, SupplyStatus, critical_categories
from .expiration import ExpirationRiskScanner, expiring_items
from .priority import PriorityScorer
from .segmentation import LeadTier, SupplierSegmenter, classify_lead
from .crisis import CrisisSignal, resolve_crisis
from .composer import OutreachBrief, OutreachComposer, OutreachResult
from .engine import FoodBankEngine, InventoryAnalysis, WorkflowResult

__all__ = [
    'Config',
    'DEFAULT_CONFIG',
    'MissingDataError',
    'CrisisState',
    'InventoryItem',
    'Supplier',
    'Snapshot',
    'ValidationResult',
    'normalize_snapshot',
    'SupplyGapAnalyzer',
    'SupplyGapRecord',
    'SupplyStatus',
    'critical_categories',
    'ExpirationRiskScanner',
    'expiring_items',
    'PriorityScorer',
    'LeadTier',
    'SupplierSegmenter',
    'classify_lead',
    'CrisisSignal',
    'resolve_crisis',
    'OutreachBrief',
    'OutreachComposer',
    'OutreachResult',
    'FoodBankEngine',
    'InventoryAnalysis',
    'WorkflowResult',
]
