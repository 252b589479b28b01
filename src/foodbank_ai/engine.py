"""
FoodBank AI - Decision Engine
=============================

Service surface handed to the routing layer. Every request is answered
by recomputing from the supplied records; nothing is cached between
calls.

Operations:
- analyze_inventory: supply gaps, critical categories, expiring items
- rank_priority_items: per-item urgency ranking
- segment_suppliers: hot / warm / cold leads
- generate_outreach: outreach emails for one category
- run_full_workflow: analysis + crisis resolution + outreach for the
  most critical category
- recent_distributions: latest hand-outs for the dashboard

Raw data-store records (maps or lists, legacy field spellings) are
normalized here, at the boundary. Missing inventory or supplier
collections raise MissingDataError.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Union

from .composer import OutreachComposer, OutreachResult, TextGenerator
from .config import Config, DEFAULT_CONFIG
from .constants import SAMPLE_HEADLINES
from .crisis import CrisisClassifier, CrisisSignal, resolve_crisis
from .expiration import ExpiringItem, count_expiring, expiring_items
from .normalization import (
    ValidationResult,
    active_items,
    normalize_crisis,
    normalize_demand_profile,
    normalize_distributions,
    normalize_inventory,
    normalize_snapshot,
    normalize_suppliers,
)
from .priority import PriorityItem, PriorityScorer
from .records import CrisisState, DistributionRecord, InventoryItem, Snapshot
from .segmentation import SupplierLead, SupplierSegmenter
from .supply_gap import (
    CategoryDistribution,
    SupplyGapAnalyzer,
    SupplyGapRecord,
    category_distribution,
    classify_supply_status,
    critical_categories,
    days_of_supply as compute_days_of_supply,
)
from .temporal import as_reference_date, parse_date, to_iso_date
from .utils.logger import LogContext, get_logger

logger = get_logger(__name__)

CrisisInput = Union[CrisisState, CrisisSignal, Mapping, None]


@dataclass
class InventoryAnalysis:
    """Result of analyze_inventory()"""
    supply_gaps: Dict[str, SupplyGapRecord]
    critical_categories: List[SupplyGapRecord]
    expiring_items: List[ExpiringItem]
    active_items: List[InventoryItem]
    expiring_count: int = 0
    category_distribution: CategoryDistribution = field(default_factory=CategoryDistribution)
    crisis: CrisisState = field(default_factory=CrisisState)

    @property
    def total_items(self) -> int:
        return len(self.active_items)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'supply_gaps': {c: r.to_dict() for c, r in self.supply_gaps.items()},
            'critical_categories': [r.to_dict() for r in self.critical_categories],
            'expiring_items': [e.to_dict() for e in self.expiring_items],
            'total_items': self.total_items,
            'expiring_count': self.expiring_count,
            'category_distribution': self.category_distribution.to_dict(),
            'crisis': self.crisis.to_dict(),
        }


@dataclass
class WorkflowResult:
    """Result of run_full_workflow()"""
    analysis: InventoryAnalysis
    crisis: CrisisSignal
    priority_items: List[PriorityItem]
    supplier_segments: Dict[str, List[SupplierLead]]
    target_category: Optional[str] = None
    outreach: List[OutreachResult] = field(default_factory=list)
    recent_distributions: List[DistributionRecord] = field(default_factory=list)
    validation: ValidationResult = field(default_factory=ValidationResult)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'analysis': self.analysis.to_dict(),
            'crisis': self.crisis.model_dump(),
            'priority_items': [p.to_dict() for p in self.priority_items],
            'supplier_segments': {
                tier: [lead.to_dict() for lead in leads]
                for tier, leads in self.supplier_segments.items()
            },
            'target_category': self.target_category,
            'emails': [r.to_dict() for r in self.outreach],
            'email_count': len(self.outreach),
            'recent_distributions': [
                {
                    'distribution_id': d.distribution_id,
                    'timestamp': d.timestamp,
                    'recipient_name': d.recipient_name,
                    'household_size': d.household_size,
                    'items': list(d.items),
                }
                for d in self.recent_distributions
            ],
            'validation': self.validation.to_dict(),
        }


class FoodBankEngine:
    """
    Main entry point for food-bank analytics and outreach.

    Usage
    -----
    >>> engine = FoodBankEngine(reference_date="2026-02-01")
    >>> analysis = engine.analyze_inventory(inventory, {'protein': 80})
    >>> analysis.critical_categories[0].category
    'protein'
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        text_generator: Optional[TextGenerator] = None,
        crisis_classifier: Optional[CrisisClassifier] = None,
        reference_date: Any = None
    ):
        """
        Parameters
        ----------
        config : Config, optional
            Thresholds and outreach settings
        text_generator : callable, optional
            Outreach capability; required only by generate_outreach()
        crisis_classifier : callable, optional
            Headline classifier consulted when no stored crisis is active
        reference_date : date-like, optional
            "Today" for every day count. Defaults to the current date.
        """
        self.config = config or DEFAULT_CONFIG
        self.text_generator = text_generator
        self.crisis_classifier = crisis_classifier
        self.reference_date = as_reference_date(reference_date)

        self.gap_analyzer = SupplyGapAnalyzer(self.config)
        self.priority_scorer = PriorityScorer(self.config)
        self.segmenter = SupplierSegmenter(self.config)

        logger.info(f"FoodBankEngine ready (reference date {to_iso_date(self.reference_date)})")

    # =========================================================================
    # BOUNDARY HELPERS
    # =========================================================================

    @staticmethod
    def _crisis_state(crisis: CrisisInput, result: Optional[ValidationResult] = None) -> CrisisState:
        if isinstance(crisis, CrisisSignal):
            return crisis.to_crisis_state()
        return normalize_crisis(crisis, result)

    @staticmethod
    def _profile(demand_profile: Optional[Mapping]) -> Optional[Dict[str, float]]:
        return normalize_demand_profile(demand_profile) if demand_profile is not None else None

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def analyze_inventory(
        self,
        inventory: Any,
        demand_profile: Optional[Mapping] = None,
        crisis: CrisisInput = None
    ) -> InventoryAnalysis:
        """
        Supply gaps, critical categories and expiring items.

        Parameters
        ----------
        inventory : map or list
            Raw or canonical inventory records
        demand_profile : dict, optional
            Category -> baseline daily demand; built-in rates when omitted
        crisis : CrisisState, CrisisSignal or dict, optional
            Active crisis scales demand

        Raises
        ------
        MissingDataError
            If inventory is None
        """
        items = active_items(normalize_inventory(inventory))
        profile = self._profile(demand_profile)
        crisis_state = self._crisis_state(crisis)
        analysis_cfg = self.config.analysis

        gaps = self.gap_analyzer.analyze(items, profile, crisis_state)
        categories = list(gaps.keys())

        analysis = InventoryAnalysis(
            supply_gaps=gaps,
            critical_categories=critical_categories(gaps, analysis_cfg.critical_days),
            expiring_items=expiring_items(
                items, self.reference_date, analysis_cfg.expiring_threshold_days
            ),
            active_items=items,
            expiring_count=count_expiring(
                items, self.reference_date, analysis_cfg.expiring_threshold_days
            ),
            category_distribution=category_distribution(
                items, categories, analysis_cfg.imbalance_share_pct
            ),
            crisis=crisis_state,
        )

        logger.info(
            f"Inventory analysis: {analysis.total_items} items, "
            f"{len(analysis.critical_categories)} critical categories, "
            f"{len(analysis.expiring_items)} expiring soon"
        )
        return analysis

    def rank_priority_items(
        self,
        inventory: Any,
        demand_profile: Optional[Mapping] = None,
        crisis: CrisisInput = None,
        top_n: Optional[int] = None
    ) -> List[PriorityItem]:
        """
        Items ranked by distribution urgency, highest first.

        ``top_n`` limits the list; the full ranking is returned otherwise.
        """
        items = normalize_inventory(inventory)
        ranked = self.priority_scorer.rank(
            items, self._profile(demand_profile), self._crisis_state(crisis), self.reference_date
        )
        return ranked if top_n is None else self.priority_scorer.top(ranked, top_n)

    def segment_suppliers(self, suppliers: Any) -> Dict[str, List[SupplierLead]]:
        """
        Suppliers grouped into ``hot``/``warm``/``cold``.

        Raises
        ------
        MissingDataError
            If suppliers is None
        """
        return self.segmenter.segment(normalize_suppliers(suppliers), self.reference_date)

    def generate_outreach(
        self,
        category: str,
        days_of_supply: Optional[float],
        inventory: Any,
        suppliers: Any,
        crisis: CrisisInput = None,
        demand_profile: Optional[Mapping] = None
    ) -> List[OutreachResult]:
        """
        Outreach emails for a target category.

        Parameters
        ----------
        category : str
            Category to request
        days_of_supply : float, optional
            Caller-reported days of supply. When given it replaces the
            computed figure and the status is reclassified from it.
        inventory, suppliers : map or list
            Raw or canonical records (both required)
        crisis : CrisisState, CrisisSignal or dict, optional
            Crisis context for the briefs
        demand_profile : dict, optional
            Category -> baseline daily demand

        Returns
        -------
        List[OutreachResult]
            At most ``max_suppliers`` results, HOT suppliers first

        Raises
        ------
        MissingDataError
            If inventory or suppliers is None
        ValueError
            If the category is blank or no text generator is configured
        """
        items = normalize_inventory(inventory)
        supplier_records = normalize_suppliers(suppliers)

        target = (category or '').strip().lower()
        if not target:
            raise ValueError("A target category is required for outreach")
        if self.text_generator is None:
            raise ValueError("No text generator configured for outreach")

        crisis_state = self._crisis_state(crisis)
        gap = self._gap_for(target, active_items(items), self._profile(demand_profile), crisis_state)
        if days_of_supply is not None:
            gap = replace(
                gap,
                days_of_supply=float(days_of_supply),
                status=classify_supply_status(
                    float(days_of_supply),
                    self.config.analysis.critical_days,
                    self.config.analysis.low_days
                ),
            )

        candidates = self.segmenter.suppliers_for_category(
            supplier_records, target, self.reference_date
        )
        composer = OutreachComposer(self.text_generator, self.config)
        return composer.compose(target, gap, candidates, crisis_state, items)

    def _gap_for(
        self,
        category: str,
        items: List[InventoryItem],
        profile: Optional[Dict[str, float]],
        crisis: CrisisState
    ) -> SupplyGapRecord:
        """Supply gap record for one category, even if it is neither stocked nor profiled."""
        gaps = self.gap_analyzer.analyze(items, profile, crisis)
        if category in gaps:
            return gaps[category]

        rates = profile if profile is not None else self.config.analysis.default_daily_demand
        baseline = self.config.demand_for(category, rates)
        effective = baseline * crisis.effective_multiplier
        days = compute_days_of_supply(0.0, effective)
        return SupplyGapRecord(
            category=category,
            total_quantity=0.0,
            baseline_daily_demand=baseline,
            effective_daily_demand=effective,
            days_of_supply=days,
            status=classify_supply_status(
                days, self.config.analysis.critical_days, self.config.analysis.low_days
            ),
            item_count=0,
        )

    def resolve_crisis(self, crisis: CrisisInput = None, scenario: Optional[str] = None) -> CrisisSignal:
        """
        Crisis signal for this run: stored active crisis first, then the
        headline classifier over the sample scenario (``normal`` by default).
        """
        headlines = SAMPLE_HEADLINES.get(scenario or 'normal', SAMPLE_HEADLINES['normal'])
        return resolve_crisis(self._crisis_state(crisis), self.crisis_classifier, headlines)

    def recent_distributions(
        self,
        distributions: Any,
        limit: int = 5
    ) -> List[DistributionRecord]:
        """Latest distributions by timestamp, newest first; undated records last."""
        def newest_first(record: DistributionRecord):
            ts = parse_date(record.timestamp)
            return (ts is None, -ts.value if ts is not None else 0)

        records = sorted(normalize_distributions(distributions), key=newest_first)
        return records[:max(0, limit)]

    def run_full_workflow(
        self,
        snapshot: Union[Snapshot, Mapping],
        scenario: Optional[str] = None,
        generate_emails: bool = True
    ) -> WorkflowResult:
        """
        End-to-end run over one data-store snapshot.

        1. Normalize the snapshot
        2. Analyze inventory with the stored crisis state
        3. Resolve the crisis signal (stored state, then classifier)
        4. Rank items and segment suppliers
        5. Generate outreach for the most critical category, if any

        Outreach is skipped (empty list) when ``generate_emails`` is False,
        when nothing is critical, or when no text generator is configured.

        Raises
        ------
        MissingDataError
            If the snapshot lacks inventory or suppliers
        """
        validation = ValidationResult()

        with LogContext(logger, "Full workflow"):
            if not isinstance(snapshot, Snapshot):
                snapshot = normalize_snapshot(snapshot, validation)

            analysis = self.analyze_inventory(
                snapshot.inventory, snapshot.demand_profile, snapshot.crisis
            )
            signal = self.resolve_crisis(snapshot.crisis, scenario)

            ranked = self.rank_priority_items(
                snapshot.inventory, snapshot.demand_profile, snapshot.crisis
            )
            segments = self.segment_suppliers(snapshot.suppliers)

            target = analysis.critical_categories[0] if analysis.critical_categories else None
            outreach: List[OutreachResult] = []

            if target is None:
                logger.info("No critical categories; outreach not needed")
            elif not generate_emails or self.text_generator is None:
                logger.info(f"Outreach for {target.category} skipped (email generation disabled)")
            else:
                outreach = self.generate_outreach(
                    target.category,
                    target.days_of_supply,
                    snapshot.inventory,
                    snapshot.suppliers,
                    signal,
                    snapshot.demand_profile,
                )

        return WorkflowResult(
            analysis=analysis,
            crisis=signal,
            priority_items=self.priority_scorer.top(ranked),
            supplier_segments=segments,
            target_category=target.category if target else None,
            outreach=outreach,
            recent_distributions=self.recent_distributions(snapshot.distributions),
            validation=validation,
        )
