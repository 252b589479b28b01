"""
Outreach Content Composer
=========================
Prepare structured outreach briefs and collect generated emails.

The composer never writes prose itself. For each supplier candidate it
builds an immutable OutreachBrief (need, urgency, supplier history,
crisis context) and hands it to an injected text-generation capability:

    text_generator(brief) -> {"subject": str, "body": str}

Replies may also be an OutreachDraft model or raw text in the
"SUBJECT: ... / BODY: ..." layout. Anything that does not yield a
non-empty subject and body is replaced by placeholder strings.

Concurrency:
- Calls fan out on a thread pool, one per supplier
- Each call has a deadline measured from submission
- Output order always matches candidate order
- A failure or timeout only affects that supplier's result
"""

import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd
from pydantic import BaseModel

from .config import Config, DEFAULT_CONFIG
from .constants import BODY_PLACEHOLDER, SUBJECT_PLACEHOLDER
from .crisis import CrisisSignal
from .records import CrisisState, DonationRecord, InventoryItem
from .segmentation import LeadTier, SupplierLead
from .supply_gap import SupplyGapRecord, SupplyStatus
from .utils.logger import LogContext, Timer, get_logger, log_llm_call

logger = get_logger(__name__)


class UrgencyTier(Enum):
    """Tone of the outreach request"""
    URGENT = "urgent"
    IMPORTANT = "important"
    GENERAL = "general"


URGENCY_BY_STATUS = {
    SupplyStatus.CRITICAL: UrgencyTier.URGENT,
    SupplyStatus.LOW: UrgencyTier.IMPORTANT,
    SupplyStatus.OK: UrgencyTier.GENERAL,
}


class OutreachDraft(BaseModel):
    """Reply contract of the text-generation capability."""

    subject: str
    body: str


@dataclass(frozen=True)
class CrisisSummary:
    """Crisis snapshot carried in a brief"""
    event_type: str
    severity: str
    demand_multiplier: float
    demand_increase_pct: int
    description: str = ""

    @classmethod
    def from_state(cls, state: CrisisState) -> Optional['CrisisSummary']:
        if not state.active:
            return None
        return cls(
            event_type=state.crisis_type.replace('_', ' '),
            severity=state.severity,
            demand_multiplier=state.demand_multiplier,
            demand_increase_pct=int(round((state.demand_multiplier - 1) * 100)),
            description=state.description,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'event_type': self.event_type,
            'severity': self.severity,
            'demand_multiplier': self.demand_multiplier,
            'demand_increase_pct': self.demand_increase_pct,
            'description': self.description,
        }


@dataclass(frozen=True)
class OutreachBrief:
    """
    Language-agnostic summary of one outreach request.

    Attributes
    ----------
    supplier_id, supplier_name, supplier_email : str
        Who is being contacted
    lead_tier : LeadTier
        Relationship recency
    target_category : str
        Category being requested
    urgency : UrgencyTier
        Derived from the category's supply status
    days_of_supply : float
        Reported (one decimal) days of supply for the category
    specific_items : Tuple[str, ...]
        Item names on hand in the category (the category name if none)
    last_donation : DonationRecord, optional
        Most recent donation, if the supplier has one
    crisis : CrisisSummary, optional
        Present only when a crisis is active
    """
    supplier_id: str
    supplier_name: str
    supplier_email: Optional[str]
    supplier_type: Optional[str]
    lead_tier: LeadTier
    response_rate: float
    preferred_categories: Tuple[str, ...]
    target_category: str
    urgency: UrgencyTier
    status: SupplyStatus
    days_of_supply: float
    total_quantity: float
    baseline_daily_demand: float
    effective_daily_demand: float
    specific_items: Tuple[str, ...]
    last_donation: Optional[DonationRecord]
    crisis: Optional[CrisisSummary]
    organization_name: str

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data view used for prompt rendering and logs."""
        return {
            'supplier_id': self.supplier_id,
            'supplier_name': self.supplier_name,
            'supplier_email': self.supplier_email,
            'supplier_type': self.supplier_type,
            'lead_tier': self.lead_tier.value,
            'response_rate': self.response_rate,
            'preferred_categories': list(self.preferred_categories),
            'target_category': self.target_category,
            'urgency': self.urgency.value,
            'status': self.status.value,
            'days_of_supply': self.days_of_supply,
            'total_quantity': self.total_quantity,
            'baseline_daily_demand': self.baseline_daily_demand,
            'effective_daily_demand': self.effective_daily_demand,
            'specific_items': list(self.specific_items),
            'last_donation': self.last_donation.to_dict() if self.last_donation else None,
            'last_donation_summary': self.last_donation.describe() if self.last_donation else None,
            'crisis': self.crisis.to_dict() if self.crisis else None,
            'organization_name': self.organization_name,
        }


@dataclass
class OutreachResult:
    """Generated (or placeholder) email for one supplier"""
    supplier_id: str
    supplier_name: str
    supplier_email: Optional[str]
    lead_tier: LeadTier
    subject: str
    body: str
    generated: bool = True
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'supplier_id': self.supplier_id,
            'supplier_name': self.supplier_name,
            'supplier_email': self.supplier_email,
            'lead_status': self.lead_tier.value,
            'subject': self.subject,
            'body': self.body,
            'generated': self.generated,
            'error': self.error,
        }


TextGenerator = Callable[[OutreachBrief], Any]


def _parse_labelled_text(text: str) -> Tuple[str, str]:
    """Split a "SUBJECT: ...\\n\\nBODY:\\n..." reply."""
    lines = text.split('\n')
    subject = ''
    body_start = 0

    for i, line in enumerate(lines):
        if line.strip().upper().startswith('SUBJECT:'):
            subject = line.strip()[len('SUBJECT:'):].strip()
            body_start = i + 1
            break

    while body_start < len(lines) and lines[body_start].strip() in ('', 'BODY:'):
        body_start += 1

    body = '\n'.join(lines[body_start:]).strip()
    if body.upper().startswith('BODY:'):
        body = body[len('BODY:'):].strip()
    return subject, body


def parse_draft(reply: Any) -> Tuple[str, str, List[str]]:
    """
    Validate a text-generation reply.

    Returns
    -------
    Tuple[str, str, List[str]]
        (subject, body, validation errors). Missing parts are replaced by
        SUBJECT_PLACEHOLDER / BODY_PLACEHOLDER.
    """
    if isinstance(reply, BaseModel):
        reply = reply.model_dump()

    if isinstance(reply, Mapping):
        subject, body = reply.get('subject'), reply.get('body')
    elif isinstance(reply, str):
        subject, body = _parse_labelled_text(reply)
    else:
        subject, body = None, None

    errors: List[str] = []
    subject = subject.strip() if isinstance(subject, str) else ''
    body = body.strip() if isinstance(body, str) else ''

    if not subject:
        errors.append('missing subject')
        subject = SUBJECT_PLACEHOLDER
    if not body:
        errors.append('missing body')
        body = BODY_PLACEHOLDER

    return subject, body, errors


class OutreachComposer:
    """
    Build briefs and gather generated emails for a target category.

    Usage
    -----
    >>> composer = OutreachComposer(text_generator=writer)
    >>> results = composer.compose('protein', gaps['protein'], candidates, crisis)
    """

    def __init__(
        self,
        text_generator: TextGenerator,
        config: Optional[Config] = None,
        timeout_seconds: Optional[float] = None
    ):
        """
        Parameters
        ----------
        text_generator : callable
            Capability taking an OutreachBrief and returning a reply
        config : Config, optional
            Batch cap and organisation name
        timeout_seconds : float, optional
            Per-call deadline; defaults to config.llm.timeout_seconds
        """
        self.text_generator = text_generator
        self.config = config or DEFAULT_CONFIG
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else self.config.llm.timeout_seconds
        )

    def build_briefs(
        self,
        category: str,
        gap: SupplyGapRecord,
        candidates: List[SupplierLead],
        crisis: Union[CrisisState, CrisisSignal, None] = None,
        items: Iterable[InventoryItem] = ()
    ) -> List[OutreachBrief]:
        """One brief per candidate, capped at ``max_suppliers``, in candidate order."""
        crisis_state = crisis.to_crisis_state() if isinstance(crisis, CrisisSignal) else crisis
        crisis_summary = CrisisSummary.from_state(crisis_state) if crisis_state else None
        specific_items = self._specific_items(category, items)

        briefs = []
        for lead in candidates[:self.config.outreach.max_suppliers]:
            supplier = lead.supplier
            briefs.append(OutreachBrief(
                supplier_id=supplier.supplier_id,
                supplier_name=supplier.name,
                supplier_email=supplier.email,
                supplier_type=supplier.supplier_type,
                lead_tier=lead.tier,
                response_rate=supplier.response_rate,
                preferred_categories=supplier.preferred_categories,
                target_category=category,
                urgency=URGENCY_BY_STATUS[gap.status],
                status=gap.status,
                days_of_supply=gap.reported_days_of_supply,
                total_quantity=gap.total_quantity,
                baseline_daily_demand=gap.baseline_daily_demand,
                effective_daily_demand=gap.effective_daily_demand,
                specific_items=specific_items,
                last_donation=supplier.last_donation,
                crisis=crisis_summary,
                organization_name=self.config.outreach.organization_name,
            ))
        return briefs

    @staticmethod
    def _specific_items(category: str, items: Iterable[InventoryItem]) -> Tuple[str, ...]:
        names: List[str] = []
        for item in items:
            if item.is_active and item.category == category and item.name not in names:
                names.append(item.name)
        return tuple(names) if names else (category,)

    def compose(
        self,
        category: str,
        gap: SupplyGapRecord,
        candidates: List[SupplierLead],
        crisis: Union[CrisisState, CrisisSignal, None] = None,
        items: Iterable[InventoryItem] = ()
    ) -> List[OutreachResult]:
        """
        Generate outreach for the top candidates.

        Returns one result per brief, in candidate order. Never raises for
        capability failures.
        """
        briefs = self.build_briefs(category, gap, candidates, crisis, items)
        if not briefs:
            logger.info(f"No supplier candidates for {category}; nothing to compose")
            return []

        with LogContext(logger, f"Generating {len(briefs)} outreach emails for {category}"):
            results = self.dispatch(briefs)

        failed = sum(1 for r in results if not r.generated)
        if failed:
            logger.warning(f"{failed}/{len(results)} outreach emails fell back to placeholders")
        return results

    def dispatch(self, briefs: List[OutreachBrief]) -> List[OutreachResult]:
        """Run the capability for every brief concurrently; keep input order."""
        # one worker per brief: deadlines run from submission
        executor = ThreadPoolExecutor(max_workers=max(1, len(briefs)))
        results: List[OutreachResult] = []

        try:
            submitted = [
                (brief, executor.submit(self._generate, brief), time.monotonic())
                for brief in briefs
            ]
            for brief, future, started in submitted:
                remaining = max(0.0, started + self.timeout_seconds - time.monotonic())
                try:
                    results.append(future.result(timeout=remaining))
                except FuturesTimeoutError:
                    future.cancel()
                    results.append(self._fallback(
                        brief, f"timed out after {self.timeout_seconds:g}s"
                    ))
                except Exception as e:
                    results.append(self._fallback(brief, str(e) or type(e).__name__))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return results

    def _generate(self, brief: OutreachBrief) -> OutreachResult:
        """Single capability call; exceptions propagate to dispatch()."""
        with Timer() as timer:
            reply = self.text_generator(brief)

        subject, body, errors = parse_draft(reply)
        log_llm_call(
            module="outreach_composer",
            latency_ms=timer.elapsed_ms,
            supplier_id=brief.supplier_id,
            succeeded=not errors,
            validation_errors=errors,
        )
        if errors:
            logger.warning(
                f"Outreach reply for supplier {brief.supplier_id} incomplete: {', '.join(errors)}"
            )

        return OutreachResult(
            supplier_id=brief.supplier_id,
            supplier_name=brief.supplier_name,
            supplier_email=brief.supplier_email,
            lead_tier=brief.lead_tier,
            subject=subject,
            body=body,
            generated=not errors,
            error='; '.join(errors) if errors else None,
        )

    def _fallback(self, brief: OutreachBrief, reason: str) -> OutreachResult:
        logger.warning(f"Outreach generation failed for supplier {brief.supplier_id}: {reason}")
        log_llm_call(
            module="outreach_composer",
            supplier_id=brief.supplier_id,
            succeeded=False,
            validation_errors=[reason],
        )
        return OutreachResult(
            supplier_id=brief.supplier_id,
            supplier_name=brief.supplier_name,
            supplier_email=brief.supplier_email,
            lead_tier=brief.lead_tier,
            subject=SUBJECT_PLACEHOLDER,
            body=BODY_PLACEHOLDER,
            generated=False,
            error=reason,
        )


def outreach_results_to_dataframe(results: List[OutreachResult]) -> pd.DataFrame:
    """Convert outreach results to a DataFrame for export."""
    if len(results) == 0:
        return pd.DataFrame()
    return pd.DataFrame([r.to_dict() for r in results])
