"""
Crisis Context
==============
Shape of the crisis signal consumed from the upstream classifier, and
resolution of the signal used for a workflow run.

Resolution order:
1. An active crisis stored in the analytics record wins
2. Otherwise the optional classifier is asked (e.g. news headlines)
3. A failing classifier resolves to the no-crisis signal

Only ``is_crisis`` and ``demand_multiplier`` feed the numbers; event
type, severity and reasoning are carried through for the outreach brief.
"""

from typing import Any, Callable, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from .records import CrisisState
from .utils.logger import get_logger

logger = get_logger(__name__)


class CrisisSignal(BaseModel):
    """Crisis classification: accepts snake_case or camelCase keys."""

    is_crisis: bool = Field(
        default=False, validation_alias=AliasChoices("is_crisis", "isCrisis")
    )
    event_type: str = Field(
        default="none", validation_alias=AliasChoices("event_type", "eventType")
    )
    severity: str = "low"
    demand_multiplier: float = Field(
        default=1.0,
        validation_alias=AliasChoices("demand_multiplier", "demandMultiplier"),
    )
    reasoning: str = ""

    @field_validator("demand_multiplier", mode="before")
    @classmethod
    def _at_least_one(cls, value: Any) -> float:
        if value is None or value == "":
            return 1.0
        return max(1.0, float(value))

    def to_crisis_state(self) -> CrisisState:
        """Crisis state used to scale demand."""
        if not self.is_crisis:
            return CrisisState(description=self.reasoning)
        return CrisisState(
            active=True,
            crisis_type=self.event_type,
            description=self.reasoning,
            severity=self.severity,
            demand_multiplier=self.demand_multiplier,
        )


NO_CRISIS_SIGNAL = CrisisSignal(reasoning="No crisis detected")

CrisisClassifier = Callable[[List[Dict[str, str]]], Any]


def signal_from_state(state: CrisisState) -> CrisisSignal:
    """Express a stored crisis state as a signal."""
    if not state.active:
        return NO_CRISIS_SIGNAL
    return CrisisSignal(
        is_crisis=True,
        event_type=state.crisis_type or "unknown",
        severity=state.severity or "medium",
        demand_multiplier=state.demand_multiplier,
        reasoning=state.description or "Active crisis detected in database",
    )


def resolve_crisis(
    state: Optional[CrisisState] = None,
    classifier: Optional[CrisisClassifier] = None,
    headlines: Optional[List[Dict[str, str]]] = None
) -> CrisisSignal:
    """
    Decide which crisis signal applies to this run.

    Parameters
    ----------
    state : CrisisState, optional
        Stored crisis; used directly when active
    classifier : callable, optional
        Takes a list of ``{title, snippet}`` headlines and returns a
        CrisisSignal or a mapping with the signal's fields
    headlines : list, optional
        Passed to the classifier

    Returns
    -------
    CrisisSignal
        Never raises for classifier failures
    """
    if state is not None and state.active:
        logger.info(
            f"Using stored crisis: {state.crisis_type} (x{state.demand_multiplier:g})"
        )
        return signal_from_state(state)

    if classifier is None or not headlines:
        return NO_CRISIS_SIGNAL

    try:
        reply = classifier(headlines)
        signal = reply if isinstance(reply, CrisisSignal) else CrisisSignal.model_validate(reply)
    except Exception as e:
        logger.warning(f"Crisis classification failed, assuming no crisis: {e}")
        return CrisisSignal(reasoning="Error analyzing news")

    logger.info(
        f"Classifier crisis signal: is_crisis={signal.is_crisis}, "
        f"type={signal.event_type}, multiplier={signal.demand_multiplier:g}"
    )
    return signal
