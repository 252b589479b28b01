"""
FoodBank AI - Command Line Runner
=================================
Runs the decision engine over a JSON snapshot of the data store and
writes report files.

Usage:
    python -m foodbank_ai.main --snapshot data.json --reference-date 2026-02-01
    python -m foodbank_ai.main --snapshot data.json --scenario winter_storm --generate-emails

Snapshot layout:
    {
      "inventory": {...} or [...],
      "suppliers": {...} or [...],
      "analytics": {"averageDailyDemand": {...}, "currentCrisis": {...}},
      "distributions": {...} or [...]
    }
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .composer import outreach_results_to_dataframe
from .config import Config
from .constants import SAMPLE_HEADLINES
from .engine import FoodBankEngine, WorkflowResult
from .expiration import expiring_items_to_dataframe
from .priority import priority_items_to_dataframe
from .supply_gap import supply_gaps_to_dataframe
from .utils.logger import get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="foodbank-ai",
        description="Inventory analytics and supplier outreach for a food bank",
    )
    parser.add_argument("--snapshot", required=True, help="Path to a JSON data-store snapshot")
    parser.add_argument("--reference-date", default=None,
                        help="Date treated as today (YYYY-MM-DD); defaults to the current date")
    parser.add_argument("--scenario", default=None, choices=sorted(SAMPLE_HEADLINES),
                        help="Sample headline set for crisis classification")
    parser.add_argument("--generate-emails", action="store_true",
                        help="Generate outreach emails with the configured chat model")
    parser.add_argument("--output-dir", default=None, help="Directory for report files")
    return parser


def _build_engine(args: argparse.Namespace, config: Config) -> FoodBankEngine:
    text_generator = None
    crisis_classifier = None

    if args.generate_emails or args.scenario:
        if not config.llm.api_key:
            logger.warning("No LLM API key configured; email generation and crisis classification disabled")
        else:
            from .text_generation import ChatCrisisClassifier, ChatOutreachWriter

            if args.generate_emails:
                text_generator = ChatOutreachWriter(config)
            if args.scenario:
                crisis_classifier = ChatCrisisClassifier(config)

    return FoodBankEngine(
        config=config,
        text_generator=text_generator,
        crisis_classifier=crisis_classifier,
        reference_date=args.reference_date,
    )


def write_reports(result: WorkflowResult, output_dir: Path) -> List[Path]:
    """Write the workflow result as JSON plus CSV tables."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []

    summary_file = output_dir / "workflow_result.json"
    with open(summary_file, 'w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, indent=2, default=str)
    written.append(summary_file)

    tables = {
        "supply_gaps.csv": supply_gaps_to_dataframe(result.analysis.supply_gaps),
        "expiring_items.csv": expiring_items_to_dataframe(result.analysis.expiring_items),
        "priority_items.csv": priority_items_to_dataframe(result.priority_items),
        "outreach_emails.csv": outreach_results_to_dataframe(result.outreach),
    }
    for filename, df in tables.items():
        if len(df) > 0:
            path = output_dir / filename
            df.to_csv(path, index=False)
            written.append(path)

    return written


def print_summary(result: WorkflowResult) -> None:
    print("\n" + "=" * 80)
    print("INVENTORY ANALYSIS")
    print("=" * 80)
    for record in result.analysis.supply_gaps.values():
        print(f"  {record.category:<12} {record.reported_days_of_supply:>6.1f} days  {record.status.value}")
    print(f"\n  Active items: {result.analysis.total_items}")
    print(f"  Expiring within window: {result.analysis.expiring_count}")

    print("\n" + "=" * 80)
    print("CRISIS")
    print("=" * 80)
    if result.crisis.is_crisis:
        print(f"  {result.crisis.event_type} ({result.crisis.severity}), "
              f"demand x{result.crisis.demand_multiplier:g}")
    else:
        print("  No crisis detected")

    print("\n" + "=" * 80)
    print("TOP PRIORITY ITEMS")
    print("=" * 80)
    for rank, item in enumerate(result.priority_items, start=1):
        print(f"  {rank}. {item.item.name:<30} {item.priority:>5.1f}")

    print("\n" + "=" * 80)
    print("OUTREACH")
    print("=" * 80)
    if result.target_category is None:
        print("  No critical categories")
    elif not result.outreach:
        print(f"  Target category: {result.target_category} (emails not generated)")
    else:
        print(f"  Target category: {result.target_category}")
        for email in result.outreach:
            marker = "" if email.generated else "  [placeholder]"
            print(f"  -> {email.supplier_name} ({email.lead_tier.value}): {email.subject}{marker}")


def main(argv: Optional[List[str]] = None) -> int:
    """Execute the workflow from the command line."""
    args = build_parser().parse_args(argv)

    config = Config()
    if args.output_dir:
        config.output_path = Path(args.output_dir)

    print("=" * 80)
    print("FOODBANK AI - INVENTORY ANALYTICS & OUTREACH")
    print("=" * 80)
    print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    snapshot_path = Path(args.snapshot)
    try:
        with open(snapshot_path, encoding='utf-8') as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read snapshot {snapshot_path}: {e}")
        return 2

    try:
        engine = _build_engine(args, config)
        result = engine.run_full_workflow(
            raw, scenario=args.scenario, generate_emails=args.generate_emails
        )
    except ValueError as e:
        logger.error(str(e))
        return 1

    print_summary(result)

    written = write_reports(result, config.output_path)
    print(f"\nOutput Directory: {config.output_path}")
    for path in written:
        print(f"  - {path.name}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
