#!/usr/bin/env python3
"""
Complete Pipeline Demo: raw answers → computed fields → generated tasks

Shows the full workflow:
1. Derive computed fields from raw assessment answers
2. Evaluate the example catalog with per-field traces
3. Run the orchestrator against in-memory adapters
"""

import asyncio
import logging
from datetime import date, datetime, timezone

from taskgen.clock import FixedClock
from taskgen.derived import derive_fields
from taskgen.evaluator import evaluate_with_trace
from taskgen.examples import build_example_catalog
from taskgen.logging_config import setup_logging
from taskgen.orchestrator import TaskGenerationOrchestrator
from taskgen.stores import InMemoryAssessmentRepository, InMemoryCatalogRepository, InMemoryTaskStore

RAW_ANSWERS = {
    "currentRentOrOwn": "Own",
    "newRentOrOwn": "Rent",
    "newDwellingType": "Condo",
    "anyPets": "No",
    "hireMovers": "Get me quotes",
    "hirePackers": "I'll pack myself",
    "fitnessWellness": ["Yoga", "Spa"],
    "financialInstitutions": ["Credit Union"],
    "childrenAges": ["Under 5", "5-12"],
}


def main():
    setup_logging(logging.INFO)
    clock = FixedClock(datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc))

    print("=" * 80)
    print("COMPLETE PIPELINE DEMO: answers → computed fields → tasks")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Computed fields
    # =========================================================================
    print("\n1. DERIVING COMPUTED FIELDS...")
    answers = derive_fields(
        RAW_ANSWERS,
        clock,
        distance_miles=412.0,
        from_state="CA",
        to_state="OR",
        move_date=date(2026, 4, 15),
    )
    for name in ("moveDistance", "isInterstate", "schoolAgeChildren", "childrenUnder5",
                 "hireMovers", "hirePackers", "daysUntilMove"):
        print(f"   ✓ {name}: {answers[name]!r}")

    # =========================================================================
    # STEP 2: Evaluate with traces
    # =========================================================================
    print("\n2. EVALUATING CATALOG...")
    catalog = build_example_catalog()
    for entry in catalog:
        outcome = evaluate_with_trace(entry.conditions, answers)
        marker = "✓" if outcome.matched else "✗"
        suffix = " (parent container, never generated)" if entry.is_parent_container else ""
        print(f"   {marker} {entry.id}{suffix}")
        for trace in outcome.trace:
            if not trace.matched:
                print(f"      {trace.field}: {trace.user_value!r} not in {list(trace.required_tokens or [])}")

    # =========================================================================
    # STEP 3: Orchestrated run
    # =========================================================================
    print("\n3. RUNNING ORCHESTRATOR...")
    store = InMemoryTaskStore()
    orchestrator = TaskGenerationOrchestrator(
        InMemoryCatalogRepository(catalog),
        InMemoryAssessmentRepository({"demo-user": answers}),
        store,
        clock=clock,
    )
    result = asyncio.run(orchestrator.run("demo-user"))
    if result.ok:
        print(f"   ✓ Persisted {len(result.task_ids)} tasks:")
        for record in store.tasks_by_user["demo-user"]:
            print(f"      - {record['id']}: {record['title']} [{record['status']}]")
    else:
        print(f"   ✗ Failed at {result.stage}: {result.error}")

    print("\n" + "=" * 80)
    print("✅ PIPELINE COMPLETE")
    print("=" * 80)


if __name__ == "__main__":
    main()
