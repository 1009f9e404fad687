"""
Command line for catalog authors.

    python -m taskgen validate CATALOG [--registry FIELDS.yaml]
    python -m taskgen generate CATALOG ANSWERS [--policy skip|fail-closed] [--trace] [--registry FIELDS.yaml]
"""

import argparse
import logging
import sys
from typing import List, Optional

from taskgen.analyzer import analyze_catalog, check_answer_shapes
from taskgen.config import load_config
from taskgen.errors import TaskGenError
from taskgen.evaluator import MalformedConditionPolicy, evaluate_with_trace, explain
from taskgen.logging_config import setup_logging
from taskgen.orchestrator import generate
from taskgen.registry import load_registry
from taskgen.stores import load_answers, load_catalog


def _print_report(report) -> None:
    print(f"Entries:            {report.total_entries}")
    print(f"  ordinary:         {report.ordinary_entries}")
    print(f"  parent containers:{report.parent_containers}")
    print(f"  unconditional:    {report.unconditional_entries}")
    if report.field_usage:
        print("Field usage:")
        for name, count in sorted(report.field_usage.items()):
            print(f"  {name}: {count}")
    if report.warnings:
        print("Warnings:")
        for i, warning in enumerate(report.warnings, 1):
            print(f"  {i}. {warning}")
    else:
        print("No warnings")


def _cmd_validate(args) -> int:
    config = load_config(args.config)
    registry = load_registry(args.registry or config.registry_path)
    catalog = load_catalog(args.catalog, config.parent_task_types)
    report = analyze_catalog(catalog, registry)
    _print_report(report)
    return 0 if report.ok else 1


def _cmd_generate(args) -> int:
    config = load_config(args.config)
    policy = MalformedConditionPolicy(args.policy) if args.policy else config.malformed_policy
    catalog = load_catalog(args.catalog, config.parent_task_types)
    answers = load_answers(args.answers)

    registry = load_registry(args.registry or config.registry_path)
    for mismatch in check_answer_shapes(answers, registry):
        print(f"warning: {mismatch.describe()}", file=sys.stderr)

    task_set = generate("cli", answers, catalog, policy, config.parent_task_types)
    for task_id in task_set.task_ids:
        print(task_id)

    if args.trace:
        for entry in catalog:
            outcome = evaluate_with_trace(entry.conditions, answers, policy)
            detail = explain(outcome)
            if entry.is_parent_for(config.parent_task_types):
                status = "excluded (parent container)"
            elif entry.id in task_set:
                status = "MATCH"
            else:
                status = "no match"
            print(f"\n{entry.id}: {status}")
            for f in detail["fields"]:
                print(f"  {f['field']}: {f['user_value']!r} vs {f['required']} -> {f['reason']}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="taskgen", description="Condition-based task generation")
    parser.add_argument("--config", help="Generation config YAML")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_validate = sub.add_parser("validate", help="Validate a catalog against the field registry")
    p_validate.add_argument("catalog", help="Catalog file (.yaml, .json or .csv)")
    p_validate.add_argument("--registry", help="Field registry YAML (packaged default otherwise)")
    p_validate.set_defaults(func=_cmd_validate)

    p_generate = sub.add_parser("generate", help="Print the task ids generated for an answer file")
    p_generate.add_argument("catalog", help="Catalog file (.yaml, .json or .csv)")
    p_generate.add_argument("answers", help="Answers file (.yaml or .json)")
    p_generate.add_argument("--policy", choices=[p.value for p in MalformedConditionPolicy])
    p_generate.add_argument("--registry", help="Field registry YAML (packaged default otherwise)")
    p_generate.add_argument("--trace", action="store_true", help="Show per-field evaluation")
    p_generate.set_defaults(func=_cmd_generate)

    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        return args.func(args)
    except (TaskGenError, FileNotFoundError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
