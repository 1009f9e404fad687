"""
Catalog Analyzer: validation and inventory of task catalogs.

This module provides read-only analysis of catalog entries against the
field registry:
    - Field usage inventory
    - Unknown fields and out-of-vocabulary tokens
    - Malformed condition clauses (flagged, never fixed)
    - Duplicate ids and out-of-range urgency
    - Answer shape checks (registry domain vs observed value)

IMPORTANT: It does NOT modify the catalog. It only produces reports.
"""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Set, Union

from taskgen.answers import AnswerKind, AnswerMap, answer_to_raw, canonicalize
from taskgen.evaluator import parse_decimal
from taskgen.model import CatalogEntry
from taskgen.registry import CatalogFieldRegistry

_COMPARATOR_RE = re.compile(r"^(>=|<=|>|<)\s*(.+)$")


def _is_comparator(token: str) -> bool:
    return _COMPARATOR_RE.match(token) is not None


def _comparator_is_valid(token: str) -> bool:
    m = _COMPARATOR_RE.match(token)
    return m is not None and parse_decimal(m.group(2)) is not None


def _is_numeric(token: str) -> bool:
    return parse_decimal(token) is not None


@dataclass
class CatalogReport:
    """Analysis report for a catalog."""

    total_entries: int = 0
    ordinary_entries: int = 0
    parent_containers: int = 0
    unconditional_entries: int = 0

    # Field usage
    field_usage: Dict[str, int] = field(default_factory=dict)
    unknown_fields: Set[str] = field(default_factory=set)
    unknown_values: Dict[str, Set[str]] = field(default_factory=dict)
    invalid_comparators: Dict[str, Set[str]] = field(default_factory=dict)

    # Entry-level problems
    malformed_conditions: Dict[str, List[str]] = field(default_factory=dict)
    duplicate_ids: Set[str] = field(default_factory=set)
    invalid_urgency: List[str] = field(default_factory=list)

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)

    @property
    def ok(self) -> bool:
        return not self.warnings


@dataclass(frozen=True)
class ShapeMismatch:
    """An answer whose runtime shape disagrees with the registry's domain."""

    field: str
    expected_list: bool
    observed: Any

    def describe(self) -> str:
        expected = "a multi-select list" if self.expected_list else "a scalar"
        return f"Field '{self.field}' should be {expected}, got {self.observed!r}"


def _token_allowed(token: str, allowed: Iterable[str]) -> bool:
    allowed = list(allowed)
    if not allowed:
        return True
    lowered = token.lower()
    if any(value.lower() == lowered for value in allowed):
        return True
    # Comparators are fine wherever the vocabulary is numeric or already uses one.
    if _is_comparator(token):
        return any(_is_comparator(v) or _is_numeric(v) for v in allowed)
    return False


def analyze_catalog(entries: List[CatalogEntry], registry: CatalogFieldRegistry) -> CatalogReport:
    """
    Validate a catalog against the field registry.

    Checks for:
    - Condition fields the registry does not know
    - Tokens outside a field's allowed values
    - Comparator tokens whose threshold is not a number
    - Malformed condition clauses
    - Duplicate entry ids
    - Urgency outside 0-100

    Returns a CatalogReport with counts and warnings.
    """
    report = CatalogReport(total_entries=len(entries))

    # =========================================================================
    # 1. ENTRY INVENTORY
    # =========================================================================

    seen_ids: Set[str] = set()
    for entry in entries:
        if entry.id in seen_ids:
            report.duplicate_ids.add(entry.id)
        seen_ids.add(entry.id)

        if entry.is_parent_container:
            report.parent_containers += 1
        else:
            report.ordinary_entries += 1

        if entry.conditions.is_unconditional:
            report.unconditional_entries += 1

        if not 0 <= entry.urgency_percentage <= 100:
            report.invalid_urgency.append(entry.id)

    # =========================================================================
    # 2. CONDITION FIELDS AND TOKENS
    # =========================================================================

    usage: Dict[str, int] = defaultdict(int)
    unknown_values: Dict[str, Set[str]] = defaultdict(set)
    invalid_comparators: Dict[str, Set[str]] = defaultdict(set)

    for entry in entries:
        for clause in entry.conditions.clauses:
            name = canonicalize(clause.field)
            usage[name] += 1

            if clause.malformed:
                report.malformed_conditions.setdefault(entry.id, []).append(clause.field)
                continue

            info = registry.get(name)
            if info is None:
                report.unknown_fields.add(name)
                continue

            for token in clause.tokens:
                if _is_comparator(token) and not _comparator_is_valid(token):
                    invalid_comparators[name].add(token)
                elif not _token_allowed(token, info.allowed_values):
                    unknown_values[name].add(token)

    report.field_usage = dict(usage)
    report.unknown_values = dict(unknown_values)
    report.invalid_comparators = dict(invalid_comparators)

    # =========================================================================
    # 3. WARNING FLAGS
    # =========================================================================

    if report.duplicate_ids:
        report.add_warning(f"Duplicate entry ids: {', '.join(sorted(report.duplicate_ids))}")

    if report.unknown_fields:
        report.add_warning(f"Unknown condition fields: {', '.join(sorted(report.unknown_fields))}")

    for name in sorted(report.unknown_values):
        values = ", ".join(sorted(report.unknown_values[name]))
        report.add_warning(f"Unknown values for '{name}': {values}")

    for name in sorted(report.invalid_comparators):
        values = ", ".join(sorted(report.invalid_comparators[name]))
        report.add_warning(f"Non-numeric comparator thresholds for '{name}': {values}")

    for entry_id in sorted(report.malformed_conditions):
        fields = ", ".join(report.malformed_conditions[entry_id])
        report.add_warning(
            f"Malformed conditions in '{entry_id}' (not a list of tokens): {fields}"
        )

    if report.invalid_urgency:
        report.add_warning(f"Urgency outside 0-100: {', '.join(report.invalid_urgency)}")

    return report


def check_answer_shapes(
    answers: Union[AnswerMap, Mapping[str, Any]],
    registry: CatalogFieldRegistry,
) -> List[ShapeMismatch]:
    """
    Compare each known field's answer shape with its registry domain.

    Unknown fields are ignored. Mismatches are reported, not corrected.
    """
    if not isinstance(answers, AnswerMap):
        answers = AnswerMap.from_raw(answers)

    mismatches: List[ShapeMismatch] = []
    for name, value in answers.items():
        expects_list = registry.expects_list(name)
        if expects_list is None:
            continue
        is_list = value.kind is AnswerKind.STRING_LIST
        if is_list != expects_list:
            mismatches.append(ShapeMismatch(name, expects_list, answer_to_raw(value)))
    return mismatches
