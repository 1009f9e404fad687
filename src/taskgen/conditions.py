"""
Condition Specs for Catalog Entries

A condition spec maps an answer field to the tokens that satisfy it:

    {"newDwellingType": ["Apartment", "Condo"], "anyPets": ["Yes"]}

Semantics:
    - AND across fields
    - OR across the tokens of one field
    - an absent or empty spec is unconditional (entry applies to everyone)

Catalog content has been authored in several encodings over time. All of
them are normalized here into one ConditionSpec:

    map form      {"hasKids": ["true"]}
    string form   "HasKids: true, moveDistance: Local"
    list form     ["hasPets: true", "moveDistance: Local"]

A field whose value is present but is not a non-empty list of strings is
kept as a MALFORMED clause, with its raw value, instead of being rejected.
The evaluator decides what a malformed clause means (see
evaluator.MalformedConditionPolicy).
"""

from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from taskgen.errors import ConditionParseError


@dataclass(frozen=True)
class ConditionClause:
    """
    One field requirement of a condition spec.

    Properties:
        field: Field name as authored (canonicalized at lookup time)
        tokens: Acceptable value tokens, or None when the clause is malformed
        raw: The authored value when malformed, for diagnostics
    """

    field: str
    tokens: Optional[Tuple[str, ...]]
    raw: Any = dataclass_field(default=None, compare=False, hash=False)

    @property
    def malformed(self) -> bool:
        return self.tokens is None


@dataclass(frozen=True)
class ConditionSpec:
    """
    Ordered collection of condition clauses.

    IMPORTANT:
        Clause order is the authored order. Evaluation walks clauses in
        this order and short-circuits on the first failing field.
    """

    clauses: Tuple[ConditionClause, ...] = ()

    @classmethod
    def unconditional(cls) -> "ConditionSpec":
        return cls()

    @classmethod
    def from_mapping(cls, conditions: Optional[Mapping[str, Any]]) -> "ConditionSpec":
        """Build from the canonical map form."""
        if not conditions:
            return cls()
        clauses = []
        for name, value in conditions.items():
            if (
                isinstance(value, (list, tuple))
                and value
                and all(isinstance(token, str) for token in value)
            ):
                clauses.append(ConditionClause(field=str(name), tokens=tuple(value)))
            else:
                clauses.append(ConditionClause(field=str(name), tokens=None, raw=value))
        return cls(tuple(clauses))

    @property
    def is_unconditional(self) -> bool:
        return not self.clauses

    @property
    def fields(self) -> List[str]:
        return [clause.field for clause in self.clauses]

    @property
    def malformed_fields(self) -> List[str]:
        return [clause.field for clause in self.clauses if clause.malformed]

    def to_mapping(self) -> Dict[str, Any]:
        """Map form. Malformed clauses are written back with their raw value."""
        return {
            clause.field: clause.raw if clause.malformed else list(clause.tokens)
            for clause in self.clauses
        }

    def __len__(self) -> int:
        return len(self.clauses)


def _parse_pairs(pairs: List[str]) -> ConditionSpec:
    """
    Parse "field: value" pairs. Repeated fields accumulate OR tokens.

    Pairs without a colon, or with an empty field or value, are ignored.
    """
    grouped: Dict[str, List[str]] = {}
    for pair in pairs:
        pair = pair.strip()
        if ":" not in pair:
            continue
        name, value = pair.split(":", 1)
        name, value = name.strip(), value.strip()
        if not name or not value:
            continue
        grouped.setdefault(name, []).append(value)
    return ConditionSpec.from_mapping(grouped)


def parse_condition_string(text: str) -> ConditionSpec:
    """
    Parse the comma-separated string encoding.

    Example:
        "HasKids: true, moveDistance: Local, moveDistance: Long Distance"
        -> {"HasKids": ["true"], "moveDistance": ["Local", "Long Distance"]}
    """
    if not text or not text.strip():
        return ConditionSpec.unconditional()
    return _parse_pairs(text.split(","))


def parse_conditions(raw: Any) -> ConditionSpec:
    """
    Normalize any supported condition encoding into a ConditionSpec.

    Args:
        raw: None, a mapping, a string, a list of "field: value" strings,
             or an existing ConditionSpec

    Returns:
        ConditionSpec (unconditional for None / empty input)

    Raises:
        ConditionParseError: If the encoding is not one of the supported forms
    """
    if raw is None:
        return ConditionSpec.unconditional()
    if isinstance(raw, ConditionSpec):
        return raw
    if isinstance(raw, Mapping):
        return ConditionSpec.from_mapping(raw)
    if isinstance(raw, str):
        return parse_condition_string(raw)
    if isinstance(raw, (list, tuple)):
        if not raw:
            return ConditionSpec.unconditional()
        if not all(isinstance(item, str) for item in raw):
            raise ConditionParseError(f"Condition list must contain only strings: {raw!r}")
        return _parse_pairs(list(raw))
    raise ConditionParseError(f"Unsupported condition encoding: {type(raw).__name__}")
