"""
Condition Evaluator

Decides whether one catalog entry's condition spec is satisfied by one
user's answer map. Pure: no mutation, no side effects beyond logging, safe
to call concurrently and repeatedly.

Evaluation rules:
    1. Unconditional spec -> True, no field checks.
    2. For each clause (AND):
         - answer absent          -> clause fails, whole spec is False
         - multi-select answer    -> any selection equals any token
                                     (case-insensitive, plain strings)
         - scalar answer          -> tokens tried in order (OR), first
                                     match wins, using token rules below
    3. No failing clause -> True.

Token rules for a scalar answer, in priority order:
    a. Numeric comparator prefix: >=, <=, >, <
    b. Literal "true" / "false"
    c. Case-insensitive string equality

Malformed clauses (value not a list of tokens) are governed by
MalformedConditionPolicy. The default, SKIP, treats the clause as
satisfied. Catalog content is authored against this behavior.
"""

from __future__ import annotations

import logging
import math
import operator
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from taskgen.answers import (
    AnswerKind,
    AnswerMap,
    AnswerValue,
    StringList,
    answer_to_raw,
    canonicalize,
)
from taskgen.conditions import ConditionClause, ConditionSpec, parse_conditions

logger = logging.getLogger("taskgen.evaluator")


class MalformedConditionPolicy(Enum):
    """
    What a malformed condition clause means.

    SKIP:
        Clause is treated as satisfied. Malformed authoring widens
        eligibility.
    FAIL_CLOSED:
        Clause fails, so the entry does not match.
    """

    SKIP = "skip"
    FAIL_CLOSED = "fail-closed"


# Two-character prefixes must be checked before their one-character prefix.
_COMPARATORS: Tuple[Tuple[str, Callable[[float, float], bool]], ...] = (
    (">=", operator.ge),
    ("<=", operator.le),
    (">", operator.gt),
    ("<", operator.lt),
)

_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$", re.ASCII)

_BOOL_TOKENS = {"true": True, "false": False}
_BOOL_ALIASES = {True: ("true", "yes"), False: ("false", "no")}


@dataclass(frozen=True)
class FieldTrace:
    """
    Diagnostic record for one clause.

    reason is one of:
        "matched", "no-match", "missing", "malformed-skipped", "malformed-failed"
    """

    field: str
    user_value: Any
    required_tokens: Tuple[str, ...]
    matched: bool
    reason: str


@dataclass(frozen=True)
class EvaluationOutcome:
    matched: bool
    trace: Tuple[FieldTrace, ...] = ()

    def __bool__(self) -> bool:
        return self.matched

    def failed_fields(self) -> List[str]:
        return [t.field for t in self.trace if not t.matched]


def parse_decimal(text: str) -> Optional[float]:
    """
    Parse a plain decimal literal such as "2", "-1.5" or ".5".

    Returns None for anything else, including "inf", "nan", "1_000" and
    exponent forms, which float() would otherwise accept.
    """
    text = text.strip()
    if _DECIMAL_RE.match(text) is None:
        return None
    return float(text)


def _to_number(value: AnswerValue) -> Optional[float]:
    if value.kind is AnswerKind.NUMBER:
        number = float(value.value)
        return number if math.isfinite(number) else None
    if value.kind is AnswerKind.STRING:
        return parse_decimal(value.value)
    return None


def _string_forms(value: AnswerValue) -> Tuple[str, ...]:
    """Lowercased string renderings a scalar answers to."""
    if value.kind is AnswerKind.BOOL:
        return _BOOL_ALIASES[value.value]
    if value.kind is AnswerKind.NUMBER:
        number = value.value
        if isinstance(number, float) and number.is_integer():
            return (str(int(number)),)
        return (str(number).lower(),)
    return (value.value.lower(),)


def match_token(value: AnswerValue, token: str) -> bool:
    """
    Match one scalar answer against one token.

    Args:
        value: A scalar AnswerValue (not a StringList)
        token: Acceptable-value token from a condition spec

    Returns:
        True if the token accepts the value
    """
    for prefix, compare in _COMPARATORS:
        if token.startswith(prefix):
            threshold = parse_decimal(token[len(prefix):])
            if threshold is None:
                return False
            number = _to_number(value)
            if number is None:
                return False
            return compare(number, threshold)

    lowered = token.lower()
    if lowered in _BOOL_TOKENS:
        if value.kind is AnswerKind.BOOL:
            return value.value is _BOOL_TOKENS[lowered]
        if value.kind is AnswerKind.STRING:
            return value.value.lower() == lowered
        return False

    return lowered in _string_forms(value)


def match_clause(value: AnswerValue, tokens: Tuple[str, ...]) -> bool:
    """OR across tokens for a single field."""
    if isinstance(value, StringList):
        wanted = {token.lower() for token in tokens}
        return any(selection.lower() in wanted for selection in value.values)
    return any(match_token(value, token) for token in tokens)


def _evaluate_clause(
    clause: ConditionClause,
    answers: AnswerMap,
    policy: MalformedConditionPolicy,
) -> FieldTrace:
    if clause.malformed:
        if policy is MalformedConditionPolicy.SKIP:
            logger.warning(
                "Malformed condition for field '%s' (%r), skipping", clause.field, clause.raw
            )
            return FieldTrace(clause.field, None, (), True, "malformed-skipped")
        logger.debug("Malformed condition for field '%s' (%r), failing", clause.field, clause.raw)
        return FieldTrace(clause.field, None, (), False, "malformed-failed")

    value = answers.get(canonicalize(clause.field))
    if value is None:
        return FieldTrace(clause.field, None, clause.tokens, False, "missing")

    matched = match_clause(value, clause.tokens)
    return FieldTrace(
        clause.field,
        answer_to_raw(value),
        clause.tokens,
        matched,
        "matched" if matched else "no-match",
    )


def _coerce_inputs(
    spec: Union[ConditionSpec, Mapping[str, Any], None],
    answers: Union[AnswerMap, Mapping[str, Any]],
) -> Tuple[ConditionSpec, AnswerMap]:
    if not isinstance(spec, ConditionSpec):
        spec = parse_conditions(spec)
    if not isinstance(answers, AnswerMap):
        answers = AnswerMap.from_raw(answers)
    return spec, answers


def evaluate_with_trace(
    spec: Union[ConditionSpec, Mapping[str, Any], None],
    answers: Union[AnswerMap, Mapping[str, Any]],
    policy: MalformedConditionPolicy = MalformedConditionPolicy.SKIP,
) -> EvaluationOutcome:
    """
    Evaluate a condition spec and record a per-field trace.

    The trace stops at the first failing field, mirroring evaluate().

    Args:
        spec: ConditionSpec or raw condition mapping (None = unconditional)
        answers: AnswerMap or raw flattened answer dictionary
        policy: How to treat malformed clauses

    Returns:
        EvaluationOutcome
    """
    spec, answers = _coerce_inputs(spec, answers)
    if spec.is_unconditional:
        return EvaluationOutcome(matched=True)

    traces: List[FieldTrace] = []
    for clause in spec.clauses:
        trace = _evaluate_clause(clause, answers, policy)
        traces.append(trace)
        logger.debug(
            "Field '%s': user has %r, need one of %s -> %s",
            trace.field, trace.user_value, list(trace.required_tokens), trace.reason,
        )
        if not trace.matched:
            return EvaluationOutcome(matched=False, trace=tuple(traces))
    return EvaluationOutcome(matched=True, trace=tuple(traces))


def evaluate(
    spec: Union[ConditionSpec, Mapping[str, Any], None],
    answers: Union[AnswerMap, Mapping[str, Any]],
    policy: MalformedConditionPolicy = MalformedConditionPolicy.SKIP,
) -> bool:
    """Return True if `answers` satisfies every clause of `spec`."""
    return evaluate_with_trace(spec, answers, policy).matched


def explain(outcome: EvaluationOutcome) -> Dict[str, Any]:
    """Plain-dict rendering of an outcome for logs and the command line."""
    return {
        "matched": outcome.matched,
        "fields": [
            {
                "field": t.field,
                "user_value": t.user_value,
                "required": list(t.required_tokens),
                "matched": t.matched,
                "reason": t.reason,
            }
            for t in outcome.trace
        ],
    }
