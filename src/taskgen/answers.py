"""
Answer Values for Task Generation

A user's finalized assessment answers, ingested once into a tagged variant
so that condition evaluation branches on an explicit kind instead of
inspecting Python types at match time.

Supported kinds:
    - ScalarString  ("Rent", "Long Distance")
    - ScalarBool    (True / False)
    - ScalarNumber  (2, 1.5)
    - StringList    (["Yoga", "Gym"], multi-select answers)

ARCHITECTURAL RULE:
    Field names are canonicalized at this boundary (first letter lowercased).
    Catalog authors and answer producers need not agree on leading case.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

logger = logging.getLogger("taskgen.answers")


def canonicalize(field_name: str) -> str:
    """
    Canonical form of a field name: first letter lowercased, rest untouched.

    Examples:
        "HasKids"      -> "hasKids"
        "moveDistance" -> "moveDistance"
    """
    if not field_name:
        return field_name
    return field_name[0].lower() + field_name[1:]


class AnswerKind(Enum):
    """Tag identifying the shape of an answer value."""

    STRING = "string"
    BOOL = "bool"
    NUMBER = "number"
    STRING_LIST = "string_list"


@dataclass(frozen=True)
class ScalarString:
    value: str
    kind = AnswerKind.STRING


@dataclass(frozen=True)
class ScalarBool:
    value: bool
    kind = AnswerKind.BOOL


@dataclass(frozen=True)
class ScalarNumber:
    value: float
    kind = AnswerKind.NUMBER


@dataclass(frozen=True)
class StringList:
    """A multi-select answer. Order of selection is preserved."""

    values: Tuple[str, ...]
    kind = AnswerKind.STRING_LIST


AnswerValue = Union[ScalarString, ScalarBool, ScalarNumber, StringList]


def to_answer_value(raw: Any) -> Optional[AnswerValue]:
    """
    Decide the tag for a raw value.

    Returns None for values that are none of the supported shapes
    (None, dicts, arbitrary objects). Callers treat that as "not answered".

    bool is checked before numbers since bool is a subclass of int.
    """
    if isinstance(raw, bool):
        return ScalarBool(raw)
    if isinstance(raw, (int, float)):
        return ScalarNumber(raw)
    if isinstance(raw, str):
        return ScalarString(raw)
    if isinstance(raw, (list, tuple)):
        return StringList(tuple(str(item) for item in raw))
    return None


def answer_to_raw(value: AnswerValue) -> Union[str, bool, float, list]:
    """Inverse of to_answer_value, used by serialization and traces."""
    if isinstance(value, StringList):
        return list(value.values)
    return value.value


class AnswerMap(Mapping):
    """
    Immutable mapping of canonical field name -> AnswerValue.

    Built once per user per generation run. Lookups canonicalize the
    requested key, so answers.get("HasKids") finds "hasKids".
    """

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[str, AnswerValue]] = None):
        self._values: Dict[str, AnswerValue] = {
            canonicalize(k): v for k, v in (values or {}).items()
        }

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "AnswerMap":
        """
        Ingest a flattened answer dictionary.

        Unsupported values are dropped and behave as absent fields.
        When two raw keys canonicalize to the same name, the later one wins.
        """
        values: Dict[str, AnswerValue] = {}
        for name, raw_value in raw.items():
            tagged = to_answer_value(raw_value)
            if tagged is None:
                logger.debug("Dropping answer '%s': unsupported value %r", name, raw_value)
                continue
            values[canonicalize(name)] = tagged
        return cls(values)

    def __getitem__(self, key: str) -> AnswerValue:
        return self._values[canonicalize(key)]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and canonicalize(key) in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"AnswerMap({self.to_raw()!r})"

    def to_raw(self) -> Dict[str, Any]:
        return {name: answer_to_raw(value) for name, value in self._values.items()}
