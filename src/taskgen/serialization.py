"""
Serialization helpers for catalog entries, answer maps and generated tasks.

Provides JSON/YAML reading and writing via an intermediate dict
representation. Catalog documents use the external camelCase keys
(taskType, urgencyPercentage); any other key is carried in metadata.
"""
from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

import yaml

from taskgen.answers import AnswerMap
from taskgen.conditions import parse_conditions
from taskgen.errors import CatalogFormatError, ConditionParseError
from taskgen.model import (
    DEFAULT_URGENCY,
    CatalogEntry,
    GeneratedTask,
    GeneratedTaskSet,
    TaskType,
)

# Raw task type names that mean "parent container".
PARENT_TASK_TYPES = frozenset({TaskType.PARENT_CONTAINER.value, "miniAssessmentParent"})

_ENTRY_KEYS = {"id", "title", "conditions", "taskType", "urgencyPercentage"}


def task_type_from_str(value: Any, parent_types=PARENT_TASK_TYPES) -> TaskType:
    """Anything not named as a parent type is an ordinary task."""
    if value in parent_types:
        return TaskType.PARENT_CONTAINER
    return TaskType.ORDINARY


def _source_type(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def entry_to_dict(e: CatalogEntry) -> Dict[str, Any]:
    d = dict(e.metadata)
    d.update({
        "id": e.id,
        "title": e.title,
        "conditions": e.conditions.to_mapping(),
        "taskType": e.source_type or e.task_type.value,
        "urgencyPercentage": e.urgency_percentage,
    })
    return d


def entry_from_dict(d: Mapping[str, Any], parent_types=PARENT_TASK_TYPES) -> CatalogEntry:
    """
    Raises:
        CatalogFormatError: If id is missing, urgency is not an integer,
            or conditions use an unsupported encoding
    """
    entry_id = d.get("id")
    if entry_id is None or str(entry_id).strip() == "":
        raise CatalogFormatError(f"Catalog entry without id: {dict(d)!r}")

    urgency = d.get("urgencyPercentage", DEFAULT_URGENCY)
    if urgency is None:
        urgency = DEFAULT_URGENCY
    if isinstance(urgency, bool) or not isinstance(urgency, (int, float, str)):
        raise CatalogFormatError(f"Invalid urgencyPercentage for '{entry_id}': {urgency!r}")
    try:
        urgency = int(urgency)
    except ValueError:
        raise CatalogFormatError(f"Invalid urgencyPercentage for '{entry_id}': {urgency!r}")

    try:
        conditions = parse_conditions(d.get("conditions"))
    except ConditionParseError as e:
        raise CatalogFormatError(f"Invalid conditions for '{entry_id}': {e}")

    return CatalogEntry(
        id=str(entry_id),
        title=str(d.get("title") or ""),
        conditions=conditions,
        task_type=task_type_from_str(d.get("taskType"), parent_types),
        urgency_percentage=urgency,
        metadata={k: v for k, v in d.items() if k not in _ENTRY_KEYS},
        source_type=_source_type(d.get("taskType")),
    )


def catalog_to_list(entries: List[CatalogEntry]) -> List[Dict[str, Any]]:
    return [entry_to_dict(e) for e in entries]


def catalog_from_list(items: Any, parent_types=PARENT_TASK_TYPES) -> List[CatalogEntry]:
    """
    Accepts a list of entry documents, or a mapping with a "tasks" list.

    Raises:
        CatalogFormatError: If the document is not a list, an entry is
            invalid, or ids are duplicated
    """
    if isinstance(items, Mapping):
        items = items.get("tasks", [])
    if items is None:
        return []
    if not isinstance(items, list):
        raise CatalogFormatError("Catalog document must be a list of entries")
    entries = [entry_from_dict(d, parent_types) for d in items]

    ids = [e.id for e in entries]
    if len(ids) != len(set(ids)):
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        raise CatalogFormatError(f"Duplicate entry ids: {duplicates}")
    return entries


def catalog_to_json(entries: List[CatalogEntry]) -> str:
    return json.dumps(catalog_to_list(entries))


def catalog_from_json(s: str) -> List[CatalogEntry]:
    return catalog_from_list(json.loads(s))


def catalog_to_yaml(entries: List[CatalogEntry]) -> str:
    return yaml.safe_dump(catalog_to_list(entries), sort_keys=False)


def catalog_from_yaml(s: str) -> List[CatalogEntry]:
    return catalog_from_list(yaml.safe_load(s))


def answers_from_json(s: str) -> AnswerMap:
    return AnswerMap.from_raw(json.loads(s) or {})


def answers_from_yaml(s: str) -> AnswerMap:
    return AnswerMap.from_raw(yaml.safe_load(s) or {})


def answers_to_json(answers: AnswerMap) -> str:
    return json.dumps(answers.to_raw(), sort_keys=True)


def task_to_dict(t: GeneratedTask) -> Dict[str, Any]:
    """Generated task record: catalog fields plus status, userId, createdAt."""
    d = entry_to_dict(t.entry)
    d.update({
        "status": t.status,
        "userId": t.user_id,
        "createdAt": t.created_at.isoformat(),
    })
    return d


def task_from_dict(d: Mapping[str, Any]) -> GeneratedTask:
    entry_doc = {k: v for k, v in d.items() if k not in ("status", "userId", "createdAt")}
    return GeneratedTask(
        entry=entry_from_dict(entry_doc),
        user_id=d["userId"],
        created_at=datetime.fromisoformat(d["createdAt"]),
        status=d.get("status", "Upcoming"),
    )


def task_set_to_dict(s: GeneratedTaskSet) -> Dict[str, Any]:
    return {"userId": s.user_id, "taskIds": list(s.task_ids)}
