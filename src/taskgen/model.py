"""
Core Catalog Model Objects

Defines the data structures the generation engine reads and produces:
    - TaskType (ordinary task vs parent container)
    - CatalogEntry (one candidate task definition)
    - GeneratedTaskSet (which entries matched for one user, one run)
    - GeneratedTask (the record handed to the task store)

ARCHITECTURAL RULE:
    Catalog entries are owned by the catalog and are read-only to the
    engine. Nothing in this package mutates a CatalogEntry.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import AbstractSet, Any, Dict, Iterator, List, Optional, Tuple

from taskgen.conditions import ConditionSpec

DEFAULT_URGENCY = 50
DEFAULT_STATUS = "Upcoming"


class TaskType(Enum):
    """
    Catalog entry type.

    PARENT_CONTAINER entries group sub-entries for presentation. They are
    never surfaced as tasks themselves, whatever their conditions say.
    """

    ORDINARY = "ordinary"
    PARENT_CONTAINER = "parent-container"


@dataclass(frozen=True)
class CatalogEntry:
    """
    A candidate task definition from the shared catalog.

    Properties:
        id:
            Unique, stable identifier (e.g. "BOOK_MOVERS")

        title:
            Human-readable task title

        conditions:
            ConditionSpec deciding who gets this task.
            Empty spec: the task applies to every user.

        task_type:
            TaskType; parent containers are never generated

        urgency_percentage:
            0-100, opaque to the evaluator

        metadata:
            Any other catalog document keys (desc, tips, category, ...)

        source_type:
            The task type name as authored, if any (e.g. "miniAssessmentParent")
    """

    id: str
    title: str
    conditions: ConditionSpec = field(default_factory=ConditionSpec)
    task_type: TaskType = TaskType.ORDINARY
    urgency_percentage: int = DEFAULT_URGENCY
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    source_type: Optional[str] = field(default=None, compare=False, hash=False)

    @property
    def is_parent_container(self) -> bool:
        return self.task_type is TaskType.PARENT_CONTAINER

    def is_parent_for(self, parent_types: AbstractSet[str]) -> bool:
        """Parent container by type, or by authored type name in `parent_types`."""
        return self.is_parent_container or self.source_type in parent_types


@dataclass(frozen=True)
class GeneratedTaskSet:
    """
    Matched catalog entries for one user and one generation run.

    A new set fully replaces any earlier set for the same user; generation
    is a full re-evaluation of the catalog, never incremental.

    Properties:
        user_id: The user this set was generated for
        entries: Matched entries, in catalog iteration order
    """

    user_id: str
    entries: Tuple[CatalogEntry, ...] = ()

    @property
    def task_ids(self) -> Tuple[str, ...]:
        return tuple(entry.id for entry in self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.task_ids


@dataclass(frozen=True)
class GeneratedTask:
    """
    A task record as written to the task store.

    Catalog entry fields plus user-specific fields (status, user_id,
    created_at). Due dates are not computed here.
    """

    entry: CatalogEntry
    user_id: str
    created_at: datetime
    status: str = DEFAULT_STATUS

    @property
    def id(self) -> str:
        return self.entry.id

    @classmethod
    def from_entry(
        cls,
        entry: CatalogEntry,
        user_id: str,
        created_at: datetime,
        status: Optional[str] = None,
    ) -> "GeneratedTask":
        return cls(entry=entry, user_id=user_id, created_at=created_at, status=status or DEFAULT_STATUS)


def index_catalog(entries: List[CatalogEntry]) -> Dict[str, CatalogEntry]:
    """
    Retrieve entries by id. Later duplicates win; the analyzer reports them.
    """
    return {entry.id: entry for entry in entries}
