"""
Task Generation Orchestrator

One-shot batch transform, triggered once per completed assessment:

    AssessmentRepository -> answer map
    CatalogRepository    -> catalog snapshot
    evaluate every non-container entry against the answer map
    TaskStore            <- matched tasks, written all-or-nothing

The evaluation step is pure (see generate()). Only the fetches and the
final write are I/O. A run either persists a complete task set, which
supersedes any earlier one for the user, or persists nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Any, List, Mapping, Optional, Protocol, Sequence, Set, Union

from taskgen.answers import AnswerMap
from taskgen.clock import Clock, SystemClock
from taskgen.config import GenerationConfig
from taskgen.errors import GenerationError
from taskgen.evaluator import MalformedConditionPolicy, evaluate
from taskgen.model import CatalogEntry, GeneratedTask, GeneratedTaskSet
from taskgen.serialization import PARENT_TASK_TYPES

logger = logging.getLogger("taskgen.orchestrator")

STAGE_ASSESSMENT = "assessment"
STAGE_CATALOG = "catalog"
STAGE_EVALUATE = "evaluate"
STAGE_STORE = "store"


class CatalogRepository(Protocol):
    async def fetch_catalog(self) -> List[CatalogEntry]:
        ...


class AssessmentRepository(Protocol):
    async def fetch_answers(self, user_id: str) -> Union[AnswerMap, Mapping[str, Any]]:
        ...


class TaskStore(Protocol):
    async def replace_tasks(self, user_id: str, tasks: Sequence[GeneratedTask]) -> None:
        """Replace the user's generated tasks. Must be all-or-nothing."""
        ...


def generate(
    user_id: str,
    answers: Union[AnswerMap, Mapping[str, Any]],
    catalog: Sequence[CatalogEntry],
    policy: MalformedConditionPolicy = MalformedConditionPolicy.SKIP,
    parent_types: AbstractSet[str] = PARENT_TASK_TYPES,
) -> GeneratedTaskSet:
    """
    Select the catalog entries that apply to one user.

    Parent containers are excluded regardless of their conditions, whether
    typed as such or authored with a type name in `parent_types`. Matched
    entries keep catalog order, so identical inputs give identical output.
    An id appears at most once; later entries with a seen id are skipped.

    Args:
        user_id: The user being generated for
        answers: AnswerMap or raw flattened answers
        catalog: Catalog snapshot
        policy: How to treat malformed condition clauses
        parent_types: Authored task type names that mean "parent container"

    Returns:
        GeneratedTaskSet (possibly empty)
    """
    if not isinstance(answers, AnswerMap):
        answers = AnswerMap.from_raw(answers)

    matched = []
    seen: Set[str] = set()
    for entry in catalog:
        if entry.id in seen:
            logger.warning("Skipping duplicate catalog entry '%s'", entry.id)
            continue
        seen.add(entry.id)
        if entry.is_parent_for(parent_types):
            logger.debug("Skipping parent container '%s'", entry.id)
            continue
        if evaluate(entry.conditions, answers, policy):
            logger.debug("Including '%s' (%s)", entry.id, entry.title)
            matched.append(entry)
        else:
            logger.debug("Skipping '%s' (%s): conditions not met", entry.id, entry.title)
    return GeneratedTaskSet(user_id=user_id, entries=tuple(matched))


@dataclass(frozen=True)
class GenerationSucceeded:
    """The task set was persisted. An empty set is a valid success."""

    task_set: GeneratedTaskSet

    @property
    def ok(self) -> bool:
        return True

    @property
    def task_ids(self):
        return self.task_set.task_ids


@dataclass(frozen=True)
class GenerationFailed:
    """
    Generation failed and nothing was persisted.

    Properties:
        user_id: The user whose run failed
        stage: "assessment", "catalog", "evaluate" or "store"
        error: The underlying exception
    """

    user_id: str
    stage: str
    error: BaseException

    @property
    def ok(self) -> bool:
        return False

    def to_error(self) -> GenerationError:
        err = GenerationError(self.stage, self.user_id, f"{self.stage} failed: {self.error}")
        err.__cause__ = self.error
        return err


GenerationResult = Union[GenerationSucceeded, GenerationFailed]


class TaskGenerationOrchestrator:
    """
    Runs a full generation for one user against the external collaborators.

    Example:
        orchestrator = TaskGenerationOrchestrator(catalog_repo, assessment_repo, store)
        result = await orchestrator.run("user-123")
        if not result.ok:
            ...  # caller decides whether to retry the whole run
    """

    def __init__(
        self,
        catalog_repository: CatalogRepository,
        assessment_repository: AssessmentRepository,
        task_store: TaskStore,
        clock: Optional[Clock] = None,
        config: Optional[GenerationConfig] = None,
    ):
        self.catalog_repository = catalog_repository
        self.assessment_repository = assessment_repository
        self.task_store = task_store
        self.clock = clock or SystemClock()
        self.config = config or GenerationConfig()

    def build_tasks(self, task_set: GeneratedTaskSet) -> List[GeneratedTask]:
        created_at = self.clock.now()
        return [
            GeneratedTask.from_entry(entry, task_set.user_id, created_at, self.config.default_status)
            for entry in task_set
        ]

    async def run(self, user_id: str, raise_on_failure: bool = False) -> GenerationResult:
        """
        Generate and persist tasks for `user_id`.

        Args:
            user_id: The user whose assessment just completed
            raise_on_failure: Raise GenerationError instead of returning
                GenerationFailed

        Returns:
            GenerationSucceeded or GenerationFailed
        """
        logger.info("Starting task generation for user %s", user_id)

        stage = STAGE_ASSESSMENT
        try:
            answers = await self.assessment_repository.fetch_answers(user_id)

            stage = STAGE_CATALOG
            catalog = await self.catalog_repository.fetch_catalog()
            logger.info("Found %d entries in catalog", len(catalog))

            stage = STAGE_EVALUATE
            task_set = generate(
                user_id,
                answers,
                catalog,
                self.config.malformed_policy,
                self.config.parent_task_types,
            )
            tasks = self.build_tasks(task_set)

            stage = STAGE_STORE
            await self.task_store.replace_tasks(user_id, tasks)
        except Exception as e:
            logger.error("Task generation for user %s failed at %s: %s", user_id, stage, e)
            failure = GenerationFailed(user_id=user_id, stage=stage, error=e)
            if raise_on_failure:
                raise failure.to_error() from e
            return failure

        logger.info("Generated %d tasks for user %s", len(task_set), user_id)
        return GenerationSucceeded(task_set=task_set)
