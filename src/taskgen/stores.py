"""
Repository and task store adapters.

In-memory implementations for tests and embedding, plus file-backed ones
for the command line:

    InMemoryCatalogRepository / FileCatalogRepository
    InMemoryAssessmentRepository / FileAssessmentRepository
    InMemoryTaskStore / JsonFileTaskStore

Every TaskStore here replaces a user's task set in one step: the new set is
built completely before anything visible changes, so a failing write
leaves the previous set untouched.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import yaml

from taskgen.answers import AnswerMap
from taskgen.csv_parser import parse_csv_file
from taskgen.errors import CatalogFormatError, TaskStoreError
from taskgen.model import CatalogEntry, GeneratedTask
from taskgen.serialization import (
    PARENT_TASK_TYPES,
    answers_from_json,
    answers_from_yaml,
    catalog_from_list,
    task_from_dict,
    task_to_dict,
)


def load_catalog(path: Union[str, Path], parent_types=PARENT_TASK_TYPES) -> List[CatalogEntry]:
    """
    Load a catalog file. Format is chosen by extension: .csv, .json, .yaml/.yml

    Raises:
        FileNotFoundError: If the file doesn't exist
        CatalogFormatError: If the extension is unsupported or content invalid
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return parse_csv_file(str(path), parent_types=parent_types)
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    text = path.read_text(encoding="utf-8")
    if suffix == ".json":
        return catalog_from_list(json.loads(text), parent_types)
    if suffix in (".yaml", ".yml"):
        return catalog_from_list(yaml.safe_load(text), parent_types)
    raise CatalogFormatError(f"Unsupported catalog format: {path.suffix}")


def load_answers(path: Union[str, Path]) -> AnswerMap:
    """Load a flattened answer map from .json or .yaml/.yml."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Answers file not found: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return answers_from_json(text)
    return answers_from_yaml(text)


class InMemoryCatalogRepository:
    def __init__(self, entries: Sequence[CatalogEntry] = ()):
        self.entries = list(entries)

    async def fetch_catalog(self) -> List[CatalogEntry]:
        # Snapshot: later changes to self.entries don't affect a running generation.
        return list(self.entries)


class FileCatalogRepository:
    """Reads the catalog file on every fetch."""

    def __init__(self, path: Union[str, Path], parent_types=PARENT_TASK_TYPES):
        self.path = Path(path)
        self.parent_types = parent_types

    async def fetch_catalog(self) -> List[CatalogEntry]:
        return load_catalog(self.path, self.parent_types)


class InMemoryAssessmentRepository:
    def __init__(self, answers_by_user: Optional[Mapping[str, Mapping[str, Any]]] = None):
        self.answers_by_user: Dict[str, Mapping[str, Any]] = dict(answers_by_user or {})

    async def fetch_answers(self, user_id: str) -> AnswerMap:
        """
        Raises:
            KeyError: If the user has no finalized assessment
        """
        if user_id not in self.answers_by_user:
            raise KeyError(f"No assessment for user '{user_id}'")
        answers = self.answers_by_user[user_id]
        if isinstance(answers, AnswerMap):
            return answers
        return AnswerMap.from_raw(answers)


class FileAssessmentRepository:
    """Answers stored one file per user: <directory>/<user_id>.yaml or .json"""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    async def fetch_answers(self, user_id: str) -> AnswerMap:
        for suffix in (".yaml", ".yml", ".json"):
            candidate = self.directory / f"{user_id}{suffix}"
            if candidate.exists():
                return load_answers(candidate)
        raise FileNotFoundError(f"No answers file for user '{user_id}' in {self.directory}")


class InMemoryTaskStore:
    """
    Keeps task records as plain dicts keyed by user id.

    `fail_writes` makes the next replace_tasks raise, for exercising
    failure handling.
    """

    def __init__(self):
        self.tasks_by_user: Dict[str, List[Dict[str, Any]]] = {}
        self.fail_writes = False
        self.write_count = 0

    async def replace_tasks(self, user_id: str, tasks: Sequence[GeneratedTask]) -> None:
        if self.fail_writes:
            raise TaskStoreError(f"Write rejected for user '{user_id}'")
        records = [task_to_dict(t) for t in tasks]
        self.tasks_by_user[user_id] = records
        self.write_count += 1

    def task_ids(self, user_id: str) -> List[str]:
        return [record["id"] for record in self.tasks_by_user.get(user_id, [])]


class JsonFileTaskStore:
    """
    One JSON document per user: <directory>/<user_id>.tasks.json

    Written to a temporary file in the same directory and renamed into
    place, so readers see either the old set or the new one.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, user_id: str) -> Path:
        return self.directory / f"{user_id}.tasks.json"

    async def replace_tasks(self, user_id: str, tasks: Sequence[GeneratedTask]) -> None:
        payload = json.dumps([task_to_dict(t) for t in tasks], indent=2)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_path, self.path_for(user_id))
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except OSError as e:
            raise TaskStoreError(f"Could not write tasks for user '{user_id}': {e}") from e

    def read_tasks(self, user_id: str) -> List[GeneratedTask]:
        path = self.path_for(user_id)
        if not path.exists():
            return []
        return [task_from_dict(d) for d in json.loads(path.read_text(encoding="utf-8"))]
