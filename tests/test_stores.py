"""
Tests for file loading, repositories and task stores.
"""

import asyncio
import json
from datetime import datetime, timezone

import pytest

from taskgen.clock import FixedClock
from taskgen.conditions import ConditionSpec
from taskgen.errors import CatalogFormatError, TaskStoreError
from taskgen.examples import build_example_catalog, example_answers
from taskgen.model import CatalogEntry, GeneratedTask
from taskgen.orchestrator import TaskGenerationOrchestrator
from taskgen.serialization import catalog_to_json, catalog_to_yaml
from taskgen.stores import (
    FileAssessmentRepository,
    FileCatalogRepository,
    InMemoryAssessmentRepository,
    JsonFileTaskStore,
    load_answers,
    load_catalog,
)

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


class TestLoadCatalog:
    def test_yaml(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text(catalog_to_yaml(build_example_catalog()), encoding="utf-8")
        assert load_catalog(path) == build_example_catalog()

    def test_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(catalog_to_json(build_example_catalog()), encoding="utf-8")
        assert [e.id for e in load_catalog(path)][0] == "FORWARD_MAIL"

    def test_csv(self, tmp_path):
        path = tmp_path / "catalog.csv"
        path.write_text("id,title,conditions\nA,Task A,anyPets: Yes\n", encoding="utf-8")
        assert load_catalog(path)[0].conditions.to_mapping() == {"anyPets": ["Yes"]}

    def test_custom_parent_types(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text('[{"id": "G", "taskType": "folder"}]', encoding="utf-8")
        assert load_catalog(path, frozenset({"folder"}))[0].is_parent_container

    def test_duplicate_ids_rejected(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text('[{"id": "A"}, {"id": "A"}]', encoding="utf-8")
        with pytest.raises(CatalogFormatError, match="Duplicate"):
            load_catalog(path)

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "catalog.txt"
        path.write_text("", encoding="utf-8")
        with pytest.raises(CatalogFormatError):
            load_catalog(path)

    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog(tmp_path / "catalog.yaml")


class TestLoadAnswers:
    def test_yaml(self, tmp_path):
        path = tmp_path / "answers.yaml"
        path.write_text('HasKids: true\nfitnessWellness: [Yoga]\n', encoding="utf-8")
        answers = load_answers(path)
        assert answers.to_raw() == {"hasKids": True, "fitnessWellness": ["Yoga"]}

    def test_json(self, tmp_path):
        path = tmp_path / "answers.json"
        path.write_text(json.dumps(example_answers()), encoding="utf-8")
        assert load_answers(path)["moveDistance"].value == "Long Distance"


class TestAssessmentRepositories:
    def test_in_memory_unknown_user(self):
        repo = InMemoryAssessmentRepository()
        with pytest.raises(KeyError):
            asyncio.run(repo.fetch_answers("nobody"))

    def test_file_repository(self, tmp_path):
        (tmp_path / "u1.json").write_text('{"anyPets": "Yes"}', encoding="utf-8")
        answers = asyncio.run(FileAssessmentRepository(tmp_path).fetch_answers("u1"))
        assert answers["anyPets"].value == "Yes"

    def test_file_repository_missing_user(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            asyncio.run(FileAssessmentRepository(tmp_path).fetch_answers("u2"))


class TestJsonFileTaskStore:
    def test_write_and_read(self, tmp_path):
        store = JsonFileTaskStore(tmp_path / "tasks")
        tasks = [GeneratedTask.from_entry(CatalogEntry(id="A", title="A"), "u1", NOW)]
        asyncio.run(store.replace_tasks("u1", tasks))
        assert store.read_tasks("u1") == tasks
        assert [p.name for p in (tmp_path / "tasks").iterdir()] == ["u1.tasks.json"]

    def test_clause_order_survives_write(self, tmp_path):
        store = JsonFileTaskStore(tmp_path)
        entry = CatalogEntry(
            id="A",
            title="A",
            conditions=ConditionSpec.from_mapping({"newRentOrOwn": ["Rent"], "newDwellingType": ["Condo"]}),
        )
        asyncio.run(store.replace_tasks("u1", [GeneratedTask.from_entry(entry, "u1", NOW)]))
        assert store.read_tasks("u1")[0].entry.conditions.fields == ["newRentOrOwn", "newDwellingType"]

    def test_replace_supersedes(self, tmp_path):
        store = JsonFileTaskStore(tmp_path)
        first = [GeneratedTask.from_entry(CatalogEntry(id="A", title="A"), "u1", NOW)]
        asyncio.run(store.replace_tasks("u1", first))
        asyncio.run(store.replace_tasks("u1", []))
        assert store.read_tasks("u1") == []

    def test_unknown_user_reads_empty(self, tmp_path):
        assert JsonFileTaskStore(tmp_path).read_tasks("nobody") == []

    def test_write_failure(self, tmp_path):
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("", encoding="utf-8")
        store = JsonFileTaskStore(blocker)
        with pytest.raises(TaskStoreError):
            asyncio.run(store.replace_tasks("u1", []))


def test_file_backed_run(tmp_path):
    """End to end with file adapters."""
    catalog_path = tmp_path / "catalog.yaml"
    catalog_path.write_text(catalog_to_yaml(build_example_catalog()), encoding="utf-8")
    answers_dir = tmp_path / "answers"
    answers_dir.mkdir()
    (answers_dir / "u1.json").write_text(json.dumps(example_answers()), encoding="utf-8")
    store = JsonFileTaskStore(tmp_path / "tasks")

    orchestrator = TaskGenerationOrchestrator(
        FileCatalogRepository(catalog_path),
        FileAssessmentRepository(answers_dir),
        store,
        clock=FixedClock(NOW),
    )
    result = asyncio.run(orchestrator.run("u1"))

    assert result.ok
    assert [t.id for t in store.read_tasks("u1")] == list(result.task_ids)
    assert all(t.created_at == NOW for t in store.read_tasks("u1"))
