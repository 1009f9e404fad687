"""
CSV Parser for task catalogs (authoring format → CatalogEntry objects).

CSV Format:
    id, title, conditions, task_type, urgency_percentage, [any other columns]

Syntax Notes:
    - conditions uses the string encoding: "Field: value, Field: value"
    - repeated fields are OR'ed: "moveDistance: Local, moveDistance: Long Distance"
    - an empty conditions cell means the task applies to everyone
    - extra columns (desc, tips, category, ...) are kept as metadata
"""

import csv
import os
import warnings
from dataclasses import dataclass, field
from io import StringIO
from typing import Dict, List

from taskgen.conditions import parse_condition_string
from taskgen.errors import CSVParseError
from taskgen.model import DEFAULT_URGENCY, CatalogEntry
from taskgen.serialization import PARENT_TASK_TYPES, task_type_from_str

REQUIRED_COLUMNS = ["id", "title", "conditions"]
_KNOWN_COLUMNS = {"id", "title", "conditions", "task_type", "urgency_percentage"}


@dataclass
class CSVRow:
    """Parsed CSV row."""
    id: str
    title: str
    conditions: str
    task_type: str = ""
    urgency_percentage: int = DEFAULT_URGENCY
    extra: Dict[str, str] = field(default_factory=dict)


def _parse_csv_rows(csv_content: str) -> List[CSVRow]:
    """Parse CSV content into structured rows."""
    reader = csv.DictReader(StringIO(csv_content))

    if reader.fieldnames is None:
        raise CSVParseError("CSV is empty")

    missing = [col for col in REQUIRED_COLUMNS if col not in reader.fieldnames]
    if missing:
        raise CSVParseError(f"Missing required columns: {missing}")

    rows = []
    for row_num, row in enumerate(reader, start=2):  # Start at 2 (header is line 1)
        try:
            urgency_cell = (row.get('urgency_percentage') or '').strip()
            csv_row = CSVRow(
                id=(row.get('id') or '').strip(),
                title=(row.get('title') or '').strip(),
                conditions=(row.get('conditions') or '').strip(),
                task_type=(row.get('task_type') or '').strip(),
                urgency_percentage=int(urgency_cell) if urgency_cell else DEFAULT_URGENCY,
                extra={
                    k: (v or '').strip()
                    for k, v in row.items()
                    if k is not None and k not in _KNOWN_COLUMNS and (v or '').strip()
                },
            )
        except ValueError as e:
            raise CSVParseError(f"Error parsing row {row_num}: {str(e)}")

        if not csv_row.id:
            raise CSVParseError(f"Error parsing row {row_num}: missing id")
        rows.append(csv_row)

    return rows


def parse_csv_string(csv_content: str, parent_types=PARENT_TASK_TYPES) -> List[CatalogEntry]:
    """
    Parse CSV content into catalog entries.

    Args:
        csv_content: CSV as string
        parent_types: Raw task_type values treated as parent containers

    Returns:
        CatalogEntry list in row order

    Raises:
        CSVParseError: If required columns are missing, a row is invalid,
            or ids are duplicated
    """
    rows = _parse_csv_rows(csv_content)

    ids = [row.id for row in rows]
    if len(ids) != len(set(ids)):
        duplicates = [i for i in ids if ids.count(i) > 1]
        raise CSVParseError(f"Duplicate entry ids: {set(duplicates)}")

    entries = []
    for row in rows:
        conditions = parse_condition_string(row.conditions)
        if row.conditions and conditions.is_unconditional:
            warnings.warn(
                f"Conditions for {row.id} contain no 'field: value' pairs: {row.conditions!r}",
                UserWarning,
            )
        if not 0 <= row.urgency_percentage <= 100:
            warnings.warn(
                f"Urgency for {row.id} outside 0-100: {row.urgency_percentage}", UserWarning
            )

        entries.append(CatalogEntry(
            id=row.id,
            title=row.title,
            conditions=conditions,
            task_type=task_type_from_str(row.task_type, parent_types),
            urgency_percentage=row.urgency_percentage,
            metadata=dict(row.extra),
            source_type=row.task_type or None,
        ))

    return entries


def parse_csv_file(filepath: str, parent_types=PARENT_TASK_TYPES) -> List[CatalogEntry]:
    """
    Parse a CSV catalog file.

    Raises:
        FileNotFoundError: If file doesn't exist
        CSVParseError: If parsing fails
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"CSV file not found: {filepath}")
    with open(filepath, 'r', encoding='utf-8', newline='') as f:
        content = f.read()
    return parse_csv_string(content, parent_types=parent_types)


__all__ = [
    "parse_csv_string",
    "parse_csv_file",
    "CSVParseError",
]
