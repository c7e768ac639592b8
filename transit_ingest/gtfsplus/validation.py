from __future__ import annotations

import csv
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, TextIO

from .reference import ReferenceDataset
from .spec import REFERENCE_ENTITIES, FieldSpec, InputType, TableSpec

HEADER_ROW = -1
NOT_FOUND = "not found in GTFS"


@dataclass(frozen=True)
class ValidationIssue:
    table_id: str
    field_name: str
    row_index: int
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table_id": self.table_id,
            "field_name": self.field_name,
            "row_index": self.row_index,
            "description": self.description,
        }


@dataclass
class ValidationReport:
    subject_id: str
    is_published_snapshot: bool
    last_modified: Optional[datetime] = None
    issues: List[ValidationIssue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "is_published_snapshot": self.is_published_snapshot,
            "last_modified": self.last_modified.isoformat() if self.last_modified else None,
            "issue_count": len(self.issues),
            "issues": [issue.to_dict() for issue in self.issues],
        }


class TableReadError(OSError):
    """Reading a table stream failed; ``issues`` holds what was found before the failure."""

    def __init__(self, table_id: str, issues: List[ValidationIssue], cause: BaseException) -> None:
        super().__init__(f"Failed to read GTFS+ table '{table_id}': {cause}")
        self.table_id = table_id
        self.issues = issues


def _reference_lookup(reference: ReferenceDataset, input_type: InputType) -> Callable[[str], bool]:
    lookups = {
        InputType.GTFS_ROUTE: reference.has_route,
        InputType.GTFS_STOP: reference.has_stop,
        InputType.GTFS_TRIP: reference.has_trip,
        InputType.GTFS_FARE: reference.has_fare,
        InputType.GTFS_SERVICE: reference.has_service,
    }
    return lookups[input_type]


def missing_id_text(value: str, entity: str) -> str:
    return " ".join((entity, "ID", value, NOT_FOUND))


def validate_value(
    issues: List[ValidationIssue],
    table_id: str,
    row_index: int,
    value: str,
    spec_field: Optional[FieldSpec],
    reference: ReferenceDataset,
) -> None:
    """Append the issues found for a single cell."""
    if spec_field is None:
        return
    name = spec_field.name

    if spec_field.required and not value:
        issues.append(ValidationIssue(table_id, name, row_index, "Required field missing value"))

    input_type = spec_field.input_type
    if input_type is InputType.DROPDOWN:
        candidate = value.casefold()
        valid = any(option.value.casefold() == candidate for option in spec_field.options)
        if not valid and not spec_field.required and value == "":
            valid = True
        if not valid:
            issues.append(ValidationIssue(table_id, name, row_index, f"Value: {value} is not a valid option."))
    elif input_type is InputType.TEXT:
        max_length = spec_field.max_length
        if max_length is not None and len(value) > max_length:
            issues.append(
                ValidationIssue(table_id, name, row_index, f"Text value exceeds the max. length of {max_length}")
            )
    elif input_type in REFERENCE_ENTITIES:
        if not _reference_lookup(reference, input_type)(value):
            issues.append(
                ValidationIssue(table_id, name, row_index, missing_id_text(value, REFERENCE_ENTITIES[input_type]))
            )


def _split_header(line: str) -> List[str]:
    line = line.rstrip("\r\n")
    if line.startswith("\ufeff"):
        line = line[1:]
    if not line:
        return []
    return line.split(",")


def validate_table(
    spec: TableSpec,
    stream: TextIO,
    reference: ReferenceDataset,
    *,
    delimiter: str = ",",
    issues: Optional[List[ValidationIssue]] = None,
) -> List[ValidationIssue]:
    """
    Validate one GTFS+ table read from ``stream`` against ``spec``.

    The header row is split on plain commas; data rows go through a
    delimiter-aware reader so quoted values may contain the delimiter. Issues
    are appended to ``issues`` (a new list when omitted) in production order:
    header issues first, then row issues row by row, column by column.
    Validation never stops on a data issue.
    """
    issues = issues if issues is not None else []
    table_id = spec.id
    try:
        headers = _split_header(stream.readline())
        fields_found: Dict[int, FieldSpec] = {}
        for spec_field in spec.fields:
            try:
                index = headers.index(spec_field.name)
            except ValueError:
                if spec_field.required:
                    issues.append(ValidationIssue(table_id, spec_field.name, HEADER_ROW, "Required column missing."))
                continue
            fields_found[index] = spec_field

        reader = csv.reader(stream, delimiter=delimiter)
        for row_index, values in enumerate(reader):
            for position, value in enumerate(values):
                validate_value(issues, table_id, row_index, value, fields_found.get(position), reference)
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise TableReadError(table_id, issues, exc) from exc
    return issues


__all__ = [
    "HEADER_ROW",
    "TableReadError",
    "ValidationIssue",
    "ValidationReport",
    "missing_id_text",
    "validate_table",
    "validate_value",
]
