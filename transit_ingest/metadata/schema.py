from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

# Postgres spellings that information_schema reports differently from DDL.
_TYPE_SYNONYMS: Dict[str, str] = {
    "character varying": "varchar",
    "character": "char",
    "bpchar": "char",
    "int": "integer",
    "int4": "integer",
    "serial": "integer",
    "serial4": "integer",
    "int2": "smallint",
    "smallserial": "smallint",
    "int8": "bigint",
    "bigserial": "bigint",
    "serial8": "bigint",
    "float8": "double precision",
    "float4": "real",
    "bool": "boolean",
    "decimal": "numeric",
    "timestamp without time zone": "timestamp",
    "timestamptz": "timestamp with time zone",
    "time without time zone": "time",
    "timetz": "time with time zone",
}

_TYPE_MODIFIER = re.compile(r"\s*\([^)]*\)")


def normalize_sql_type(sql_type: Optional[str], *, canonicalize: bool = False) -> str:
    """
    Return the comparable spelling of a SQL type.

    Without ``canonicalize`` only surrounding whitespace is dropped, so types
    compare by exact spelling. With it the type is lower-cased, length or
    precision modifiers are removed and known synonyms are mapped to one name.
    """
    if sql_type is None:
        return ""
    value = str(sql_type).strip()
    if not canonicalize:
        return value
    value = _TYPE_MODIFIER.sub("", value.lower())
    value = " ".join(value.split())
    return _TYPE_SYNONYMS.get(value, value)


def types_equivalent(expected: Optional[str], observed: Optional[str], *, canonicalize: bool = False) -> bool:
    return normalize_sql_type(expected, canonicalize=canonicalize) == normalize_sql_type(
        observed, canonicalize=canonicalize
    )


@dataclass(frozen=True)
class ExpectedColumn:
    name: str
    sql_type: str


@dataclass(frozen=True)
class ExpectedTable:
    name: str
    columns: Tuple[ExpectedColumn, ...] = ()

    def column(self, name: str) -> Optional[ExpectedColumn]:
        lowered = name.lower()
        return next((col for col in self.columns if col.name.lower() == lowered), None)

    def create_table_sql(self, namespace: str) -> str:
        column_sql = ", ".join(f"{col.name} {col.sql_type}" for col in self.columns)
        return f"CREATE TABLE IF NOT EXISTS {namespace}.{self.name} ({column_sql})"

    @staticmethod
    def from_config(config: Dict[str, Any]) -> "ExpectedTable":
        if not isinstance(config, dict):
            raise ValueError("expected table entries must be objects")
        name = config.get("name")
        if not name or not isinstance(name, str):
            raise ValueError("expected table entries require a string 'name'")
        columns_cfg = config.get("columns") or []
        if not isinstance(columns_cfg, list) or not columns_cfg:
            raise ValueError(f"expected table '{name}' requires a non-empty 'columns' list")
        columns: List[ExpectedColumn] = []
        for entry in columns_cfg:
            col_name = entry.get("name") if isinstance(entry, dict) else None
            col_type = (entry.get("type") or entry.get("sql_type")) if isinstance(entry, dict) else None
            if not col_name or not col_type:
                raise ValueError(f"expected table '{name}' has a column without name or type")
            columns.append(ExpectedColumn(name=str(col_name), sql_type=str(col_type)))
        return ExpectedTable(name=name, columns=tuple(columns))


def load_expected_tables(path: str) -> List[ExpectedTable]:
    with open(path, "r", encoding="utf-8") as handle:
        config = json.load(handle)
    if not isinstance(config, list):
        raise ValueError(f"{path} must contain a list of tables")
    return [ExpectedTable.from_config(entry) for entry in config]


@dataclass(frozen=True)
class ColumnCheck:
    """Column as observed in the live schema."""

    name: str
    sql_type: str


@dataclass(frozen=True)
class ColumnTypeMismatch:
    name: str
    expected_type: str
    observed_type: str

    def render(self) -> str:
        return f"{self.name}:{self.observed_type}->{self.expected_type}"


class TableCheck:
    """Expected table compared with the columns found for it; derived once at construction."""

    def __init__(
        self,
        expected: ExpectedTable,
        observed_columns: Sequence[ColumnCheck],
        *,
        canonicalize_types: bool = False,
    ) -> None:
        self.expected = expected
        self.observed_columns: Tuple[ColumnCheck, ...] = tuple(observed_columns)
        observed_by_name = {col.name.lower(): col for col in self.observed_columns}
        self.missing_columns: Tuple[ExpectedColumn, ...] = tuple(
            col for col in expected.columns if col.name.lower() not in observed_by_name
        )
        mismatches: List[ColumnTypeMismatch] = []
        for observed in self.observed_columns:
            expected_col = expected.column(observed.name)
            if expected_col is None:
                continue
            if not types_equivalent(expected_col.sql_type, observed.sql_type, canonicalize=canonicalize_types):
                mismatches.append(
                    ColumnTypeMismatch(
                        name=expected_col.name,
                        expected_type=expected_col.sql_type,
                        observed_type=observed.sql_type,
                    )
                )
        self.mismatched_type_columns: Tuple[ColumnTypeMismatch, ...] = tuple(mismatches)

    @property
    def name(self) -> str:
        return self.expected.name

    def has_column_issues(self) -> bool:
        return bool(self.missing_columns or self.mismatched_type_columns)

    def alter_table_sql(self, namespace: str) -> Optional[str]:
        if not self.has_column_issues():
            return None
        clauses = [f"ADD COLUMN IF NOT EXISTS {col.name} {col.sql_type}" for col in self.missing_columns]
        clauses.extend(
            f"ALTER COLUMN {col.name} TYPE {col.expected_type} USING {col.name}::{col.expected_type}"
            for col in self.mismatched_type_columns
        )
        return f"ALTER TABLE {namespace}.{self.name} " + ", ".join(clauses)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table": self.name,
            "missing_columns": [col.name for col in self.missing_columns],
            "mismatched_type_columns": [col.render() for col in self.mismatched_type_columns],
        }


@dataclass
class NamespaceCheck:
    namespace: str
    owner: Any = None
    label: str = ""
    is_orphan: bool = False
    missing_tables: List[ExpectedTable] = field(default_factory=list)
    checked_tables: List[TableCheck] = field(default_factory=list)

    @property
    def owner_name(self) -> Optional[str]:
        if self.owner is None:
            return None
        return getattr(self.owner, "name", None) or str(self.owner)

    def tables_with_column_issues(self) -> List[TableCheck]:
        return [table for table in self.checked_tables if table.has_column_issues()]

    def needs_upgrade(self) -> bool:
        if self.is_orphan:
            return False
        return bool(self.missing_tables or self.tables_with_column_issues())

    def header_text(self) -> str:
        owner = self.owner_name
        prefix = f"{owner} " if owner else ""
        return f"{prefix}{self.label} ({self.namespace})".strip()

    def report_lines(self) -> List[str]:
        lines = [f"Namespace {self.header_text()}"]
        if self.is_orphan:
            lines.append("  orphan: no tables found")
            return lines
        for table in self.missing_tables:
            lines.append(f"  missing table: {table.name}")
        for table in self.tables_with_column_issues():
            if table.missing_columns:
                lines.append(
                    f"  {table.name}: missing columns {', '.join(col.name for col in table.missing_columns)}"
                )
            if table.mismatched_type_columns:
                lines.append(
                    f"  {table.name}: column type changes "
                    f"{', '.join(col.render() for col in table.mismatched_type_columns)}"
                )
        if len(lines) == 1:
            lines.append("  up to date")
        return lines

    def to_dict(self) -> Dict[str, Any]:
        return {
            "namespace": self.namespace,
            "owner": self.owner_name,
            "label": self.label,
            "is_orphan": self.is_orphan,
            "missing_tables": [table.name for table in self.missing_tables],
            "checked_tables": [table.to_dict() for table in self.tables_with_column_issues()],
        }


def summarize_checks(checks: Iterable[NamespaceCheck]) -> Dict[str, int]:
    tables_to_create = columns_to_add = columns_to_retype = 0
    for check in checks:
        if check.is_orphan:
            continue
        tables_to_create += len(check.missing_tables)
        for table in check.checked_tables:
            columns_to_add += len(table.missing_columns)
            columns_to_retype += len(table.mismatched_type_columns)
    return {
        "tables_to_create": tables_to_create,
        "columns_to_add": columns_to_add,
        "columns_to_retype": columns_to_retype,
    }


__all__ = [
    "ColumnCheck",
    "ColumnTypeMismatch",
    "ExpectedColumn",
    "ExpectedTable",
    "NamespaceCheck",
    "TableCheck",
    "load_expected_tables",
    "normalize_sql_type",
    "summarize_checks",
    "types_equivalent",
]
