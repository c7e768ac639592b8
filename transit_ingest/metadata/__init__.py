from .gtfs_tables import GTFS_TABLES
from .introspection import SchemaIntrospector
from .schema import (
    ColumnCheck,
    ColumnTypeMismatch,
    ExpectedColumn,
    ExpectedTable,
    NamespaceCheck,
    TableCheck,
    load_expected_tables,
    normalize_sql_type,
    summarize_checks,
    types_equivalent,
)

__all__ = [
    "ColumnCheck",
    "ColumnTypeMismatch",
    "ExpectedColumn",
    "ExpectedTable",
    "GTFS_TABLES",
    "NamespaceCheck",
    "SchemaIntrospector",
    "TableCheck",
    "load_expected_tables",
    "normalize_sql_type",
    "summarize_checks",
    "types_equivalent",
]
