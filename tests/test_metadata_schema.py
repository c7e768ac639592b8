import json

import pytest

from transit_ingest.metadata.gtfs_tables import GTFS_TABLES
from transit_ingest.metadata.schema import (
    ColumnCheck,
    ExpectedColumn,
    ExpectedTable,
    NamespaceCheck,
    TableCheck,
    load_expected_tables,
    normalize_sql_type,
    summarize_checks,
    types_equivalent,
)


def _table(name, columns):
    return ExpectedTable(name=name, columns=tuple(ExpectedColumn(col, sql_type) for col, sql_type in columns))


def _observed(columns):
    return [ColumnCheck(name, sql_type) for name, sql_type in columns]


STOPS = _table("stops", [("stop_id", "character varying"), ("stop_lat", "double precision"), ("zone_id", "character varying")])


def test_table_check_matching_schema_has_no_issues():
    check = TableCheck(STOPS, _observed([("stop_id", "character varying"), ("stop_lat", "double precision"), ("zone_id", "character varying")]))

    assert not check.has_column_issues()
    assert check.alter_table_sql("ns") is None


def test_table_check_derives_missing_and_mismatched_columns():
    check = TableCheck(STOPS, _observed([("stop_id", "character varying"), ("stop_lat", "text"), ("extra", "integer")]))

    assert [col.name for col in check.missing_columns] == ["zone_id"]
    assert [(m.name, m.expected_type, m.observed_type) for m in check.mismatched_type_columns] == [
        ("stop_lat", "double precision", "text")
    ]
    assert check.has_column_issues()
    assert check.alter_table_sql("abc_123") == (
        "ALTER TABLE abc_123.stops ADD COLUMN IF NOT EXISTS zone_id character varying, "
        "ALTER COLUMN stop_lat TYPE double precision USING stop_lat::double precision"
    )


def test_exact_type_comparison_is_the_default():
    check = TableCheck(STOPS, _observed([("stop_id", "varchar"), ("stop_lat", "float8"), ("zone_id", "character varying")]))

    assert [m.name for m in check.mismatched_type_columns] == ["stop_id", "stop_lat"]


def test_canonical_type_comparison_accepts_synonyms():
    check = TableCheck(
        STOPS,
        _observed([("stop_id", "VARCHAR(255)"), ("stop_lat", "float8"), ("zone_id", "character varying")]),
        canonicalize_types=True,
    )

    assert not check.has_column_issues()


@pytest.mark.parametrize(
    "left,right",
    [
        ("character varying", "varchar"),
        ("int4", "integer"),
        ("INTEGER", "serial"),
        ("bool", "boolean"),
        ("timestamp without time zone", "timestamp"),
        ("numeric(10, 2)", "decimal"),
    ],
)
def test_type_synonyms(left, right):
    assert types_equivalent(left, right, canonicalize=True)
    assert not types_equivalent(left, right)


def test_normalize_sql_type_trims_without_canonicalizing():
    assert normalize_sql_type("  Character Varying ") == "Character Varying"
    assert normalize_sql_type(None) == ""
    assert normalize_sql_type("  Character   Varying(20) ", canonicalize=True) == "varchar"


def test_create_table_sql_lists_expected_columns():
    table = _table("stop_attributes", [("stop_id", "text"), ("accessibility_id", "integer")])

    assert table.create_table_sql("ns1") == (
        "CREATE TABLE IF NOT EXISTS ns1.stop_attributes (stop_id text, accessibility_id integer)"
    )


def test_namespace_check_report_and_summary():
    trips_check = TableCheck(_table("trips", [("trip_id", "text"), ("shape_id", "text")]), _observed([("trip_id", "text")]))
    routes_check = TableCheck(_table("routes", [("route_id", "text")]), _observed([("route_id", "text")]))
    check = NamespaceCheck(
        namespace="abc",
        label="v3",
        missing_tables=[_table("shapes", [("shape_id", "text")])],
        checked_tables=[trips_check, routes_check],
    )
    orphan = NamespaceCheck(namespace="gone", label="editor", is_orphan=True)

    assert check.needs_upgrade()
    assert not orphan.needs_upgrade()
    assert check.report_lines() == [
        "Namespace v3 (abc)",
        "  missing table: shapes",
        "  trips: missing columns shape_id",
    ]
    assert orphan.report_lines() == ["Namespace editor (gone)", "  orphan: no tables found"]
    assert summarize_checks([check, orphan]) == {"tables_to_create": 1, "columns_to_add": 1, "columns_to_retype": 0}
    assert check.to_dict()["checked_tables"] == [
        {"table": "trips", "missing_columns": ["shape_id"], "mismatched_type_columns": []}
    ]


def test_load_expected_tables(tmp_path):
    path = tmp_path / "tables.json"
    path.write_text(
        json.dumps([{"name": "stop_attributes", "columns": [{"name": "stop_id", "type": "text"}]}]),
        encoding="utf-8",
    )

    tables = load_expected_tables(str(path))

    assert tables == [ExpectedTable("stop_attributes", (ExpectedColumn("stop_id", "text"),))]


@pytest.mark.parametrize(
    "cfg",
    [
        {"columns": [{"name": "a", "type": "text"}]},
        {"name": "t", "columns": []},
        {"name": "t", "columns": [{"name": "a"}]},
    ],
)
def test_expected_table_config_errors(cfg):
    with pytest.raises(ValueError):
        ExpectedTable.from_config(cfg)


def test_builtin_gtfs_tables_are_well_formed():
    names = [table.name for table in GTFS_TABLES]
    assert len(names) == len(set(names))
    assert {"routes", "stops", "trips", "stop_times"} <= set(names)
    assert all(table.columns for table in GTFS_TABLES)
