from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List, Optional

from transit_ingest.common import PrintLogger
from transit_ingest.config import load_config, parse_csv_option, validate_config
from transit_ingest.metadata.gtfs_tables import GTFS_TABLES
from transit_ingest.metadata.introspection import SchemaIntrospector
from transit_ingest.metadata.schema import load_expected_tables
from transit_ingest.tools.sqlalchemy import SQLAlchemyTool

from .catalog import FeedSource, JsonNamespaceCatalog
from .runner import check_targets, run_schema_check
from .sources import NamespaceTarget
from .updater import SchemaUpdater


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="schema-recon")
    parser.add_argument("--config", required=True, help="Path to JSON configuration file")
    parser.add_argument(
        "--namespace-types",
        default=None,
        help="Comma separated namespace types to check (editor, versions, snapshots; default: configured or all)",
    )
    parser.add_argument(
        "--namespace",
        action="append",
        default=None,
        help="Check only this namespace (repeatable); the catalog is not consulted",
    )
    parser.add_argument(
        "--upgrade",
        action="store_true",
        default=False,
        help="Apply the create/alter statements to every non-orphan namespace that needs them",
    )
    parser.add_argument("--output-json", default=None, help="Optional path to write the report as JSON")
    parser.add_argument(
        "--fail-on-issues",
        action="store_true",
        default=False,
        help="Exit with non-zero code if a namespace needs an upgrade or failed",
    )
    return parser.parse_args(argv)


def run_cli(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    cfg: Dict[str, Any] = load_config(args.config)
    validate_config(cfg, sections=("schema_check",))
    runtime = cfg.get("runtime", {})
    schema_cfg = cfg["schema_check"]
    logger = PrintLogger(job_name=runtime.get("job_name", "schema_recon"), file_path=runtime.get("log_file"))
    expected_path = schema_cfg.get("expected_tables_path")
    expected_tables = load_expected_tables(expected_path) if expected_path else list(GTFS_TABLES)
    namespace_types = parse_csv_option(args.namespace_types) or schema_cfg.get("namespace_types")

    tool = SQLAlchemyTool.from_config(cfg)
    try:
        with SchemaUpdater(
            SchemaIntrospector(tool),
            tool,
            logger,
            canonicalize_types=bool(schema_cfg.get("canonicalize_types", False)),
        ) as updater:
            if args.namespace:
                owner = FeedSource(id="cli", name="cli")
                targets = [
                    NamespaceTarget(namespace=namespace, owner=owner, label="requested", source_type="cli")
                    for namespace in args.namespace
                ]
                report = check_targets(
                    updater=updater,
                    targets=targets,
                    expected_tables=expected_tables,
                    logger=logger,
                    upgrade=args.upgrade,
                )
            else:
                report = run_schema_check(
                    updater=updater,
                    catalog=JsonNamespaceCatalog.from_path(schema_cfg["catalog_path"]),
                    expected_tables=expected_tables,
                    logger=logger,
                    namespace_types=namespace_types,
                    upgrade=args.upgrade,
                )
    finally:
        tool.stop()

    payload = report.to_dict()
    if args.output_json:
        with open(args.output_json, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, sort_keys=True)
    else:
        print(json.dumps(payload, indent=2, sort_keys=True))
    print(report.sql_changes)
    if args.fail_on_issues and report.has_issues():
        raise SystemExit(2)


__all__ = ["parse_args", "run_cli"]
