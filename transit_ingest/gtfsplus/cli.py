from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List, Optional

from transit_ingest.common import PrintLogger
from transit_ingest.config import load_config, validate_config

from .reference import GtfsReferenceDataset, ReferenceDatasetStore, open_reference
from .runner import GtfsPlusValidator
from .spec import TableSpecRegistry


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="gtfsplus-validate")
    parser.add_argument("--config", required=True, help="Path to JSON configuration file")
    parser.add_argument("--feed-version-id", required=True, help="Identifier of the feed version being validated")
    parser.add_argument("--gtfs", required=True, help="Path to the published GTFS zip archive")
    parser.add_argument(
        "--gtfs-plus",
        default=None,
        help="Path to user-saved GTFS+ zip archive (defaults to validating the GTFS archive)",
    )
    parser.add_argument("--output-json", default=None, help="Optional path to write the validation report")
    parser.add_argument(
        "--fail-on-issues",
        action="store_true",
        default=False,
        help="Exit with non-zero code if any validation issue is found",
    )
    return parser.parse_args(argv)


def run_cli(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    cfg: Dict[str, Any] = load_config(args.config)
    validate_config(cfg, sections=("gtfsplus",))
    runtime = cfg.get("runtime", {})
    gtfsplus_cfg = cfg["gtfsplus"]
    logger = PrintLogger(job_name=runtime.get("job_name", "gtfsplus"), file_path=runtime.get("log_file"))
    specs = TableSpecRegistry.from_path(gtfsplus_cfg["spec_path"])
    validator = GtfsPlusValidator(
        specs,
        logger,
        delimiter=gtfsplus_cfg.get("delimiter", ","),
        encoding=gtfsplus_cfg.get("encoding", "utf-8"),
    )
    cache_dir = gtfsplus_cfg.get("cache_dir")
    if cache_dir:
        scope = ReferenceDatasetStore(cache_dir, logger).open(args.feed_version_id, args.gtfs)
    else:
        scope = open_reference(GtfsReferenceDataset.from_zip(args.gtfs))
    with scope as reference:
        report = validator.validate_feed(
            args.feed_version_id,
            args.gtfs,
            reference,
            gtfs_plus_path=args.gtfs_plus,
        )
    payload = report.to_dict()
    if args.output_json:
        with open(args.output_json, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, sort_keys=True)
    else:
        print(json.dumps(payload, indent=2, sort_keys=True))
    if args.fail_on_issues and report.issues:
        raise SystemExit(2)


__all__ = ["parse_args", "run_cli"]
