from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional

DEFAULT_NAMESPACE_TYPES = ("editor", "versions", "snapshots")


def load_config(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as handle:
        cfg = json.load(handle)
    if not isinstance(cfg, dict):
        raise ValueError("Configuration root must be an object")
    return cfg


def validate_config(cfg: Dict[str, Any], *, sections: Iterable[str] = ("gtfsplus", "schema_check")) -> None:
    """Raise ``ValueError`` when the sections required by a command are malformed."""

    def _require_bool(section: Dict[str, Any], key: str, context: str) -> None:
        if key in section and not isinstance(section[key], bool):
            raise ValueError(f"{context}.{key} must be a boolean")

    def _validate_gtfsplus(gtfsplus: Any) -> None:
        if not isinstance(gtfsplus, dict):
            raise ValueError("gtfsplus must be an object")
        _require_bool(gtfsplus, "enabled", "gtfsplus")
        if not gtfsplus.get("enabled", True):
            raise ValueError("gtfsplus.enabled must be true to run GTFS+ validation")
        spec_path = gtfsplus.get("spec_path")
        if not spec_path or not isinstance(spec_path, str):
            raise ValueError("gtfsplus.spec_path must be a non-empty string")
        delimiter = gtfsplus.get("delimiter", ",")
        if not isinstance(delimiter, str) or len(delimiter) != 1:
            raise ValueError("gtfsplus.delimiter must be a single character")
        encoding = gtfsplus.get("encoding", "utf-8")
        if not isinstance(encoding, str) or not encoding:
            raise ValueError("gtfsplus.encoding must be a non-empty string")
        cache_dir = gtfsplus.get("cache_dir")
        if cache_dir is not None and not isinstance(cache_dir, str):
            raise ValueError("gtfsplus.cache_dir must be a string when provided")

    def _validate_schema_check(schema_cfg: Any) -> None:
        # Imported lazily; the registry lives in the recon subsystem.
        from schema_recon.sources import registry

        if not isinstance(schema_cfg, dict):
            raise ValueError("schema_check must be an object")
        sa_cfg = cfg.get("runtime", {}).get("sqlalchemy") or {}
        if not sa_cfg.get("url"):
            raise ValueError("runtime.sqlalchemy.url must be provided for schema checks")
        catalog_path = schema_cfg.get("catalog_path")
        if not catalog_path or not isinstance(catalog_path, str):
            raise ValueError("schema_check.catalog_path must be a non-empty string")
        types = schema_cfg.get("namespace_types")
        if types is not None:
            if isinstance(types, str) or not isinstance(types, (list, tuple)):
                raise ValueError("schema_check.namespace_types must be a list")
            unknown = [entry for entry in types if registry.get(str(entry)) is None]
            if unknown:
                raise ValueError(f"Unsupported namespace types: {', '.join(map(str, unknown))}")
        expected_path = schema_cfg.get("expected_tables_path")
        if expected_path is not None and not isinstance(expected_path, str):
            raise ValueError("schema_check.expected_tables_path must be a string when provided")
        _require_bool(schema_cfg, "canonicalize_types", "schema_check")

    runtime = cfg.get("runtime")
    if runtime is not None and not isinstance(runtime, dict):
        raise ValueError("runtime must be an object when provided")
    for section in sections:
        if section not in cfg:
            raise ValueError(f"Missing config key: {section}")
        if section == "gtfsplus":
            _validate_gtfsplus(cfg[section])
        elif section == "schema_check":
            _validate_schema_check(cfg[section])
        else:
            raise ValueError(f"Unknown config section: {section}")


def parse_csv_option(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    entries = [entry.strip().lower() for entry in value.split(",") if entry.strip()]
    return entries or None


__all__ = ["DEFAULT_NAMESPACE_TYPES", "load_config", "parse_csv_option", "validate_config"]
