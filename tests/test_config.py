import json

import pytest

from transit_ingest.common import PrintLogger
from transit_ingest.config import load_config, parse_csv_option, validate_config


def _cfg(**overrides):
    cfg = {
        "runtime": {"job_name": "nightly", "sqlalchemy": {"url": "postgresql+psycopg2://localhost/gtfs"}},
        "gtfsplus": {"spec_path": "gtfsplus.json", "delimiter": ",", "encoding": "utf-8"},
        "schema_check": {"catalog_path": "catalog.json", "namespace_types": ["editor", "versions"]},
    }
    cfg.update(overrides)
    return cfg


def test_valid_config_passes():
    validate_config(_cfg())


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"gtfsplus": {"delimiter": ","}}, "spec_path"),
        ({"gtfsplus": {"spec_path": "x.json", "delimiter": ";;"}}, "delimiter"),
        ({"gtfsplus": {"spec_path": "x.json", "enabled": False}}, "enabled"),
        ({"gtfsplus": {"spec_path": "x.json", "enabled": "yes"}}, "boolean"),
        ({"schema_check": {"catalog_path": "c.json", "namespace_types": "editor"}}, "list"),
        ({"schema_check": {"catalog_path": "c.json", "namespace_types": ["branches"]}}, "branches"),
        ({"schema_check": {"namespace_types": ["editor"]}}, "catalog_path"),
        ({"schema_check": {"catalog_path": "c.json", "canonicalize_types": 1}}, "canonicalize_types"),
        ({"runtime": {}}, "runtime.sqlalchemy.url"),
        ({"runtime": "nope"}, "runtime"),
    ],
)
def test_invalid_config_is_rejected(overrides, message):
    with pytest.raises(ValueError) as exc:
        validate_config(_cfg(**overrides))

    assert message in str(exc.value)


def test_only_requested_sections_are_validated():
    cfg = _cfg()
    del cfg["schema_check"]
    cfg["runtime"] = {}

    validate_config(cfg, sections=("gtfsplus",))
    with pytest.raises(ValueError, match="Missing config key: schema_check"):
        validate_config(cfg, sections=("schema_check",))


def test_load_config_requires_an_object(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps([1, 2]), encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(str(path))


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, None),
        ("", None),
        (" , ", None),
        ("Editor, versions,,", ["editor", "versions"]),
    ],
)
def test_parse_csv_option(value, expected):
    assert parse_csv_option(value) == expected


def test_print_logger_emits_json_lines(tmp_path, capsys):
    log_file = tmp_path / "run.log"
    logger = PrintLogger(job_name="config_test", file_path=str(log_file))

    logger.warning("reference_cache_corrupted", version="v1", path=None)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["level"] == "WARN"
    assert payload["msg"] == "reference_cache_corrupted"
    assert payload["version"] == "v1"
    assert "path" not in payload
    assert json.loads(log_file.read_text(encoding="utf-8").strip())["job"] == "config_test"
