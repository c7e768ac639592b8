from typing import Any, List, Tuple

import pytest
from sqlalchemy import create_engine, event, text

from transit_ingest.tools.sqlalchemy import SQLAlchemyTool


class RecordingLogger:
    """Collects structured log events instead of printing them."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, str, dict]] = []

    def log(self, level: str, msg: str, **fields: Any) -> None:
        self.events.append((level.upper(), msg, fields))

    def debug(self, msg: str, **fields: Any) -> None:
        self.log("DEBUG", msg, **fields)

    def info(self, msg: str, **fields: Any) -> None:
        self.log("INFO", msg, **fields)

    def warn(self, msg: str, **fields: Any) -> None:
        self.log("WARN", msg, **fields)

    warning = warn

    def error(self, msg: str, **fields: Any) -> None:
        self.log("ERROR", msg, **fields)

    def messages(self, level: str | None = None) -> List[str]:
        return [msg for lvl, msg, _ in self.events if level is None or lvl == level.upper()]


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def tool(tmp_path):
    """SQLAlchemyTool over SQLite with an attached ``information_schema`` database."""
    engine = create_engine(f"sqlite:///{tmp_path / 'main.db'}")
    info_path = tmp_path / "information_schema.db"

    @event.listens_for(engine, "connect")
    def _attach_information_schema(dbapi_conn, _record):
        dbapi_conn.execute(f"ATTACH DATABASE '{info_path}' AS information_schema")

    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE information_schema.tables (table_schema TEXT, table_name TEXT)"))
        conn.execute(
            text(
                "CREATE TABLE information_schema.columns "
                "(table_schema TEXT, table_name TEXT, column_name TEXT, data_type TEXT, ordinal_position INTEGER)"
            )
        )
        conn.execute(
            text("INSERT INTO information_schema.tables VALUES (:s, :t)"),
            [
                {"s": "ns1", "t": "trips"},
                {"s": "ns1", "t": "routes"},
                {"s": "other", "t": "stops"},
            ],
        )
        conn.execute(
            text("INSERT INTO information_schema.columns VALUES (:s, :t, :c, :d, :p)"),
            [
                {"s": "ns1", "t": "routes", "c": "route_short_name", "d": "text", "p": 2},
                {"s": "ns1", "t": "routes", "c": "route_id", "d": "text", "p": 1},
                {"s": "ns1", "t": "trips", "c": "trip_id", "d": "text", "p": 1},
                {"s": "other", "t": "routes", "c": "route_id", "d": "integer", "p": 1},
            ],
        )
    sa_tool = SQLAlchemyTool(engine)
    yield sa_tool
    sa_tool.stop()
