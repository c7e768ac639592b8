from __future__ import annotations

from typing import Any, Dict

try:
    from sqlalchemy import create_engine, text
    from sqlalchemy.engine import Connection, Engine
except ImportError as exc:  # pragma: no cover - dependency guard
    raise RuntimeError("SQLAlchemy support requires the 'sqlalchemy' package") from exc

from .base import ExecutionTool


class SQLAlchemyTool(ExecutionTool):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def connect(self) -> Connection:
        return self._engine.connect()

    def execute_statement(self, sql: str) -> None:
        # Each DDL statement commits on its own so a failure only rolls back itself.
        with self._engine.begin() as conn:
            conn.execute(text(sql))

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "SQLAlchemyTool":
        runtime = cfg.get("runtime", {})
        sa_cfg = runtime.get("sqlalchemy") or {}
        url = sa_cfg.get("url")
        if not url:
            raise ValueError("runtime.sqlalchemy.url must be provided for SQLAlchemy tool")
        engine = create_engine(url, **{k: v for k, v in sa_cfg.items() if k != "url"})
        return cls(engine)

    def stop(self) -> None:
        if self._engine:
            self._engine.dispose()
