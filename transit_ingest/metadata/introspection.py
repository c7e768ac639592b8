from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection

from .schema import ColumnCheck


class SchemaIntrospector:
    """
    Read table and column metadata for a namespace from ``information_schema``.

    The metadata statements are built once and reused for every call, and one
    connection is held until :meth:`close`. Each lookup ends its read
    transaction so DDL committed elsewhere is visible to the next call.
    """

    def __init__(self, tool: Any) -> None:
        self._conn: Optional[Connection] = tool.connect()
        self._select_tables = text(
            "select table_name from information_schema.tables "
            "where table_schema = :namespace order by table_name"
        )
        self._select_columns = text(
            "select column_name, data_type from information_schema.columns "
            "where table_schema = :namespace and table_name = :table_name order by ordinal_position"
        )

    def _connection(self) -> Connection:
        if self._conn is None:
            raise RuntimeError("SchemaIntrospector is closed")
        return self._conn

    def list_tables(self, namespace: str) -> List[str]:
        conn = self._connection()
        try:
            result = conn.execute(self._select_tables, {"namespace": namespace})
            return [str(row[0]) for row in result]
        finally:
            conn.rollback()

    def list_columns(self, namespace: str, table_name: str) -> List[ColumnCheck]:
        conn = self._connection()
        try:
            result = conn.execute(self._select_columns, {"namespace": namespace, "table_name": table_name})
            return [ColumnCheck(name=str(row[0]), sql_type=str(row[1])) for row in result]
        finally:
            conn.rollback()

    def close(self) -> None:
        if self._conn is not None:
            try:
                self._conn.close()
            finally:
                self._conn = None

    def __enter__(self) -> "SchemaIntrospector":
        return self

    def __exit__(self, *_exc: Any) -> None:
        self.close()


__all__ = ["SchemaIntrospector"]
