from __future__ import annotations

import abc
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StatementExecutor(Protocol):
    """Anything able to run a single DDL statement."""

    def execute_statement(self, sql: str) -> None: ...


class ExecutionTool(abc.ABC):
    """Handle to the relational backend used by the schema tooling."""

    @abc.abstractmethod
    def connect(self) -> Any:
        ...

    @abc.abstractmethod
    def execute_statement(self, sql: str) -> None:
        ...

    @abc.abstractmethod
    def stop(self) -> None:
        ...

    def __enter__(self) -> "ExecutionTool":
        return self

    def __exit__(self, *_exc: Any) -> None:
        self.stop()
