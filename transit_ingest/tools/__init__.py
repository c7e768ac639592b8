from .base import ExecutionTool, StatementExecutor

__all__ = ["ExecutionTool", "StatementExecutor"]
