from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from transit_ingest.common import PrintLogger
from transit_ingest.metadata.introspection import SchemaIntrospector
from transit_ingest.metadata.schema import ExpectedTable, NamespaceCheck, TableCheck
from transit_ingest.tools.base import StatementExecutor


@dataclass(frozen=True)
class AppliedStatement:
    table: str
    statement: str


@dataclass(frozen=True)
class StatementFailure:
    table: str
    statement: str
    error: str


@dataclass
class UpgradeResult:
    namespace: str
    skipped: bool = False
    applied: List[AppliedStatement] = field(default_factory=list)
    failures: List[StatementFailure] = field(default_factory=list)

    @property
    def first_failure(self) -> Optional[StatementFailure]:
        return self.failures[0] if self.failures else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "namespace": self.namespace,
            "skipped": self.skipped,
            "applied": [entry.statement for entry in self.applied],
            "failures": [
                {"table": entry.table, "statement": entry.statement, "error": entry.error} for entry in self.failures
            ],
        }


class SchemaUpgradeError(RuntimeError):
    """Raised when one or more DDL statements failed during an upgrade."""

    def __init__(self, message: str, result: UpgradeResult) -> None:
        super().__init__(message)
        self.result = result


class SchemaUpdater:
    """
    Detect whether feed namespaces match the expected GTFS table layout and
    create missing tables, add missing columns and retype mismatched columns.

    Checked namespaces are memoized for the lifetime of a run. The cache has a
    single writer; callers sharing an updater across threads must synchronize.
    """

    def __init__(
        self,
        introspector: SchemaIntrospector,
        executor: StatementExecutor,
        logger: PrintLogger,
        *,
        canonicalize_types: bool = False,
    ) -> None:
        self.introspector = introspector
        self.executor = executor
        self.logger = logger
        self.canonicalize_types = canonicalize_types
        self._checked_namespaces: Dict[str, NamespaceCheck] = {}

    @property
    def checked_namespaces(self) -> Dict[str, NamespaceCheck]:
        return dict(self._checked_namespaces)

    def reset_checked_namespaces(self) -> None:
        self._checked_namespaces = {}

    def check_namespace(
        self,
        namespace: str,
        expected_tables: Sequence[ExpectedTable],
        owner: Any = None,
        label: str = "",
    ) -> NamespaceCheck:
        existing = self._checked_namespaces.get(namespace)
        if existing is not None:
            return existing
        check = self._build_check(namespace, expected_tables, owner, label)
        self._checked_namespaces[namespace] = check
        for line in check.report_lines():
            self.logger.debug("schema_check_report", namespace=namespace, line=line)
        self.logger.info(
            "schema_check_namespace",
            namespace=namespace,
            label=label,
            orphan=check.is_orphan,
            missing_tables=len(check.missing_tables),
            tables_with_column_issues=len(check.tables_with_column_issues()),
        )
        return check

    def _build_check(
        self,
        namespace: str,
        expected_tables: Sequence[ExpectedTable],
        owner: Any,
        label: str,
    ) -> NamespaceCheck:
        observed_tables = {name.lower() for name in self.introspector.list_tables(namespace)}
        check = NamespaceCheck(namespace=namespace, owner=owner, label=label)
        if not observed_tables:
            check.is_orphan = True
            return check
        for expected in expected_tables:
            if expected.name.lower() not in observed_tables:
                check.missing_tables.append(expected)
                continue
            columns = self.introspector.list_columns(namespace, expected.name)
            check.checked_tables.append(
                TableCheck(expected, columns, canonicalize_types=self.canonicalize_types)
            )
        return check

    def apply_upgrade(self, namespace_check: NamespaceCheck) -> UpgradeResult:
        """
        Bring a namespace in line with its check.

        Orphan namespaces are never modified. A failing statement stops the
        work for its own table only; remaining tables are still processed and
        :class:`SchemaUpgradeError` is raised at the end with the full result.
        """
        namespace = namespace_check.namespace
        result = UpgradeResult(namespace=namespace)
        if namespace_check.is_orphan:
            result.skipped = True
            self.logger.warn("schema_upgrade_skipped_orphan", namespace=namespace)
            return result

        for table in namespace_check.missing_tables:
            self._execute(result, table.name, [table.create_table_sql(namespace)])
        for table_check in namespace_check.tables_with_column_issues():
            alter_sql = table_check.alter_table_sql(namespace)
            if alter_sql:
                self._execute(result, table_check.name, [alter_sql])

        if result.applied:
            # Cached check no longer reflects the live schema.
            self._checked_namespaces.pop(namespace, None)
        self.logger.info(
            "schema_upgrade_done",
            namespace=namespace,
            applied=len(result.applied),
            failed=len(result.failures),
        )
        if result.failures:
            first = result.first_failure
            raise SchemaUpgradeError(
                f"Upgrade of namespace {namespace} failed on '{first.statement}': {first.error}",
                result,
            )
        return result

    def _execute(self, result: UpgradeResult, table: str, statements: Iterable[str]) -> None:
        for statement in statements:
            self.logger.info("schema_upgrade_execute", namespace=result.namespace, table=table, sql=statement)
            try:
                self.executor.execute_statement(statement)
            except SQLAlchemyError as exc:
                self.logger.error(
                    "schema_upgrade_statement_failed",
                    namespace=result.namespace,
                    table=table,
                    sql=statement,
                    err=str(exc),
                )
                result.failures.append(StatementFailure(table=table, statement=statement, error=str(exc)))
                return
            result.applied.append(AppliedStatement(table=table, statement=statement))

    def render_sql_changes(self, checks: Optional[Iterable[NamespaceCheck]] = None) -> str:
        """Human-readable list of the DDL each non-orphan namespace still needs."""
        if checks is None:
            checks = self._checked_namespaces.values()
        lines = ["-- Overview of changes that should be performed:"]
        for check in checks:
            if check.is_orphan or not check.needs_upgrade():
                continue
            lines.append(f"-- {check.header_text()}")
            for table in check.missing_tables:
                lines.append(f"{table.create_table_sql(check.namespace)};")
            for table_check in check.tables_with_column_issues():
                lines.append(f"{table_check.alter_table_sql(check.namespace)};")
        lines.append("-- End of changes")
        return "\n".join(lines)

    def close(self) -> None:
        self.introspector.close()

    def __enter__(self) -> "SchemaUpdater":
        return self

    def __exit__(self, *_exc: Any) -> None:
        self.close()


__all__ = [
    "AppliedStatement",
    "SchemaUpdater",
    "SchemaUpgradeError",
    "StatementFailure",
    "UpgradeResult",
]
