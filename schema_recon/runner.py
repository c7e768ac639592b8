from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Set

from sqlalchemy.exc import SQLAlchemyError

from transit_ingest.common import PrintLogger
from transit_ingest.config import DEFAULT_NAMESPACE_TYPES
from transit_ingest.metadata.schema import ExpectedTable, NamespaceCheck

from .catalog import NamespaceCatalog
from .results import NamespaceFailure, SchemaCheckReport
from .sources import NamespaceSource, NamespaceTarget, registry
from .updater import SchemaUpdater, SchemaUpgradeError


def _resolve_sources(namespace_types: Optional[Iterable[str]], logger: PrintLogger) -> List[NamespaceSource]:
    sources: List[NamespaceSource] = []
    for entry in namespace_types or DEFAULT_NAMESPACE_TYPES:
        source_cls = registry.get(str(entry))
        if source_cls is None:
            raise ValueError(f"Unsupported namespace type: {entry}")
        sources.append(source_cls(logger))
    return sources


def collect_targets(
    catalog: NamespaceCatalog,
    namespace_types: Optional[Iterable[str]],
    logger: PrintLogger,
) -> List[NamespaceTarget]:
    sources = _resolve_sources(namespace_types, logger)
    targets: List[NamespaceTarget] = []
    for project in catalog.iter_projects():
        logger.info("schema_check_project", project=project.name, feed_sources=len(project.feed_sources))
        for feed_source in project.feed_sources:
            for source in sources:
                targets.extend(source.targets(feed_source))
    return targets


def run_schema_check(
    *,
    updater: SchemaUpdater,
    catalog: NamespaceCatalog,
    expected_tables: Sequence[ExpectedTable],
    logger: PrintLogger,
    namespace_types: Optional[Iterable[str]] = None,
    upgrade: bool = False,
) -> SchemaCheckReport:
    """
    Check every namespace referenced from the catalog and optionally upgrade them.

    Each distinct namespace is introspected once. A namespace whose check or
    upgrade fails is recorded in the report and the batch moves on.
    """
    updater.reset_checked_namespaces()
    targets = collect_targets(catalog, namespace_types, logger)
    return check_targets(
        updater=updater,
        targets=targets,
        expected_tables=expected_tables,
        logger=logger,
        upgrade=upgrade,
    )


def check_targets(
    *,
    updater: SchemaUpdater,
    targets: Iterable[NamespaceTarget],
    expected_tables: Sequence[ExpectedTable],
    logger: PrintLogger,
    upgrade: bool = False,
) -> SchemaCheckReport:
    report = SchemaCheckReport()
    checks: Dict[str, NamespaceCheck] = {}
    failed: Set[str] = set()
    for target in targets:
        if target.namespace in checks or target.namespace in failed:
            continue
        try:
            checks[target.namespace] = updater.check_namespace(
                target.namespace,
                expected_tables,
                owner=target.owner,
                label=target.label,
            )
        except SQLAlchemyError as exc:
            failed.add(target.namespace)
            logger.error(
                "schema_check_namespace_failed",
                namespace=target.namespace,
                label=target.label,
                err=str(exc),
            )
            report.failures.append(
                NamespaceFailure(
                    namespace=target.namespace,
                    owner=target.owner.name,
                    label=target.label,
                    stage="check",
                    error=str(exc),
                )
            )
    report.sql_changes = updater.render_sql_changes(checks.values())

    if upgrade:
        for namespace, check in list(checks.items()):
            if not check.needs_upgrade():
                continue
            try:
                report.upgrades.append(updater.apply_upgrade(check))
            except SchemaUpgradeError as exc:
                report.upgrades.append(exc.result)
                report.failures.append(
                    NamespaceFailure(
                        namespace=namespace,
                        owner=check.owner_name,
                        label=check.label,
                        stage="upgrade",
                        error=str(exc),
                    )
                )
                continue
            # Report the post-upgrade state instead of the stale check.
            try:
                checks[namespace] = updater.check_namespace(
                    namespace,
                    expected_tables,
                    owner=check.owner,
                    label=check.label,
                )
            except SQLAlchemyError as exc:
                logger.error("schema_recheck_namespace_failed", namespace=namespace, label=check.label, err=str(exc))
                report.failures.append(
                    NamespaceFailure(
                        namespace=namespace,
                        owner=check.owner_name,
                        label=check.label,
                        stage="recheck",
                        error=str(exc),
                    )
                )
    report.checks = list(checks.values())

    summary = report.summary
    logger.info("schema_check_summary", **summary.to_dict()["summary"])
    return report


__all__ = ["check_targets", "collect_targets", "run_schema_check"]
