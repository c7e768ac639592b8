from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from transit_ingest.metadata.schema import NamespaceCheck, summarize_checks

from .updater import UpgradeResult


@dataclass
class NamespaceFailure:
    namespace: str
    label: str
    stage: str
    error: str
    owner: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "namespace": self.namespace,
            "owner": self.owner,
            "label": self.label,
            "stage": self.stage,
            "error": self.error,
        }


@dataclass
class ReconRunSummary:
    namespaces: int
    orphans: int
    up_to_date: int
    needs_upgrade: int
    failed: int
    tables_to_create: int
    columns_to_add: int
    columns_to_retype: int

    @classmethod
    def from_results(
        cls,
        checks: Iterable[NamespaceCheck],
        failures: Iterable[NamespaceFailure],
    ) -> "ReconRunSummary":
        checks = list(checks)
        orphans = needs_upgrade = up_to_date = 0
        for check in checks:
            if check.is_orphan:
                orphans += 1
            elif check.needs_upgrade():
                needs_upgrade += 1
            else:
                up_to_date += 1
        pending = summarize_checks(checks)
        return cls(
            namespaces=len(checks),
            orphans=orphans,
            up_to_date=up_to_date,
            needs_upgrade=needs_upgrade,
            failed=len({failure.namespace for failure in failures}),
            tables_to_create=pending["tables_to_create"],
            columns_to_add=pending["columns_to_add"],
            columns_to_retype=pending["columns_to_retype"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "completed",
            "summary": {
                "namespaces": self.namespaces,
                "orphans": self.orphans,
                "up_to_date": self.up_to_date,
                "needs_upgrade": self.needs_upgrade,
                "failed": self.failed,
                "tables_to_create": self.tables_to_create,
                "columns_to_add": self.columns_to_add,
                "columns_to_retype": self.columns_to_retype,
            },
        }


@dataclass
class SchemaCheckReport:
    checks: List[NamespaceCheck] = field(default_factory=list)
    failures: List[NamespaceFailure] = field(default_factory=list)
    upgrades: List[UpgradeResult] = field(default_factory=list)
    sql_changes: str = ""

    @property
    def summary(self) -> ReconRunSummary:
        return ReconRunSummary.from_results(self.checks, self.failures)

    def has_issues(self) -> bool:
        summary = self.summary
        return bool(summary.needs_upgrade or summary.failed)

    def to_dict(self) -> Dict[str, Any]:
        payload = self.summary.to_dict()
        payload["namespaces"] = [check.to_dict() for check in self.checks]
        payload["failures"] = [failure.to_dict() for failure in self.failures]
        payload["upgrades"] = [upgrade.to_dict() for upgrade in self.upgrades]
        payload["sql_changes"] = self.sql_changes
        return payload


__all__ = ["NamespaceFailure", "ReconRunSummary", "SchemaCheckReport"]
