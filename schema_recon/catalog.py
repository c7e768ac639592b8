from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Protocol, Sequence


@dataclass(frozen=True)
class FeedVersionRef:
    version: Optional[int]
    namespace: Optional[str] = None


@dataclass(frozen=True)
class SnapshotRef:
    name: Optional[str]
    namespace: Optional[str] = None


@dataclass(frozen=True)
class FeedSource:
    id: str
    name: str
    editor_namespace: Optional[str] = None
    versions: Sequence[FeedVersionRef] = ()
    snapshots: Sequence[SnapshotRef] = ()


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    feed_sources: Sequence[FeedSource] = field(default_factory=tuple)


class NamespaceCatalog(Protocol):
    """Source of the projects whose namespaces should be checked."""

    def iter_projects(self) -> Iterator[Project]: ...


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _opt_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


class JsonNamespaceCatalog:
    """Catalog backed by a JSON export of projects, feed sources, versions and snapshots."""

    def __init__(self, projects: Sequence[Project]) -> None:
        self._projects = list(projects)

    def iter_projects(self) -> Iterator[Project]:
        return iter(self._projects)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "JsonNamespaceCatalog":
        projects_cfg = config.get("projects") if isinstance(config, dict) else None
        if not isinstance(projects_cfg, list):
            raise ValueError("catalog must contain a 'projects' list")
        projects: List[Project] = []
        for project_cfg in projects_cfg:
            feed_sources: List[FeedSource] = []
            for fs_cfg in project_cfg.get("feed_sources") or project_cfg.get("feedSources") or []:
                versions = tuple(
                    FeedVersionRef(version=_opt_int(entry.get("version")), namespace=_opt_str(entry.get("namespace")))
                    for entry in fs_cfg.get("versions") or []
                )
                snapshots = tuple(
                    SnapshotRef(name=_opt_str(entry.get("name")), namespace=_opt_str(entry.get("namespace")))
                    for entry in fs_cfg.get("snapshots") or []
                )
                feed_sources.append(
                    FeedSource(
                        id=str(fs_cfg["id"]),
                        name=str(fs_cfg.get("name") or fs_cfg["id"]),
                        editor_namespace=_opt_str(fs_cfg.get("editor_namespace", fs_cfg.get("editorNamespace"))),
                        versions=versions,
                        snapshots=snapshots,
                    )
                )
            projects.append(
                Project(
                    id=str(project_cfg["id"]),
                    name=str(project_cfg.get("name") or project_cfg["id"]),
                    feed_sources=tuple(feed_sources),
                )
            )
        return cls(projects)

    @classmethod
    def from_path(cls, path: str) -> "JsonNamespaceCatalog":
        with open(path, "r", encoding="utf-8") as handle:
            return cls.from_config(json.load(handle))


__all__ = [
    "FeedSource",
    "FeedVersionRef",
    "JsonNamespaceCatalog",
    "NamespaceCatalog",
    "Project",
    "SnapshotRef",
]
