from __future__ import annotations

from typing import List

from ..catalog import FeedSource
from .base import NamespaceSource, NamespaceTarget


class EditorNamespaceSource(NamespaceSource):
    _TYPE = "editor"

    def targets(self, feed_source: FeedSource) -> List[NamespaceTarget]:
        if not feed_source.editor_namespace:
            return []
        return [
            NamespaceTarget(
                namespace=feed_source.editor_namespace,
                owner=feed_source,
                label="editor",
                source_type=self.type_name(),
            )
        ]


class VersionNamespaceSource(NamespaceSource):
    _TYPE = "versions"

    def targets(self, feed_source: FeedSource) -> List[NamespaceTarget]:
        with_namespace = [version for version in feed_source.versions if version.namespace]
        self.logger.info(
            "schema_check_feed_versions",
            feed_source=feed_source.id,
            with_namespace=len(with_namespace),
            total=len(feed_source.versions),
        )
        return [
            NamespaceTarget(
                namespace=version.namespace,
                owner=feed_source,
                label=f"v{version.version}" if version.version is not None else "v?",
                source_type=self.type_name(),
            )
            for version in with_namespace
        ]


class SnapshotNamespaceSource(NamespaceSource):
    _TYPE = "snapshots"

    def targets(self, feed_source: FeedSource) -> List[NamespaceTarget]:
        with_namespace = [snapshot for snapshot in feed_source.snapshots if snapshot.namespace]
        self.logger.info(
            "schema_check_snapshots",
            feed_source=feed_source.id,
            with_namespace=len(with_namespace),
            total=len(feed_source.snapshots),
        )
        return [
            NamespaceTarget(
                namespace=snapshot.namespace,
                owner=feed_source,
                label=snapshot.name or "(unnamed)",
                source_type=self.type_name(),
            )
            for snapshot in with_namespace
        ]
