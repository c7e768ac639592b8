from .base import NamespaceSource, NamespaceTarget, SourceRegistry, registry
from .builtin import EditorNamespaceSource, SnapshotNamespaceSource, VersionNamespaceSource

registry.register(EditorNamespaceSource)
registry.register(VersionNamespaceSource)
registry.register(SnapshotNamespaceSource)

__all__ = ["NamespaceSource", "NamespaceTarget", "SourceRegistry", "registry"]
