from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Dict, List, Optional, Type

from transit_ingest.common import PrintLogger

from ..catalog import FeedSource


@dataclass(frozen=True)
class NamespaceTarget:
    namespace: str
    owner: FeedSource
    label: str
    source_type: str


class SourceRegistry:
    """Registry of namespace types that can be enumerated for a feed source."""

    def __init__(self) -> None:
        self._by_type: Dict[str, Type["NamespaceSource"]] = {}

    def register(self, source_cls: Type["NamespaceSource"]) -> None:
        self._by_type[source_cls.type_name()] = source_cls

    def get(self, source_type: str) -> Optional[Type["NamespaceSource"]]:
        return self._by_type.get(source_type.strip().lower())

    def all(self) -> Dict[str, Type["NamespaceSource"]]:
        return dict(self._by_type)


registry = SourceRegistry()


class NamespaceSource(abc.ABC):
    """Yields the namespaces of one kind referenced by a feed source."""

    def __init__(self, logger: PrintLogger) -> None:
        self.logger = logger

    @classmethod
    def type_name(cls) -> str:
        return getattr(cls, "_TYPE", cls.__name__.lower())

    @abc.abstractmethod
    def targets(self, feed_source: FeedSource) -> List[NamespaceTarget]:
        ...
