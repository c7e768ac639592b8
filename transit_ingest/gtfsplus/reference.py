from __future__ import annotations

import json
import os
import zipfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Iterator, Optional, Protocol, runtime_checkable

import pandas as pd

from transit_ingest.common import PrintLogger


@runtime_checkable
class ReferenceDataset(Protocol):
    """Read-only ID membership lookups against a loaded GTFS feed."""

    def has_route(self, route_id: str) -> bool: ...

    def has_stop(self, stop_id: str) -> bool: ...

    def has_trip(self, trip_id: str) -> bool: ...

    def has_fare(self, fare_id: str) -> bool: ...

    def has_service(self, service_id: str) -> bool: ...

    def close(self) -> None: ...


# (collection, GTFS file, id column); services come from both calendar files.
_REFERENCE_SOURCES = (
    ("routes", "routes.txt", "route_id"),
    ("stops", "stops.txt", "stop_id"),
    ("trips", "trips.txt", "trip_id"),
    ("fares", "fare_attributes.txt", "fare_id"),
    ("services", "calendar.txt", "service_id"),
    ("services", "calendar_dates.txt", "service_id"),
)


@dataclass(frozen=True)
class GtfsReferenceDataset:
    routes: FrozenSet[str] = field(default_factory=frozenset)
    stops: FrozenSet[str] = field(default_factory=frozenset)
    trips: FrozenSet[str] = field(default_factory=frozenset)
    fares: FrozenSet[str] = field(default_factory=frozenset)
    services: FrozenSet[str] = field(default_factory=frozenset)

    def has_route(self, route_id: str) -> bool:
        return route_id in self.routes

    def has_stop(self, stop_id: str) -> bool:
        return stop_id in self.stops

    def has_trip(self, trip_id: str) -> bool:
        return trip_id in self.trips

    def has_fare(self, fare_id: str) -> bool:
        return fare_id in self.fares

    def has_service(self, service_id: str) -> bool:
        return service_id in self.services

    def close(self) -> None:
        return None

    def counts(self) -> Dict[str, int]:
        return {
            "routes": len(self.routes),
            "stops": len(self.stops),
            "trips": len(self.trips),
            "fares": len(self.fares),
            "services": len(self.services),
        }

    @classmethod
    def from_ids(
        cls,
        *,
        routes: Iterable[str] = (),
        stops: Iterable[str] = (),
        trips: Iterable[str] = (),
        fares: Iterable[str] = (),
        services: Iterable[str] = (),
    ) -> "GtfsReferenceDataset":
        return cls(
            routes=frozenset(routes),
            stops=frozenset(stops),
            trips=frozenset(trips),
            fares=frozenset(fares),
            services=frozenset(services),
        )

    @classmethod
    def from_zip(cls, path: str) -> "GtfsReferenceDataset":
        collected: Dict[str, set] = {name: set() for name, _, _ in _REFERENCE_SOURCES}
        with zipfile.ZipFile(path) as archive:
            members = {os.path.basename(name): name for name in archive.namelist() if not name.endswith("/")}
            for collection, filename, column in _REFERENCE_SOURCES:
                member = members.get(filename)
                if member is None:
                    continue
                with archive.open(member) as handle:
                    collected[collection].update(_read_id_column(handle, column))
        return cls.from_ids(**collected)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "routes": sorted(self.routes),
            "stops": sorted(self.stops),
            "trips": sorted(self.trips),
            "fares": sorted(self.fares),
            "services": sorted(self.services),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GtfsReferenceDataset":
        if not isinstance(payload, dict):
            raise ValueError("reference cache payload must be an object")
        values = {}
        for key in ("routes", "stops", "trips", "fares", "services"):
            entries = payload[key]
            if not isinstance(entries, list):
                raise ValueError(f"reference cache entry '{key}' must be a list")
            values[key] = [str(entry) for entry in entries]
        return cls.from_ids(**values)


def _read_id_column(handle, column: str) -> Iterable[str]:
    try:
        frame = pd.read_csv(
            handle,
            usecols=lambda name: str(name).strip() == column,
            dtype=str,
            keep_default_na=False,
            encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError:
        return []
    if frame.empty or len(frame.columns) == 0:
        return []
    values = frame.iloc[:, 0]
    return [value for value in values.tolist() if value != ""]


class ReferenceDatasetStore:
    """On-disk cache of reference datasets keyed by dataset version id.

    A cache file that cannot be decoded is removed and rebuilt once from the
    GTFS archive.
    """

    def __init__(self, cache_dir: str, logger: Optional[PrintLogger] = None) -> None:
        self.cache_dir = cache_dir
        self.logger = logger

    def cache_path(self, version_id: str) -> str:
        return os.path.join(self.cache_dir, f"{version_id}.reference.json")

    def load(self, version_id: str, gtfs_path: str) -> GtfsReferenceDataset:
        path = self.cache_path(version_id)
        if os.path.isfile(path):
            try:
                with open(path, "r", encoding="utf-8") as handle:
                    dataset = GtfsReferenceDataset.from_dict(json.load(handle))
                self._log("info", "reference_cache_hit", version_id=version_id, path=path)
                return dataset
            except (ValueError, KeyError) as exc:
                self._log("error", "reference_cache_corrupted", version_id=version_id, path=path, err=str(exc))
                os.remove(path)
        self._log("info", "reference_cache_build", version_id=version_id, source=gtfs_path)
        dataset = GtfsReferenceDataset.from_zip(gtfs_path)
        os.makedirs(self.cache_dir, exist_ok=True)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as handle:
            json.dump(dataset.to_dict(), handle)
        os.replace(tmp_path, path)
        self._log("info", "reference_cache_written", version_id=version_id, path=path, **dataset.counts())
        return dataset

    @contextmanager
    def open(self, version_id: str, gtfs_path: str) -> Iterator[GtfsReferenceDataset]:
        dataset = self.load(version_id, gtfs_path)
        try:
            yield dataset
        finally:
            dataset.close()

    def _log(self, level: str, msg: str, **fields: Any) -> None:
        if self.logger is not None:
            self.logger.log(level, msg, **fields)


@contextmanager
def open_reference(dataset: ReferenceDataset) -> Iterator[ReferenceDataset]:
    """Scope an already-built reference dataset so it is closed after use."""
    try:
        yield dataset
    finally:
        dataset.close()


__all__ = [
    "GtfsReferenceDataset",
    "ReferenceDataset",
    "ReferenceDatasetStore",
    "open_reference",
]
