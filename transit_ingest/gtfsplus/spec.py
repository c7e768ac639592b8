from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple


class SpecConfigurationError(ValueError):
    """Raised when a GTFS+ table specification cannot be used for validation."""


class InputType(str, Enum):
    DROPDOWN = "DROPDOWN"
    TEXT = "TEXT"
    GTFS_ROUTE = "GTFS_ROUTE"
    GTFS_STOP = "GTFS_STOP"
    GTFS_TRIP = "GTFS_TRIP"
    GTFS_FARE = "GTFS_FARE"
    GTFS_SERVICE = "GTFS_SERVICE"

    @classmethod
    def parse(cls, value: Any) -> Optional["InputType"]:
        """Exact, case-sensitive match; any other spelling is an unknown type."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


# Entity label used in "not found in GTFS" descriptions.
REFERENCE_ENTITIES: Dict[InputType, str] = {
    InputType.GTFS_ROUTE: "Route",
    InputType.GTFS_STOP: "Stop",
    InputType.GTFS_TRIP: "Trip",
    InputType.GTFS_FARE: "Fare",
    InputType.GTFS_SERVICE: "Service",
}


@dataclass(frozen=True)
class FieldOption:
    value: str


@dataclass(frozen=True)
class FieldSpec:
    name: str
    required: bool = False
    input_type: Optional[InputType] = None
    input_type_name: str = ""
    max_length: Optional[int] = None
    options: Tuple[FieldOption, ...] = ()

    def __post_init__(self) -> None:
        if self.input_type is InputType.DROPDOWN and not self.options:
            raise SpecConfigurationError(f"DROPDOWN field '{self.name}' requires at least one option")
        if self.max_length is not None and self.input_type is not InputType.TEXT:
            object.__setattr__(self, "max_length", None)

    @staticmethod
    def from_config(config: Dict[str, Any], *, table_id: str = "?") -> "FieldSpec":
        if not isinstance(config, dict):
            raise SpecConfigurationError(f"Table '{table_id}' has a field entry that is not an object")
        name = config.get("name")
        if not name or not isinstance(name, str):
            raise SpecConfigurationError(f"Table '{table_id}' has a field without a name")
        raw_type = config.get("inputType", config.get("input_type", ""))
        input_type = InputType.parse(raw_type)
        required = config.get("required")
        if required is None:
            required = False
        elif not isinstance(required, bool):
            raise SpecConfigurationError(f"Field '{table_id}.{name}' required must be a boolean, got {required!r}")
        max_length = config.get("maxLength", config.get("max_length"))
        if max_length is not None:
            if isinstance(max_length, bool) or not isinstance(max_length, int) or max_length < 0:
                raise SpecConfigurationError(
                    f"Field '{table_id}.{name}' maxLength must be a non-negative integer, got {max_length!r}"
                )
        options_cfg = config.get("options") or []
        if not isinstance(options_cfg, list):
            raise SpecConfigurationError(f"Field '{table_id}.{name}' options must be a list")
        options: List[FieldOption] = []
        for entry in options_cfg:
            value = entry.get("value") if isinstance(entry, dict) else entry
            if value is None:
                raise SpecConfigurationError(f"Field '{table_id}.{name}' has an option without a value")
            options.append(FieldOption(value=str(value)))
        try:
            return FieldSpec(
                name=name,
                required=required,
                input_type=input_type,
                input_type_name=str(raw_type or ""),
                max_length=max_length,
                options=tuple(options),
            )
        except SpecConfigurationError as exc:
            raise SpecConfigurationError(f"Table '{table_id}': {exc}") from exc


@dataclass(frozen=True)
class TableSpec:
    id: str
    name: str
    fields: Tuple[FieldSpec, ...] = field(default_factory=tuple)

    @staticmethod
    def from_config(config: Dict[str, Any]) -> "TableSpec":
        if not isinstance(config, dict):
            raise SpecConfigurationError("Table specification entries must be objects")
        table_id = config.get("id")
        name = config.get("name")
        if not table_id or not isinstance(table_id, str):
            raise SpecConfigurationError("Table specification requires a string 'id'")
        if not name or not isinstance(name, str):
            raise SpecConfigurationError(f"Table '{table_id}' requires a string 'name'")
        fields_cfg = config.get("fields") or []
        if not isinstance(fields_cfg, list):
            raise SpecConfigurationError(f"Table '{table_id}' fields must be a list")
        fields = tuple(FieldSpec.from_config(entry, table_id=table_id) for entry in fields_cfg)
        return TableSpec(id=table_id, name=name, fields=fields)

    def field_names(self) -> List[str]:
        return [spec_field.name for spec_field in self.fields]


class TableSpecRegistry:
    """Table specs keyed by the file name they validate (e.g. ``realtime_routes.txt``)."""

    def __init__(self, specs: Iterable[TableSpec]) -> None:
        self._by_name: Dict[str, TableSpec] = {}
        self._by_id: Dict[str, TableSpec] = {}
        for spec in specs:
            if spec.name in self._by_name:
                raise SpecConfigurationError(f"Duplicate table name in specification: {spec.name}")
            self._by_name[spec.name] = spec
            self._by_id[spec.id] = spec

    def get(self, name: str) -> Optional[TableSpec]:
        return self._by_name.get(name)

    def by_id(self, table_id: str) -> Optional[TableSpec]:
        return self._by_id.get(table_id)

    def names(self) -> Sequence[str]:
        return list(self._by_name)

    def __iter__(self) -> Iterator[TableSpec]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    @classmethod
    def from_config(cls, config: Any) -> "TableSpecRegistry":
        if not isinstance(config, list):
            raise SpecConfigurationError("GTFS+ specification must be a list of tables")
        return cls(TableSpec.from_config(entry) for entry in config)

    @classmethod
    def from_path(cls, path: str) -> "TableSpecRegistry":
        with open(path, "r", encoding="utf-8") as handle:
            try:
                config = json.load(handle)
            except json.JSONDecodeError as exc:
                raise SpecConfigurationError(f"GTFS+ specification {path} is not valid JSON: {exc}") from exc
        return cls.from_config(config)


__all__ = [
    "FieldOption",
    "FieldSpec",
    "InputType",
    "REFERENCE_ENTITIES",
    "SpecConfigurationError",
    "TableSpec",
    "TableSpecRegistry",
]
