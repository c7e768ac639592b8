from .reference import GtfsReferenceDataset, ReferenceDataset, ReferenceDatasetStore, open_reference
from .runner import GtfsPlusValidator
from .spec import FieldOption, FieldSpec, InputType, SpecConfigurationError, TableSpec, TableSpecRegistry
from .validation import TableReadError, ValidationIssue, ValidationReport, validate_table

__all__ = [
    "FieldOption",
    "FieldSpec",
    "GtfsPlusValidator",
    "GtfsReferenceDataset",
    "InputType",
    "ReferenceDataset",
    "ReferenceDatasetStore",
    "SpecConfigurationError",
    "TableReadError",
    "TableSpec",
    "TableSpecRegistry",
    "ValidationIssue",
    "ValidationReport",
    "open_reference",
    "validate_table",
]
