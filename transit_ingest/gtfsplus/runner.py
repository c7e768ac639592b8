from __future__ import annotations

import io
import os
import zipfile
from datetime import datetime
from typing import List, Optional

from transit_ingest.common import PrintLogger

from .reference import ReferenceDataset
from .spec import TableSpecRegistry
from .validation import ValidationIssue, ValidationReport, validate_table


class GtfsPlusValidator:
    """Validate every GTFS+ table found in a feed archive."""

    def __init__(
        self,
        specs: TableSpecRegistry,
        logger: PrintLogger,
        *,
        delimiter: str = ",",
        encoding: str = "utf-8",
    ) -> None:
        self.specs = specs
        self.logger = logger
        self.delimiter = delimiter
        self.encoding = encoding

    def validate_archive(
        self,
        archive_path: str,
        reference: ReferenceDataset,
        issues: Optional[List[ValidationIssue]] = None,
    ) -> List[ValidationIssue]:
        issues = issues if issues is not None else []
        tables_found = 0
        with zipfile.ZipFile(archive_path) as archive:
            for entry in archive.infolist():
                if entry.is_dir():
                    continue
                spec = self.specs.get(entry.filename)
                if spec is None:
                    continue
                tables_found += 1
                before = len(issues)
                with archive.open(entry) as raw:
                    stream = io.TextIOWrapper(raw, encoding=self.encoding, newline="")
                    validate_table(spec, stream, reference, delimiter=self.delimiter, issues=issues)
                self.logger.info(
                    "gtfsplus_table_validated",
                    table=entry.filename,
                    table_id=spec.id,
                    issues=len(issues) - before,
                )
        self.logger.info("gtfsplus_tables_found", found=tables_found, configured=len(self.specs))
        return issues

    def validate_feed(
        self,
        feed_version_id: str,
        gtfs_path: str,
        reference: ReferenceDataset,
        gtfs_plus_path: Optional[str] = None,
    ) -> ValidationReport:
        """
        Build the GTFS+ report for a feed version.

        User-edited GTFS+ data (``gtfs_plus_path``) is validated when present;
        otherwise the published GTFS archive itself is validated and the report
        is flagged as the published snapshot.
        """
        self.logger.info("gtfsplus_validation_start", feed_version_id=feed_version_id)
        if gtfs_plus_path and os.path.isfile(gtfs_plus_path):
            published = False
            archive_path = gtfs_plus_path
            self.logger.info("gtfsplus_validating_saved_data", path=archive_path)
        else:
            published = True
            archive_path = gtfs_path
            self.logger.warn("gtfsplus_saved_data_missing", fallback=archive_path)
        report = ValidationReport(
            subject_id=feed_version_id,
            is_published_snapshot=published,
            last_modified=datetime.fromtimestamp(os.path.getmtime(archive_path)).astimezone(),
        )
        self.validate_archive(archive_path, reference, issues=report.issues)
        self.logger.info(
            "gtfsplus_validation_end",
            feed_version_id=feed_version_id,
            published=published,
            issues=len(report.issues),
        )
        return report


__all__ = ["GtfsPlusValidator"]
