"""
Backup service for snapshotting a blog store to disk.

A backup is one JSON document holding every category and blog of a store
plus the counts observed at snapshot time. It is assembled in memory and
written in a single operation so ``counts`` always describes the arrays
written next to it.
"""
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from blogmigrate.core.logging_config import log_error, log_info, log_warning
from blogmigrate.core.time_utils import filename_timestamp, isoformat_utc, utc_now
from blogmigrate.schemas.dto import (
    BackupArtifact,
    BackupContents,
    BackupCounts,
    BlogRecord,
    CategoryRecord,
    MigrationReport,
    row_document,
)
from blogmigrate.stores import BlogStore

COUNT_MISMATCH_WARNING = "Backup counts do not match actual data"


class BackupValidationError(ValueError):
    """Raised when a backup file cannot be trusted for restore."""
    pass


class BackupStructureError(BackupValidationError):
    """A required top-level field of the backup is missing."""

    def __init__(self, message: str = "Invalid backup file structure"):
        super().__init__(message)


class BackupCorruptionError(BackupValidationError):
    """A required field has the wrong type or the file is not valid JSON."""

    def __init__(self, message: str = "Backup data is corrupted"):
        super().__init__(message)


@dataclass(frozen=True)
class BackupResult:
    """Location and content of a written backup."""
    file: Path
    data: BackupArtifact


def _is_absent(value: Any) -> bool:
    """Missing, null, empty string, zero or false. Lists and objects, even empty, are present."""
    if isinstance(value, (list, dict)):
        return False
    return not value


def _check_structure(document: Any) -> Dict[str, Any]:
    """
    Check the top-level shape of a parsed backup.

    Raises:
        BackupStructureError: If timestamp, categories or blogs is absent
        BackupCorruptionError: If categories or blogs is not a list
    """
    if not isinstance(document, dict):
        raise BackupStructureError()
    if any(_is_absent(document.get(key)) for key in ("timestamp", "categories", "blogs")):
        raise BackupStructureError()
    if not isinstance(document["categories"], list) or not isinstance(document["blogs"], list):
        raise BackupCorruptionError()
    return document


def _expected_count(counts: Any, key: str) -> Any:
    if not isinstance(counts, dict):
        return 0
    return counts.get(key) or 0


class BackupService:
    """Service for writing and checking store backups."""

    def __init__(self, store: BlogStore, backup_dir: Path):
        """
        Initialize backup service.

        Args:
            store: Store to snapshot
            backup_dir: Directory backups are written to
        """
        self.store = store
        self.backup_dir = Path(backup_dir)

    def create_backup(self) -> BackupResult:
        """
        Snapshot every category and blog of the store.

        Returns:
            BackupResult with the file path and the artifact written to it
        """
        now = utc_now()
        categories = [row_document(row) for row in self.store.categories.find_documents()]
        blogs = [row_document(row) for row in self.store.blogs.find_documents()]

        artifact = BackupArtifact(
            timestamp=isoformat_utc(now),
            store=self.store.label,
            categories=categories,
            blogs=blogs,
            counts=BackupCounts(categories=len(categories), blogs=len(blogs)),
        )

        self.backup_dir.mkdir(parents=True, exist_ok=True)
        backup_file = self.backup_dir / f"{self.store.label}-backup-{filename_timestamp(now)}.json"
        try:
            backup_file.write_text(
                json.dumps(artifact.to_document(), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as exc:
            log_error(exc, "Failed to create backup", file=str(backup_file))
            raise

        log_info(
            "Backup created successfully",
            file=str(backup_file),
            store=self.store.label,
            categories_backed_up=len(categories),
            blogs_backed_up=len(blogs),
        )
        return BackupResult(file=backup_file, data=artifact)

    @staticmethod
    def read_backup_document(backup_file: Path) -> Dict[str, Any]:
        """
        Read and structurally check a backup file.

        Raises:
            FileNotFoundError: If the file does not exist
            BackupStructureError: If a required field is missing
            BackupCorruptionError: If the JSON is invalid or a field has the wrong type
        """
        content = Path(backup_file).read_text(encoding="utf-8")
        try:
            document = json.loads(content)
        except json.JSONDecodeError as exc:
            raise BackupCorruptionError() from exc
        return _check_structure(document)

    @staticmethod
    def validate_backup(backup_file: Path, report: MigrationReport) -> bool:
        """
        Validate a previously written backup.

        A count mismatch is only reported as a warning on ``report``; the
        backup content itself is still considered restorable.

        Returns:
            True when the backup is structurally sound

        Raises:
            BackupStructureError: If timestamp, categories or blogs is absent
            BackupCorruptionError: If categories or blogs is not a list
        """
        try:
            document = BackupService.read_backup_document(backup_file)
        except (BackupValidationError, OSError) as exc:
            log_error(exc, "Backup validation failed", file=str(backup_file))
            raise

        actual_categories = len(document["categories"])
        actual_blogs = len(document["blogs"])
        counts = document.get("counts")
        if (
            actual_categories != _expected_count(counts, "categories")
            or actual_blogs != _expected_count(counts, "blogs")
        ):
            report.add_warning(COUNT_MISMATCH_WARNING)
            log_warning(
                COUNT_MISMATCH_WARNING,
                file=str(backup_file),
                counts=counts,
                categories=actual_categories,
                blogs=actual_blogs,
            )

        log_info(
            "Backup validation successful",
            file=str(backup_file),
            categories=actual_categories,
            blogs=actual_blogs,
        )
        return True

    @staticmethod
    def load_backup(backup_file: Path) -> BackupContents:
        """
        Parse a backup into typed records for restore.

        Raises:
            BackupStructureError: If a required field is missing
            BackupCorruptionError: If the file or any record is malformed
        """
        document = BackupService.read_backup_document(backup_file)
        try:
            return BackupContents(
                timestamp=str(document["timestamp"]),
                store=document.get("store") or "unknown",
                categories=[CategoryRecord.model_validate(item) for item in document["categories"]],
                blogs=[BlogRecord.model_validate(item) for item in document["blogs"]],
            )
        except ValidationError as exc:
            raise BackupCorruptionError(f"Backup data is corrupted: {exc.error_count()} invalid fields") from exc


def find_latest_backup(backup_dir: Path, label: Optional[str] = None) -> Optional[Path]:
    """Most recent backup file in ``backup_dir``, optionally for one store label."""
    pattern = f"{label}-backup-*.json" if label else "*-backup-*.json"
    candidates = sorted(
        Path(backup_dir).glob(pattern),
        key=lambda path: path.name.split("-backup-", 1)[-1],
    )
    return candidates[-1] if candidates else None
