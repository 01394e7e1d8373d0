"""
Migration service for running a complete blog migration.

Runs the phases in order (backup, categories, blogs, validation), writes
the run report next to the backups and can roll the target store back to
a snapshot.
"""
import json
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Tuple

from blogmigrate.core.config import Settings, mask_credentials
from blogmigrate.core.database import create_store_engine, init_store, store_session
from blogmigrate.core.logging_config import log_error, log_info
from blogmigrate.core.time_utils import filename_timestamp, utc_now
from blogmigrate.schemas.dto import MigrationReport, MigrationRunResult, RollbackResult
from blogmigrate.services.backup_service import BackupService
from blogmigrate.services.blog_migration_service import BlogMigrationService
from blogmigrate.services.category_migration_service import CategoryMigrationService
from blogmigrate.services.migration_validation_service import MigrationValidationService
from blogmigrate.stores import BlogStore, open_sql_store

SOURCE_LABEL = "source"
TARGET_LABEL = "target"


@contextmanager
def connect_stores(
    settings: Settings, *, create_schema: bool = False
) -> Iterator[Tuple[BlogStore, BlogStore]]:
    """
    Open the source and target stores named by the settings.

    With ``create_schema`` the target tables are created when missing;
    otherwise neither store is altered by connecting.

    Raises:
        ValueError: If either connection URL is not configured
    """
    source_uri, target_uri = settings.require_store_uris()
    log_info(
        "Connecting to stores",
        source_db=mask_credentials(source_uri),
        target_db=mask_credentials(target_uri),
    )
    source_engine = create_store_engine(source_uri, echo=settings.database_echo)
    target_engine = create_store_engine(target_uri, echo=settings.database_echo)
    try:
        if create_schema:
            init_store(target_engine)
        with store_session(source_engine) as source_session, store_session(target_engine) as target_session:
            yield (
                open_sql_store(source_session, SOURCE_LABEL),
                open_sql_store(target_session, TARGET_LABEL),
            )
    finally:
        source_engine.dispose()
        target_engine.dispose()
        log_info("Disconnected from stores")


class MigrationService:
    """Service coordinating a full migration run."""

    def __init__(self, source: BlogStore, target: BlogStore, backup_dir: Path):
        """
        Initialize migration service.

        Args:
            source: Store blogs are migrated from
            target: Store blogs are migrated into
            backup_dir: Directory for backups and run reports
        """
        self.source = source
        self.target = target
        self.backup_dir = Path(backup_dir)
        self.source_backups = BackupService(source, self.backup_dir)
        self.target_backups = BackupService(target, self.backup_dir)
        self.categories = CategoryMigrationService(source, target)
        self.blogs = BlogMigrationService(source, target)
        self.validator = MigrationValidationService(source, target)

    def _write_report(self, result: MigrationRunResult) -> Path:
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        report_file = self.backup_dir / f"migration-report-{filename_timestamp()}.json"
        report_file.write_text(
            json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        return report_file

    def execute_migration(
        self,
        *,
        skip_backup: bool = False,
        report: Optional[MigrationReport] = None,
    ) -> MigrationRunResult:
        """
        Run backup, category, blog and validation phases in order.

        Args:
            skip_backup: Skip the source backup and the target snapshot
            report: Report to accumulate into; a fresh one by default

        Returns:
            MigrationRunResult with counts, warnings, errors and validation

        Raises:
            BackupValidationError: If a freshly written backup fails validation
            Exception: Any store failure outside the per-record loops
        """
        report = report or MigrationReport()
        report.started_at = utc_now()
        backup_file: Optional[Path] = None
        snapshot_file: Optional[Path] = None

        try:
            log_info("Starting blog migration process", backup_dir=str(self.backup_dir))

            if not skip_backup:
                backup = self.source_backups.create_backup()
                self.source_backups.validate_backup(backup.file, report)
                backup_file = backup.file

                snapshot = self.target_backups.create_backup()
                self.target_backups.validate_backup(snapshot.file, report)
                snapshot_file = snapshot.file

            category_id_mapping = self.categories.migrate_categories(report)
            self.blogs.migrate_blog_posts(category_id_mapping, report)
            validation = self.validator.validate_migration(report)

            report.finished_at = utc_now()
            result = MigrationRunResult.from_report(
                report,
                success=validation.is_valid and not report.errors,
                duration_ms=int((report.finished_at - report.started_at).total_seconds() * 1000),
                validation=validation,
                backup_file=str(backup_file) if backup_file else None,
                target_snapshot_file=str(snapshot_file) if snapshot_file else None,
            )
            report_file = self._write_report(result)
            result.report_file = str(report_file)

            log_info(
                "Migration completed",
                success=result.success,
                categories_migrated=result.categories_migrated,
                blogs_migrated=result.blogs_migrated,
                errors=len(result.errors),
                warnings=len(result.warnings),
                report_file=str(report_file),
            )
            return result
        except Exception as exc:
            report.finished_at = utc_now()
            report.add_error(str(exc))
            log_error(exc, "Migration failed", errors=len(report.errors))
            raise

    def rollback(self, backup_file: Path, report: Optional[MigrationReport] = None) -> RollbackResult:
        """
        Replace the target store's categories and blogs with a backup.

        The backup is validated first; records are restored with the ids
        they have in the backup. Deletes and inserts run in one target
        transaction, so a failed restore leaves the target as it was.

        Raises:
            BackupValidationError: If the backup is malformed
        """
        report = report or MigrationReport()
        log_info("Starting migration rollback", backup_file=str(backup_file))

        try:
            self.target_backups.validate_backup(backup_file, report)
            contents = self.target_backups.load_backup(backup_file)

            with self.target.transaction():
                self.target.blogs.delete_all()
                self.target.categories.delete_all()

                categories_restored = (
                    self.target.categories.insert_many(contents.categories) if contents.categories else 0
                )
                blogs_restored = self.target.blogs.insert_many(contents.blogs) if contents.blogs else 0
        except Exception as exc:
            log_error(exc, "Rollback failed", backup_file=str(backup_file))
            raise

        log_info(
            "Rollback completed successfully",
            categories_restored=categories_restored,
            blogs_restored=blogs_restored,
        )
        return RollbackResult(
            success=True,
            categories_restored=categories_restored,
            blogs_restored=blogs_restored,
        )
