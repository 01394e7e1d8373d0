"""
Migration engine services.
"""
from .backup_service import (
    BackupCorruptionError,
    BackupResult,
    BackupService,
    BackupStructureError,
    BackupValidationError,
)
from .blog_migration_service import BlogMigrationService
from .category_migration_service import CategoryMigrationService
from .migration_service import MigrationService, connect_stores
from .migration_validation_service import MigrationValidationService

__all__ = [
    "BackupCorruptionError",
    "BackupResult",
    "BackupService",
    "BackupStructureError",
    "BackupValidationError",
    "BlogMigrationService",
    "CategoryMigrationService",
    "MigrationService",
    "MigrationValidationService",
    "connect_stores",
]
