"""
Category migration service.

Copies categories from the source store into the target store and builds
the source-id to target-id mapping the blog phase relies on.
"""
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError

from blogmigrate.core.logging_config import log_error, log_info
from blogmigrate.schemas.dto import CategoryRecord, MigrationReport
from blogmigrate.stores import BlogStore
from blogmigrate.utils import IDMapper


class CategoryMigrationService:
    """Service for migrating categories between stores."""

    def __init__(self, source: BlogStore, target: BlogStore):
        self.source = source
        self.target = target

    @staticmethod
    def _create_values(category: CategoryRecord) -> Dict[str, Any]:
        return {
            "name": category.name,
            "description": category.description or "",
            "slug": category.slug,
            "is_active": category.is_active,
            "created_at": category.created_at,
            "updated_at": category.updated_at,
        }

    @staticmethod
    def _refresh_values(source: CategoryRecord, existing: CategoryRecord) -> Dict[str, Any]:
        """Source values win where the source has one."""
        return {
            "description": source.description or existing.description,
            "slug": source.slug or existing.slug,
            "is_active": source.is_active,
        }

    def _migrate_category(self, category: CategoryRecord, report: MigrationReport) -> str:
        """Create or reuse one category and return its target id."""
        existing = self.target.categories.find_one({"name": category.name})

        if existing is None:
            created = self.target.categories.create(self._create_values(category))
            report.categories_migrated += 1
            log_info(
                "Created new category",
                source_id=category.id,
                target_id=created.id,
                name=created.name,
            )
            return created.id

        refreshed = self.target.categories.update(
            existing.id, self._refresh_values(category, existing)
        )
        target_id = refreshed.id if refreshed is not None else existing.id
        report.categories_reused += 1
        log_info(
            "Reused existing category",
            source_id=category.id,
            target_id=target_id,
            name=category.name,
        )
        return target_id

    def migrate_categories(self, report: MigrationReport) -> IDMapper:
        """
        Migrate every source category into the target store.

        Categories are matched by ``name``. A match is reused rather than
        duplicated, so the mapping still gets an entry for it. A failure on
        one category, including a source row that does not validate as a
        ``CategoryRecord``, is recorded on ``report`` and the run continues.

        Args:
            report: Report of the current run

        Returns:
            IDMapper from source category id to target category id
        """
        source_categories = self.source.categories.find_documents()
        log_info(f"Starting category migration: {len(source_categories)} categories found")

        category_id_mapping = IDMapper()

        for document in source_categories:
            name = document.get("name")
            source_id = document.get("id")
            try:
                category = CategoryRecord.model_validate(document)
                target_id = self._migrate_category(category, report)
                category_id_mapping.record(category.id, target_id)
            except (ValueError, SQLAlchemyError) as category_error:
                error_msg = f"Failed to migrate category: {name} - {category_error}"
                log_error(category_error, error_msg, source_id=source_id)
                report.add_error(error_msg)
            except Exception as category_error:  # noqa: BLE001 - continue on bad category
                error_msg = f"Failed to migrate category: {name} - {category_error}"
                log_error(category_error, error_msg, source_id=source_id, context="unexpected_category_error")
                report.add_error(error_msg)

        log_info(
            "Category migration completed",
            total=len(source_categories),
            migrated=report.categories_migrated,
            reused=report.categories_reused,
            errors=len(report.errors),
        )
        return category_id_mapping
