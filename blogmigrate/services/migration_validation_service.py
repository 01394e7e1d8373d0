"""
Migration validation service.

Read-only comparison of source and target state after a migration.
"""
from typing import Optional

from blogmigrate.core.logging_config import log_error, log_info
from blogmigrate.schemas.dto import MigrationReport, ValidationResult
from blogmigrate.stores import BlogStore

SAMPLE_SIZE = 5


class MigrationValidationService:
    """Service for checking migrated data integrity."""

    def __init__(self, source: BlogStore, target: BlogStore):
        self.source = source
        self.target = target

    def count_blogs_with_invalid_categories(self) -> int:
        """
        Count target blogs whose non-null ``category_id`` matches no target category.

        Only the distinct referenced ids are compared against the category
        ids, then each dangling id is counted.
        """
        valid_category_ids = {str(value) for value in self.target.categories.distinct("id")}
        referenced_ids = {
            str(value) for value in self.target.blogs.distinct("category_id") if value is not None
        }
        dangling_ids = sorted(referenced_ids - valid_category_ids)
        return sum(self.target.blogs.count({"category_id": dangling_id}) for dangling_id in dangling_ids)

    def _check_sample(self, result: ValidationResult) -> None:
        for blog in self.target.blogs.find(limit=SAMPLE_SIZE):
            if not blog.title or not blog.subtitle:
                result.add_issue(f"Blog {blog.id} missing required fields")

    def validate_migration(self, report: Optional[MigrationReport] = None) -> ValidationResult:
        """
        Compare source and target stores.

        The four counts are informational. ``is_valid`` turns False only for
        integrity problems: dangling category references or sampled posts
        missing a title or subtitle. Never raises and never writes to either
        store; a failed read is returned as an issue.

        Args:
            report: Report of the current run, copied into the result when given

        Returns:
            ValidationResult for the current state of both stores
        """
        result = ValidationResult()
        if report is not None:
            result.categories_migrated = report.categories_migrated
            result.blogs_migrated = report.blogs_migrated

        try:
            result.source_categories = self.source.categories.count()
            result.source_blogs = self.source.blogs.count()
            result.target_categories = self.target.categories.count()
            result.target_blogs = self.target.blogs.count()

            result.blogs_with_invalid_categories = self.count_blogs_with_invalid_categories()
            if result.blogs_with_invalid_categories > 0:
                result.add_issue(
                    f"{result.blogs_with_invalid_categories} blogs have invalid category references"
                )

            self._check_sample(result)
        except Exception as exc:  # noqa: BLE001 - validation reports, never raises
            log_error(exc, "Migration validation failed")
            result.add_issue(f"Validation failed: {exc}")

        log_info(
            "Migration validation completed",
            source_categories=result.source_categories,
            target_categories=result.target_categories,
            source_blogs=result.source_blogs,
            target_blogs=result.target_blogs,
            blogs_with_invalid_categories=result.blogs_with_invalid_categories,
            is_valid=result.is_valid,
        )
        return result
