"""
Blog migration service.

Copies blog posts from the source store into the target store, remapping
``category_id`` through the mapping produced by the category phase.
"""
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from blogmigrate.core.logging_config import log_debug, log_error, log_info, log_warning
from blogmigrate.schemas.dto import BlogRecord, MigrationReport
from blogmigrate.stores import BlogStore


class BlogMigrationService:
    """Service for migrating blog posts between stores."""

    def __init__(self, source: BlogStore, target: BlogStore):
        self.source = source
        self.target = target

    @staticmethod
    def _resolve_category_id(
        blog: BlogRecord,
        category_id_mapping: Mapping,
        report: MigrationReport,
    ) -> Optional[str]:
        """
        Translate the blog's source category id into the target id space.

        A blog without a category, or whose category has no mapping entry,
        gets None. The source id itself is never written to the target.
        """
        if not blog.category_id:
            log_debug("Blog has no category", source_id=blog.id, title=blog.title)
            return None
        target_category_id = category_id_mapping.get(str(blog.category_id))
        if not target_category_id:
            warning_msg = f"Category not found for blog: {blog.title}"
            report.add_warning(warning_msg)
            log_warning(warning_msg, source_id=blog.id, source_category_id=blog.category_id)
            return None
        return str(target_category_id)

    @staticmethod
    def _create_values(blog: BlogRecord, target_category_id: Optional[str]) -> Dict[str, Any]:
        return {
            "title": blog.title,
            "subtitle": blog.subtitle,
            "sections": blog.sections,
            "tags": [tag.model_dump() for tag in blog.tags],
            "seo": blog.seo,
            "category_id": target_category_id,
            "multi_views": blog.multi_views,
            "unique_views": blog.unique_views,
            "is_archive": blog.is_archive,
            "created_at": blog.created_at,
            "updated_at": blog.updated_at,
        }

    def _find_existing(self, blog: BlogRecord) -> Optional[BlogRecord]:
        title, subtitle = blog.identity_key
        return self.target.blogs.find_one({"title": title, "subtitle": subtitle})

    def migrate_blog_posts(
        self,
        category_id_mapping: Mapping,
        report: MigrationReport,
    ) -> List[BlogRecord]:
        """
        Migrate every source blog post into the target store.

        Posts whose ``(title, subtitle)`` already exists in the target are
        skipped with a warning, which makes the phase safe to re-run after a
        partial failure. A failure on one post, including a source row that
        does not validate as a ``BlogRecord``, is recorded on ``report`` and
        the run continues.

        Args:
            category_id_mapping: Source category id -> target category id (read only)
            report: Report of the current run

        Returns:
            Target records created by this call
        """
        source_blogs = self.source.blogs.find_documents()
        log_info(f"Starting blog migration: {len(source_blogs)} blogs found")

        migrated_blogs: List[BlogRecord] = []

        for document in source_blogs:
            title = document.get("title")
            source_id = document.get("id")
            try:
                blog = BlogRecord.model_validate(document)
                existing = self._find_existing(blog)
                if existing is not None:
                    log_info(
                        "Blog already exists, skipping",
                        source_id=blog.id,
                        existing_id=existing.id,
                        title=blog.title,
                    )
                    report.add_warning(f"Blog already exists: {blog.title}")
                    report.blogs_skipped += 1
                    continue

                target_category_id = self._resolve_category_id(blog, category_id_mapping, report)
                created = self.target.blogs.create(self._create_values(blog, target_category_id))

                log_info(
                    "Migrated blog successfully",
                    source_id=blog.id,
                    target_id=created.id,
                    title=created.title,
                    category_id=target_category_id,
                )
                migrated_blogs.append(created)
                report.blogs_migrated += 1
            except (ValueError, SQLAlchemyError) as blog_error:
                error_msg = f"Failed to migrate blog: {title} - {blog_error}"
                log_error(blog_error, error_msg, source_id=source_id)
                report.add_error(error_msg)
            except Exception as blog_error:  # noqa: BLE001 - continue on bad post
                error_msg = f"Failed to migrate blog: {title} - {blog_error}"
                log_error(blog_error, error_msg, source_id=source_id, context="unexpected_blog_error")
                report.add_error(error_msg)

        log_info(
            "Blog migration completed",
            total=len(source_blogs),
            migrated=report.blogs_migrated,
            skipped=report.blogs_skipped,
            errors=len(report.errors),
        )
        return migrated_blogs
