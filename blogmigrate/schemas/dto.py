"""
Data Transfer Objects (DTOs) for the blog migration engine.

Records are the fixed-shape view of a category or blog at the migration
boundary, independent of how either store keeps them internally. Backup
artifacts hold the raw store rows as documents with camelCase keys
(``categoryId``, ``isActive``...) so they read like the documents the blog
CMS stores; records accept either spelling on input.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python

from blogmigrate.core.time_utils import ensure_utc, isoformat_utc


class RecordModel(BaseModel):
    """Base for DTOs that read camelCase or snake_case keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


def row_document(row: Dict[str, Any]) -> Dict[str, Any]:
    """JSON-compatible document with camelCase keys for a raw store row."""
    return {
        to_camel(key): isoformat_utc(value) if isinstance(value, datetime) else to_jsonable_python(value)
        for key, value in row.items()
    }


# ============================================================================
# Record Model
# ============================================================================

class TagDTO(RecordModel):
    """Label/value pair attached to a blog post."""
    label: str = Field(..., description="Display label")
    value: str = Field(..., description="Tag value")


class CategoryRecord(RecordModel):
    """
    Category as it exists in either store.

    Identity for deduplication is ``name``.
    """
    id: str = Field(..., description="Store-assigned identifier")
    name: str = Field(..., min_length=1, description="Category name")
    description: Optional[str] = Field(None, description="Optional description")
    slug: Optional[str] = Field(None, description="URL slug")
    is_active: bool = Field(default=True, description="Whether the category is active")
    created_at: Optional[datetime] = Field(None, description="Creation time")
    updated_at: Optional[datetime] = Field(None, description="Last update time")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v

    @field_validator("created_at", "updated_at")
    @classmethod
    def as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class BlogRecord(RecordModel):
    """
    Blog post as it exists in either store.

    ``category_id`` is store-relative: a source id means nothing in the
    target store. Identity for deduplication is ``(title, subtitle)``,
    compared by exact value.
    """
    id: str = Field(..., description="Store-assigned identifier")
    title: str = Field(..., description="Post title")
    subtitle: str = Field(..., description="Post subtitle")
    sections: List[Dict[str, Any]] = Field(default_factory=list, description="Opaque content sections")
    tags: List[TagDTO] = Field(default_factory=list, description="Ordered tags")
    category_id: Optional[str] = Field(None, description="Category reference in the same store")
    multi_views: int = Field(default=0, ge=0, description="Total view count")
    unique_views: List[str] = Field(default_factory=list, description="Visitor tokens, unique")
    is_archive: bool = Field(default=False, description="Whether the post is archived")
    seo: Dict[str, Any] = Field(default_factory=dict, description="Opaque SEO metadata")
    created_at: Optional[datetime] = Field(None, description="Creation time")
    updated_at: Optional[datetime] = Field(None, description="Last update time")

    @field_validator("id", "category_id", mode="before")
    @classmethod
    def coerce_ids(cls, v):
        return str(v) if v is not None else v

    @field_validator("sections", "tags", "unique_views", mode="before")
    @classmethod
    def default_empty_list(cls, v):
        return [] if v is None else v

    @field_validator("seo", mode="before")
    @classmethod
    def default_empty_dict(cls, v):
        return {} if v is None else v

    @field_validator("multi_views", mode="before")
    @classmethod
    def default_zero_views(cls, v):
        return 0 if v is None else v

    @field_validator("created_at", "updated_at")
    @classmethod
    def as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @field_validator("unique_views")
    @classmethod
    def dedupe_unique_views(cls, v: List[str]) -> List[str]:
        """Visitor tokens form a set; keep first-seen order."""
        return list(dict.fromkeys(v))

    @property
    def identity_key(self) -> tuple[str, str]:
        return (self.title, self.subtitle)


# ============================================================================
# Backup
# ============================================================================

class BackupCounts(BaseModel):
    """Record counts captured when a backup is written."""
    categories: int = Field(0, ge=0)
    blogs: int = Field(0, ge=0)


class BackupArtifact(BaseModel):
    """
    On-disk snapshot of a store's categories and blogs.

    Rows are kept as documents exactly as the store returned them, so a row
    that would not pass record validation is still backed up. ``counts``
    equal the list lengths at snapshot time.
    """
    model_config = ConfigDict(frozen=True)

    timestamp: str = Field(..., description="ISO-8601 snapshot time")
    store: str = Field(default="source", description="Label of the snapshotted store")
    categories: List[Dict[str, Any]] = Field(default_factory=list)
    blogs: List[Dict[str, Any]] = Field(default_factory=list)
    counts: BackupCounts = Field(default_factory=BackupCounts)

    def to_document(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "store": self.store,
            "categories": list(self.categories),
            "blogs": list(self.blogs),
            "counts": self.counts.model_dump(),
        }


class BackupContents(BaseModel):
    """A backup parsed into typed records, ready to restore."""
    timestamp: str
    store: str
    categories: List[CategoryRecord] = Field(default_factory=list)
    blogs: List[BlogRecord] = Field(default_factory=list)


# ============================================================================
# Reporting
# ============================================================================

class MigrationReport(BaseModel):
    """
    Counts, warnings and errors accumulated over one migration run.

    Created at the start of a run and passed explicitly to every phase.
    """
    categories_migrated: int = Field(0, description="Target categories newly created")
    categories_reused: int = Field(0, description="Source categories resolved to an existing target category")
    blogs_migrated: int = Field(0, description="Target blogs newly created")
    blogs_skipped: int = Field(0, description="Source blogs already present in the target")
    warnings: List[str] = Field(default_factory=list, description="Non-fatal issues, in order")
    errors: List[str] = Field(default_factory=list, description="Per-record failures, in order")
    started_at: Optional[datetime] = Field(None)
    finished_at: Optional[datetime] = Field(None)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def add_error(self, message: str) -> None:
        self.errors.append(message)


class ValidationResult(BaseModel):
    """Source/target comparison produced by the migration validator."""
    source_categories: int = 0
    target_categories: int = 0
    source_blogs: int = 0
    target_blogs: int = 0
    categories_migrated: Optional[int] = None
    blogs_migrated: Optional[int] = None
    blogs_with_invalid_categories: int = 0
    is_valid: bool = True
    issues: List[str] = Field(default_factory=list)

    def add_issue(self, message: str) -> None:
        self.is_valid = False
        self.issues.append(message)


class MigrationRunResult(BaseModel):
    """Final report of a complete migration run."""
    success: bool = False
    categories_migrated: int = 0
    categories_reused: int = 0
    blogs_migrated: int = 0
    blogs_skipped: int = 0
    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    duration_ms: int = 0
    validation: ValidationResult = Field(default_factory=ValidationResult)
    backup_file: Optional[str] = None
    target_snapshot_file: Optional[str] = None
    report_file: Optional[str] = None

    @classmethod
    def from_report(cls, report: MigrationReport, **kwargs: Any) -> "MigrationRunResult":
        return cls(**report.model_dump(), **kwargs)


class RollbackResult(BaseModel):
    """Outcome of restoring the target store from a backup."""
    success: bool = True
    categories_restored: int = 0
    blogs_restored: int = 0
