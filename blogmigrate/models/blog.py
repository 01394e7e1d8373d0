"""
Blog post model.
"""
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, Index

from .base import BaseModel


class Blog(BaseModel, table=True):
    """
    Blog post.

    ``category_id`` carries no foreign key, so a post can outlive its
    category; the migration validator reports such dangling references.
    """
    __tablename__ = "blog"

    title: str = Field(..., max_length=500)
    subtitle: str = Field(..., max_length=1000)
    sections: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    tags: List[Dict[str, str]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    seo: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )
    category_id: Optional[uuid.UUID] = Field(default=None, nullable=True)
    multi_views: int = Field(default=0, ge=0, nullable=False)
    unique_views: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    is_archive: bool = Field(default=False, nullable=False)

    __table_args__ = (
        Index('idx_blog_title_subtitle', 'title', 'subtitle'),
        Index('idx_blog_category_id', 'category_id'),
        Index('idx_blog_is_archive', 'is_archive'),
    )
