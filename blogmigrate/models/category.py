"""
Blog category model.
"""
from typing import Optional

from sqlmodel import CheckConstraint, Field, Index

from .base import BaseModel


class Category(BaseModel, table=True):
    """
    Category a blog post can be filed under.
    """
    __tablename__ = "category"

    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default="", max_length=2000)
    slug: Optional[str] = Field(default=None, max_length=200)
    is_active: bool = Field(default=True, nullable=False)

    __table_args__ = (
        CheckConstraint('length(name) > 0', name='check_category_name_not_empty'),
        Index('idx_category_name', 'name', unique=True),
        Index('idx_category_slug', 'slug'),
        Index('idx_category_is_active', 'is_active'),
    )
