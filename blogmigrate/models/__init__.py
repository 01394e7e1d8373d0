# Import all models for easy access
from .base import BaseModel
from .blog import Blog
from .category import Category

__all__ = [
    "BaseModel",
    "Blog",
    "Category",
]
