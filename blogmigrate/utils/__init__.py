"""
Shared utilities.
"""
from .id_mapper import IDMapper

__all__ = ["IDMapper"]
