from .memory_store import MemoryRecordCollection, make_memory_store

__all__ = ["MemoryRecordCollection", "make_memory_store"]
