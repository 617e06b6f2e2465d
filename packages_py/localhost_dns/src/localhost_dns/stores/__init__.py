"""
Connection cache store implementations
"""
from .memory import MemoryConnectionStore, create_memory_store

__all__ = [
    "MemoryConnectionStore",
    "create_memory_store",
]
