"""
Store contracts and in-memory implementations.
"""
from .base import ClinicalDataStore, HandoverRepository
from .memory import InMemoryClinicalStore, InMemoryHandoverRepository

__all__ = [
    "ClinicalDataStore",
    "HandoverRepository",
    "InMemoryClinicalStore",
    "InMemoryHandoverRepository",
]
