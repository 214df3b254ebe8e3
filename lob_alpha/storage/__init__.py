"""
Storage module for LOB Alpha Research System.
"""

from .repository import InMemoryRepository, Repository

__all__ = [
    "Repository",
    "InMemoryRepository",
]
