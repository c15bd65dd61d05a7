"""Data access repositories."""

from .base import BaseRepository
from .draft_repository import DraftRepository

__all__ = [
    "BaseRepository",
    "DraftRepository",
]
