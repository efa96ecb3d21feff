"""SQLite-backed document persistence."""

from research_council.storage.database import Database

__all__ = ["Database"]
