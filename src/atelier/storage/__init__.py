"""Run history storage."""

from atelier.storage.database import Database

__all__ = ["Database"]
