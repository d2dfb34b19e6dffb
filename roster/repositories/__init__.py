"""
Persistence adapters.

``memory_store`` holds member records for the life of the process;
``sql_repository`` keeps login accounts in SQL. Services depend on these
classes instead of touching storage directly.
"""

from .memory_store import RecordNotFound, RecordStore

__all__ = ["RecordNotFound", "RecordStore"]
