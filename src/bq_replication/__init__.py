"""
BigQuery replication system.

Exports date-sharded BigQuery tables to Cloud Storage, loads the staged files
with sling, and keeps the staging area clean between runs.
"""

from .replication import ReplicationManager, select_tables

__version__ = "1.0.0"

__all__ = [
    "ReplicationManager",
    "select_tables",
]
