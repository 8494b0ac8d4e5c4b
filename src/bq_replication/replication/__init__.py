"""
Replication module for the replication system.

This module provides table selection, the run policies and the manager that
drives the export, load and cleanup sequence.
"""

from .replication_manager import ReplicationManager, SourcePlan
from .table_selector import select_tables

__all__ = ["ReplicationManager", "SourcePlan", "select_tables"]
