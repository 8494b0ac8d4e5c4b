"""
Audit module for the replication system.

This module provides the structured run logger and the audit trail writer.
"""

from .audit_logger import AuditLogger
from .logger import ReplicationLogger

__all__ = ["AuditLogger", "ReplicationLogger"]
