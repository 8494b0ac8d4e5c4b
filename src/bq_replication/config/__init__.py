"""
Configuration module for the replication system.

This module provides configuration loading and validation functionality
using Pydantic models.
"""

from bq_replication.config.loader import ConfigLoader
from bq_replication.config.models import (AuditConfig, ExportStrategy,
                                          LoadJobTemplate, LoadMode,
                                          LoggingConfig, ReplicationScheme,
                                          ReplicationSystemConfig, RunResult,
                                          RunSummary, SourceConfig,
                                          SourceRole)

__all__ = [
    "ConfigLoader",
    "AuditConfig",
    "ExportStrategy",
    "LoadJobTemplate",
    "LoadMode",
    "LoggingConfig",
    "ReplicationScheme",
    "ReplicationSystemConfig",
    "RunResult",
    "RunSummary",
    "SourceConfig",
    "SourceRole",
]
