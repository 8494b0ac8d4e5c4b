"""
Exceptions raised by the replication system.

Configuration and table-selection errors abort a run before any side effect.
NoMatchingFilesError is an expected condition that callers downgrade to a log
line; every other error terminates the run.
"""

from typing import Iterable


class ReplicationError(Exception):
    """Base class for all replication errors."""


class ConfigurationError(ReplicationError):
    """Raised when the run configuration or a load-job template can't be read."""


class InvalidDateFormatError(ReplicationError):
    """Raised when a date bound is not in YYYYMMDD format."""

    def __init__(self, field_name: str, value: str):
        self.field_name = field_name
        self.value = value
        super().__init__(f"{field_name} not in YYYYMMDD format: {value!r}")


class UnknownReplicationSchemeError(ReplicationError):
    """Raised when a source asks for a scheme outside the known set."""

    def __init__(self, scheme: str, valid_schemes: Iterable[str]):
        self.scheme = scheme
        self.valid_schemes = list(valid_schemes)
        super().__init__(
            f"Replication scheme {scheme!r} must be one of these options "
            f"[{', '.join(self.valid_schemes)}]"
        )


class NoMatchingFilesError(ReplicationError):
    """Raised when a staging listing has no files of the requested format."""

    def __init__(self, bucket: str, prefix: str, file_format: str):
        self.bucket = bucket
        self.prefix = prefix
        self.file_format = file_format
        super().__init__(
            f"No files of {file_format} format under gs://{bucket}/{prefix}"
        )


class ExportJobFailedError(ReplicationError):
    """Raised when a table export job ends in error."""

    def __init__(self, table_name: str, reason: str):
        self.table_name = table_name
        self.reason = reason
        super().__init__(f"Error exporting table {table_name}: {reason}")


class LoadInvocationFailedError(ReplicationError):
    """Raised when the loader fails to run a load task."""

    def __init__(self, object_path: str, reason: str):
        self.object_path = object_path
        self.reason = reason
        super().__init__(f"Load of {object_path} failed: {reason}")
