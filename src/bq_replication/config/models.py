"""
Configuration models for the replication system using Pydantic.

This module defines the models that validate and parse the YAML run
configuration, the sling load-job templates, and the run records written to
the audit trail.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DATE_KEY_FORMAT = "%Y%m%d"


class SourceRole(str, Enum):
    """Enumeration of the known source roles."""

    DAILY = "daily"
    INTRADAY = "intraday"


class ReplicationScheme(str, Enum):
    """Enumeration of the table-selection schemes."""

    TODAY = "today"
    RANGE = "range"
    ALL_TIME = "all-time"


class ExportStrategy(str, Enum):
    """Enumeration of run-level export strategies."""

    PLAIN = "plain"
    DAILY_STREAMING = "daily+streaming"


class LoadMode(str, Enum):
    """
    Enumeration of load modes.

    ``append`` is the template default. Sling has no mode of that name, so it
    is sent as ``incremental``, which appends when no primary or update keys
    are set.
    """

    APPEND = "append"
    INCREMENTAL = "incremental"
    FULL_REFRESH = "full-refresh"
    TRUNCATE = "truncate"
    SNAPSHOT = "snapshot"
    BACKFILL = "backfill"


SLING_MODES = {LoadMode.APPEND: LoadMode.INCREMENTAL.value}


def _check_date_key(field_name: str, value: str) -> datetime:
    if not (len(value) == 8 and value.isdigit()):
        raise ValueError(f"{field_name} not in YYYYMMDD format: {value!r}")
    try:
        return datetime.strptime(value, DATE_KEY_FORMAT)
    except ValueError as e:
        raise ValueError(f"{field_name} not in YYYYMMDD format: {value!r}") from e


class SourceConfig(BaseModel):
    """Configuration for one source (daily or intraday)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    table_prefix: str = Field(alias="tablePrefix")
    bucket: str
    bucket_suffix: str = Field(default="", alias="bucketSuffix")
    file_format: str = Field(default="json", alias="fileFormat")
    replication_scheme: ReplicationScheme = Field(alias="replicationScheme")
    date_range_start: Optional[str] = Field(default=None, alias="dateRangeStart")
    date_range_end: Optional[str] = Field(default=None, alias="dateRangeEnd")
    sling_cfg_path: str = Field(alias="slingCfgPath")

    @field_validator("file_format")
    @classmethod
    def validate_file_format(cls, v):
        """Strip a leading dot so ``.json`` and ``json`` match the same files."""
        v = v.strip().lstrip(".")
        if not v:
            raise ValueError("fileFormat must not be empty")
        return v

    @model_validator(mode="after")
    def validate_date_range(self):
        """Validate the date bounds when the range scheme is selected."""
        if self.replication_scheme != ReplicationScheme.RANGE:
            return self

        missing_fields = [
            alias
            for alias, value in (
                ("dateRangeStart", self.date_range_start),
                ("dateRangeEnd", self.date_range_end),
            )
            if not value
        ]
        if missing_fields:
            raise ValueError(
                f"When replicationScheme is range, the following fields are "
                f"required: {missing_fields}"
            )

        start = _check_date_key("dateRangeStart", self.date_range_start)
        end = _check_date_key("dateRangeEnd", self.date_range_end)
        if start > end:
            raise ValueError(
                f"dateRangeStart {self.date_range_start} is after "
                f"dateRangeEnd {self.date_range_end}"
            )
        return self

    @property
    def date_bounds(self) -> Optional[tuple]:
        """(start, end) for the range scheme, otherwise None."""
        if self.replication_scheme == ReplicationScheme.RANGE:
            return (self.date_range_start, self.date_range_end)
        return None


class LoggingConfig(BaseModel):
    """Configuration for logging settings."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO")
    format: str = Field(default="json")  # "text" or "json"
    log_to_file: bool = Field(default=False)
    log_file_path: Optional[str] = None

    @field_validator("level")
    @classmethod
    def validate_level(cls, v):
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(
                f"Invalid logging level: {v}. Must be one of {valid_levels}"
            )
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v):
        """Validate logging format."""
        valid_formats = ["text", "json"]
        if v.lower() not in valid_formats:
            raise ValueError(
                f"Invalid logging format: {v}. Must be one of {valid_formats}"
            )
        return v.lower()

    @model_validator(mode="after")
    def validate_log_file(self):
        """A log file path is required when logging to file."""
        if self.log_to_file and not self.log_file_path:
            raise ValueError("log_file_path is required when log_to_file is true")
        return self


class AuditConfig(BaseModel):
    """Configuration for the JSON-lines audit trail."""

    model_config = ConfigDict(frozen=True)

    audit_file: Optional[str] = None


class ReplicationSystemConfig(BaseModel):
    """Root configuration model for the replication system."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    project_id: str = Field(alias="projectID")
    dataset: str = Field(alias="schema")
    timezone: str = Field(default="UTC")
    export_strategy: ExportStrategy = Field(
        default=ExportStrategy.PLAIN, alias="exportStrategy"
    )
    location: str = Field(default="US")
    sources: Dict[SourceRole, SourceConfig]
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    audit_config: AuditConfig = Field(default_factory=AuditConfig, alias="audit")

    @field_validator("sources")
    @classmethod
    def validate_sources(cls, v):
        """Ensure at least one source is configured."""
        if not v:
            raise ValueError("At least one source must be configured")
        return v

    @model_validator(mode="after")
    def validate_export_strategy(self):
        """daily+streaming reconciles the two sources against each other."""
        if self.export_strategy == ExportStrategy.DAILY_STREAMING:
            missing = [
                role.value
                for role in (SourceRole.DAILY, SourceRole.INTRADAY)
                if role not in self.sources
            ]
            if missing:
                raise ValueError(
                    f"Export strategy {self.export_strategy.value} requires "
                    f"sources: {missing}"
                )
        return self

    def source(self, role: SourceRole) -> SourceConfig:
        """Return the configuration for a role, failing on unknown roles."""
        try:
            return self.sources[SourceRole(role)]
        except KeyError:
            raise KeyError(f"Source {SourceRole(role).value} is not configured") from None


class SourceEndpoint(BaseModel):
    """Source side of a sling task."""

    model_config = ConfigDict(extra="allow")

    conn: str
    stream: Optional[str] = None
    options: Optional[Dict[str, Any]] = None


class TargetEndpoint(BaseModel):
    """Target side of a sling task."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    conn: str
    object_name: str = Field(alias="object")
    options: Optional[Dict[str, Any]] = None


class LoadJobTemplate(BaseModel):
    """
    Sling task configuration used as a template for each staged object.

    Keys the model doesn't know about are kept so the whole task passes
    through to sling unchanged.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    source: SourceEndpoint
    target: TargetEndpoint
    mode: LoadMode = LoadMode.APPEND

    def for_object(
        self, object_path: str, mode_override: Optional[LoadMode] = None
    ) -> "LoadJobTemplate":
        """Clone the template for a single object, optionally overriding mode."""
        clone = self.model_copy(deep=True)
        clone.source.stream = object_path
        if mode_override is not None:
            clone.mode = LoadMode(mode_override)
        return clone

    def to_task(self) -> Dict[str, Any]:
        """Serializable sling task dictionary."""
        task = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        task["mode"] = SLING_MODES.get(self.mode, self.mode.value)
        return task


class RunResult(BaseModel):
    """Model for operation run results."""

    operation_type: str  # cleanup, export, load, reconcile
    source: str
    table_name: Optional[str] = None
    object_uri: Optional[str] = None
    status: str  # success, skipped, failed
    start_time: str
    end_time: str
    error_message: Optional[str] = None
    details: Optional[dict] = None


class RunSummary(BaseModel):
    """Model for run summary logging."""

    run_id: str
    start_time: str
    end_time: Optional[str] = None
    duration: Optional[float] = None
    status: str  # completed, failed
    total_sources: int
    total_tables: int
    total_objects: int
    successful_operations: int = 0
    failed_operations: int = 0
    summary: Optional[str] = None
