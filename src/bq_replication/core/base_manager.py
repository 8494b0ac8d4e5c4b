"""
Base manager class with common functionality for replication runs.

This module provides run bookkeeping shared by managers: run identifiers,
operation results, audit logging and run summaries.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from bq_replication.audit.audit_logger import AuditLogger
from bq_replication.audit.logger import ReplicationLogger
from bq_replication.config.models import (
    ReplicationSystemConfig,
    RunResult,
    RunSummary,
)


class BaseManager:
    """Base manager class with common functionality for replication runs."""

    def __init__(
        self,
        config: ReplicationSystemConfig,
        logger: ReplicationLogger,
        run_id: Optional[str] = None,
    ):
        """
        Initialize the base manager.

        Args:
            config: System configuration
            logger: Logger instance
            run_id: Optional run identifier
        """
        self.config = config
        self.logger = logger
        self.run_id = run_id or str(uuid.uuid4())
        self.audit_logger = AuditLogger(
            logger,
            self.run_id,
            audit_file=config.audit_config.audit_file,
        )
        self.results: List[RunResult] = []

    def record_result(
        self,
        operation_type: str,
        source: str,
        status: str,
        start_time: datetime,
        table_name: Optional[str] = None,
        object_uri: Optional[str] = None,
        error_message: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> RunResult:
        """
        Record the outcome of one step and write it to the audit trail.

        Args:
            operation_type: cleanup, export, load or reconcile
            source: Source role the step belongs to
            status: success, skipped or failed
            start_time: When the step started
            table_name: Table the step worked on, if any
            object_uri: Staged object the step worked on, if any
            error_message: Error message if failed
            details: Additional details about the step
        """
        result = RunResult(
            operation_type=operation_type,
            source=source,
            table_name=table_name,
            object_uri=object_uri,
            status=status,
            start_time=start_time.isoformat(),
            end_time=datetime.now(timezone.utc).isoformat(),
            error_message=error_message,
            details=details,
        )
        self.results.append(result)
        self.audit_logger.log_operation(result)
        return result

    def create_summary(
        self,
        start_time: datetime,
        results: List[RunResult],
        total_sources: int,
        operation_type: str = "replication",
        error_message: Optional[str] = None,
    ) -> RunSummary:
        """
        Create a run summary object.

        Args:
            start_time: Run start time
            results: Results recorded during the run
            total_sources: Number of sources the run covered
            operation_type: Name used in the summary text
            error_message: Error that stopped the run, if any
        """
        end_time = datetime.now(timezone.utc)
        duration = (end_time - start_time).total_seconds()

        successful_operations = sum(1 for r in results if r.status == "success")
        failed_operations = sum(1 for r in results if r.status == "failed")
        if error_message and failed_operations == 0:
            failed_operations = 1

        tables = set(f"{r.source}.{r.table_name}" for r in results if r.table_name)
        objects = set(r.object_uri for r in results if r.object_uri)

        status = "failed" if error_message else "completed"
        summary_text = (
            f"{operation_type.title()} {status} in {duration:.1f}s. "
            f"Processed {total_sources} sources, {len(tables)} tables, "
            f"{len(objects)} objects. {successful_operations} operations "
            f"succeeded, {failed_operations} failed"
        )
        if error_message:
            summary_text += f". Error: {error_message}"

        return RunSummary(
            run_id=self.run_id,
            start_time=start_time.isoformat(),
            end_time=end_time.isoformat(),
            duration=duration,
            status=status,
            total_sources=total_sources,
            total_tables=len(tables),
            total_objects=len(objects),
            successful_operations=successful_operations,
            failed_operations=failed_operations,
            summary=summary_text,
        )

    def log_run_summary(self, summary: RunSummary) -> None:
        """
        Log run summary and write it to the audit trail.

        Args:
            summary: Run summary to log
        """
        if summary.status == "failed":
            self.logger.error(summary.summary, extra={"run_id": self.run_id})
        else:
            self.logger.info(summary.summary, extra={"run_id": self.run_id})
        self.audit_logger.log_summary(summary)
