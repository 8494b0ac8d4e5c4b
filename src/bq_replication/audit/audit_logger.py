"""
Audit logger for replication operations.

This module appends run results and run summaries to a JSON-lines audit
file so operators can see which tables and objects a run touched.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from bq_replication.audit.logger import ReplicationLogger
from bq_replication.config.models import RunResult, RunSummary


class AuditLogger:
    """Audit logger for recording operations to an audit file."""

    def __init__(
        self,
        logger: ReplicationLogger,
        run_id: str,
        audit_file: Optional[str] = None,
    ):
        """
        Initialize the audit logger.

        Args:
            logger: Logger instance for standard logging
            run_id: Unique run identifier
            audit_file: Path of the JSON-lines audit file, None disables auditing
        """
        self.logger = logger
        self.run_id = run_id
        self.audit_file = Path(audit_file) if audit_file else None

    @property
    def enabled(self) -> bool:
        return self.audit_file is not None

    def _append(self, record: dict) -> None:
        if not self.enabled:
            return

        record = {
            "run_id": self.run_id,
            "logging_time": datetime.now(timezone.utc).isoformat(),
            **record,
        }
        try:
            self.audit_file.parent.mkdir(parents=True, exist_ok=True)
            with self.audit_file.open("a", encoding="utf-8") as f:
                f.write(json.dumps(record, default=str) + "\n")
        except OSError as e:
            # Fallback to standard logging if audit file logging fails
            self.logger.warning(
                f"Failed to log to audit file {self.audit_file}: {str(e)}"
            )

    def log_operation(self, result: Union[RunResult, dict]) -> None:
        """
        Log one operation result to the audit file.

        Args:
            result: RunResult of a cleanup, export, load or reconcile step
        """
        if isinstance(result, RunResult):
            result = result.model_dump()
        self._append({"record_type": "operation", **result})

    def log_summary(self, summary: RunSummary) -> None:
        """
        Log a run summary to the audit file.

        Args:
            summary: Summary produced at the end of a run
        """
        self._append({"record_type": "run_summary", **summary.model_dump()})
