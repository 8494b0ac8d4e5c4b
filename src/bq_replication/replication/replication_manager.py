"""
Replication manager driving the export, load and cleanup sequence.

For every selected source the manager picks the tables of the run, clears
their staging directories, exports them to Cloud Storage, loads each staged
object with sling and, under the daily+streaming strategy, purges the
intraday staging data the finished daily table supersedes.

Sources, tables and objects are processed one at a time. Every error other
than an empty staging listing stops the run.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Tuple

from bq_replication.audit.logger import ReplicationLogger
from bq_replication.bigquery_operations import EXPORT_FILE_EXTENSION, BigQueryOperations
from bq_replication.config.loader import ConfigLoader
from bq_replication.config.models import (
    LoadJobTemplate,
    ReplicationScheme,
    ReplicationSystemConfig,
    RunSummary,
    SourceConfig,
    SourceRole,
)
from bq_replication.core.base_manager import BaseManager
from bq_replication.core.exceptions import ConfigurationError, NoMatchingFilesError
from bq_replication.loading.load_dispatcher import LoadDispatcher
from bq_replication.replication.date_range import create_date
from bq_replication.replication.policies import (
    intraday_directory_for,
    load_mode_for,
    should_reconcile,
)
from bq_replication.replication.table_selector import select_tables
from bq_replication.storage.staging import StagingReconciler, make_gcs_path


@dataclass(frozen=True)
class SourcePlan:
    """What one source will do this run, resolved before any side effect."""

    role: SourceRole
    source: SourceConfig
    template: LoadJobTemplate
    tables: Tuple[str, ...]


class ReplicationManager(BaseManager):
    """Manager for coordinating replication across the configured sources."""

    def __init__(
        self,
        config: ReplicationSystemConfig,
        logger: ReplicationLogger,
        bq_ops: BigQueryOperations,
        staging: StagingReconciler,
        load_dispatcher: LoadDispatcher,
        run_id: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the replication manager.

        Args:
            config: System configuration
            logger: Logger instance
            bq_ops: BigQuery operations helper
            staging: Staging area operations
            load_dispatcher: Sling load dispatcher
            run_id: Optional run identifier
            clock: Returns the current instant, defaults to the wall clock
        """
        super().__init__(config, logger, run_id)
        self.bq_ops = bq_ops
        self.staging = staging
        self.load_dispatcher = load_dispatcher
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def today_key(self, role: SourceRole) -> str:
        """Date key the today scheme picks for a role."""
        return create_date(self.config.timezone, SourceRole(role).value, now=self.clock())

    def select_tables(self, role: SourceRole) -> List[str]:
        """
        Tables a source replicates this run.

        The all-time scheme reads the dataset's table listing fresh each run.
        """
        source = self.config.source(role)
        catalog = None
        if source.replication_scheme == ReplicationScheme.ALL_TIME:
            catalog = self.bq_ops.list_tables(self.config.dataset, source.table_prefix)

        return select_tables(
            source.replication_scheme,
            source.table_prefix,
            date_bounds=source.date_bounds,
            catalog=catalog,
            today_key=lambda: self.today_key(role),
        )

    def plan_run(self, roles: Iterable[SourceRole]) -> List[SourcePlan]:
        """
        Resolve templates and table lists of every selected source.

        Raises:
            ConfigurationError: If a role isn't configured or its template
                can't be read
            UnknownReplicationSchemeError: If a scheme can't be resolved
        """
        plans = []
        for role in roles:
            role = SourceRole(role)
            if role not in self.config.sources:
                raise ConfigurationError(f"Source {role.value} is not configured")

            source = self.config.source(role)
            template = ConfigLoader.load_load_job_template(source.sling_cfg_path)
            tables = tuple(self.select_tables(role))

            self.logger.info(
                f"Selected {len(tables)} tables for {role.value} "
                f"({source.replication_scheme.value})",
                extra={"source": role.value, "tables": list(tables)},
            )
            plans.append(SourcePlan(role, source, template, tables))
        return plans

    def run_replication_operations(self, roles: Iterable[SourceRole]) -> RunSummary:
        """
        Run the replication for the selected sources, one after the other.

        Returns:
            RunSummary with operation results

        Raises:
            ReplicationError: The first fatal error, after it is logged and
                the failed summary is audited
        """
        start_time = datetime.now(timezone.utc)
        roles = [SourceRole(role) for role in roles]

        self.logger.info(
            f"Starting replication operations (run_id: {self.run_id})",
            extra={"run_id": self.run_id, "sources": [r.value for r in roles]},
        )

        try:
            plans = self.plan_run(roles)
            for plan in plans:
                self.replicate_source(plan)
        except Exception as e:
            error_msg = f"Replication operation failed: {str(e)}"
            self.logger.error(error_msg, extra={"run_id": self.run_id}, exc_info=True)
            summary = self.create_summary(
                start_time, self.results, len(roles), error_message=str(e)
            )
            self.log_run_summary(summary)
            raise

        summary = self.create_summary(start_time, self.results, len(roles))
        self.log_run_summary(summary)
        return summary

    def replicate_source(self, plan: SourcePlan) -> None:
        """Export, load, clean up and reconcile one source."""
        role = plan.role.value
        if not plan.tables:
            self.logger.info(
                f"No tables selected for {role}, nothing to replicate",
                extra={"source": role},
            )
            return

        self._export_tables(plan)

        object_uris = self._list_exported_objects(plan)
        self._load_objects(plan, object_uris)

        # Loaded shards must not be picked up again by the next run
        self._clean_staging(
            plan.role,
            plan.source.bucket,
            plan.source.bucket_suffix,
            EXPORT_FILE_EXTENSION,
        )

        if should_reconcile(
            plan.role, plan.source.replication_scheme, self.config.export_strategy
        ):
            self._reconcile_streaming(plan)

        self.logger.info(f"Completed replication for {role}", extra={"source": role})

    def _clean_staging(
        self,
        role: SourceRole,
        bucket: str,
        key_prefix: str,
        file_format: str,
        operation_type: str = "cleanup",
        table_name: Optional[str] = None,
    ) -> int:
        """Empty a staging prefix; an already empty prefix is not an error."""
        start_time = datetime.now(timezone.utc)
        try:
            deleted = self.staging.empty_directory(bucket, key_prefix, file_format)
        except NoMatchingFilesError as e:
            self.logger.info(
                f"Nothing to clean: {str(e)}",
                extra={"source": role.value, "operation": operation_type},
            )
            self.record_result(
                operation_type,
                role.value,
                "skipped",
                start_time,
                table_name=table_name,
                details={"bucket": bucket, "prefix": key_prefix},
            )
            return 0

        self.record_result(
            operation_type,
            role.value,
            "success",
            start_time,
            table_name=table_name,
            details={"bucket": bucket, "prefix": key_prefix, "deleted": deleted},
        )
        return deleted

    def _export_tables(self, plan: SourcePlan) -> None:
        source = plan.source
        destination_prefix = make_gcs_path(source.bucket, source.bucket_suffix)

        for table_name in plan.tables:
            self._clean_staging(
                plan.role,
                source.bucket,
                f"{source.bucket_suffix}{table_name}/",
                source.file_format,
                table_name=table_name,
            )

            start_time = datetime.now(timezone.utc)
            exported_uri = self.bq_ops.export_table(
                self.config.dataset, table_name, destination_prefix
            )
            self.record_result(
                "export",
                plan.role.value,
                "success",
                start_time,
                table_name=table_name,
                details={"destination_uri": exported_uri},
            )

    def _list_exported_objects(self, plan: SourcePlan) -> List[str]:
        """URIs of the staged JSON shards of a source, in listing order."""
        source = plan.source
        try:
            object_names = self.staging.list_matching(
                source.bucket, source.bucket_suffix, EXPORT_FILE_EXTENSION
            )
        except NoMatchingFilesError as e:
            self.logger.info(
                f"No staged objects to load: {str(e)}",
                extra={"source": plan.role.value},
            )
            return []

        return [make_gcs_path(source.bucket, name) for name in object_names]

    def _load_objects(self, plan: SourcePlan, object_uris: List[str]) -> None:
        for index, object_uri in enumerate(object_uris):
            start_time = datetime.now(timezone.utc)
            mode_override = load_mode_for(plan.role, index)
            self.load_dispatcher.dispatch_load(plan.template, object_uri, mode_override)
            self.record_result(
                "load",
                plan.role.value,
                "success",
                start_time,
                object_uri=object_uri,
                details={
                    "mode": (mode_override or plan.template.mode).value,
                    "target": plan.template.target.object_name,
                },
            )

    def _reconcile_streaming(self, plan: SourcePlan) -> None:
        """Purge the staging data a completed daily table supersedes."""
        daily = plan.source
        intraday = self.config.source(SourceRole.INTRADAY)

        self.logger.info(
            "Reconciling daily and intraday staging areas",
            extra={"source": plan.role.value, "operation": "reconcile"},
        )

        self._clean_staging(
            plan.role,
            daily.bucket,
            daily.bucket_suffix,
            daily.file_format,
            operation_type="reconcile",
        )

        intraday_directory = intraday_directory_for(
            plan.tables[0], daily.table_prefix, intraday.table_prefix
        )
        self._clean_staging(
            SourceRole.INTRADAY,
            intraday.bucket,
            f"{intraday.bucket_suffix}{intraday_directory}/",
            intraday.file_format,
            operation_type="reconcile",
            table_name=intraday_directory,
        )
