"""
BigQuery operations utility for the replication system.

This module wraps the BigQuery client calls the replication run needs:
listing the tables of a dataset and exporting a table to Cloud Storage.
"""

from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import List, Optional

from google.api_core.exceptions import GoogleAPICallError
from google.cloud import bigquery

from bq_replication.audit.logger import ReplicationLogger
from bq_replication.core.exceptions import ExportJobFailedError

EXPORT_FILE_EXTENSION = "json"


def export_uri_for(destination_prefix: str, table_name: str) -> str:
    """Wildcard URI of a table's export shards."""
    return (
        f"{destination_prefix}{table_name}/{table_name}_*.{EXPORT_FILE_EXTENSION}"
    )


class BigQueryOperations:
    """Utility class for BigQuery operations."""

    def __init__(
        self,
        client: bigquery.Client,
        project_id: str,
        logger: ReplicationLogger,
        location: str = "US",
        export_timeout_seconds: Optional[float] = None,
    ):
        """
        Initialize BigQuery operations.

        Args:
            client: BigQuery client
            project_id: Project holding the source datasets
            logger: Logger instance
            location: Location the extract jobs run in
            export_timeout_seconds: Optional upper bound on waiting for an export
        """
        self.client = client
        self.project_id = project_id
        self.logger = logger
        self.location = location
        self.export_timeout_seconds = export_timeout_seconds

    def _dataset_ref(self, dataset: str) -> bigquery.DatasetReference:
        return bigquery.DatasetReference(self.project_id, dataset)

    def list_tables(self, dataset: str, prefix: str = "") -> List[str]:
        """
        Get the tables of a dataset whose name starts with a prefix.

        Args:
            dataset: Dataset name
            prefix: Table name prefix

        Returns:
            Table names in the order the API lists them
        """
        tables = self.client.list_tables(self._dataset_ref(dataset))
        return [
            table.table_id for table in tables if table.table_id.startswith(prefix)
        ]

    def export_table(
        self, dataset: str, table_name: str, destination_prefix: str
    ) -> str:
        """
        Export a table as sharded newline-delimited JSON and wait for the job.

        Shards are written to ``<destination_prefix><table>/<table>_*.json``.
        The destination format is always JSON, whatever format the source is
        configured to clean up.

        Args:
            dataset: Dataset holding the table
            table_name: Table to export
            destination_prefix: ``gs://`` prefix the table directory goes under

        Returns:
            Wildcard URI the shards were written to

        Raises:
            ExportJobFailedError: If the job can't be submitted or ends in error
        """
        destination_uri = export_uri_for(destination_prefix, table_name)
        table_ref = self._dataset_ref(dataset).table(table_name)
        job_config = bigquery.ExtractJobConfig(
            destination_format=bigquery.DestinationFormat.NEWLINE_DELIMITED_JSON
        )

        self.logger.info(
            f"Exporting {self.project_id}.{dataset}.{table_name} to {destination_uri}",
            extra={"table": table_name, "operation": "export"},
        )

        try:
            job = self.client.extract_table(
                table_ref,
                destination_uri,
                job_config=job_config,
                location=self.location,
            )
            job.result(timeout=self.export_timeout_seconds)
        except (GoogleAPICallError, FutureTimeoutError) as e:
            raise ExportJobFailedError(table_name, str(e)) from e

        if job.error_result:
            raise ExportJobFailedError(
                table_name, job.error_result.get("message", str(job.error_result))
            )

        self.logger.info(
            f"{destination_uri} created.",
            extra={"table": table_name, "operation": "export", "job_id": job.job_id},
        )
        return destination_uri
