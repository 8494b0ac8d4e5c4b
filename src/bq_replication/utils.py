"""
Client factories for the replication system.

Credentials come from Application Default Credentials, the same way the
Google Cloud client libraries resolve them everywhere else.
"""

from typing import Optional

from google.cloud import bigquery, storage


def create_bigquery_client(
    project_id: str, location: Optional[str] = None
) -> bigquery.Client:
    """Create a BigQuery client for the source project."""
    return bigquery.Client(project=project_id, location=location)


def create_storage_client(project_id: str) -> storage.Client:
    """Create a Cloud Storage client for the staging buckets."""
    return storage.Client(project=project_id)
