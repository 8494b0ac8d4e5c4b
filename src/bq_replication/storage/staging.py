"""
Staging area operations on Google Cloud Storage.

The staging area holds the sharded export files waiting to be loaded. This
module lists, filters and deletes them so every run starts from a clean
prefix.
"""

from typing import Iterable, List, Optional

from google.api_core.exceptions import NotFound
from google.cloud import storage

from bq_replication.audit.logger import ReplicationLogger
from bq_replication.core.exceptions import NoMatchingFilesError

GCS_SCHEME = "gs"
LIST_TIMEOUT_SECONDS = 10


def make_gcs_path(bucket_name: str, bucket_suffix: str) -> str:
    """Build ``gs://<bucket>/<suffix>``."""
    return f"{GCS_SCHEME}://{bucket_name}/{bucket_suffix}"


def filter_by_suffix(contents: Iterable[str], file_format: str) -> List[str]:
    """
    Keep the object names ending in ``.<file_format>``, in listing order.

    Raises:
        NoMatchingFilesError: If no name matches
    """
    suffix = f".{file_format}"
    matching_files = [name for name in contents if name.endswith(suffix)]
    if not matching_files:
        raise NoMatchingFilesError("", "", file_format)
    return matching_files


class StagingReconciler:
    """Lists and deletes staged export files."""

    def __init__(
        self,
        client: storage.Client,
        logger: ReplicationLogger,
        timeout_seconds: float = LIST_TIMEOUT_SECONDS,
    ):
        """
        Initialize the staging reconciler.

        Args:
            client: Cloud Storage client
            logger: Logger instance
            timeout_seconds: Timeout applied to listing and delete calls
        """
        self.client = client
        self.logger = logger
        self.timeout_seconds = timeout_seconds

    def list_files_with_prefix(
        self, bucket_name: str, prefix: str, delimiter: Optional[str] = None
    ) -> List[str]:
        """
        List object names under a prefix.

        Without a delimiter the whole tree under the prefix is returned; with
        ``/`` only the objects directly in the "directory" are.
        """
        blobs = self.client.list_blobs(
            bucket_name,
            prefix=prefix,
            delimiter=delimiter,
            timeout=self.timeout_seconds,
        )
        return [blob.name for blob in blobs]

    def list_matching(
        self, bucket_name: str, key_prefix: str, file_format: str
    ) -> List[str]:
        """
        List the objects under ``key_prefix`` whose name ends in ``.file_format``.

        Raises:
            NoMatchingFilesError: If nothing under the prefix matches
        """
        contents = self.list_files_with_prefix(bucket_name, key_prefix)
        try:
            return filter_by_suffix(contents, file_format)
        except NoMatchingFilesError:
            raise NoMatchingFilesError(bucket_name, key_prefix, file_format) from None

    def delete_file(self, bucket_name: str, object_name: str) -> bool:
        """
        Delete one object guarded by its current generation.

        The generation is read right before the delete, so an object
        overwritten in between is left alone.

        Returns:
            True if the object was deleted
        """
        bucket = self.client.bucket(bucket_name)
        blob = bucket.get_blob(object_name, timeout=self.timeout_seconds)
        if blob is None:
            self.logger.info(
                f"Blob {object_name} already gone from {bucket_name}",
                extra={"bucket": bucket_name, "object": object_name},
            )
            return False

        blob.delete(
            if_generation_match=blob.generation, timeout=self.timeout_seconds
        )
        self.logger.info(
            f"Blob {object_name} deleted.",
            extra={"bucket": bucket_name, "object": object_name},
        )
        return True

    def delete_all(self, bucket_name: str, object_names: Iterable[str]) -> int:
        """
        Delete every object, continuing past individual failures.

        Returns:
            Number of objects deleted
        """
        deleted = 0
        for object_name in object_names:
            try:
                if self.delete_file(bucket_name, object_name):
                    deleted += 1
            except NotFound:
                self.logger.info(f"Blob {object_name} already gone from {bucket_name}")
            except Exception as e:
                self.logger.error(
                    f"Failed to delete gs://{bucket_name}/{object_name}: {str(e)}",
                    exc_info=True,
                    extra={"bucket": bucket_name, "object": object_name},
                )
        return deleted

    def empty_directory(
        self, bucket_name: str, key_prefix: str, file_format: str
    ) -> int:
        """
        Delete every ``.file_format`` object under a prefix.

        Returns:
            Number of objects deleted

        Raises:
            NoMatchingFilesError: If nothing under the prefix matches
        """
        matching_files = self.list_matching(bucket_name, key_prefix, file_format)
        return self.delete_all(bucket_name, matching_files)
