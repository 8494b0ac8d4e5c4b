"""Unit tests for staging area operations."""

import pytest
from google.api_core.exceptions import NotFound, PreconditionFailed

from bq_replication.core.exceptions import NoMatchingFilesError
from bq_replication.storage.staging import (
    StagingReconciler,
    filter_by_suffix,
    make_gcs_path,
)


def _blob(mocker, name, generation=1):
    blob = mocker.Mock()
    blob.name = name
    blob.generation = generation
    return blob


@pytest.fixture
def client(mocker):
    return mocker.Mock()


@pytest.fixture
def reconciler(client, logger):
    return StagingReconciler(client, logger)


class TestHelpers:
    """Tests for the pure path helpers."""

    def test_make_gcs_path(self):
        assert make_gcs_path("b", "s") == "gs://b/s"
        assert make_gcs_path("your-bucket-name", "bucket-suffix") == (
            "gs://your-bucket-name/bucket-suffix"
        )

    def test_filter_by_suffix(self):
        contents = ["f1.json", "f2.json", "f3.txt"]
        assert filter_by_suffix(contents, "json") == ["f1.json", "f2.json"]

    def test_filter_by_suffix_needs_dot(self):
        """A name merely ending in the format letters does not match."""
        with pytest.raises(NoMatchingFilesError):
            filter_by_suffix(["notjson", "a.xjson.txt"], "json")

    def test_filter_by_suffix_no_matches(self):
        with pytest.raises(NoMatchingFilesError):
            filter_by_suffix(["a.txt", "b.txt"], "json")


class TestStagingReconciler:
    """Tests for StagingReconciler."""

    def test_list_matching_uses_full_listing_with_timeout(self, reconciler, client, mocker):
        client.list_blobs.return_value = [
            _blob(mocker, "daily/t/t_000.json"),
            _blob(mocker, "daily/t/sub/t_001.json"),
            _blob(mocker, "daily/t/_SUCCESS"),
        ]

        result = reconciler.list_matching("staging", "daily/t/", "json")

        assert result == ["daily/t/t_000.json", "daily/t/sub/t_001.json"]
        client.list_blobs.assert_called_once_with(
            "staging", prefix="daily/t/", delimiter=None, timeout=10
        )

    def test_list_matching_empty(self, reconciler, client):
        client.list_blobs.return_value = []

        with pytest.raises(NoMatchingFilesError) as excinfo:
            reconciler.list_matching("staging", "daily/", "json")

        assert excinfo.value.bucket == "staging"
        assert excinfo.value.prefix == "daily/"

    def test_delete_file_uses_generation_precondition(self, reconciler, client, mocker):
        blob = _blob(mocker, "daily/f1.json", generation=42)
        client.bucket.return_value.get_blob.return_value = blob

        assert reconciler.delete_file("staging", "daily/f1.json") is True

        client.bucket.assert_called_once_with("staging")
        blob.delete.assert_called_once_with(if_generation_match=42, timeout=10)

    def test_delete_file_missing_object(self, reconciler, client):
        client.bucket.return_value.get_blob.return_value = None
        assert reconciler.delete_file("staging", "daily/f1.json") is False

    def test_delete_all_continues_after_failure(self, reconciler, client, logger, mocker):
        """One failed delete is logged and the others still run."""
        blobs = {
            "a.json": _blob(mocker, "a.json"),
            "b.json": _blob(mocker, "b.json"),
            "c.json": _blob(mocker, "c.json"),
        }
        blobs["a.json"].delete.side_effect = PreconditionFailed("generation changed")
        blobs["b.json"].delete.side_effect = NotFound("gone")
        client.bucket.return_value.get_blob.side_effect = lambda name, timeout: blobs[name]

        deleted = reconciler.delete_all("staging", ["a.json", "b.json", "c.json"])

        assert deleted == 1
        blobs["c.json"].delete.assert_called_once()
        logger.error.assert_called_once()

    def test_empty_directory(self, reconciler, client, mocker):
        blobs = [_blob(mocker, "d/f1.json"), _blob(mocker, "d/f2.txt")]
        client.list_blobs.return_value = blobs
        client.bucket.return_value.get_blob.side_effect = (
            lambda name, timeout: {b.name: b for b in blobs}[name]
        )

        assert reconciler.empty_directory("staging", "d/", "json") == 1
        blobs[0].delete.assert_called_once()
        blobs[1].delete.assert_not_called()

    def test_empty_directory_propagates_no_matching_files(self, reconciler, client):
        client.list_blobs.return_value = []
        with pytest.raises(NoMatchingFilesError):
            reconciler.empty_directory("staging", "d/", "json")
