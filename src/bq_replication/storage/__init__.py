"""
Storage module for the replication system.

This module provides the Cloud Storage staging area operations.
"""

from .staging import StagingReconciler, filter_by_suffix, make_gcs_path

__all__ = ["StagingReconciler", "filter_by_suffix", "make_gcs_path"]
