"""
Loading module for the replication system.

This module provides the sling load dispatcher.
"""

from .load_dispatcher import LoadDispatcher

__all__ = ["LoadDispatcher"]
