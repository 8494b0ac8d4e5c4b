"""Core run bookkeeping and exceptions for the replication system."""
