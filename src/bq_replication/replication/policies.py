"""
Business rules of the replication run.

Kept apart from the manager so each rule can be tested on its own.
"""

from typing import Optional, Union

from bq_replication.config.models import (
    ExportStrategy,
    LoadMode,
    ReplicationScheme,
    SourceRole,
)


def load_mode_for(
    role: Union[str, SourceRole], index: int
) -> Optional[LoadMode]:
    """
    Mode override for the ``index``-th object loaded for a source.

    The first intraday object of a run replaces the partially loaded table,
    every later object appends. Daily objects always use the template mode.
    Returns None when the template mode applies.
    """
    if SourceRole(role) == SourceRole.INTRADAY and index == 0:
        return LoadMode.FULL_REFRESH
    return None


def should_reconcile(
    role: Union[str, SourceRole],
    scheme: Union[str, ReplicationScheme],
    strategy: Union[str, ExportStrategy],
) -> bool:
    """Whether a completed source purges the overlapping intraday staging data."""
    return (
        SourceRole(role) == SourceRole.DAILY
        and ReplicationScheme(scheme) == ReplicationScheme.TODAY
        and ExportStrategy(strategy) == ExportStrategy.DAILY_STREAMING
    )


def intraday_directory_for(
    daily_table: str, daily_prefix: str, intraday_prefix: str
) -> str:
    """
    Intraday staging directory covering the same day as a daily table.

    ``events_20230101`` with prefixes ``events_``/``events_intraday_`` maps to
    ``events_intraday_20230101``.
    """
    if daily_prefix and daily_table.startswith(daily_prefix):
        return intraday_prefix + daily_table[len(daily_prefix):]
    return daily_table.replace(daily_prefix, intraday_prefix, 1)
