"""
Table selection for a replication run.

Turns a source's replication scheme into the ordered list of warehouse tables
to export this run.
"""

from typing import Callable, List, Optional, Sequence, Tuple, Union

from bq_replication.config.models import ReplicationScheme
from bq_replication.core.exceptions import UnknownReplicationSchemeError
from bq_replication.replication.date_range import generate_date_range


def _as_scheme(scheme: Union[str, ReplicationScheme]) -> ReplicationScheme:
    try:
        return ReplicationScheme(scheme)
    except ValueError:
        raise UnknownReplicationSchemeError(
            str(scheme), [item.value for item in ReplicationScheme]
        ) from None


def select_tables(
    scheme: Union[str, ReplicationScheme],
    prefix: str,
    date_bounds: Optional[Tuple[str, str]] = None,
    catalog: Optional[Sequence[str]] = None,
    today_key: Optional[Callable[[], str]] = None,
) -> List[str]:
    """
    Select the tables a source replicates this run.

    Args:
        scheme: Replication scheme (today, range or all-time)
        prefix: Table name prefix, e.g. ``events_``
        date_bounds: Inclusive (start, end) date keys, used by ``range``
        catalog: Table names present in the dataset, used by ``all-time``
        today_key: Callable returning today's date key, used by ``today``

    Returns:
        Table names in processing order

    Raises:
        UnknownReplicationSchemeError: If the scheme is not recognised
        ValueError: If the input the scheme needs is missing
    """
    scheme = _as_scheme(scheme)

    if scheme == ReplicationScheme.TODAY:
        if today_key is None:
            raise ValueError("today scheme requires a today_key callable")
        return [f"{prefix}{today_key()}"]

    if scheme == ReplicationScheme.RANGE:
        if not date_bounds:
            raise ValueError("range scheme requires date bounds")
        start, end = date_bounds
        return [f"{prefix}{date_key}" for date_key in generate_date_range(start, end)]

    if scheme == ReplicationScheme.ALL_TIME:
        if catalog is None:
            raise ValueError("all-time scheme requires a table catalog")
        return [table for table in catalog if table.startswith(prefix)]

    raise UnknownReplicationSchemeError(
        scheme.value, [item.value for item in ReplicationScheme]
    )
