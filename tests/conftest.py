"""Shared fixtures for the replication tests."""

from datetime import datetime, timezone

import pytest
import yaml

from bq_replication.audit.logger import ReplicationLogger
from bq_replication.config.loader import ConfigLoader

SLING_TEMPLATE = {
    "source": {"conn": "GCS", "stream": "placeholder"},
    "target": {"conn": "POSTGRES", "object": "analytics.events"},
    "mode": "incremental",
}

# 2023-01-06 03:00 UTC is still 2023-01-05 in New York
FIXED_NOW = datetime(2023, 1, 6, 3, 0, tzinfo=timezone.utc)


@pytest.fixture
def logger(mocker):
    """Logger double recording every call."""
    return mocker.Mock(spec=ReplicationLogger)


@pytest.fixture
def sling_template_path(tmp_path):
    path = tmp_path / "sling.yaml"
    path.write_text(yaml.safe_dump(SLING_TEMPLATE))
    return path


@pytest.fixture
def config_data(sling_template_path):
    """Raw configuration mapping with both sources on the today scheme."""
    return {
        "projectID": "my-project",
        "schema": "analytics_123",
        "timezone": "UTC",
        "exportStrategy": "plain",
        "sources": {
            "daily": {
                "tablePrefix": "events_",
                "bucket": "staging",
                "bucketSuffix": "daily/",
                "fileFormat": "json",
                "replicationScheme": "today",
                "slingCfgPath": str(sling_template_path),
            },
            "intraday": {
                "tablePrefix": "events_intraday_",
                "bucket": "staging",
                "bucketSuffix": "intraday/",
                "fileFormat": "json",
                "replicationScheme": "today",
                "slingCfgPath": str(sling_template_path),
            },
        },
    }


@pytest.fixture
def make_config(config_data):
    """Build a validated config, overriding top-level or per-source keys."""

    def _make(daily=None, intraday=None, **top_level):
        data = {**config_data, **top_level}
        data["sources"] = {
            role: dict(source) for role, source in config_data["sources"].items()
        }
        if daily is not None:
            data["sources"]["daily"].update(daily)
        if intraday is not None:
            data["sources"]["intraday"].update(intraday)
        return ConfigLoader.load_from_dict(data)

    return _make
