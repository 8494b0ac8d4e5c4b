"""Unit tests for configuration models and loading."""

import pytest
import yaml

from bq_replication.config.loader import ConfigLoader
from bq_replication.config.models import (
    ExportStrategy,
    LoadMode,
    ReplicationScheme,
    SourceRole,
)
from bq_replication.core.exceptions import ConfigurationError


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_load_from_file(self, tmp_path, config_data):
        path = tmp_path / "gcs.yaml"
        path.write_text(yaml.safe_dump(config_data))

        config = ConfigLoader.load_from_file(path)

        assert config.project_id == "my-project"
        assert config.dataset == "analytics_123"
        assert config.export_strategy == ExportStrategy.PLAIN
        assert set(config.sources) == {SourceRole.DAILY, SourceRole.INTRADAY}
        daily = config.source(SourceRole.DAILY)
        assert daily.table_prefix == "events_"
        assert daily.replication_scheme == ReplicationScheme.TODAY
        assert daily.date_bounds is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigLoader.load_from_file(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "gcs.yaml"
        path.write_text("projectID: [unclosed")
        with pytest.raises(ConfigurationError):
            ConfigLoader.load_from_file(path)

    def test_config_is_immutable(self, make_config):
        config = make_config()
        with pytest.raises(Exception):
            config.project_id = "other"

    def test_unknown_scheme_rejected(self, make_config):
        with pytest.raises(ConfigurationError):
            make_config(daily={"replicationScheme": "weekly"})

    def test_unknown_source_role_rejected(self, make_config, config_data):
        data = dict(config_data)
        data["sources"] = {**config_data["sources"], "hourly": config_data["sources"]["daily"]}
        with pytest.raises(ConfigurationError):
            ConfigLoader.load_from_dict(data)

    def test_range_requires_bounds(self, make_config):
        with pytest.raises(ConfigurationError, match="dateRangeEnd"):
            make_config(daily={"replicationScheme": "range", "dateRangeStart": "20230101"})

    def test_range_rejects_bad_date(self, make_config):
        with pytest.raises(ConfigurationError, match="YYYYMMDD"):
            make_config(
                daily={
                    "replicationScheme": "range",
                    "dateRangeStart": "2023-01-01",
                    "dateRangeEnd": "20230105",
                }
            )

    def test_range_rejects_start_after_end(self, make_config):
        with pytest.raises(ConfigurationError):
            make_config(
                daily={
                    "replicationScheme": "range",
                    "dateRangeStart": "20230105",
                    "dateRangeEnd": "20230101",
                }
            )

    def test_bounds_ignored_for_today(self, make_config):
        config = make_config(daily={"dateRangeStart": "garbage"})
        assert config.source("daily").date_bounds is None

    def test_streaming_strategy_requires_both_sources(self, config_data):
        data = {**config_data, "exportStrategy": "daily+streaming"}
        data["sources"] = {"daily": config_data["sources"]["daily"]}
        with pytest.raises(ConfigurationError, match="intraday"):
            ConfigLoader.load_from_dict(data)

    def test_file_format_leading_dot_stripped(self, make_config):
        config = make_config(daily={"fileFormat": ".json"})
        assert config.source("daily").file_format == "json"


class TestLoadJobTemplate:
    """Tests for load-job template loading and cloning."""

    def test_load_template(self, sling_template_path):
        template = ConfigLoader.load_load_job_template(sling_template_path)
        assert template.source.conn == "GCS"
        assert template.target.object_name == "analytics.events"
        assert template.mode == LoadMode.INCREMENTAL

    def test_default_mode(self, tmp_path):
        path = tmp_path / "sling.yaml"
        path.write_text(
            yaml.safe_dump(
                {"source": {"conn": "GCS"}, "target": {"conn": "PG", "object": "a.b"}}
            )
        )
        assert ConfigLoader.load_load_job_template(path).mode == LoadMode.APPEND

    def test_append_mode_accepted(self, tmp_path):
        path = tmp_path / "sling.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "source": {"conn": "GCS"},
                    "target": {"conn": "PG", "object": "a.b"},
                    "mode": "append",
                }
            )
        )

        template = ConfigLoader.load_load_job_template(path)

        assert template.mode == LoadMode.APPEND
        assert template.to_task()["mode"] == "incremental"

    def test_other_modes_pass_through(self, sling_template_path):
        template = ConfigLoader.load_load_job_template(sling_template_path)
        task = template.for_object("gs://b/f.json", LoadMode.FULL_REFRESH).to_task()
        assert task["mode"] == "full-refresh"

    def test_invalid_template(self, tmp_path):
        path = tmp_path / "sling.yaml"
        path.write_text(yaml.safe_dump({"source": {"conn": "GCS"}}))
        with pytest.raises(ConfigurationError):
            ConfigLoader.load_load_job_template(path)

    def test_for_object_leaves_template_untouched(self, sling_template_path):
        template = ConfigLoader.load_load_job_template(sling_template_path)

        clone = template.for_object("gs://b/f1.json", LoadMode.FULL_REFRESH)

        assert clone.source.stream == "gs://b/f1.json"
        assert clone.mode == LoadMode.FULL_REFRESH
        assert template.source.stream == "placeholder"
        assert template.mode == LoadMode.INCREMENTAL

    def test_to_task_keeps_unknown_keys(self, tmp_path):
        path = tmp_path / "sling.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "source": {"conn": "GCS", "options": {"format": "jsonlines"}},
                    "target": {"conn": "PG", "object": "a.b", "options": {"add_new_columns": True}},
                    "env": {"SLING_THREADS": 2},
                }
            )
        )
        task = ConfigLoader.load_load_job_template(path).for_object("gs://b/f.json").to_task()

        assert task == {
            "source": {"conn": "GCS", "stream": "gs://b/f.json", "options": {"format": "jsonlines"}},
            "target": {"conn": "PG", "object": "a.b", "options": {"add_new_columns": True}},
            "mode": "incremental",
            "env": {"SLING_THREADS": 2},
        }
