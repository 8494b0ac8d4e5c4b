"""Unit tests for the replication run policies."""

import pytest

from bq_replication.config.models import LoadMode
from bq_replication.replication.policies import (
    intraday_directory_for,
    load_mode_for,
    should_reconcile,
)


class TestLoadModeFor:
    """Tests for load_mode_for."""

    def test_first_intraday_object_is_full_refresh(self):
        assert load_mode_for("intraday", 0) == LoadMode.FULL_REFRESH

    @pytest.mark.parametrize("index", [1, 2, 10])
    def test_later_intraday_objects_use_template_mode(self, index):
        assert load_mode_for("intraday", index) is None

    @pytest.mark.parametrize("index", [0, 1])
    def test_daily_objects_use_template_mode(self, index):
        assert load_mode_for("daily", index) is None


class TestShouldReconcile:
    """Tests for should_reconcile."""

    def test_daily_today_streaming(self):
        assert should_reconcile("daily", "today", "daily+streaming") is True

    @pytest.mark.parametrize(
        "role,scheme,strategy",
        [
            ("intraday", "today", "daily+streaming"),
            ("daily", "range", "daily+streaming"),
            ("daily", "all-time", "daily+streaming"),
            ("daily", "today", "plain"),
        ],
    )
    def test_other_combinations(self, role, scheme, strategy):
        assert should_reconcile(role, scheme, strategy) is False


class TestIntradayDirectoryFor:
    """Tests for intraday_directory_for."""

    def test_substitutes_prefix(self):
        result = intraday_directory_for("events_20230105", "events_", "events_intraday_")
        assert result == "events_intraday_20230105"

    def test_only_leading_prefix_replaced(self):
        result = intraday_directory_for("ev_ev_20230105", "ev_", "evi_")
        assert result == "evi_ev_20230105"
