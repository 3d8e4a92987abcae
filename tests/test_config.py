"""Tests for environment settings."""

from pathlib import Path
from unittest.mock import patch

import pytest

from mneme.core import config
from mneme.core.errors import ConfigError


class TestReviewLimit:
    """Tests for MNEME_REVIEW_LIMIT parsing."""

    def test_default_when_unset(self):
        with patch.dict("os.environ", {}, clear=True):
            assert config.review_limit() == 20

    def test_default_when_blank(self):
        with patch.dict("os.environ", {"MNEME_REVIEW_LIMIT": "  "}):
            assert config.review_limit() == 20

    @pytest.mark.parametrize("raw,expected", [("0", 0), ("5", 5), (" 40 ", 40)])
    def test_integer_values(self, raw, expected):
        with patch.dict("os.environ", {"MNEME_REVIEW_LIMIT": raw}):
            assert config.review_limit() == expected

    @pytest.mark.parametrize("raw", ["abc", "2.5", "-1"])
    def test_bad_values_are_config_errors(self, raw):
        with patch.dict("os.environ", {"MNEME_REVIEW_LIMIT": raw}):
            with pytest.raises(ConfigError, match="MNEME_REVIEW_LIMIT"):
                config.review_limit()


class TestStateDir:
    def test_database_lives_in_state_dir(self, tmp_path: Path):
        with patch.dict("os.environ", {"MNEME_STATE_DIR": str(tmp_path)}):
            assert config.database_path() == tmp_path / "mneme.db"
