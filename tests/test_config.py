"""Tests for configuration loading."""

from datetime import date
from unittest.mock import patch

import pytest

from dayplan.config import Config, load_config
from dayplan.core.model import OverlapPolicy


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "dayplan.conf"
    with patch("dayplan.config.CONFIG_FILE", path):
        yield path


class TestLoadConfig:
    def test_defaults_without_file(self, config_file):
        config = load_config()
        assert config == Config()
        assert config.timezone == "UTC"
        assert config.default_duration_min == 30
        assert config.overlap_policy == OverlapPolicy.WARNING

    def test_reads_values(self, config_file):
        config_file.write_text(
            "# dayplan settings\n"
            'TIMEZONE="America/Toronto"\n'
            "DEFAULT_DURATION=25m\n"
            "OVERLAP_POLICY=error # strict\n"
        )
        config = load_config()
        assert config.timezone == "America/Toronto"
        assert config.default_duration_min == 25
        assert config.overlap_policy == OverlapPolicy.ERROR

    def test_invalid_values_are_ignored(self, config_file):
        config_file.write_text("TIMEZONE=Mars/Olympus\nDEFAULT_DURATION=0m\nOVERLAP_POLICY=sometimes\n")
        assert load_config() == Config()

    def test_junk_lines_are_skipped(self, config_file):
        config_file.write_text("not a setting\n\nCOLOR=blue\nDEFAULT_DURATION='1h'\n")
        assert load_config().default_duration_min == 60


class TestToOptions:
    def test_config_seeds_options(self):
        config = Config(timezone="Europe/Paris", default_duration_min=45, overlap_policy=OverlapPolicy.IGNORE)
        options = config.to_options(day=date(2025, 1, 15))
        assert options.day == date(2025, 1, 15)
        assert options.timezone == "Europe/Paris"
        assert options.default_duration_min == 45
        assert options.overlap_policy == OverlapPolicy.IGNORE

    def test_explicit_timezone_wins(self):
        assert Config(timezone="Europe/Paris").to_options(timezone="UTC").timezone == "UTC"
