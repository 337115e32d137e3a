"""
Tests for configuration, validation and time helpers.
"""

from datetime import datetime, timezone

import pytest
import yaml

from gamepilot.utils.config import ConfigManager, SystemConfig, load_config
from gamepilot.utils.time import clamp, parse_datetime, format_datetime, js_weekday, hours_between
from gamepilot.utils.validation import ValidationReport, check_unit_range


class TestConfigManager:
    """Configuration loading and validation."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ('GAMEPILOT_REDIS_URL', 'GAMEPILOT_LOG_LEVEL', 'GAMEPILOT_STALE_HOURS',
                     'GAMEPILOT_MAX_RECOMMENDATIONS', 'GAMEPILOT_ENVIRONMENT', 'DEBUG'):
            monkeypatch.delenv(name, raising=False)

    def test_missing_file_uses_defaults_without_writing(self, tmp_path):
        path = tmp_path / 'missing.yaml'
        config = ConfigManager(str(path)).get_config()

        assert config == SystemConfig()
        assert not path.exists()

    def test_yaml_file_overrides_sections(self, tmp_path):
        path = tmp_path / 'gamepilot.yaml'
        path.write_text(yaml.safe_dump({
            'persona': {'stale_after_hours': 12},
            'recommendation': {'max_recommendations': 5},
            'environment': 'staging'
        }))

        config = load_config(str(path))

        assert config.persona.stale_after_hours == 12
        assert config.recommendation.max_recommendations == 5
        assert config.environment == 'staging'
        assert config.mood.challenge_seeking_weight == 0.25

    def test_environment_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv('GAMEPILOT_REDIS_URL', 'redis://cache:6379/0')
        monkeypatch.setenv('GAMEPILOT_LOG_LEVEL', 'debug')
        monkeypatch.setenv('GAMEPILOT_MAX_RECOMMENDATIONS', '3')

        config = ConfigManager(str(tmp_path / 'none.yaml')).get_config()

        assert config.store.backend == 'redis'
        assert config.store.redis_url == 'redis://cache:6379/0'
        assert config.logging.level == 'DEBUG'
        assert config.recommendation.max_recommendations == 3

    def test_validate_config(self, tmp_path):
        manager = ConfigManager(str(tmp_path / 'none.yaml'))
        assert manager.validate_config() == {'valid': True, 'errors': [], 'warnings': []}

        manager.update_config({'store': {'backend': 'sqlite'}, 'mood': {'focus_stability_weight': 0.5}})
        result = manager.validate_config()

        assert result['valid'] is False
        assert result['errors'] == ['Unknown store backend: sqlite']
        assert len(result['warnings']) == 1

        manager.update_config({'store': {'backend': 'memory'}, 'signals': {'max_tracked_users': 0}})
        assert manager.validate_config()['errors'] == ['max_tracked_users must be positive']

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / 'saved' / 'gamepilot.json'
        manager = ConfigManager(str(tmp_path / 'none.yaml'))
        manager.update_config({'signals': {'buffer_capacity': 250}})
        manager.save_config(str(path))

        assert load_config(str(path)).signals.buffer_capacity == 250


class TestValidationReport:

    def test_warnings_keep_report_valid(self):
        report = ValidationReport()
        report.warn('x', 'unusual')
        assert report.is_valid
        assert report.to_dict() == {'is_valid': True, 'issues': [], 'warnings': ['unusual']}

    def test_unit_range_and_merge(self):
        report = check_unit_range({'a': 0.0, 'b': 1.0, 'c': 1.01, 'd': None})
        assert report.issues == [
            'c is out of range [0,1]: 1.01',
            'd is out of range [0,1]: None'
        ]

        merged = ValidationReport().merge(report)
        assert not merged.is_valid


class TestTimeHelpers:

    def test_clamp(self):
        assert clamp(1.5) == 1.0
        assert clamp(-2) == 0.0
        assert clamp(12, 1, 10) == 10

    def test_parse_and_format(self):
        parsed = parse_datetime('2026-03-04T12:00:00Z')
        assert parsed == datetime(2026, 3, 4, 12, tzinfo=timezone.utc)
        assert parse_datetime(datetime(2026, 3, 4, 12)) == parsed
        assert format_datetime(parsed) == '2026-03-04T12:00:00+00:00'
        assert parse_datetime(None) is None

    def test_weekday_and_hours(self):
        assert js_weekday(datetime(2026, 3, 1)) == 0
        assert js_weekday(datetime(2026, 3, 7)) == 6
        assert hours_between(datetime(2026, 3, 1), datetime(2026, 3, 2, 6)) == 30
