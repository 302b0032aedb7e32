import os
from unittest.mock import patch

import pytest

from calpanel.core.config import ConfigError, HighlightRule, WidgetConfig, load_config, parse_highlights


class TestLoadConfig:
    """Test environment-driven configuration."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_config()

        assert config.refresh_interval == 30
        assert config.fetch_interval == 300
        assert config.event_count == 10
        assert config.title_color == "white"
        assert config.description_color == "white"
        assert config.past_color == "gray"
        assert config.until_color == "lightblue"
        assert config.highlights == []
        assert config.current_icon == "🔸"
        assert config.conflict_icon == "🚨"
        assert config.display_location is True
        assert config.display_response_status is True
        assert config.email is None
        assert config.date_format == "%a, %b %d"
        assert config.datetime_format == "%a, %b %d, %H:%M"
        assert config.calendar_provider == "mock"
        assert config.calendar_id == "primary"
        assert config.access_token is None

    def test_custom_values(self):
        env = {
            "GCAL_REFRESH_INTERVAL": "0",
            "GCAL_COLOR_TITLE": "cyan",
            "GCAL_COLOR_PAST": "darkgray",
            "GCAL_HIGHLIGHTS": '[["meeting", "yellow"], ["standup", "green"]]',
            "GCAL_DISPLAY_LOCATION": "false",
            "GCAL_DISPLAY_RESPONSE_STATUS": "0",
            "GCAL_EMAIL": "me@acme.com",
            "GCAL_DATETIME_FORMAT": "%H:%M",
            "CALENDAR_PROVIDER": "GOOGLE",
            "GCAL_ACCESS_TOKEN": "ya29.token",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config()

        assert config.refresh_interval == 0
        assert config.title_color == "cyan"
        assert config.past_color == "darkgray"
        assert config.highlights == [
            HighlightRule(pattern="meeting", color="yellow"),
            HighlightRule(pattern="standup", color="green"),
        ]
        assert config.display_location is False
        assert config.display_response_status is False
        assert config.email == "me@acme.com"
        assert config.datetime_format == "%H:%M"
        assert config.calendar_provider == "google"
        assert config.access_token == "ya29.token"

    def test_invalid_integer_fails_fast(self):
        with patch.dict(os.environ, {"GCAL_REFRESH_INTERVAL": "soon"}, clear=True):
            with pytest.raises(ConfigError) as exc_info:
                load_config()
        assert "GCAL_REFRESH_INTERVAL" in str(exc_info.value)

    def test_negative_interval_rejected(self):
        with patch.dict(os.environ, {"GCAL_REFRESH_INTERVAL": "-5"}, clear=True):
            with pytest.raises(ConfigError) as exc_info:
                load_config()
        assert "refresh_interval" in str(exc_info.value)

    def test_invalid_email_rejected(self):
        with patch.dict(os.environ, {"GCAL_EMAIL": "not-an-email"}, clear=True):
            with pytest.raises(ConfigError) as exc_info:
                load_config()
        assert "email" in str(exc_info.value)


class TestParseHighlights:
    """Test typed highlight rule parsing."""

    def test_empty(self):
        assert parse_highlights("") == []
        assert parse_highlights("   ") == []

    def test_keeps_order(self):
        rules = parse_highlights('[["b", "blue"], ["a", "red"]]')
        assert [r.pattern for r in rules] == ["b", "a"]
        assert [r.color for r in rules] == ["blue", "red"]

    def test_not_json(self):
        with pytest.raises(ConfigError, match="not valid JSON"):
            parse_highlights("[meeting, yellow]")

    def test_not_a_list(self):
        with pytest.raises(ConfigError, match="JSON list"):
            parse_highlights('{"meeting": "yellow"}')

    @pytest.mark.parametrize("raw", [
        '[["meeting"]]',
        '[["meeting", "yellow", "extra"]]',
        '[["meeting", 3]]',
        '["meeting"]',
    ])
    def test_malformed_pairs(self, raw):
        with pytest.raises(ConfigError, match=r"GCAL_HIGHLIGHTS\[0\]"):
            parse_highlights(raw)

    def test_invalid_regex(self):
        with pytest.raises(ConfigError, match="invalid highlight pattern"):
            parse_highlights('[["ok", "green"], ["(unclosed", "red"]]')

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_highlights("nope")


def test_widget_config_accepts_rules_directly():
    config = WidgetConfig(highlights=[{"pattern": "1:1", "color": "orange"}])
    assert config.highlights[0].color == "orange"
