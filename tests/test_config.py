"""
Tests for configuration loading.
"""

import pytest

from config import (
    Config,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    get_config,
    parse_priority_weights,
)


class TestParsePriorityWeights:
    """Test CONTEXT_PRIORITY_WEIGHTS parsing."""

    def test_empty(self):
        assert parse_priority_weights(None) == {}
        assert parse_priority_weights('') == {}

    def test_valid_object(self):
        assert parse_priority_weights('{"event": 5, "world.history": 2.5}') == {'event': 5, 'world.history': 2.5}

    @pytest.mark.parametrize("raw", ['not json', '[1, 2]', '{"event": "high"}', '{"event": true}'])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            parse_priority_weights(raw)


class TestGetConfig:
    """Test environment selection."""

    def test_named_environments(self):
        assert get_config('production') is ProductionConfig
        assert get_config('testing') is TestingConfig

    def test_unknown_falls_back_to_development(self):
        assert get_config('staging') is DevelopmentConfig

    def test_validate_rejects_zero_limit(self, monkeypatch):
        monkeypatch.setattr(Config, 'CONTEXT_TOKEN_LIMIT', 0)

        with pytest.raises(ValueError):
            Config.validate_required_config()


def test_app_uses_configured_assembler(app):
    assembler = app.extensions['context_assembler']

    assert assembler.default_token_limit == 1000
    assert assembler.prioritizer.weights['event'] == 3
