"""
Unit Tests for Configuration Settings

Tests the settings loading, validation, and default values.
"""

import pytest
from pydantic import ValidationError

from stream_relay.core.config.settings import QueueConfig, Settings, StreamConfig, get_settings
from stream_relay.core.exceptions import ConfigurationError

WIKI_VARS = (
    "WIKI_LANG",
    "WIKI_STREAM",
    "WIKI_BACKOFF_START_MS",
    "WIKI_BACKOFF_INCREMENT_MS",
    "WIKI_BACKOFF_MAX_MS",
)


@pytest.mark.unit
class TestSettingsInitialization:
    """Test Settings class initialization and validation."""

    def test_settings_can_be_created(self):
        """Test that Settings can be instantiated without any environment."""
        settings = Settings()
        assert settings is not None

    def test_app_settings_have_valid_defaults(self):
        """Test that app settings have reasonable defaults."""
        settings = Settings()

        assert len(settings.app.APP_NAME) > 0
        assert len(settings.app.APP_VERSION) > 0
        assert settings.app.ENVIRONMENT in ["development", "staging", "production"]
        assert 1 <= settings.app.API_PORT <= 65535

    def test_queue_defaults(self):
        """Consumer long-poll defaults to the SQS maximum."""
        settings = Settings()

        assert settings.QUEUE_RECEIVE_WAIT_SECONDS == 20
        assert settings.QUEUE_CONSUMER_GROUP
        assert settings.QUEUE_CONSUMER_NAME

    def test_log_level_is_normalized(self):
        settings = Settings(LOG_LEVEL="debug")
        assert settings.logging.LOG_LEVEL == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(LOG_LEVEL="LOUD")

    def test_receive_wait_bounded_by_sqs_limit(self):
        with pytest.raises(ValidationError):
            Settings(QUEUE_RECEIVE_WAIT_SECONDS=21)

    def test_stream_read_timeout(self):
        assert Settings().STREAM_READ_TIMEOUT_SECONDS == 60.0
        assert Settings(STREAM_READ_TIMEOUT_SECONDS="5").STREAM_READ_TIMEOUT_SECONDS == 5.0

        with pytest.raises(ValidationError):
            Settings(STREAM_READ_TIMEOUT_SECONDS=0)

    def test_get_settings_is_singleton(self):
        assert get_settings() is get_settings()


@pytest.mark.unit
class TestStreamConfig:
    """Test StreamConfig loading from the environment."""

    def test_from_env_loads_all_fields(self, stream_env):
        config = StreamConfig.from_env()

        assert config.WIKI_LANG == "en"
        assert config.WIKI_STREAM == "recentchange"
        assert config.WIKI_BACKOFF_START_MS == 1000
        assert config.WIKI_BACKOFF_INCREMENT_MS == 1000
        assert config.WIKI_BACKOFF_MAX_MS == 30000

    def test_derived_values(self, stream_config):
        assert stream_config.expected_server_name == "en.wikipedia.org"
        assert stream_config.stream_url == "https://stream.wikimedia.org/v2/stream/recentchange"
        assert stream_config.backoff_start_seconds == 1.0
        assert stream_config.backoff_increment_seconds == 1.0
        assert stream_config.backoff_max_seconds == 30.0

    @pytest.mark.parametrize("missing", WIKI_VARS)
    def test_missing_variable_is_configuration_error(self, stream_env, monkeypatch, missing):
        monkeypatch.delenv(missing)

        with pytest.raises(ConfigurationError) as exc_info:
            StreamConfig.from_env()

        fields = [err["field"] for err in exc_info.value.context["errors"]]
        assert missing in fields
        assert missing in exc_info.value.hint

    def test_non_numeric_backoff_rejected(self, stream_env, monkeypatch):
        monkeypatch.setenv("WIKI_BACKOFF_START_MS", "soon")

        with pytest.raises(ConfigurationError):
            StreamConfig.from_env()

    def test_start_above_max_rejected(self, stream_env, monkeypatch):
        monkeypatch.setenv("WIKI_BACKOFF_START_MS", "60000")

        with pytest.raises(ConfigurationError):
            StreamConfig.from_env()

    def test_config_is_frozen(self, stream_config):
        with pytest.raises(ValidationError):
            stream_config.WIKI_LANG = "de"


@pytest.mark.unit
class TestQueueConfig:
    """Test QueueConfig loading from the environment."""

    def test_from_env(self, stream_env):
        assert QueueConfig.from_env().SQS_QUEUE_URL == "redis://localhost:6379/0/wiki-events"

    def test_missing_queue_url(self, monkeypatch):
        monkeypatch.delenv("SQS_QUEUE_URL", raising=False)

        with pytest.raises(ConfigurationError) as exc_info:
            QueueConfig.from_env()

        assert exc_info.value.hint == "Set SQS_QUEUE_URL"
