"""
Tests for centralized configuration system.
Verifies environment variable loading and default values.
"""
import pytest
from src.config import Settings, get_settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("SESSION_BACKEND", "LOG_LEVEL", "STAGE_DELAY_SECONDS", "VECTOR_CLASSIFICATION_POLICY"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigurationSystem:
    """Test suite for configuration management."""

    def test_default_values(self, clean_env):
        """Verify all configuration fields have sensible defaults."""
        settings = Settings(openai_api_key="test-key", _env_file=None)

        # Models
        assert settings.chat_model == "openai:gpt-4o"
        assert settings.embedding_model == "text-embedding-3-small"
        assert settings.embedding_dimensions == 1536

        # Pipeline rules
        assert settings.max_message_length == 5000
        assert settings.response_max_tokens == 300
        assert settings.page_context_turns == 3
        assert settings.page_knowledge_limit == 5
        assert settings.stage_delay_seconds == 0.0

        # Sessions
        assert settings.session_backend == "mongodb"
        assert settings.session_cookie_name == "bevgenie_session"

        # Logging
        assert settings.log_level == "INFO"
        assert settings.enable_structured_logging is False

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("SESSION_BACKEND", "memory")
        clean_env.setenv("STAGE_DELAY_SECONDS", "0.25")
        clean_env.setenv("VECTOR_CLASSIFICATION_POLICY", "highest_confidence")

        settings = Settings(openai_api_key="test-key", _env_file=None)

        assert settings.session_backend == "memory"
        assert settings.stage_delay_seconds == 0.25
        assert settings.vector_classification_policy == "highest_confidence"

    def test_invalid_backend_rejected(self, clean_env):
        clean_env.setenv("SESSION_BACKEND", "redis")

        with pytest.raises(Exception):
            Settings(openai_api_key="test-key", _env_file=None)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
