"""
Centralized Configuration System
Environment-aware settings for the BevGenie pipeline and its collaborators.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow"
    )
    """
    Production-grade configuration management.
    Loads from environment variables with sensible defaults.
    """

    # ============================================
    # OPENAI CONFIGURATION
    # ============================================
    openai_api_key: str

    # ============================================
    # MODEL SELECTION (by pipeline role)
    # ============================================
    chat_model: str = "openai:gpt-4o"
    page_model: str = "openai:gpt-4o"
    presentation_model: str = "openai:gpt-4o"
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536

    # ============================================
    # LLM LIMITS
    # ============================================
    llm_timeout_seconds: float = 60.0
    response_max_tokens: int = 300
    response_temperature: float = 0.7
    page_max_tokens: int = 4000
    page_temperature: float = 0.7
    presentation_max_tokens: int = 8000

    # ============================================
    # PIPELINE RULES
    # ============================================
    max_message_length: int = 5000
    history_window_size: int = 20       # Conversation turns sent to the chat model
    page_context_turns: int = 3         # Turns embedded in the page prompt
    page_knowledge_limit: int = 5       # Knowledge snippets embedded in the page prompt
    knowledge_top_k: int = 5
    knowledge_min_similarity: float = 0.0
    knowledge_vector_index: str = "knowledge_vector_index"
    intent_page_confidence_threshold: float = 0.5
    stage_delay_seconds: float = 0.0    # Cosmetic pacing between SSE stages
    enable_vector_detection: bool = True

    # ============================================
    # PERSONA TUNING
    # ============================================
    confidence_growth_rate: float = 0.35
    vector_confidence_threshold: float = 0.6
    vector_classification_policy: Literal["latest", "highest_confidence"] = "latest"

    # ============================================
    # SESSIONS
    # ============================================
    session_backend: Literal["mongodb", "memory"] = "mongodb"
    session_cookie_name: str = "bevgenie_session"
    session_cookie_max_age_seconds: int = 60 * 60 * 24 * 30
    max_tracked_queries: int = 200      # Newest queries kept on the session record

    # ============================================
    # MONGODB
    # ============================================
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "bevgenie"
    mongodb_max_pool_size: int = 20
    mongodb_min_pool_size: int = 1
    mongodb_server_selection_timeout_ms: int = 5000

    # ============================================
    # COMPLIANCE & LOGGING
    # ============================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    enable_structured_logging: bool = False  # Set to True for production JSON logs

    # ============================================
    # ENVIRONMENT
    # ============================================
    environment: Literal["development", "staging", "production", "test"] = "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Singleton pattern for settings.
    Uses LRU cache to ensure only one Settings instance exists.
    """
    return Settings()


# Convenience accessor for common use
settings = get_settings()
