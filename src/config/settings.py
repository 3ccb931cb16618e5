"""
Configuration management for the application.
Loads settings from environment variables and the project .env file.
"""

from pathlib import Path
from typing import Dict, List
from dataclasses import dataclass, field
from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from loguru import logger

# Find project root (where .env and data/ live)
# This file is at src/config/settings.py, so project root is 3 levels up
_project_root = Path(__file__).resolve().parent.parent.parent

# Export for use by vector_store, database, logger - ensures consistent data/ paths
PROJECT_ROOT = _project_root

# Load environment variables from project root
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(dotenv_path=_env_file, override=True)
    logger.debug(f"Loaded .env from: {_env_file}")
else:
    logger.warning(f".env file not found at: {_env_file}")
    # Fallback to default behavior (current directory)
    load_dotenv(override=True)


@dataclass
class LLMProviderConfig:
    """One OpenAI-compatible chat completion provider."""
    name: str
    base_url: str
    api_key: str
    model: str
    headers: Dict[str, str] = field(default_factory=dict)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # LLM Providers (tried in this order: groq, openrouter)
    groq_api_key: str = Field(default="")
    groq_base_url: str = Field(default="https://api.groq.com/openai/v1")
    groq_model: str = Field(default="llama3-8b-8192")

    openrouter_api_key: str = Field(default="")
    openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1")
    openrouter_model: str = Field(default="meta-llama/llama-3.1-8b-instruct:free")

    # Sent to OpenRouter as HTTP-Referer / X-Title
    app_url: str = Field(default="http://localhost:3000")
    app_title: str = Field(default="Financial Advisor RAG")

    # Generation
    llm_max_tokens: int = Field(default=3000)
    llm_timeout_seconds: float = Field(default=60.0)
    default_temperature: float = Field(default=0.3)
    creative_temperature: float = Field(default=0.9)

    # Context assembly
    max_context_documents: int = Field(default=15)  # Hard cap on merged retrieval results
    history_messages_in_prompt: int = Field(default=5)
    recent_messages_limit: int = Field(default=10)

    # Proactive agent
    proactive_confidence_threshold: float = Field(default=0.7)  # Matches must score strictly above this
    proactive_llm_fallback: bool = Field(default=True)  # Ask the model when no instruction pattern fires

    # Calendar / email defaults
    default_timezone: str = Field(default="America/New_York")
    default_meeting_duration_minutes: int = Field(default=60)
    advisor_signature: str = Field(default="Your Financial Advisor")

    # Storage
    database_url: str = Field(default=f"sqlite:///{_project_root / 'data' / 'assistant.db'}")
    vector_store_path: str = Field(default="data/vector_store")

    # Logging
    log_level: str = Field(default="INFO")

    class Config:
        env_file = str(_project_root / ".env")
        env_file_encoding = "utf-8"
        extra = "allow"  # Allow extra fields from .env


def build_provider_configs(config: "Settings") -> List[LLMProviderConfig]:
    """
    Build the ordered provider list from settings.

    Only providers with an API key are returned. The list is handed to the
    LLM client at construction time.

    Args:
        config: Settings instance to read keys from

    Returns:
        Providers in priority order
    """
    candidates = [
        LLMProviderConfig(
            name="groq",
            base_url=config.groq_base_url,
            api_key=config.groq_api_key,
            model=config.groq_model,
        ),
        LLMProviderConfig(
            name="openrouter",
            base_url=config.openrouter_base_url,
            api_key=config.openrouter_api_key,
            model=config.openrouter_model,
            headers={
                "HTTP-Referer": config.app_url,
                "X-Title": config.app_title,
            },
        ),
    ]

    providers = [p for p in candidates if p.api_key]
    if not providers:
        logger.warning("⚠️  No LLM providers configured! Set GROQ_API_KEY or OPENROUTER_API_KEY in .env")
    return providers


# Create global settings instance
settings = Settings()

# Resolve vector store path to absolute
_vector_store_path = Path(settings.vector_store_path)
if not _vector_store_path.is_absolute():
    _vector_store_path = _project_root / _vector_store_path

settings.vector_store_path_resolved = str(_vector_store_path)
