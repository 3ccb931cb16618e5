"""
Configuration layer - Settings and constants
"""

from src.config.settings import settings, Settings, LLMProviderConfig, build_provider_configs, PROJECT_ROOT
from src.config.constants import TOOL_CATALOG, KNOWN_TOOLS, APOLOGY_MESSAGE

__all__ = [
    "settings",
    "Settings",
    "LLMProviderConfig",
    "build_provider_configs",
    "PROJECT_ROOT",
    "TOOL_CATALOG",
    "KNOWN_TOOLS",
    "APOLOGY_MESSAGE",
]
