"""
Multi-provider LLM client

Sends chat completions to OpenAI-compatible providers in priority order and
falls through to the next provider when one fails.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence

from langchain_core.language_models import BaseChatModel
from loguru import logger

from src.config.settings import LLMProviderConfig, build_provider_configs, settings
from src.llm.response_utils import extract_text_from_response, to_langchain_messages
from src.utils.errors import AllProvidersFailedError, LLMProviderError, NoProvidersConfiguredError

MIN_TEMPERATURE = 0.1
MAX_TEMPERATURE = 1.0

ChatFactory = Callable[[LLMProviderConfig, float], BaseChatModel]


def clamp_temperature(temperature: float) -> float:
    """Keep temperature inside the range every provider accepts."""
    return max(MIN_TEMPERATURE, min(MAX_TEMPERATURE, temperature))


def create_chat_model(
    provider: LLMProviderConfig,
    temperature: float,
    max_tokens: Optional[int] = None,
    timeout: Optional[float] = None,
) -> BaseChatModel:
    """
    Create a LangChain chat model bound to one provider.

    Args:
        provider: Provider endpoint, model and credentials
        temperature: Already-clamped generation temperature
        max_tokens: Completion token limit (defaults to settings.llm_max_tokens)
        timeout: Request timeout in seconds (defaults to settings.llm_timeout_seconds)

    Returns:
        ChatOpenAI instance pointed at the provider's base URL
    """
    from langchain_openai import ChatOpenAI

    return ChatOpenAI(
        model=provider.model,
        base_url=provider.base_url,
        api_key=provider.api_key,
        temperature=temperature,
        max_tokens=max_tokens or settings.llm_max_tokens,
        timeout=timeout or settings.llm_timeout_seconds,
        default_headers=provider.headers or None,
        max_retries=0,  # failover to the next provider instead
    )


class LLMClient:
    """
    Chat completion client with ordered provider failover.

    The provider list is fixed at construction. Each request walks the list
    once; a failure on one provider is recorded and the next one is tried.
    """

    def __init__(
        self,
        providers: Optional[List[LLMProviderConfig]] = None,
        chat_factory: Optional[ChatFactory] = None,
    ):
        """
        Initialize the client

        Args:
            providers: Providers in priority order (defaults to those configured in settings)
            chat_factory: Builds a chat model for (provider, temperature); used by tests
        """
        self.providers = list(providers) if providers is not None else build_provider_configs(settings)
        self._chat_factory = chat_factory or create_chat_model

        if self.providers:
            names = ", ".join(p.name for p in self.providers)
            logger.info(f"✅ LLM providers configured: {names}")

    async def generate_response(self, messages: Sequence[Dict[str, Any]], temperature: float = 0.7) -> str:
        """
        Generate a completion, trying providers in order.

        Args:
            messages: Ordered {role, content} messages
            temperature: Requested temperature (clamped to 0.1-1.0)

        Returns:
            Completion text from the first provider that succeeds

        Raises:
            NoProvidersConfiguredError: No provider has an API key
            AllProvidersFailedError: Every provider failed
        """
        if not self.providers:
            raise NoProvidersConfiguredError()

        lc_messages = to_langchain_messages(messages)
        temperature = clamp_temperature(temperature)
        errors: List[str] = []

        for provider in self.providers:
            try:
                logger.debug(f"Trying {provider.name}...")
                model = self._chat_factory(provider, temperature)
                response = await model.ainvoke(lc_messages)
                text = extract_text_from_response(response)
                if not text:
                    raise LLMProviderError(f"Invalid response format from {provider.name}")

                logger.info(f"✅ Success with {provider.name}")
                return text
            except Exception as e:
                error_msg = f"{provider.name} failed: {e}"
                logger.error(f"❌ {error_msg}")
                errors.append(error_msg)

        raise AllProvidersFailedError(errors)
