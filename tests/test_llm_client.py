"""
Tests for the multi-provider LLM client
"""

import asyncio

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from src.config.settings import LLMProviderConfig, Settings, build_provider_configs
from src.llm.client import LLMClient, clamp_temperature
from src.llm.response_utils import extract_text_from_response, to_langchain_messages
from src.utils.errors import AllProvidersFailedError, NoProvidersConfiguredError

GROQ = LLMProviderConfig(name="groq", base_url="https://groq.test", api_key="g", model="llama")
OPENROUTER = LLMProviderConfig(name="openrouter", base_url="https://or.test", api_key="o", model="llama")

MESSAGES = [{"role": "system", "content": "Be brief"}, {"role": "user", "content": "Hello"}]


class ScriptedChat:
    def __init__(self, outcome):
        self.outcome = outcome
        self.received = None

    async def ainvoke(self, messages):
        self.received = messages
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class ChatFactory:
    """Hands out one scripted chat model per provider name"""

    def __init__(self, **outcomes):
        self.outcomes = outcomes
        self.requests = []

    def __call__(self, provider, temperature):
        self.requests.append((provider.name, temperature))
        return ScriptedChat(self.outcomes[provider.name])


class TestFailover:
    def test_first_provider_answers(self):
        factory = ChatFactory(groq=AIMessage(content="hi from groq"), openrouter=AIMessage(content="unused"))
        client = LLMClient([GROQ, OPENROUTER], chat_factory=factory)

        assert asyncio.run(client.generate_response(MESSAGES)) == "hi from groq"
        assert [name for name, _ in factory.requests] == ["groq"]

    def test_falls_through_to_next_provider(self):
        factory = ChatFactory(groq=RuntimeError("rate limited"), openrouter=AIMessage(content="hi from openrouter"))
        client = LLMClient([GROQ, OPENROUTER], chat_factory=factory)

        assert asyncio.run(client.generate_response(MESSAGES)) == "hi from openrouter"
        assert [name for name, _ in factory.requests] == ["groq", "openrouter"]

    def test_empty_completion_counts_as_failure(self):
        factory = ChatFactory(groq=AIMessage(content=""), openrouter=AIMessage(content="fallback"))
        client = LLMClient([GROQ, OPENROUTER], chat_factory=factory)

        assert asyncio.run(client.generate_response(MESSAGES)) == "fallback"

    def test_all_providers_failed(self):
        factory = ChatFactory(groq=RuntimeError("down"), openrouter=RuntimeError("also down"))
        client = LLMClient([GROQ, OPENROUTER], chat_factory=factory)

        with pytest.raises(AllProvidersFailedError) as exc_info:
            asyncio.run(client.generate_response(MESSAGES))

        assert exc_info.value.errors == ["groq failed: down", "openrouter failed: also down"]
        assert "All LLM providers failed" in str(exc_info.value)

    def test_no_providers(self):
        client = LLMClient([], chat_factory=ChatFactory())

        with pytest.raises(NoProvidersConfiguredError):
            asyncio.run(client.generate_response(MESSAGES))

    def test_temperature_is_clamped(self):
        factory = ChatFactory(groq=AIMessage(content="ok"))
        client = LLMClient([GROQ], chat_factory=factory)

        asyncio.run(client.generate_response(MESSAGES, temperature=1.7))
        asyncio.run(client.generate_response(MESSAGES, temperature=0.0))

        assert [t for _, t in factory.requests] == [1.0, 0.1]

    @pytest.mark.parametrize("requested,expected", [(0.5, 0.5), (-1, 0.1), (3, 1.0)])
    def test_clamp_temperature(self, requested, expected):
        assert clamp_temperature(requested) == expected


class TestProviderConfig:
    def test_only_keyed_providers_in_priority_order(self):
        config = Settings(groq_api_key="g-key", openrouter_api_key="o-key")
        assert [p.name for p in build_provider_configs(config)] == ["groq", "openrouter"]

    def test_openrouter_headers(self):
        config = Settings(groq_api_key="", openrouter_api_key="o-key", app_title="Advisor")

        providers = build_provider_configs(config)

        assert [p.name for p in providers] == ["openrouter"]
        assert providers[0].headers["X-Title"] == "Advisor"

    def test_no_keys(self):
        assert build_provider_configs(Settings(groq_api_key="", openrouter_api_key="")) == []


class TestResponseUtils:
    def test_roles_are_mapped(self):
        converted = to_langchain_messages(MESSAGES + [{"role": "assistant", "content": "Hi"}, {"role": "tool", "content": {"a": 1}}])

        assert [type(m) for m in converted] == [SystemMessage, HumanMessage, AIMessage, HumanMessage]
        assert converted[3].content == '{"a": 1}'

    def test_extract_text_variants(self):
        assert extract_text_from_response(AIMessage(content="plain")) == "plain"
        assert extract_text_from_response("raw string") == "raw string"
        blocks = [{"type": "reasoning", "text": "thinking"}, {"type": "text", "text": "answer"}, " more"]
        assert extract_text_from_response(blocks) == "answer more"
        assert extract_text_from_response(AIMessage(content="")) == ""
