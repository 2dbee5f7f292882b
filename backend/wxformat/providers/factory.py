import logging

from wxformat.config import settings
from wxformat.providers.anthropic_provider import AnthropicProvider
from wxformat.providers.base import BaseLLMProvider, CompletionConfig
from wxformat.providers.deepseek_provider import DeepSeekProvider
from wxformat.providers.mock_provider import MockProvider
from wxformat.providers.openai_provider import OpenAIProvider


logger = logging.getLogger("wx_format.providers")

_PROVIDERS = {
    "deepseek": DeepSeekProvider,
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
}


def get_provider(name: str | None = None) -> BaseLLMProvider:
    candidate = (name or settings.default_llm_provider).lower()
    provider_cls = _PROVIDERS.get(candidate)
    if provider_cls is None:
        return MockProvider()

    config = CompletionConfig.from_settings(candidate)
    if not config.api_key:
        logger.warning("provider_unconfigured name=%s -- using canned responses", candidate)
        return MockProvider()
    return provider_cls(config)
