from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict

from wxformat.config import Settings, settings


class CompletionError(RuntimeError):
    pass


class ChatMessage(TypedDict):
    role: str
    content: str


@dataclass(frozen=True)
class CompletionConfig:
    api_key: str | None
    api_endpoint: str | None = None
    model: str = "deepseek-chat"
    temperature: float = 0.7
    max_tokens: int = 4000
    timeout_seconds: int = 60
    retries: int = 1

    @classmethod
    def from_settings(cls, provider_name: str, source: Settings | None = None) -> "CompletionConfig":
        cfg = source or settings
        common = {
            "temperature": cfg.completion_temperature,
            "max_tokens": cfg.completion_max_tokens,
            "timeout_seconds": cfg.completion_timeout_seconds,
            "retries": cfg.completion_retries,
        }
        name = (provider_name or "").lower()
        if name == "openai":
            return cls(api_key=cfg.openai_api_key, api_endpoint=cfg.openai_base_url, model=cfg.openai_model, **common)
        if name == "anthropic":
            return cls(api_key=cfg.anthropic_api_key, model=cfg.anthropic_model, **common)
        return cls(
            api_key=cfg.deepseek_api_key,
            api_endpoint=cfg.deepseek_api_endpoint,
            model=cfg.deepseek_model,
            **common,
        )


def preview_text(text: str, limit: int | None = None) -> str:
    raw = str(text or "").replace("\r", " ").replace("\n", " ").strip()
    cap = int(limit or settings.log_preview_chars)
    if len(raw) <= cap:
        return raw
    return raw[:cap].rstrip() + " ..."


class BaseLLMProvider:
    name = "base"

    def __init__(self, config: CompletionConfig | None = None):
        self.config = config

    def complete(self, messages: list[ChatMessage], *, request_label: str = "complete") -> str:
        raise NotImplementedError
