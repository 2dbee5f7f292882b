import logging
import time
from time import perf_counter

from anthropic import Anthropic

from wxformat.providers.base import BaseLLMProvider, ChatMessage, CompletionConfig, CompletionError, preview_text


logger = logging.getLogger("wx_format.providers")


def _split_system(messages: list[ChatMessage]) -> tuple[str, list[ChatMessage]]:
    system = "\n\n".join(row["content"] for row in messages if row["role"] == "system")
    rest = [row for row in messages if row["role"] != "system"]
    return system, rest


class AnthropicProvider(BaseLLMProvider):
    name = "anthropic"

    def __init__(self, config: CompletionConfig, client: Anthropic | None = None):
        super().__init__(config)
        self.client = client or Anthropic(api_key=config.api_key, timeout=config.timeout_seconds)

    def complete(self, messages: list[ChatMessage], *, request_label: str = "complete") -> str:
        system, conversation = _split_system(messages)
        retries = max(0, int(self.config.retries))
        last_error: Exception | None = None

        for attempt in range(retries + 1):
            started = perf_counter()
            logger.info(
                "anthropic_request_start label=%s model=%s attempt=%d/%d input_chars=%d system_preview=%s",
                request_label,
                self.config.model,
                attempt + 1,
                retries + 1,
                len(system) + sum(len(row["content"]) for row in conversation),
                preview_text(system, 140),
            )
            try:
                response = self.client.messages.create(
                    model=self.config.model,
                    max_tokens=self.config.max_tokens,
                    temperature=self.config.temperature,
                    system=system,
                    messages=conversation,
                )
                text = "".join(block.text for block in response.content if hasattr(block, "text"))
                logger.info(
                    "anthropic_request_done label=%s duration_sec=%.2f output_chars=%d output_preview=%s",
                    request_label,
                    perf_counter() - started,
                    len(text),
                    preview_text(text, 220),
                )
                return text
            except Exception as exc:
                last_error = exc
                logger.warning(
                    "anthropic_request_error label=%s attempt=%d/%d duration_sec=%.2f reason=%s",
                    request_label,
                    attempt + 1,
                    retries + 1,
                    perf_counter() - started,
                    exc,
                )
                if attempt < retries:
                    time.sleep(0.6 * (2**attempt))

        raise CompletionError(f"Anthropic request failed ({last_error})") from last_error
