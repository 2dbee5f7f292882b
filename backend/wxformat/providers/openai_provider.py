import logging
from time import perf_counter

from openai import OpenAI

from wxformat.providers.base import BaseLLMProvider, ChatMessage, CompletionConfig, CompletionError, preview_text


logger = logging.getLogger("wx_format.providers")


class OpenAIProvider(BaseLLMProvider):
    name = "openai"

    def __init__(self, config: CompletionConfig, client: OpenAI | None = None):
        super().__init__(config)
        self.client = client or OpenAI(
            api_key=config.api_key,
            base_url=config.api_endpoint or None,
            timeout=config.timeout_seconds,
        )

    def complete(self, messages: list[ChatMessage], *, request_label: str = "complete") -> str:
        retries = max(0, int(self.config.retries))
        last_error: Exception | None = None

        for attempt in range(retries + 1):
            started = perf_counter()
            logger.info(
                "openai_request_start label=%s model=%s attempt=%d/%d input_chars=%d",
                request_label,
                self.config.model,
                attempt + 1,
                retries + 1,
                sum(len(row["content"]) for row in messages),
            )
            try:
                response = self.client.chat.completions.create(
                    model=self.config.model,
                    messages=messages,
                    temperature=self.config.temperature,
                    max_tokens=self.config.max_tokens,
                )
                text = (response.choices[0].message.content or "").strip()
                if not text:
                    raise ValueError("OpenAI returned an empty completion")
                logger.info(
                    "openai_request_done label=%s duration_sec=%.2f output_chars=%d output_preview=%s",
                    request_label,
                    perf_counter() - started,
                    len(text),
                    preview_text(text, 220),
                )
                return text
            except Exception as exc:
                last_error = exc
                logger.warning(
                    "openai_request_error label=%s attempt=%d/%d duration_sec=%.2f reason=%s",
                    request_label,
                    attempt + 1,
                    retries + 1,
                    perf_counter() - started,
                    exc,
                )

        raise CompletionError(f"OpenAI request failed ({last_error})") from last_error
