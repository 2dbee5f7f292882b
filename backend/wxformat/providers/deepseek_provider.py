import logging
import time
from time import perf_counter

import requests

from wxformat.providers.base import BaseLLMProvider, ChatMessage, CompletionConfig, CompletionError, preview_text


logger = logging.getLogger("wx_format.providers")


def _error_detail(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    error = payload.get("error") if isinstance(payload, dict) else None
    message = error.get("message") if isinstance(error, dict) else error
    return str(message or f"API request failed: {response.status_code}")


class DeepSeekProvider(BaseLLMProvider):
    """Chat completions over a plain JSON POST with a bearer credential."""

    name = "deepseek"

    def __init__(self, config: CompletionConfig, session: requests.Session | None = None):
        super().__init__(config)
        self.session = session or requests.Session()

    def _post(self, messages: list[ChatMessage]) -> str:
        response = self.session.post(
            self.config.api_endpoint,
            json={
                "model": self.config.model,
                "messages": messages,
                "temperature": self.config.temperature,
                "max_tokens": self.config.max_tokens,
                "stream": False,
            },
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.config.api_key}",
            },
            timeout=self.config.timeout_seconds,
        )
        if not response.ok:
            raise CompletionError(_error_detail(response))

        try:
            payload = response.json()
            return str(payload["choices"][0]["message"]["content"] or "")
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise CompletionError(f"Malformed completion payload ({exc})") from exc

    def complete(self, messages: list[ChatMessage], *, request_label: str = "complete") -> str:
        retries = max(0, int(self.config.retries))
        last_error: Exception | None = None

        for attempt in range(retries + 1):
            started = perf_counter()
            logger.info(
                "deepseek_request_start label=%s model=%s attempt=%d/%d input_chars=%d user_preview=%s",
                request_label,
                self.config.model,
                attempt + 1,
                retries + 1,
                sum(len(row["content"]) for row in messages),
                preview_text(messages[-1]["content"] if messages else "", 220),
            )
            try:
                text = self._post(messages)
                logger.info(
                    "deepseek_request_done label=%s duration_sec=%.2f output_chars=%d output_preview=%s",
                    request_label,
                    perf_counter() - started,
                    len(text),
                    preview_text(text, 220),
                )
                return text
            except (requests.RequestException, CompletionError) as exc:
                last_error = exc
                logger.warning(
                    "deepseek_request_error label=%s attempt=%d/%d duration_sec=%.2f reason=%s",
                    request_label,
                    attempt + 1,
                    retries + 1,
                    perf_counter() - started,
                    exc,
                )
                if attempt < retries:
                    time.sleep(0.6 * (2**attempt))

        if isinstance(last_error, CompletionError):
            raise last_error
        raise CompletionError(f"DeepSeek request failed ({last_error})") from last_error
