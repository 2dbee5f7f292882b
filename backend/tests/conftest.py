import os
import tempfile
from datetime import datetime, timezone

import pytest

# Settings are read at import time, so the environment is pinned before any
# wxformat module loads.
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="wxformat-tests-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEFAULT_LLM_PROVIDER"] = "mock"
for _key in ("DEEPSEEK_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY"):
    os.environ.pop(_key, None)

from wxformat.providers.base import BaseLLMProvider, CompletionError  # noqa: E402
from wxformat.services.template_service import TemplateStore  # noqa: E402
from wxformat.storage import MemoryLocalStorage  # noqa: E402

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class StubProvider(BaseLLMProvider):
    """Returns a fixed reply (or raises) and records the messages it saw."""

    name = "stub"

    def __init__(self, reply: str = "", error: Exception | None = None):
        super().__init__(None)
        self.reply = reply
        self.error = error
        self.calls: list[list[dict]] = []

    def complete(self, messages, *, request_label="complete"):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def memory_storage():
    return MemoryLocalStorage()


@pytest.fixture
def template_store(memory_storage):
    return TemplateStore(memory_storage, key="wx_format_templates", clock=lambda: FIXED_NOW)


@pytest.fixture
def stub_provider():
    return StubProvider


@pytest.fixture
def failing_provider():
    return StubProvider(error=CompletionError("network down"))
