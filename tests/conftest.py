import json
from typing import List, Union

import pytest

from gsd.config import BackendSettings, EngineConfig
from gsd.llm import IBackendAdapter, Message, ModelInfo, ModelProvider
from gsd.utils.retry import RetryConfig


class FakeBackend(IBackendAdapter):
    """Backend that plays back scripted replies and records what it was sent."""

    def __init__(self, replies: List[Union[str, Exception]]):
        self.replies = list(replies)
        self.requests: List[List[Message]] = []
        self.closed = False

    @property
    def model_info(self) -> ModelInfo:
        return ModelInfo(id="fake-model", name="fake-model", provider=ModelProvider.GROQ)

    async def send(self, messages: List[Message]) -> str:
        self.requests.append(list(messages))
        if not self.replies:
            raise AssertionError("FakeBackend ran out of scripted replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def close(self) -> None:
        self.closed = True


class RecordingSleep:
    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


def done(summary: str) -> str:
    return json.dumps({"done": True, "summary": summary})


def actions(*items: dict) -> str:
    return json.dumps({"actions": list(items)})


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig(
        backend="groq",
        backends={"groq": BackendSettings(name="groq", model="fake-model", api_key="key",
                                          api_url="https://example.test/chat/completions")},
        retry=RetryConfig(max_attempts=3, base_delay=1.0),
        max_iterations=5,
        planner_cooldown=2.0,
        max_outer_iterations=3,
        max_delegation_depth=1,
        max_result_chars=4000,
        command_timeout=30.0,
    )
