import json
from types import SimpleNamespace

import anthropic
import httpx
import pytest

from gsd.config import BackendSettings
from gsd.errors import AuthError, ProviderError, TransportError
from gsd.llm import (
    AnthropicAdapter,
    GeminiAdapter,
    GitHubModelsAdapter,
    GroqAdapter,
    Message,
    OllamaAdapter,
)

GROQ_URL = "https://api.groq.test/openai/v1/chat/completions"
OLLAMA_URL = "http://ollama.test/api/chat"

CONVERSATION = [Message(role="user", content="hello"), Message(role="assistant", content="hi"),
                Message(role="user", content="go on")]


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def groq(handler, api_key="secret"):
    settings = BackendSettings(name="groq", model="llama", api_key=api_key, api_url=GROQ_URL,
                               temperature=0.2, max_tokens=512)
    return GroqAdapter(settings, client=mock_client(handler))


def ollama(handler):
    settings = BackendSettings(name="ollama", model="llama3.2", api_url=OLLAMA_URL,
                               temperature=0.3, max_tokens=256)
    return OllamaAdapter(settings, client=mock_client(handler))


async def test_openai_compatible_request_and_response():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "choices": [{"message": {"role": "assistant", "content": '{"done": true}'}}],
            "usage": {"prompt_tokens": 10, "completion_tokens": 3},
        })

    adapter = groq(handler)

    content = await adapter.send(CONVERSATION)

    assert content == '{"done": true}'
    assert seen["auth"] == "Bearer secret"
    assert seen["body"] == {
        "model": "llama",
        "messages": [m.to_dict() for m in CONVERSATION],
        "temperature": 0.2,
        "max_tokens": 512,
    }
    await adapter.close()


async def test_http_429_is_retryable_provider_error():
    adapter = groq(lambda request: httpx.Response(
        429, json={"error": {"message": "Too many requests"}}
    ))

    with pytest.raises(ProviderError) as exc_info:
        await adapter.send(CONVERSATION)

    assert exc_info.value.retryable
    assert exc_info.value.status_code == 429


async def test_rate_limit_error_payload_is_retryable():
    adapter = groq(lambda request: httpx.Response(
        200, json={"error": {"message": "Rate limit reached for model llama"}}
    ))

    with pytest.raises(ProviderError) as exc_info:
        await adapter.send(CONVERSATION)

    assert exc_info.value.retryable


async def test_other_provider_errors_are_not_retryable():
    adapter = groq(lambda request: httpx.Response(
        400, json={"error": {"message": "model not found"}}
    ))

    with pytest.raises(ProviderError) as exc_info:
        await adapter.send(CONVERSATION)

    assert not exc_info.value.retryable
    assert exc_info.value.message == "model not found"


@pytest.mark.parametrize("status", [401, 403])
async def test_rejected_credentials_raise_auth_error(status):
    adapter = groq(lambda request: httpx.Response(status, json={"error": {"message": "invalid"}}))

    with pytest.raises(AuthError):
        await adapter.send(CONVERSATION)


async def test_missing_api_key_raises_auth_error_without_request():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={})

    adapter = groq(handler, api_key=None)

    with pytest.raises(AuthError) as exc_info:
        await adapter.send(CONVERSATION)

    assert "GROQ_API_KEY" in str(exc_info.value)
    assert requests == []


async def test_connection_failure_is_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    adapter = groq(handler)

    with pytest.raises(TransportError):
        await adapter.send(CONVERSATION)


async def test_response_without_choices():
    adapter = groq(lambda request: httpx.Response(200, json={"id": "x"}))

    with pytest.raises(ProviderError):
        await adapter.send(CONVERSATION)


@pytest.mark.parametrize("choices", [["oops"], [{"message": "oops"}]])
async def test_malformed_choice_is_provider_error(choices):
    adapter = groq(lambda request: httpx.Response(200, json={"choices": choices}))

    with pytest.raises(ProviderError):
        await adapter.send(CONVERSATION)


async def test_github_models_uses_token():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

    settings = BackendSettings(name="github", model="gpt-4o", api_key="ghp_x",
                               api_url="https://models.test/chat/completions")
    adapter = GitHubModelsAdapter(settings, client=mock_client(handler))

    assert await adapter.send(CONVERSATION) == "ok"
    assert seen["auth"] == "Bearer ghp_x"


async def test_ollama_request_shape():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"message": {"role": "assistant", "content": "ready"},
                                         "prompt_eval_count": 5, "eval_count": 1})

    adapter = ollama(handler)

    assert await adapter.send(CONVERSATION) == "ready"
    assert seen["auth"] is None
    assert seen["body"]["stream"] is False
    assert seen["body"]["options"] == {"temperature": 0.3, "num_predict": 256}


async def test_ollama_empty_response_is_transport_error():
    adapter = ollama(lambda request: httpx.Response(200, json={"message": {"content": ""}}))

    with pytest.raises(TransportError) as exc_info:
        await adapter.send(CONVERSATION)

    assert "ollama serve" in str(exc_info.value)


async def test_ollama_error_string_payload():
    adapter = ollama(lambda request: httpx.Response(404, json={"error": "model 'x' not found"}))

    with pytest.raises(ProviderError) as exc_info:
        await adapter.send(CONVERSATION)

    assert exc_info.value.status_code == 404
    assert not exc_info.value.retryable


def test_http_adapter_requires_url():
    with pytest.raises(ValueError):
        GroqAdapter(BackendSettings(name="groq", model="llama", api_key="k"))


class FakeAnthropicMessages:
    def __init__(self, result):
        self.result = result
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def anthropic_adapter(result):
    messages = FakeAnthropicMessages(result)
    client = SimpleNamespace(messages=messages)
    settings = BackendSettings(name="anthropic", model="claude-test", api_key="k", max_tokens=100)
    return AnthropicAdapter(settings, client=client), messages


async def test_anthropic_joins_text_blocks():
    response = SimpleNamespace(
        content=[SimpleNamespace(type="text", text='{"done": '),
                 SimpleNamespace(type="text", text="true}")],
        usage=SimpleNamespace(input_tokens=3, output_tokens=2),
    )
    adapter, messages = anthropic_adapter(response)

    assert await adapter.send(CONVERSATION) == '{"done": true}'
    assert messages.kwargs["model"] == "claude-test"
    assert messages.kwargs["max_tokens"] == 100
    assert messages.kwargs["messages"][1] == {"role": "assistant", "content": "hi"}


async def test_anthropic_rate_limit_is_retryable():
    request = httpx.Request("POST", "https://api.anthropic.test/v1/messages")
    error = anthropic.RateLimitError(
        "rate limited", response=httpx.Response(429, request=request), body=None
    )
    adapter, _ = anthropic_adapter(error)

    with pytest.raises(ProviderError) as exc_info:
        await adapter.send(CONVERSATION)

    assert exc_info.value.retryable
    assert exc_info.value.status_code == 429


async def test_anthropic_authentication_error():
    request = httpx.Request("POST", "https://api.anthropic.test/v1/messages")
    error = anthropic.AuthenticationError(
        "bad key", response=httpx.Response(401, request=request), body=None
    )
    adapter, _ = anthropic_adapter(error)

    with pytest.raises(AuthError):
        await adapter.send(CONVERSATION)


def test_anthropic_requires_api_key():
    with pytest.raises(AuthError):
        AnthropicAdapter(BackendSettings(name="anthropic", model="claude-test"))


async def test_gemini_maps_roles():
    calls = {}

    async def generate_content(**kwargs):
        calls.update(kwargs)
        return SimpleNamespace(text="from gemini", usage_metadata=None)

    client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(
        generate_content=generate_content
    )))
    settings = BackendSettings(name="gemini", model="gemini-test", api_key="k", max_tokens=64)
    adapter = GeminiAdapter(settings, client=client)

    assert await adapter.send(CONVERSATION) == "from gemini"
    assert [content["role"] for content in calls["contents"]] == ["user", "model", "user"]
    assert calls["contents"][1]["parts"] == [{"text": "hi"}]
    assert calls["config"].max_output_tokens == 64
