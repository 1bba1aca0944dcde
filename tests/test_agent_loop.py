import json

import pytest

from gsd.agent import AgentStatus, AgentTask, LoopState, Task, TaskConfig
from gsd.errors import AuthError, ProviderError
from gsd.prompts import CORRECTIVE_MESSAGE
from gsd.tools import ExecutionContext, create_default_action_executor
from gsd.utils.retry import RetryConfig, RetryPolicy

from .conftest import FakeBackend, actions, done


def make_agent(backend, tmp_path, sleep, max_iterations=5, **config):
    return AgentTask(
        task=Task(role="backend", description="create hello.txt with content 'hi'"),
        backend=backend,
        executor=create_default_action_executor(),
        config=TaskConfig(max_iterations=max_iterations, **config),
        retry_policy=RetryPolicy(RetryConfig(max_attempts=3, base_delay=1.0), sleep=sleep),
        context=ExecutionContext(role="backend", working_dir=str(tmp_path)),
        sleep=sleep,
    )


async def test_hello_file_end_to_end(tmp_path, sleep):
    backend = FakeBackend([
        actions({"type": "write_file", "params": {"path": "hello.txt", "content": "hi"}}),
        done("Created hello.txt"),
    ])
    agent = make_agent(backend, tmp_path, sleep)

    outcome = await agent.run()

    assert outcome.status == AgentStatus.DONE
    assert outcome.summary == "Created hello.txt"
    assert agent.request_count == 2
    assert len(backend.requests) == 2
    assert (tmp_path / "hello.txt").read_text() == "hi"
    assert agent.state == LoopState.DONE

    feedback = agent.conversation[2]
    assert feedback.role == "user"
    assert feedback.content.startswith("Actions executed. Results:")
    assert "write_file: File written: hello.txt" in feedback.content


async def test_done_terminates_immediately(tmp_path, sleep):
    backend = FakeBackend([done("nothing to do")])
    agent = make_agent(backend, tmp_path, sleep, max_iterations=10)

    outcome = await agent.run()

    assert outcome.is_done
    assert outcome.summary == "nothing to do"
    assert len(backend.requests) == 1


async def test_unrecognized_reply_gets_one_corrective_message(tmp_path, sleep):
    backend = FakeBackend(['{"thoughts": "thinking"}', done("ok")])
    agent = make_agent(backend, tmp_path, sleep)

    outcome = await agent.run()

    assert outcome.is_done
    assert [m.content for m in agent.conversation].count(CORRECTIVE_MESSAGE) == 1
    assert agent.conversation[2].content == CORRECTIVE_MESSAGE
    assert backend.requests[1][-1].content == CORRECTIVE_MESSAGE


async def test_iteration_budget_bounds_the_loop(tmp_path, sleep):
    backend = FakeBackend(["not json"] * 3)
    agent = make_agent(backend, tmp_path, sleep, max_iterations=3)

    outcome = await agent.run()

    assert outcome.status == AgentStatus.EXHAUSTED
    assert outcome.last_content == "not json"
    assert len(backend.requests) == 3
    assert agent.iteration_count == 3


async def test_conversation_is_append_only(tmp_path, sleep):
    backend = FakeBackend([
        actions({"type": "run_command", "params": {"command": "echo one"}}),
        "garbled",
        done("finished"),
    ])
    agent = make_agent(backend, tmp_path, sleep)

    await agent.run()

    for earlier, later in zip(backend.requests, backend.requests[1:]):
        assert later[:len(earlier)] == earlier
        assert len(later) == len(earlier) + 2


async def test_actions_run_in_order(tmp_path, sleep):
    backend = FakeBackend([
        actions(
            {"type": "write_file", "params": {"path": "order.txt", "content": "first"}},
            {"type": "read_file", "params": {"path": "order.txt"}},
        ),
        done("ok"),
    ])
    agent = make_agent(backend, tmp_path, sleep)

    await agent.run()

    assert "read_file: first" in agent.conversation[2].content


async def test_unknown_action_is_fed_back(tmp_path, sleep):
    backend = FakeBackend([
        actions({"type": "teleport", "params": {}}),
        done("gave up teleporting"),
    ])
    agent = make_agent(backend, tmp_path, sleep)

    outcome = await agent.run()

    assert outcome.is_done
    assert "teleport: Unknown action: teleport" in agent.conversation[2].content


async def test_rate_limited_request_is_retried(tmp_path, sleep):
    backend = FakeBackend([
        ProviderError("rate limit", retryable=True, status_code=429),
        done("ok"),
    ])
    agent = make_agent(backend, tmp_path, sleep)

    outcome = await agent.run()

    assert outcome.is_done
    assert sleep.calls == [1.0]
    assert len(agent.conversation) == 2


async def test_auth_error_is_fatal(tmp_path, sleep):
    backend = FakeBackend([AuthError("bad key")])
    agent = make_agent(backend, tmp_path, sleep)

    with pytest.raises(AuthError):
        await agent.run()

    assert sleep.calls == []


async def test_pacing_delays(tmp_path, sleep):
    backend = FakeBackend([
        actions(
            {"type": "run_command", "params": {"command": "echo a"}},
            {"type": "run_command", "params": {"command": "echo b"}},
        ),
        done("ok"),
    ])
    agent = make_agent(backend, tmp_path, sleep,
                       between_actions_delay=0.5, between_iterations_delay=3.0)

    await agent.run()

    assert sleep.calls == [0.5, 0.5, 3.0]


async def test_first_message_carries_task_and_protocol(tmp_path, sleep):
    backend = FakeBackend([done("ok")])
    agent = make_agent(backend, tmp_path, sleep)

    await agent.run()

    first = backend.requests[0][0]
    assert first.role == "user"
    assert "create hello.txt" in first.content
    assert '"done": true' in first.content
    assert "write_file" in first.content


async def test_done_summary_object_becomes_text(tmp_path, sleep):
    backend = FakeBackend([json.dumps({"done": True, "summary": {"files": ["a"]}})])
    agent = make_agent(backend, tmp_path, sleep)

    outcome = await agent.run()

    assert json.loads(outcome.summary) == {"files": ["a"]}


def test_rejects_zero_iterations(tmp_path, sleep):
    with pytest.raises(ValueError):
        make_agent(FakeBackend([]), tmp_path, sleep, max_iterations=0)
