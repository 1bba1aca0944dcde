import json

import pytest

from gsd.agent import AgentDispatcher, Planner
from gsd.errors import PlanningError, UnknownRole

from .conftest import FakeBackend, done


def plan(*pairs):
    return json.dumps({"tasks": [{"agent": role, "task_description": task}
                                 for role, task in pairs]})


def summary(status, text="summary", next_prompt=""):
    return json.dumps({"summary": text, "status": status, "next_prompt": next_prompt})


def make_planner(engine_config, backend, sleep, tmp_path):
    dispatcher = AgentDispatcher(engine_config, backend=backend, working_dir=str(tmp_path),
                                 sleep=sleep)
    return Planner(dispatcher, sleep=sleep)


async def test_single_complete_iteration(engine_config, sleep, tmp_path):
    backend = FakeBackend([
        plan(("architect", "design api"), ("backend", "build api")),
        done("design ready"),
        done("api built"),
        summary("complete", "api delivered"),
    ])
    planner = make_planner(engine_config, backend, sleep, tmp_path)

    result = await planner.run("Build a todo API")

    assert result.stopped_reason == "complete"
    assert result.complete
    assert result.final_summary == "api delivered"
    steps = result.iterations[0].steps
    assert [(step.task.role, step.outcome.summary) for step in steps] == [
        ("architect", "design ready"), ("backend", "api built")
    ]
    summary_prompt = backend.requests[-1][0].content
    assert "--- Output from architect ---\ndesign ready" in summary_prompt
    assert "--- Output from backend ---\napi built" in summary_prompt
    assert sleep.calls == []


async def test_decomposition_prompt_lists_roles(engine_config, sleep, tmp_path):
    backend = FakeBackend([plan(("db", "schema")), done("ok"), summary("complete")])
    planner = make_planner(engine_config, backend, sleep, tmp_path)

    await planner.run("Store todos")

    prompt = backend.requests[0][0].content
    assert "planner architect backend frontend db reviewer" in prompt
    assert 'Goal: "Store todos"' in prompt


async def test_incomplete_without_auto_mode_stops(engine_config, sleep, tmp_path):
    backend = FakeBackend([
        plan(("backend", "build")),
        done("half done"),
        summary("incomplete", next_prompt="finish it"),
    ])
    planner = make_planner(engine_config, backend, sleep, tmp_path)

    result = await planner.run("Build it", auto_mode=False)

    assert result.stopped_reason == "manual"
    assert not result.complete
    assert len(result.iterations) == 1
    assert backend.replies == []


async def test_auto_mode_continues_with_next_prompt(engine_config, sleep, tmp_path):
    backend = FakeBackend([
        plan(("backend", "build")),
        done("built"),
        summary("incomplete", next_prompt="add tests"),
        plan(("reviewer", "write tests")),
        done("tests added"),
        summary("complete", "all done"),
    ])
    planner = make_planner(engine_config, backend, sleep, tmp_path)

    result = await planner.run("Build it", auto_mode=True)

    assert result.stopped_reason == "complete"
    assert [record.goal for record in result.iterations] == ["Build it", "add tests"]
    assert 'Goal: "add tests"' in backend.requests[3][0].content
    second_summary_prompt = backend.requests[5][0].content
    assert 'Original Goal: "Build it"' in second_summary_prompt
    assert sleep.calls == [engine_config.planner_cooldown]


async def test_auto_mode_is_bounded(engine_config, sleep, tmp_path):
    replies = []
    for _ in range(engine_config.max_outer_iterations):
        replies += [plan(("backend", "try")), done("tried"), summary("incomplete", next_prompt="again")]
    backend = FakeBackend(replies)
    planner = make_planner(engine_config, backend, sleep, tmp_path)

    result = await planner.run("Never finishes", auto_mode=True)

    assert result.stopped_reason == "max_iterations"
    assert len(result.iterations) == engine_config.max_outer_iterations
    assert sleep.calls == [engine_config.planner_cooldown] * (engine_config.max_outer_iterations - 1)


async def test_auto_mode_defaults_to_config(engine_config, sleep, tmp_path):
    engine_config.auto_mode = True
    backend = FakeBackend([
        plan(("backend", "build")), done("built"), summary("incomplete", next_prompt="more"),
        plan(("backend", "more")), done("more built"), summary("complete"),
    ])
    planner = make_planner(engine_config, backend, sleep, tmp_path)

    result = await planner.run("Build it")

    assert len(result.iterations) == 2


async def test_malformed_decomposition_is_fatal(engine_config, sleep, tmp_path):
    backend = FakeBackend(["I think we should start with the database."])
    planner = make_planner(engine_config, backend, sleep, tmp_path)

    with pytest.raises(PlanningError):
        await planner.run("Build it")

    assert len(backend.requests) == 1


async def test_malformed_summary_is_fatal(engine_config, sleep, tmp_path):
    backend = FakeBackend([plan(("backend", "build")), done("built"), '{"summary": "x"}'])
    planner = make_planner(engine_config, backend, sleep, tmp_path)

    with pytest.raises(PlanningError):
        await planner.run("Build it")


async def test_unknown_role_stops_the_run(engine_config, sleep, tmp_path):
    backend = FakeBackend([plan(("backend", "build"), ("marketing", "launch")), done("built")])
    planner = make_planner(engine_config, backend, sleep, tmp_path)

    with pytest.raises(UnknownRole):
        await planner.run("Ship it")

    assert backend.replies == []


async def test_plan_result_to_dict(engine_config, sleep, tmp_path):
    backend = FakeBackend([plan(("backend", "build")), "garbage", done("built"),
                           summary("complete", "done")])
    planner = make_planner(engine_config, backend, sleep, tmp_path)

    result = (await planner.run("Build it")).to_dict()

    assert result["status"] == "complete"
    assert result["summary"] == "done"
    step = result["iterations"][0]["steps"][0]
    assert step == {"agent": "backend", "task_description": "build", "status": "done",
                    "summary": "built", "iterations": 2}
