"""
Main entry point for GSD Agents - multi-backend agent execution service.

Exposes the role dispatcher and the planner over HTTP.
"""

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from .agent import AgentDispatcher, Planner
from .config import EngineConfig
from .errors import ErrorFormatter, GSDError, UnknownRole

logger = logging.getLogger(__name__)


app = FastAPI(title="GSD Agents - Multi-backend Agent Engine")

# Global dispatcher, built from the environment on first use
_dispatcher: Optional[AgentDispatcher] = None


class TaskRequest(BaseModel):
    role: str
    task: str


class PlanRequest(BaseModel):
    goal: str
    auto: Optional[bool] = None


def get_dispatcher() -> AgentDispatcher:
    """Get or create the dispatcher instance."""
    global _dispatcher

    if _dispatcher is None:
        _dispatcher = AgentDispatcher(EngineConfig.from_env())

    return _dispatcher


@app.post("/tasks")
async def run_task(request: TaskRequest):
    """
    Run one task as one role.

    Fatal engine errors are reported as a "failed" status; an unknown role is a 400.
    """
    try:
        outcome = await get_dispatcher().dispatch(request.role, request.task)
    except UnknownRole as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GSDError as e:
        logger.error(f"Task for '{request.role}' failed: {e}", exc_info=True)
        return ErrorFormatter.to_status(e)

    logger.info(f"Task for '{request.role}' finished: {outcome.status.value}")
    return outcome.to_dict()


@app.post("/plans")
async def run_plan(request: PlanRequest):
    """Run the planner on a goal"""
    try:
        result = await Planner(get_dispatcher()).run(request.goal, auto_mode=request.auto)
    except UnknownRole as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GSDError as e:
        logger.error(f"Plan failed: {e}", exc_info=True)
        return ErrorFormatter.to_status(e)

    return result.to_dict()


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    try:
        dispatcher = get_dispatcher()
    except GSDError as e:
        return {**ErrorFormatter.to_status(e), "service": "gsd-agents"}

    return {
        "status": "healthy",
        "service": "gsd-agents",
        "backend": dispatcher.config.backend,
        "model": dispatcher.backend.model_info.id,
    }


@app.get("/")
async def root():
    """Root endpoint with service info"""
    return {
        "name": "GSD Agents",
        "description": "Autonomous task execution against interchangeable LLM backends",
        "version": "v0.1.0",
        "architecture": "Conversation-driven action loop with role dispatch and planning",
        "features": [
            "Groq, GitHub Models, Ollama, Gemini and Anthropic backends",
            "Rate-limit aware retry with exponential backoff",
            "Shell and file actions with bounded feedback",
            "Role dispatch with bounded self-delegation",
            "Planner with decompose, execute and summarize iterations"
        ]
    }


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)
