"""Text-completion boundary used by thread analysis."""

from typing import Protocol

from pydantic_ai.models import Model

from court_export.agents.registry import get_agent
from court_export.utils.logger import get_logger

logger = get_logger("court_export.agents.completion")


class CompletionClient(Protocol):
    """Any chat-style provider: one system instruction and one user prompt in, text out."""

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        ...


class AgentCompletionClient:
    """CompletionClient backed by a Pydantic AI agent from the registry.

    The agent is built on first use so a missing provider key surfaces as a
    completion failure, not at construction.
    """

    def __init__(self, agent_id: str = "thread_analyzer", model: Model | str | None = None):
        self._agent_id = agent_id
        self._model = model

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        agent = get_agent(self._agent_id, system_prompt, output_type=str, model=self._model)
        result = await agent.run(user_prompt)
        logger.debug("completion.done", agent_id=self._agent_id, response_chars=len(result.output or ""))
        return result.output or ""
