"""
agent.orchestrator - Coordinator that delegates sub-tasks to specialists.

The orchestrator runs the same loop as every other agent, plus one extra
tool, delegate_to_agent. A delegation runs the chosen specialist's loop on
a fresh, private transcript seeded only with the task (and optional
context); the specialist's final text becomes the delegation's tool result.
Specialists cannot delegate further.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from pydantic import ValidationError

from cosmo_agents.agent.base import BaseAgent
from cosmo_agents.agent.definitions import (
    DELEGATE_TOOL,
    DELEGATE_TOOL_NAME,
    get_definition,
    sub_agent_definition,
)
from cosmo_agents.agent.memory import ConversationMemory
from cosmo_agents.agent.tools.executor import ToolExecutor, error_payload
from cosmo_agents.application.context import SessionContext
from cosmo_agents.application.services.chat_history import ChatHistoryService
from cosmo_agents.domain.models import (
    AgentDefinition,
    AgentMessage,
    AgentRole,
    DelegationRequest,
    OrchestratorResult,
    ToolInvocation,
)
from cosmo_agents.domain.ports import ContextStore, LanguageModelPort

logger = logging.getLogger(__name__)

SUB_AGENT_MAX_ITERATIONS_MESSAGE = "Agent reached maximum iterations."


class AgentOrchestrator(BaseAgent):
    """Top-level agent with delegation.

    Args:
        sub_agent_max_iterations:  Iteration cap for each delegated run;
                                   defaults to the orchestrator's own cap.
        language:                  Response language for the orchestrator
                                   and every specialist it calls.
    """

    def __init__(
        self,
        llm: LanguageModelPort,
        executor: ToolExecutor,
        context: Optional[SessionContext] = None,
        context_store: Optional[ContextStore] = None,
        history: Optional[ChatHistoryService] = None,
        max_iterations: int = 15,
        sub_agent_max_iterations: Optional[int] = None,
        model_timeout: Optional[float] = None,
        history_limit: int = 20,
        language: str = "en",
        definition: Optional[AgentDefinition] = None,
    ):
        super().__init__(
            definition or get_definition(AgentRole.ORCHESTRATOR, language),
            llm,
            executor,
            context=context,
            context_store=context_store,
            history=history,
            max_iterations=max_iterations,
            model_timeout=model_timeout,
            history_limit=history_limit,
        )
        self._language = language
        self._sub_agent_max_iterations = sub_agent_max_iterations or max_iterations
        self._agent_messages: list[AgentMessage] = []

    @property
    def agent_messages(self) -> list[AgentMessage]:
        """Delegation log of the most recent chat() call, in call order."""
        return list(self._agent_messages)

    async def chat(
        self, user_message: str, cancel: Optional[asyncio.Event] = None,
    ) -> OrchestratorResult:
        self._agent_messages = []
        response, tools_used = await self._converse(user_message, cancel)
        return OrchestratorResult(
            response=response,
            agent_messages=list(self._agent_messages),
            tools_used=tools_used,
            session_id=self.session_id,
        )

    async def reset_conversation(self) -> None:
        self._agent_messages = []
        await super().reset_conversation()

    # ------------------------------------------------------------------
    # Loop hooks
    # ------------------------------------------------------------------

    def _is_self(self, definition: AgentDefinition) -> bool:
        return definition.role == self._definition.role

    def _tools_for(self, definition: AgentDefinition) -> list[dict[str, Any]]:
        tools = super()._tools_for(definition)
        if self._is_self(definition):
            tools.append(DELEGATE_TOOL)
        return tools

    async def _dispatch(
        self,
        definition: AgentDefinition,
        call: ToolInvocation,
        tools_used: list[str],
        cancel: Optional[asyncio.Event] = None,
    ) -> str:
        if call.name == DELEGATE_TOOL_NAME and self._is_self(definition):
            return await self._delegate(call, tools_used, cancel)
        return await super()._dispatch(definition, call, tools_used, cancel)

    # ------------------------------------------------------------------
    # Delegation
    # ------------------------------------------------------------------

    async def _delegate(
        self,
        call: ToolInvocation,
        tools_used: list[str],
        cancel: Optional[asyncio.Event],
    ) -> str:
        try:
            request = DelegationRequest.model_validate(call.input or {})
        except ValidationError as e:
            logger.warning("[%s] Invalid delegation: %s", self.name, e)
            return error_payload(f"Invalid input for {DELEGATE_TOOL_NAME}: {e.errors()[0]['msg']}")

        try:
            definition = sub_agent_definition(request.agent, self._language)
        except KeyError:
            logger.warning("[%s] Delegation to unknown agent '%s'", self.name, request.agent)
            return error_payload(f"Unknown agent: {request.agent}")

        logger.info("[%s] => %s: %s", self.name, definition.name, request.task[:80])

        memory = ConversationMemory()
        if request.context:
            memory.add_user_message(f"Context: {request.context}\n\nTask: {request.task}")
        else:
            memory.add_user_message(request.task)

        sub_tools: list[str] = []
        text = await self._run_loop(
            definition,
            memory,
            sub_tools,
            cancel,
            max_iterations=self._sub_agent_max_iterations,
        )
        if text is None:
            logger.warning("[%s] %s hit max iterations", self.name, definition.name)
            text = SUB_AGENT_MAX_ITERATIONS_MESSAGE

        self._agent_messages.append(AgentMessage(
            agent_type=definition.role,
            content=text,
            tools_used=sub_tools,
        ))
        tools_used.extend(sub_tools)
        return text
