"""
agent.base - The bounded tool-use loop shared by every agent.

One chat() call:
    1. load org/user context on first use, append + persist the user message
    2. up to max_iterations times: call the model with the context-aware
       system prompt, the agent's tools and the full transcript
         - tool calls → run them sequentially in the order the model gave,
           append the call turn and the result turn together, loop again
         - text only  → that is the answer: append, persist, return
    3. cap reached → return a fixed message (not an error)

Tool failures never abort the loop; the executor turns them into JSON
error results the model can read. Model-call failures (including the
per-call timeout) propagate to the caller and end the turn; the transcript
keeps everything appended before the failure.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from cosmo_agents.agent.memory import ConversationMemory
from cosmo_agents.agent.tools.executor import ToolExecutor
from cosmo_agents.application.context import SessionContext
from cosmo_agents.application.services.chat_history import ChatHistoryService
from cosmo_agents.domain.exceptions import ModelTimeoutError, TurnCancelledError
from cosmo_agents.domain.models import (
    AgentDefinition,
    AgentResult,
    ConversationMessage,
    ModelTurn,
    ToolInvocation,
    ToolResult,
)
from cosmo_agents.domain.ports import ContextStore, LanguageModelPort

logger = logging.getLogger(__name__)

MAX_ITERATIONS_MESSAGE = "Reached maximum iterations."


class BaseAgent:
    """A single persona running the tool-use loop.

    Constructed by factory.py with all dependencies injected. Owns its
    transcript; never shares it with another agent.
    """

    def __init__(
        self,
        definition: AgentDefinition,
        llm: LanguageModelPort,
        executor: ToolExecutor,
        context: Optional[SessionContext] = None,
        context_store: Optional[ContextStore] = None,
        history: Optional[ChatHistoryService] = None,
        max_iterations: int = 10,
        model_timeout: Optional[float] = None,
        history_limit: int = 20,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self._definition = definition
        self._llm = llm
        self._executor = executor
        self._context = context or SessionContext()
        self._context_store = context_store
        self._history = history
        self._max_iterations = max_iterations
        self._model_timeout = model_timeout
        self._history_limit = history_limit
        self._memory = ConversationMemory()
        self._context_attempted = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def definition(self) -> AgentDefinition:
        return self._definition

    @property
    def name(self) -> str:
        return self._definition.name

    @property
    def session_id(self) -> str:
        return self._context.session_id

    @property
    def context(self) -> SessionContext:
        return self._context

    @property
    def history(self) -> list[ConversationMessage]:
        """Snapshot of the transcript."""
        return list(self._memory.messages)

    @property
    def max_iterations(self) -> int:
        return self._max_iterations

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def load_context(self) -> None:
        """Fetch org/user context. Failures degrade to no context."""
        self._context_attempted = True
        if self._context_store is None:
            return
        await self._context.load_context(self._context_store)

    async def load_history(self) -> int:
        """Seed the transcript from remote history (persisting sessions only)."""
        if not (self._context.persist_history and self._history):
            return 0
        items = await self._history.load(self.session_id, self._history_limit)
        return self._memory.load_history(items)

    async def reset_conversation(self) -> None:
        """Forget the transcript, locally and (if persisting) remotely."""
        self._memory.clear()
        if self._context.persist_history and self._history:
            await self._history.clear(self.session_id)
        logger.info("[%s] Conversation reset (session %s)", self.name, self.session_id)

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    async def chat(
        self, user_message: str, cancel: Optional[asyncio.Event] = None,
    ) -> AgentResult:
        """Process one user message and return the agent's answer.

        Raises:
            ModelTimeoutError: A model call exceeded model_timeout.
            TurnCancelledError: `cancel` was set while the turn was running.
            Exception: Any error raised by the language model itself.
        """
        response, tools_used = await self._converse(user_message, cancel)
        return AgentResult(
            response=response,
            tools_used=tools_used,
            session_id=self.session_id,
        )

    async def _converse(
        self, user_message: str, cancel: Optional[asyncio.Event],
    ) -> tuple[str, list[str]]:
        if not user_message or not user_message.strip():
            return "", []

        if not self._context_attempted:
            await self.load_context()
        self._context.new_request()

        logger.info(
            "[%s] Processing (session=%s): %s",
            self.name, self.session_id, user_message[:80],
        )

        self._memory.add_user_message(user_message)
        self._persist("user", user_message)

        tools_used: list[str] = []
        response = await self._run_loop(
            self._definition, self._memory, tools_used, cancel,
        )
        if response is None:
            logger.warning("[%s] Hit max iterations (%d)", self.name, self._max_iterations)
            return MAX_ITERATIONS_MESSAGE, tools_used

        self._persist("assistant", response, tools_used)
        return response, tools_used

    async def _run_loop(
        self,
        definition: AgentDefinition,
        memory: ConversationMemory,
        tools_used: list[str],
        cancel: Optional[asyncio.Event] = None,
        max_iterations: Optional[int] = None,
    ) -> Optional[str]:
        """Run the bounded loop on `memory` as `definition`.

        Returns the final text (already appended to memory), or None when
        the iteration cap (this agent's own unless given) is reached.
        """
        system_prompt = self._system_prompt_for(definition)
        tools = self._tools_for(definition)
        limit = max_iterations or self._max_iterations

        for iteration in range(1, limit + 1):
            _check_cancelled(cancel)
            turn = await self._call_model(system_prompt, tools, memory.messages)
            logger.debug(
                "[%s] Iteration %d: stop=%s, %d tool call(s)",
                definition.name, iteration, turn.stop_reason.value, len(turn.tool_calls),
            )

            if not turn.tool_calls:
                memory.add_ai_message(turn.text)
                return turn.text

            results: list[ToolResult] = []
            for call in turn.tool_calls:
                _check_cancelled(cancel)
                content = await self._dispatch(definition, call, tools_used, cancel)
                results.append(ToolResult(tool_call_id=call.id, content=content))
            memory.add_tool_exchange(turn.tool_calls, results, turn.text)

        return None

    async def _call_model(
        self,
        system_prompt: str,
        tools: list[dict[str, Any]],
        messages: list[ConversationMessage],
    ) -> ModelTurn:
        try:
            return await asyncio.wait_for(
                self._llm.respond(system_prompt, tools, list(messages)),
                timeout=self._model_timeout,
            )
        except asyncio.TimeoutError:
            raise ModelTimeoutError(
                f"Model call timed out after {self._model_timeout:g}s"
            )

    async def _dispatch(
        self,
        definition: AgentDefinition,
        call: ToolInvocation,
        tools_used: list[str],
        cancel: Optional[asyncio.Event] = None,
    ) -> str:
        """Run one tool call for `definition` and return its result content."""
        logger.info("[%s] -> %s", definition.name, call.name)
        tools_used.append(call.name)
        return await self._executor.execute(call.name, call.input)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _system_prompt_for(self, definition: AgentDefinition) -> str:
        return self._context.build_system_prompt(
            definition.system_prompt, include_memories=definition.context_aware,
        )

    def _tools_for(self, definition: AgentDefinition) -> list[dict[str, Any]]:
        return self._executor.catalog.schemas(definition.allowed_tools)

    def _persist(self, role: str, content: str, tools_used: Optional[list[str]] = None) -> None:
        """Fire-and-forget mirror of one text turn (persisting sessions only)."""
        if not (self._context.persist_history and self._history):
            return
        self._history.record(self.session_id, role, content, tools_used=tools_used or None)


def _check_cancelled(cancel: Optional[asyncio.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise TurnCancelledError("Turn cancelled by caller")
