"""
agent.memory - Per-agent conversation transcript.

Stores turns as a plain list[ConversationMessage]. The list is passed to
the language model on every call, so it must always be well-formed: every
assistant tool-call turn is immediately followed by a tool-result turn that
answers each call, in order, by id.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from cosmo_agents.domain.models import (
    ConversationMessage,
    HistoryItem,
    ToolInvocation,
    ToolResult,
)

logger = logging.getLogger(__name__)


class ConversationMemory:
    """Append-only transcript owned by exactly one agent."""

    def __init__(self):
        self._messages: list[ConversationMessage] = []

    @property
    def messages(self) -> list[ConversationMessage]:
        return self._messages

    def __len__(self) -> int:
        return len(self._messages)

    def add_user_message(self, content: str) -> None:
        self._messages.append(ConversationMessage.user_text(content))

    def add_ai_message(self, content: str) -> None:
        self._messages.append(ConversationMessage.assistant_text(content))

    def add_tool_exchange(
        self,
        calls: Sequence[ToolInvocation],
        results: Sequence[ToolResult],
        text: str = "",
    ) -> None:
        """Append an assistant tool-call turn together with its results.

        Raises:
            ValueError: If results do not answer calls one-to-one, in order.
        """
        call_ids = [c.id for c in calls]
        result_ids = [r.tool_call_id for r in results]
        if not calls or call_ids != result_ids:
            raise ValueError(
                f"Tool results {result_ids} do not match tool calls {call_ids}"
            )
        self._messages.append(ConversationMessage.assistant_tool_calls(calls, text))
        self._messages.append(ConversationMessage.tool_result_turn(results))

    def load_history(self, items: Iterable[HistoryItem]) -> int:
        """Replace the transcript with remote text turns. Returns the count loaded."""
        self._messages.clear()
        loaded = 0
        for item in items:
            if not item.content:
                continue
            if item.role == "user":
                self.add_user_message(item.content)
            elif item.role == "assistant":
                self.add_ai_message(item.content)
            else:
                continue
            loaded += 1
        if loaded:
            logger.info("Loaded %d message(s) from remote history", loaded)
        return loaded

    def clear(self) -> None:
        """Clear all conversation history."""
        self._messages.clear()
