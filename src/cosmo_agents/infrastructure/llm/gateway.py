"""
infrastructure.llm.gateway - LanguageModelPort backed by a LangChain chat model.

Translates the provider-neutral transcript (domain.models.ConversationMessage)
into LangChain messages, binds the catalog tool schemas, performs exactly one
model call and maps the AIMessage back to a ModelTurn.

Errors raised by the chat model are not caught here — the agent loop treats
them as fatal for the current turn.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence
from uuid import uuid4

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)

from cosmo_agents.domain.models import (
    ConversationMessage,
    ModelTurn,
    StopReason,
    ToolInvocation,
)

logger = logging.getLogger(__name__)

# Provider-specific finish reasons mapped onto the Anthropic vocabulary.
_STOP_REASONS = {
    "end_turn": StopReason.END_TURN,
    "stop": StopReason.END_TURN,
    "tool_use": StopReason.TOOL_USE,
    "tool_calls": StopReason.TOOL_USE,
    "max_tokens": StopReason.MAX_TOKENS,
    "length": StopReason.MAX_TOKENS,
    "stop_sequence": StopReason.STOP_SEQUENCE,
}


class LangChainGateway:
    """Call a LangChain chat model with tools.

    Implements LanguageModelPort (structural typing — no explicit inheritance).
    """

    def __init__(self, llm: BaseChatModel):
        self._llm = llm

    async def respond(
        self,
        system_prompt: str,
        tools: Sequence[dict[str, Any]],
        messages: Sequence[ConversationMessage],
    ) -> ModelTurn:
        lc_messages: list[BaseMessage] = [SystemMessage(content=system_prompt)]
        lc_messages.extend(to_langchain_messages(messages))

        runnable = self._llm.bind_tools(list(tools)) if tools else self._llm

        logger.debug(
            "Model call: %d message(s), %d tool(s)", len(lc_messages), len(tools),
        )
        response = await runnable.ainvoke(lc_messages)
        return to_model_turn(response)


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------

def to_langchain_messages(messages: Sequence[ConversationMessage]) -> list[BaseMessage]:
    """Convert transcript turns to LangChain messages.

    A tool-result turn expands to one ToolMessage per result, in order.
    """
    converted: list[BaseMessage] = []
    for msg in messages:
        if msg.is_tool_result_turn:
            for result in msg.tool_results:
                converted.append(
                    ToolMessage(content=result.content, tool_call_id=result.tool_call_id)
                )
        elif msg.role == "assistant":
            if msg.is_tool_call_turn:
                converted.append(AIMessage(
                    content=msg.content,
                    tool_calls=[
                        {"name": c.name, "args": dict(c.input), "id": c.id, "type": "tool_call"}
                        for c in msg.tool_calls
                    ],
                ))
            else:
                converted.append(AIMessage(content=msg.content))
        else:
            converted.append(HumanMessage(content=msg.content))
    return converted


def to_model_turn(response: BaseMessage) -> ModelTurn:
    """Map a chat model response onto a ModelTurn."""
    text = _extract_text(response.content)

    calls: list[ToolInvocation] = []
    for call in getattr(response, "tool_calls", None) or []:
        calls.append(ToolInvocation(
            id=call.get("id") or f"call_{uuid4().hex[:12]}",
            name=call["name"],
            input=dict(call.get("args") or {}),
        ))

    metadata = getattr(response, "response_metadata", None) or {}
    raw_reason = metadata.get("stop_reason") or metadata.get("finish_reason")
    stop_reason = _STOP_REASONS.get(raw_reason or "")
    if stop_reason is None:
        stop_reason = StopReason.TOOL_USE if calls else StopReason.END_TURN

    return ModelTurn(text=text, tool_calls=tuple(calls), stop_reason=stop_reason)


def _extract_text(content: Any) -> str:
    """Join the text blocks of a message; tool_use blocks are ignored."""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "\n".join(p for p in parts if p)
