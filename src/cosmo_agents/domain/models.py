"""
domain.models - Value objects for the agent loop.

These are immutable data containers with no business logic and no
dependencies on infrastructure (no LangChain, no HTTP, no Anthropic SDK).
The transcript is kept in a provider-neutral shape; the LLM gateway
converts it to whatever the chat model expects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------

class AgentRole(str, Enum):
    """Every agent persona the system knows about."""
    COSMO = "cosmo"
    ORCHESTRATOR = "orchestrator"
    RESEARCH = "research"
    OUTREACH = "outreach"
    ANALYTICS = "analytics"
    ENRICHMENT = "enrichment"


# Roles the orchestrator may delegate to. Closed set.
SUB_AGENT_ROLES: tuple[AgentRole, ...] = (
    AgentRole.RESEARCH,
    AgentRole.OUTREACH,
    AgentRole.ANALYTICS,
    AgentRole.ENRICHMENT,
)


class StopReason(str, Enum):
    END_TURN = "end_turn"
    TOOL_USE = "tool_use"
    MAX_TOKENS = "max_tokens"
    STOP_SEQUENCE = "stop_sequence"


# ---------------------------------------------------------------------------
# Transcript
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ToolInvocation:
    """One tool call requested by the model."""
    id: str
    name: str
    input: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool call, keyed by the id of the call it answers.

    content is always a string (JSON for tool payloads and errors).
    """
    tool_call_id: str
    content: str


@dataclass(frozen=True)
class ConversationMessage:
    """One turn of the transcript.

    Exactly one of content / tool_calls / tool_results carries the payload:
      - user or assistant text:        content
      - assistant tool-call turn:      tool_calls (content holds any preamble)
      - tool-result turn (role=user):  tool_results
    """
    role: str
    content: str = ""
    tool_calls: tuple[ToolInvocation, ...] = ()
    tool_results: tuple[ToolResult, ...] = ()

    @classmethod
    def user_text(cls, text: str) -> ConversationMessage:
        return cls(role="user", content=text)

    @classmethod
    def assistant_text(cls, text: str) -> ConversationMessage:
        return cls(role="assistant", content=text)

    @classmethod
    def assistant_tool_calls(
        cls, calls: list[ToolInvocation] | tuple[ToolInvocation, ...], text: str = "",
    ) -> ConversationMessage:
        return cls(role="assistant", content=text, tool_calls=tuple(calls))

    @classmethod
    def tool_result_turn(
        cls, results: list[ToolResult] | tuple[ToolResult, ...],
    ) -> ConversationMessage:
        return cls(role="user", tool_results=tuple(results))

    @property
    def is_tool_call_turn(self) -> bool:
        return bool(self.tool_calls)

    @property
    def is_tool_result_turn(self) -> bool:
        return bool(self.tool_results)


@dataclass(frozen=True)
class ModelTurn:
    """One response from the language model."""
    text: str = ""
    tool_calls: tuple[ToolInvocation, ...] = ()
    stop_reason: StopReason = StopReason.END_TURN

    @property
    def requests_tools(self) -> bool:
        return self.stop_reason == StopReason.TOOL_USE or bool(self.tool_calls)


# ---------------------------------------------------------------------------
# Agent results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AgentResult:
    response: str
    tools_used: list[str] = field(default_factory=list)
    session_id: str = ""


@dataclass(frozen=True)
class AgentMessage:
    """Record of one delegation performed during an orchestrator turn."""
    agent_type: AgentRole
    content: str
    tools_used: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class OrchestratorResult:
    response: str
    agent_messages: list[AgentMessage] = field(default_factory=list)
    tools_used: list[str] = field(default_factory=list)
    session_id: str = ""


@dataclass(frozen=True)
class AgentDefinition:
    """Static description of one agent persona.

    allowed_tools names catalog tools only. The delegation tool is never
    listed here; the orchestrator adds it on top of its own definition.
    """
    role: AgentRole
    name: str
    system_prompt: str
    allowed_tools: tuple[str, ...] = ()
    context_aware: bool = True


class DelegationRequest(BaseModel):
    """Input of the synthetic delegate_to_agent tool."""

    agent: str = Field(description="The specialized agent to delegate to")
    task: str = Field(description="Clear description of what you want the agent to do")
    context: Optional[str] = Field(
        default=None,
        description="Optional: Additional context from previous agent results",
    )


# ---------------------------------------------------------------------------
# Remote context
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HistoryItem:
    """One row of remote conversation history."""
    role: str
    content: str
    tools_used: list[str] = field(default_factory=list)
    contact_id: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> HistoryItem:
        return cls(
            role=data.get("role", "user"),
            content=data.get("content") or "",
            tools_used=list(data.get("tools_used") or []),
            contact_id=data.get("contact_id"),
            created_at=data.get("created_at"),
        )


@dataclass(frozen=True)
class MergedContext:
    """Organization + user context as served by /v1/context/merged.

    merged:          raw merged dictionary (org, user, recent history, ...)
    prompt_context:  backend-rendered text fragment for the system prompt
    """
    merged: dict[str, Any] = field(default_factory=dict)
    prompt_context: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> MergedContext:
        return cls(
            merged=dict(data.get("merged") or {}),
            prompt_context=data.get("prompt_context") or "",
        )

    @property
    def conversation_history(self) -> list[HistoryItem]:
        rows = self.merged.get("conversation_history") or []
        return [HistoryItem.from_api(r) for r in rows if isinstance(r, dict)]

    @property
    def relevant_memories(self) -> list[str]:
        memories = self.merged.get("relevant_memories") or []
        return [str(m) for m in memories if m]
