"""
domain.ports - Abstract interfaces (Protocols) for all system boundaries.

These define WHAT the agents need without specifying HOW. Infrastructure
modules provide concrete implementations; tests provide in-memory fakes.

Using typing.Protocol (structural typing) instead of ABC — any class that
implements the methods satisfies the port without explicit inheritance.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from cosmo_agents.domain.models import ConversationMessage, ModelTurn


@runtime_checkable
class LanguageModelPort(Protocol):
    """One call to a tool-capable chat model.

    tools are catalog-shaped dicts: {"name", "description", "input_schema"}.
    Errors are not caught here; they propagate to the agent loop.
    """

    async def respond(
        self,
        system_prompt: str,
        tools: Sequence[dict[str, Any]],
        messages: Sequence[ConversationMessage],
    ) -> ModelTurn: ...


@runtime_checkable
class ContextStore(Protocol):
    """Remote organization/user context and conversation history."""

    async def get_merged_context(self, session_id: Optional[str] = None) -> dict[str, Any]: ...

    async def get_history(self, session_id: str, limit: int = 20) -> list[dict[str, Any]]: ...

    async def save_message(
        self,
        session_id: str,
        role: str,
        content: str,
        contact_id: Optional[str] = None,
        tools_used: Optional[list[str]] = None,
    ) -> None: ...

    async def clear_history(self, session_id: str) -> None: ...


@runtime_checkable
class CredentialStore(Protocol):
    """Local cache for a backend access token."""

    def load(self, base_url: str) -> Optional[str]: ...

    def save(self, token: str, base_url: str, expires_in: int) -> None: ...

    def clear(self) -> bool: ...
