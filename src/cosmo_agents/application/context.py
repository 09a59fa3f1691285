"""
application.context - Per-session context for one agent conversation.

Holds the session identity plus the organization/user context fetched from
the backend, and renders the context-aware system prompt. Every agent gets
its own SessionContext; two concurrent CLI sessions never share one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional
from uuid import uuid4

from cosmo_agents.domain.models import MergedContext
from cosmo_agents.domain.ports import ContextStore

logger = logging.getLogger(__name__)

ORG_CONTEXT_HEADING = "## Context from Organization"
MEMORIES_HEADING = "## Relevant Memories"


@dataclass
class SessionContext:
    """Per-session context passed to every agent.

    Attributes:
        session_id:       Stable id for remote history; random if not given.
        persist_history:  Mirror turns to the backend history endpoint.
        user_id:          Backend user id (sent as X-User-ID by the client).
        org_id:           Backend org id (sent as X-Org-ID by the client).
        merged:           Last successfully loaded context, or None.
        memories:         Extra memory lines supplied by the caller; merged
                          with any the backend returns.
        request_id:       Unique per chat() call, for tracing/logging.
    """
    session_id: str = field(default_factory=lambda: uuid4().hex)
    persist_history: bool = False
    user_id: Optional[str] = None
    org_id: Optional[str] = None
    merged: Optional[MergedContext] = None
    memories: list[str] = field(default_factory=list)
    request_id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def is_loaded(self) -> bool:
        return self.merged is not None

    async def load_context(self, store: ContextStore) -> Optional[MergedContext]:
        """Fetch the merged org/user context for this session.

        Any failure degrades to "no context" with a warning. A repeated call
        replaces the previous value wholesale.
        """
        try:
            data = await store.get_merged_context(self.session_id)
        except Exception as e:
            logger.warning("Could not load context for session %s: %s", self.session_id, e)
            self.merged = None
            return None

        self.merged = MergedContext.from_api(data or {})
        logger.debug(
            "Loaded context for session %s (%d chars)",
            self.session_id, len(self.merged.prompt_context),
        )
        return self.merged

    def build_system_prompt(self, base_prompt: str, include_memories: bool = True) -> str:
        """Base role prompt, then org/user context, then relevant memories.

        The order is fixed. Empty sections are omitted.
        """
        sections = [base_prompt]

        if self.merged and self.merged.prompt_context.strip():
            sections.append(f"{ORG_CONTEXT_HEADING}\n{self.merged.prompt_context.strip()}")

        if include_memories:
            memories = self.relevant_memories()
            if memories:
                bullets = "\n".join(f"- {m}" for m in memories)
                sections.append(f"{MEMORIES_HEADING}\n{bullets}")

        return "\n\n".join(sections)

    def relevant_memories(self) -> list[str]:
        remote = self.merged.relevant_memories if self.merged else []
        seen: set[str] = set()
        combined: list[str] = []
        for memory in [*remote, *self.memories]:
            if memory not in seen:
                seen.add(memory)
                combined.append(memory)
        return combined

    def new_request(self) -> None:
        self.request_id = uuid4().hex

    def new_session(self) -> None:
        """Rotate to a fresh session id and forget the loaded context."""
        self.session_id = uuid4().hex
        self.merged = None
