"""
agent.specialists - Standalone specialist agents.

Each one is a BaseAgent bound to its role definition, for talking to a
single specialist directly (`cosmo chat --agent research`) instead of going
through the orchestrator.
"""

from __future__ import annotations

from typing import Optional

from cosmo_agents.agent.base import BaseAgent
from cosmo_agents.agent.definitions import get_definition
from cosmo_agents.agent.tools.executor import ToolExecutor
from cosmo_agents.application.context import SessionContext
from cosmo_agents.application.services.chat_history import ChatHistoryService
from cosmo_agents.domain.models import AgentRole
from cosmo_agents.domain.ports import ContextStore, LanguageModelPort


class SpecialistAgent(BaseAgent):
    ROLE: AgentRole = AgentRole.COSMO

    def __init__(
        self,
        llm: LanguageModelPort,
        executor: ToolExecutor,
        context: Optional[SessionContext] = None,
        context_store: Optional[ContextStore] = None,
        history: Optional[ChatHistoryService] = None,
        max_iterations: int = 10,
        model_timeout: Optional[float] = None,
        history_limit: int = 20,
        language: str = "en",
    ):
        super().__init__(
            get_definition(self.ROLE, language),
            llm,
            executor,
            context=context,
            context_store=context_store,
            history=history,
            max_iterations=max_iterations,
            model_timeout=model_timeout,
            history_limit=history_limit,
        )


class CosmoAgent(SpecialistAgent):
    """General-purpose agent with the whole catalog."""
    ROLE = AgentRole.COSMO


class ResearchAgent(SpecialistAgent):
    ROLE = AgentRole.RESEARCH


class OutreachAgent(SpecialistAgent):
    ROLE = AgentRole.OUTREACH


class AnalyticsAgent(SpecialistAgent):
    ROLE = AgentRole.ANALYTICS


class EnrichmentAgent(SpecialistAgent):
    ROLE = AgentRole.ENRICHMENT


SPECIALISTS: dict[AgentRole, type[SpecialistAgent]] = {
    cls.ROLE: cls
    for cls in (CosmoAgent, ResearchAgent, OutreachAgent, AnalyticsAgent, EnrichmentAgent)
}
