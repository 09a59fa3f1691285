"""
factory - Composition root for COSMO agents.

ALL dependency wiring happens here. No other module constructs its own
dependencies. Adapters (the CLI) call this factory to get fully configured
clients and agents.

Usage:
    from cosmo_agents.factory import ServiceFactory
    from cosmo_agents.infrastructure.config import Settings

    factory = ServiceFactory(Settings.from_env())
    agent = factory.create_agent("orchestrator", session_id="demo",
                                 persist_history=True)
    result = await agent.chat("Research John and draft an intro email")
    await factory.aclose()
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from cosmo_agents.agent.base import BaseAgent
from cosmo_agents.agent.orchestrator import AgentOrchestrator
from cosmo_agents.agent.specialists import SPECIALISTS
from cosmo_agents.agent.tools.executor import ToolExecutor
from cosmo_agents.application.context import SessionContext
from cosmo_agents.application.services.chat_history import ChatHistoryService
from cosmo_agents.domain.models import AgentRole
from cosmo_agents.domain.ports import LanguageModelPort
from cosmo_agents.infrastructure.api.cosmo_client import CosmoApiClient
from cosmo_agents.infrastructure.config import Settings

logger = logging.getLogger(__name__)


class ServiceFactory:
    """Composition root — wires all dependencies together.

    The API client, gateway, executor and history service are lazy
    singletons shared by every agent this factory creates. Each agent gets
    its own SessionContext and transcript.

    Args:
        settings: Resolved configuration.
        llm:      Ready-made LangChain chat model (skips build_llm).
        gateway:  Ready-made LanguageModelPort (tests pass a scripted one).
        client:   Ready-made backend client.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        llm=None,
        gateway: Optional[LanguageModelPort] = None,
        client: Optional[CosmoApiClient] = None,
    ):
        self._settings = settings
        self._llm = llm
        self._gateway = gateway
        self._client = client
        self._executor: Optional[ToolExecutor] = None
        self._history: Optional[ChatHistoryService] = None

    @property
    def settings(self) -> Settings:
        return self._settings

    # ------------------------------------------------------------------
    # Infrastructure
    # ------------------------------------------------------------------

    def create_client(self) -> CosmoApiClient:
        if self._client is None:
            s = self._settings
            self._client = CosmoApiClient(
                base_url=s.cosmo_base_url,
                api_key=s.cosmo_api_key,
                user_id=s.cosmo_user_id,
                org_id=s.cosmo_org_id,
                timeout=s.http_timeout,
            )
        return self._client

    def create_gateway(self) -> LanguageModelPort:
        if self._gateway is None:
            from cosmo_agents.infrastructure.llm.gateway import LangChainGateway

            self._gateway = LangChainGateway(self._llm or self._build_llm())
        return self._gateway

    def _build_llm(self):
        from cosmo_agents.infrastructure.llm.llm_builder import build_llm

        s = self._settings
        logger.info("Building %s model %s", s.llm_provider, s.active_llm_model)
        return build_llm(
            provider=s.llm_provider,
            model=s.active_llm_model,
            max_tokens=s.llm_max_tokens,
            anthropic_api_key=s.anthropic_api_key,
            openai_api_key=s.openai_api_key,
            groq_api_key=s.groq_api_key,
            ollama_base_url=s.ollama_base_url,
        )

    def create_executor(self) -> ToolExecutor:
        if self._executor is None:
            self._executor = ToolExecutor(
                self.create_client(), timeout=self._settings.tool_timeout,
            )
        return self._executor

    def create_history_service(self) -> ChatHistoryService:
        if self._history is None:
            self._history = ChatHistoryService(self.create_client())
        return self._history

    # ------------------------------------------------------------------
    # Agents
    # ------------------------------------------------------------------

    def create_agent(
        self,
        role: Union[AgentRole, str] = AgentRole.ORCHESTRATOR,
        session_id: Optional[str] = None,
        persist_history: bool = False,
        language: Optional[str] = None,
    ) -> BaseAgent:
        """Build a fully wired agent for `role`.

        Returns an AgentOrchestrator for "orchestrator", a specialist
        BaseAgent otherwise.

        Raises:
            ValueError: For an unknown role or language.
        """
        role = AgentRole(role)
        s = self._settings
        client = self.create_client()
        context = SessionContext(
            persist_history=persist_history,
            user_id=s.cosmo_user_id or None,
            org_id=s.cosmo_org_id or None,
        )
        if session_id:
            context.session_id = session_id

        common = dict(
            llm=self.create_gateway(),
            executor=self.create_executor(),
            context=context,
            context_store=client,
            history=self.create_history_service(),
            model_timeout=s.model_timeout,
            history_limit=s.history_limit,
            language=language or s.agent_language,
        )

        if role == AgentRole.ORCHESTRATOR:
            agent: BaseAgent = AgentOrchestrator(
                max_iterations=s.orchestrator_max_iterations,
                **common,
            )
        else:
            agent = SPECIALISTS[role](max_iterations=s.agent_max_iterations, **common)

        logger.info(
            "Created %s (session=%s, persist=%s)",
            agent.name, agent.session_id, persist_history,
        )
        return agent

    async def aclose(self) -> None:
        """Flush pending history writes and release the HTTP session."""
        if self._history is not None:
            await self._history.aclose()
        if self._client is not None:
            self._client.close()
