"""
ServiceFactory wiring with an injected gateway and backend.
"""

import pytest

from conftest import FakeBackend, ScriptedGateway, text_turn
from cosmo_agents.agent.orchestrator import AgentOrchestrator
from cosmo_agents.agent.specialists import ResearchAgent
from cosmo_agents.factory import ServiceFactory
from cosmo_agents.infrastructure.config import Settings


class ClosableBackend(FakeBackend):
    def __init__(self):
        super().__init__()
        self.closed = False

    def close(self) -> None:
        self.closed = True


def _factory(backend, script=()):
    settings = Settings(agent_max_iterations=4, orchestrator_max_iterations=7)
    return ServiceFactory(settings, gateway=ScriptedGateway(list(script)), client=backend)


def test_orchestrator_uses_its_own_cap():
    agent = _factory(ClosableBackend()).create_agent("orchestrator")

    assert isinstance(agent, AgentOrchestrator)
    assert agent.max_iterations == 7


def test_specialist_roles_build_specialists():
    factory = _factory(ClosableBackend())

    agent = factory.create_agent("research", session_id="s-1", persist_history=True)

    assert isinstance(agent, ResearchAgent)
    assert agent.max_iterations == 4
    assert agent.session_id == "s-1"
    assert agent.context.persist_history


def test_agents_share_infrastructure_but_not_sessions():
    factory = _factory(ClosableBackend())

    first = factory.create_agent("cosmo")
    second = factory.create_agent("cosmo")

    assert factory.create_executor() is factory.create_executor()
    assert first.session_id != second.session_id


def test_unknown_role_is_rejected():
    with pytest.raises(ValueError):
        _factory(ClosableBackend()).create_agent("janitor")


@pytest.mark.asyncio
async def test_aclose_flushes_history_and_closes_client():
    backend = ClosableBackend()
    factory = _factory(backend, [text_turn("Hello!")])
    agent = factory.create_agent("cosmo", session_id="s-9", persist_history=True)

    await agent.chat("hi")
    await factory.aclose()

    assert [row["content"] for row in backend.history["s-9"]] == ["hi", "Hello!"]
    assert backend.closed
