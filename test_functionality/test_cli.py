"""
CLI commands that do not need a live backend or model.
"""

import pytest
from typer.testing import CliRunner

from conftest import FakeBackend, ScriptedGateway, text_turn
from cosmo_agents import __version__
from cosmo_agents.adapters.cli import main as cli
from cosmo_agents.adapters.cli.session import FileCredentialStore
from cosmo_agents.factory import ServiceFactory
from cosmo_agents.infrastructure.config import Settings

runner = CliRunner()


@pytest.fixture
def token_path(tmp_path, monkeypatch):
    path = tmp_path / "token.json"
    monkeypatch.setenv("TOKEN_CACHE_PATH", str(path))
    monkeypatch.setenv("COSMO_BASE_URL", "http://cosmo.test")
    monkeypatch.delenv("COSMO_API_KEY", raising=False)
    return path


def test_version():
    result = runner.invoke(cli.app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_chat_rejects_unknown_agent(token_path):
    result = runner.invoke(cli.app, ["chat", "--agent", "janitor"])

    assert result.exit_code == 1
    assert "Unknown agent" in result.output


def test_chat_rejects_unsupported_language(token_path):
    result = runner.invoke(cli.app, ["chat", "--language", "fr"])

    assert result.exit_code == 1
    assert "Unsupported language" in result.output


def test_stats_rejects_bad_month(token_path):
    result = runner.invoke(cli.app, ["stats", "--month", "2024-13"])

    assert result.exit_code == 1
    assert "YYYY-MM" in result.output


def test_stats_counts_the_month(token_path, monkeypatch):
    backend = FakeBackend()
    backend.created_counts[("2024-05-01T00:00:00.000Z", "2024-06-01T00:00:00.000Z")] = 3

    class StubFactory:
        def __init__(self, settings):
            self.settings = settings

        def create_client(self):
            return backend

        async def aclose(self):
            pass

    monkeypatch.setenv("COSMO_API_KEY", "key-1")
    monkeypatch.setattr(cli, "ServiceFactory", StubFactory)

    result = runner.invoke(cli.app, ["stats", "--month", "2024-05"])

    assert result.exit_code == 0, result.output
    assert "2024-05-01T00:00:00.000Z" in result.output
    assert result.output.rstrip().endswith("3")


def test_logout_without_cache(token_path):
    result = runner.invoke(cli.app, ["logout"])

    assert result.exit_code == 0
    assert "No cached token" in result.output


def test_logout_clears_cache(token_path):
    FileCredentialStore(token_path).save("jwt", "http://cosmo.test", 3600)

    result = runner.invoke(cli.app, ["logout"])

    assert result.exit_code == 0
    assert "Token cleared" in result.output
    assert not token_path.exists()


class _ClosableBackend(FakeBackend):
    def close(self) -> None:
        pass


@pytest.mark.asyncio
async def test_switch_restores_the_session_transcript():
    backend = _ClosableBackend()
    factory = ServiceFactory(
        Settings(), gateway=ScriptedGateway([text_turn("Hello!")]), client=backend,
    )
    first = factory.create_agent("cosmo", session_id="s-1", persist_history=True)
    await first.chat("hi")

    switched = await cli._switch_agent(factory, "research", "s-1", None)

    assert switched.name != first.name
    assert switched.session_id == "s-1"
    assert [m.content for m in switched.history] == ["hi", "Hello!"]
    await factory.aclose()


@pytest.mark.asyncio
async def test_switch_without_session_starts_empty():
    factory = ServiceFactory(Settings(), gateway=ScriptedGateway([]), client=_ClosableBackend())

    switched = await cli._switch_agent(factory, "outreach", None, None)

    assert switched.history == []
    await factory.aclose()
