"""
adapters.cli.main - Terminal adapter for COSMO agents.

Uses the same ServiceFactory as any other adapter, so agent behaviour is
identical whichever front end drives it.

Commands
--------
  chat      Interactive chat with an agent (orchestrator or a specialist)
  analyze   One-shot full analysis of a contact
  stats     Count contacts created in a UTC window
  login     Sign in and cache the token (~/.cosmo-cli-token.json)
  logout    Clear the cached token

Usage
-----
  cosmo login
  cosmo chat --agent orchestrator --session demo
  cosmo stats --month 2024-05
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from cosmo_agents import __version__
from cosmo_agents.adapters.cli.session import FileCredentialStore
from cosmo_agents.agent.base import BaseAgent
from cosmo_agents.agent.prompt import SUPPORTED_LANGUAGES
from cosmo_agents.agent.tools.handlers.contacts import display_name
from cosmo_agents.application.date_ranges import resolve_utc_range
from cosmo_agents.domain.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DomainError,
)
from cosmo_agents.domain.models import AgentRole
from cosmo_agents.factory import ServiceFactory
from cosmo_agents.infrastructure.api.cosmo_client import CosmoApiClient
from cosmo_agents.infrastructure.config import Settings

logger = logging.getLogger(__name__)

console = Console()
app = typer.Typer(
    help="COSMO AI Agent - CRM intelligence from your terminal",
    add_completion=False,
    no_args_is_help=True,
)

AGENT_CHOICES = [r.value for r in AgentRole]
DASHBOARD_ROLES = (AgentRole.ORCHESTRATOR, AgentRole.OUTREACH)
DASHBOARD_ROWS = 5


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _load_settings(model: Optional[str] = None) -> Settings:
    settings = Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if model:
        field = f"llm_model_{settings.llm_provider}"
        if field in {f.name for f in dataclasses.fields(settings)}:
            settings = dataclasses.replace(settings, **{field: model})
    return settings


def _credential_store(settings: Settings) -> FileCredentialStore:
    return FileCredentialStore(settings.token_cache_path)


async def _login(settings: Settings, email: str, password: str) -> str:
    """Log in against the backend and cache the token."""
    client = CosmoApiClient(settings.cosmo_base_url, timeout=settings.http_timeout)
    try:
        token, expires_in = await client.login(email, password)
    finally:
        client.close()
    _credential_store(settings).save(token, settings.cosmo_base_url, expires_in)
    return token


async def _resolve_token(settings: Settings) -> str:
    """Find a usable backend token.

    Order: COSMO_API_KEY, then the cached token for this backend, then
    COSMO_EMAIL/COSMO_PASSWORD, then an interactive prompt.

    Raises:
        AuthenticationError: If every source fails.
    """
    if settings.cosmo_api_key:
        return settings.cosmo_api_key

    cached = _credential_store(settings).load(settings.cosmo_base_url)
    if cached:
        console.print("[dim]Using cached token...[/dim]")
        return cached

    if settings.cosmo_email and settings.cosmo_password:
        console.print("[dim]Logging in with credentials from environment...[/dim]")
        return await _login(settings, settings.cosmo_email, settings.cosmo_password)

    console.print("[yellow]Authentication required[/yellow]")
    email = Prompt.ask("[bold]Email[/bold]")
    password = Prompt.ask("[bold]Password[/bold]", password=True)
    if not email or not password:
        raise AuthenticationError("Email and password are required")
    token = await _login(settings, email, password)
    console.print("[green]✓ Login successful! Token cached.[/green]")
    return token


async def _authenticated_factory(settings: Settings) -> ServiceFactory:
    """Build a factory whose client carries a valid token, or exit(1)."""
    try:
        token = await _resolve_token(settings)
    except DomainError as e:
        console.print(f"[bold red]Authentication failed:[/bold red] {e}")
        raise typer.Exit(code=1)
    return ServiceFactory(dataclasses.replace(settings, cosmo_api_key=token))


def _print_result(result) -> None:
    console.print()
    console.print(Panel(Markdown(result.response or "_(no response)_"), title="COSMO", border_style="cyan"))
    if result.tools_used:
        console.print(f"[dim]Tools used: {', '.join(result.tools_used)}[/dim]")
    for message in getattr(result, "agent_messages", []):
        console.print(f"[dim]  ↳ {message.agent_type.value}: {', '.join(message.tools_used) or 'no tools'}[/dim]")


async def _show_dashboard(client: CosmoApiClient) -> None:
    """Print who is due for a first touch or a follow-up. Best effort."""
    try:
        cold, followup = await asyncio.gather(
            client.suggest_outreach("cold", DASHBOARD_ROWS),
            client.suggest_outreach("followup", DASHBOARD_ROWS),
        )
    except Exception as e:
        logger.warning("Outreach dashboard unavailable: %s", e)
        console.print("[dim]  (Could not load outreach dashboard)[/dim]")
        return

    if not cold["total"] and not followup["total"]:
        console.print("[dim]No outreach due today.[/dim]\n")
        return

    table = Table(title="Daily Outreach Dashboard", box=box.SIMPLE)
    table.add_column("Type", style="bold")
    table.add_column("#", justify="right")
    table.add_column("Contact")
    table.add_column("Company")
    for label, data in (("Ready to send", cold), ("Follow-up", followup)):
        for i, row in enumerate(data["suggestions"][:DASHBOARD_ROWS], 1):
            contact = row.get("contact") or row
            table.add_row(label if i == 1 else "", str(i), contact.get("name") or display_name(contact) or "-", contact.get("company") or "-")
        hidden = data["total"] - min(len(data["suggestions"]), DASHBOARD_ROWS)
        if hidden > 0:
            table.add_row("", "", f"[dim]... and {hidden} more[/dim]", "")
    console.print(table)


async def _switch_agent(
    factory: ServiceFactory, target: str, session: Optional[str], language: Optional[str],
) -> BaseAgent:
    """Build the /switch target on the same session, restoring its history."""
    agent = factory.create_agent(target, session_id=session, persist_history=bool(session), language=language)
    await agent.load_context()
    if session:
        await agent.load_history()
    return agent


def _print_history(agent: BaseAgent) -> None:
    console.print("[dim]\n--- Conversation History ---[/dim]")
    for message in agent.history:
        if message.is_tool_result_turn or not message.content:
            continue
        prefix = "You" if message.role == "user" else agent.name
        console.print(f"[dim]{prefix}: {message.content[:100]}[/dim]")
    console.print("[dim]--- End History ---\n[/dim]")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"cosmo-agents v{__version__}")
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Commands: Chat
# ---------------------------------------------------------------------------

@app.command()
def chat(
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model name for the active provider."),
    agent_type: str = typer.Option("cosmo", "--agent", "-a", help=f"Agent: {', '.join(AGENT_CHOICES)}."),
    session: Optional[str] = typer.Option(None, "--session", "-s", help="Session ID for persistent history."),
    language: Optional[str] = typer.Option(None, "--language", "-l", help=f"Response language: {', '.join(SUPPORTED_LANGUAGES)}."),
) -> None:
    """Start an interactive chat session."""
    if agent_type not in AGENT_CHOICES:
        console.print(f"[bold red]Unknown agent '{agent_type}'.[/bold red] Choose one of: {', '.join(AGENT_CHOICES)}")
        raise typer.Exit(code=1)
    if language and language not in SUPPORTED_LANGUAGES:
        console.print(f"[bold red]Unsupported language '{language}'.[/bold red]")
        raise typer.Exit(code=1)

    settings = _load_settings(model)

    async def _run() -> None:
        factory = await _authenticated_factory(settings)
        role = AgentRole(agent_type)
        try:
            agent = factory.create_agent(role, session_id=session, persist_history=bool(session), language=language)
        except ConfigurationError as e:
            console.print(f"[bold red]Configuration error:[/bold red] {e}")
            raise typer.Exit(code=1)

        with console.status("[bold cyan]Loading context...", spinner="dots"):
            await agent.load_context()
            restored = await agent.load_history()

        console.print(Panel(
            f"[bold]COSMO AI Agent - CRM Intelligence[/bold]\n"
            f"Agent: [bold]{agent.name}[/bold]   Model: {settings.active_llm_model}\n"
            f"COSMO API: {settings.cosmo_base_url}"
            + (f"\nSession: {agent.session_id} ({restored} messages restored)" if session else ""),
            border_style="cyan",
        ))
        if role in DASHBOARD_ROLES:
            await _show_dashboard(factory.create_client())

        console.print(
            "Type your message and press Enter. Commands:\n"
            "[dim]  /reset            Clear conversation history\n"
            f"  /switch <agent>   Switch agent ({', '.join(AGENT_CHOICES)})\n"
            "  /history          Show this conversation\n"
            "  /logout           Clear cached token and exit\n"
            "  /exit             Exit the chat[/dim]"
        )

        try:
            while True:
                try:
                    user_input = Prompt.ask("\n[bold green]You[/bold green]").strip()
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                if not user_input:
                    continue

                if user_input in ("/exit", "/quit"):
                    console.print("[dim]Goodbye![/dim]")
                    break

                if user_input == "/reset":
                    await agent.reset_conversation()
                    console.print("[yellow]Conversation reset.[/yellow]")
                    continue

                if user_input == "/history":
                    _print_history(agent)
                    continue

                if user_input == "/logout":
                    cleared = _credential_store(settings).clear()
                    console.print("[yellow]Token cleared.[/yellow]" if cleared else "[dim]No cached token found.[/dim]")
                    break

                if user_input.startswith("/switch"):
                    target = user_input[len("/switch"):].strip()
                    if target not in AGENT_CHOICES:
                        console.print(f"[yellow]Usage: /switch <{'|'.join(AGENT_CHOICES)}>[/yellow]")
                        continue
                    agent = await _switch_agent(factory, target, session, language)
                    console.print(f"[yellow]Switched to {agent.name}.[/yellow]")
                    continue

                try:
                    with console.status("[bold cyan]Thinking...", spinner="dots"):
                        result = await agent.chat(user_input)
                except Exception as e:
                    logger.error("Chat turn failed: %s", e, exc_info=True)
                    console.print(f"[bold red]Error:[/bold red] {e}")
                    continue
                _print_result(result)
        finally:
            await factory.aclose()

    asyncio.run(_run())


# ---------------------------------------------------------------------------
# Commands: One-shot
# ---------------------------------------------------------------------------

@app.command()
def analyze(
    contact_id: str = typer.Argument(..., help="Contact ID to analyze."),
) -> None:
    """Run a full analysis on one contact and print the summary."""
    settings = _load_settings()
    console.print(f"[cyan]Running full analysis on contact: {contact_id}[/cyan]")

    async def _run() -> None:
        factory = await _authenticated_factory(settings)
        try:
            agent = factory.create_agent(AgentRole.COSMO)
            with console.status("[bold cyan]Analyzing...", spinner="dots"):
                result = await agent.chat(
                    f"Run a full analysis on contact {contact_id} and give me a comprehensive summary."
                )
        except Exception as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(code=1)
        finally:
            await factory.aclose()
        _print_result(result)

    asyncio.run(_run())


@app.command()
def stats(
    day: Optional[str] = typer.Option(None, "--day", help="Date to count contacts (YYYY-MM-DD, UTC)."),
    month: Optional[str] = typer.Option(None, "--month", help="Month to count contacts (YYYY-MM, UTC)."),
    start: Optional[str] = typer.Option(None, "--start", help="Start datetime (ISO 8601, UTC)."),
    end: Optional[str] = typer.Option(None, "--end", help="End datetime (ISO 8601, UTC, exclusive)."),
) -> None:
    """Count contacts created in a UTC window (default: today)."""
    try:
        window = resolve_utc_range(day=day, month=month, start=start, end=end)
    except ValueError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=1)

    settings = _load_settings()

    async def _run() -> None:
        factory = await _authenticated_factory(settings)
        try:
            total = await factory.create_client().count_contacts_created(window.start_iso, window.end_iso)
        except Exception as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(code=1)
        finally:
            await factory.aclose()
        console.print(
            f"[cyan]Contacts created from {window.start_iso} to {window.end_iso} (UTC): {total}[/cyan]"
        )

    asyncio.run(_run())


# ---------------------------------------------------------------------------
# Commands: Auth
# ---------------------------------------------------------------------------

@app.command()
def login() -> None:
    """Sign in to COSMO and cache the token."""
    settings = _load_settings()
    console.print(Panel(f"[bold]Login to COSMO[/bold]\nAPI: {settings.cosmo_base_url}", border_style="blue"))
    email = Prompt.ask("[bold]Email[/bold]")
    password = Prompt.ask("[bold]Password[/bold]", password=True)

    async def _run() -> None:
        try:
            await _login(settings, email, password)
        except DomainError as e:
            console.print(f"[bold red]Login failed:[/bold red] {e}")
            raise typer.Exit(code=1)
        console.print("[green]✓ Login successful! Token cached.[/green]")

    asyncio.run(_run())


@app.command()
def logout() -> None:
    """Clear the cached token."""
    settings = _load_settings()
    try:
        cleared = _credential_store(settings).clear()
    except OSError as e:
        console.print(f"[bold red]Failed to clear token:[/bold red] {e}")
        raise typer.Exit(code=1)
    console.print("[green]✓ Token cleared[/green]" if cleared else "[dim]No cached token found[/dim]")


# ---------------------------------------------------------------------------
# Global version option
# ---------------------------------------------------------------------------

@app.callback()
def _callback(
    version: bool = typer.Option(
        False, "--version", "-v",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """COSMO AI Agent CLI"""


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
