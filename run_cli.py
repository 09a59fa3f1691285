"""
Run the COSMO agents CLI without installing the package.

Usage:
    python run_cli.py [COMMAND] [OPTIONS]

Commands:
    chat       Interactive chat (--agent, --session, --model, --language)
    analyze    One-shot full analysis of a contact
    stats      Count contacts created in a UTC window (--day, --month, --start/--end)
    login      Sign in and cache the token (~/.cosmo-cli-token.json)
    logout     Clear the cached token

Examples:
    python run_cli.py login
    python run_cli.py chat --agent orchestrator --session demo
    python run_cli.py stats --month 2024-05

Environment variables (all optional):
    COSMO_BASE_URL      Backend URL (default: http://localhost:8081)
    COSMO_API_KEY       Backend token; skips login when set
    COSMO_EMAIL         Login email for non-interactive use
    COSMO_PASSWORD      Login password for non-interactive use
    LLM_PROVIDER        "anthropic", "openai", "groq", or "ollama" (default: anthropic)
    ANTHROPIC_API_KEY   Required when LLM_PROVIDER=anthropic
    OPENAI_API_KEY      Required when LLM_PROVIDER=openai
    GROQ_API_KEY        Required when LLM_PROVIDER=groq
    OLLAMA_BASE_URL     Ollama server URL (default: http://localhost:11434/)
    AGENT_LANGUAGE      "en" or "vi" (default: en)
    LOG_LEVEL           Python logging level (default: WARNING)
"""

import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

from cosmo_agents.adapters.cli.main import app

if __name__ == "__main__":
    app()
