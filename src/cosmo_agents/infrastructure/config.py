"""
infrastructure.config - Typed, injectable configuration.

A frozen dataclass that can be constructed from the environment (and an
optional .env file) or passed explicitly in tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class Settings:
    """Centralized configuration for COSMO agents.

    No module-level globals — construct via from_env() or pass explicitly
    in tests.
    """

    # ── COSMO backend ───────────────────────────────────────────
    cosmo_base_url: str = "http://localhost:8081"
    cosmo_api_key: str = ""
    cosmo_email: str = ""
    cosmo_password: str = ""
    cosmo_user_id: str = ""
    cosmo_org_id: str = ""
    http_timeout: float = 30.0

    # ── Centralized LLM Provider ────────────────────────────────
    # Allowed: "anthropic", "openai", "groq", "ollama"
    llm_provider: str = "anthropic"

    # Only the model matching llm_provider is used.
    llm_model_anthropic: str = "claude-sonnet-4-20250514"
    llm_model_openai: str = "gpt-4.1-mini"
    llm_model_groq: str = "llama-3.3-70b-versatile"
    llm_model_ollama: str = "llama3.2"
    llm_max_tokens: int = 4096

    # Connection details
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    groq_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434/"

    # ── Agent loop ──────────────────────────────────────────────
    agent_max_iterations: int = 10
    orchestrator_max_iterations: int = 15
    model_timeout: float = 120.0
    tool_timeout: float = 30.0
    history_limit: int = 20
    agent_language: str = "en"

    # ── CLI ─────────────────────────────────────────────────────
    token_cache_path: Path = Path.home() / ".cosmo-cli-token.json"
    log_level: str = "WARNING"

    @property
    def active_llm_model(self) -> str:
        """Return the model name for the currently active LLM provider."""
        if self.llm_provider == "openai":
            return self.llm_model_openai
        elif self.llm_provider == "groq":
            return self.llm_model_groq
        elif self.llm_provider == "ollama":
            return self.llm_model_ollama
        return self.llm_model_anthropic

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> Settings:
        """Build Settings from the process environment (after loading .env)."""
        from dotenv import load_dotenv
        load_dotenv(dotenv_path=env_file)

        token_cache = os.getenv("TOKEN_CACHE_PATH", "")

        return cls(
            cosmo_base_url=os.getenv("COSMO_BASE_URL", "http://localhost:8081").rstrip("/"),
            cosmo_api_key=os.getenv("COSMO_API_KEY", ""),
            cosmo_email=os.getenv("COSMO_EMAIL", ""),
            cosmo_password=os.getenv("COSMO_PASSWORD", ""),
            cosmo_user_id=os.getenv("COSMO_USER_ID", ""),
            cosmo_org_id=os.getenv("COSMO_ORG_ID", ""),
            http_timeout=float(os.getenv("HTTP_TIMEOUT", "30")),

            llm_provider=os.getenv("LLM_PROVIDER", "anthropic"),
            llm_model_anthropic=os.getenv("LLM_MODEL_ANTHROPIC", "claude-sonnet-4-20250514"),
            llm_model_openai=os.getenv("LLM_MODEL_OPENAI", "gpt-4.1-mini"),
            llm_model_groq=os.getenv("LLM_MODEL_GROQ", "llama-3.3-70b-versatile"),
            llm_model_ollama=os.getenv("LLM_MODEL_OLLAMA", "llama3.2"),
            llm_max_tokens=int(os.getenv("LLM_MAX_TOKENS", "4096")),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            groq_api_key=os.getenv("GROQ_API_KEY", ""),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/"),

            agent_max_iterations=int(os.getenv("AGENT_MAX_ITERATIONS", "10")),
            orchestrator_max_iterations=int(os.getenv("ORCHESTRATOR_MAX_ITERATIONS", "15")),
            model_timeout=float(os.getenv("MODEL_TIMEOUT", "120")),
            tool_timeout=float(os.getenv("TOOL_TIMEOUT", "30")),
            history_limit=int(os.getenv("HISTORY_LIMIT", "20")),
            agent_language=os.getenv("AGENT_LANGUAGE", "en"),

            token_cache_path=(
                Path(token_cache).expanduser() if token_cache
                else Path.home() / ".cosmo-cli-token.json"
            ),
            log_level=os.getenv("LOG_LEVEL", "WARNING"),
        )
