"""
cosmo_agents - Tool-calling agents for the COSMO CRM.

Layers (inner to outer):
    domain/          value objects, ports, exceptions (no vendor imports)
    application/     session context, history persistence, date ranges
    agent/           tool catalog + executor, prompts, agent loop, orchestrator
    infrastructure/  config, COSMO HTTP client, LLM construction and gateway
    adapters/        terminal CLI
    factory          composition root
"""

__version__ = "1.0.0"
