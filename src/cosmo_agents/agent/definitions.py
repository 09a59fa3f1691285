"""
agent.definitions - Static persona table: role -> prompt + allowed tools.

Also defines the synthetic delegate_to_agent tool that only the orchestrator
exposes. Sub-agent tool sets must never contain it (no recursive
delegation); the table is validated at import time.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Union

from cosmo_agents.agent import prompt
from cosmo_agents.agent.tools.catalog import COSMO_TOOLS, ToolCatalog
from cosmo_agents.domain.exceptions import ConfigurationError
from cosmo_agents.domain.models import (
    SUB_AGENT_ROLES,
    AgentDefinition,
    AgentRole,
    DelegationRequest,
)

DELEGATE_TOOL_NAME = "delegate_to_agent"

AGENT_DEFINITIONS: dict[AgentRole, AgentDefinition] = {
    AgentRole.COSMO: AgentDefinition(
        role=AgentRole.COSMO,
        name="COSMO",
        system_prompt=prompt.COSMO_PROMPT,
        allowed_tools=tuple(COSMO_TOOLS.names()),
    ),
    AgentRole.ORCHESTRATOR: AgentDefinition(
        role=AgentRole.ORCHESTRATOR,
        name="Orchestrator",
        system_prompt=prompt.ORCHESTRATOR_PROMPT,
        allowed_tools=(
            "search_contacts",
            "get_contact",
            "create_contact",
            "list_segments",
            "list_playbooks",
        ),
    ),
    AgentRole.RESEARCH: AgentDefinition(
        role=AgentRole.RESEARCH,
        name="Research Agent",
        system_prompt=prompt.RESEARCH_PROMPT,
        allowed_tools=(
            "search_contacts",
            "get_contact",
            "enrich_contact",
            "calculate_segment_scores",
            "list_segments",
            "get_segment_contacts",
        ),
    ),
    AgentRole.OUTREACH: AgentDefinition(
        role=AgentRole.OUTREACH,
        name="Outreach Agent",
        system_prompt=prompt.OUTREACH_PROMPT,
        allowed_tools=(
            "get_contact",
            "enrich_contact",
            "search_contacts",
            "list_playbooks",
            "get_playbook",
            "enroll_contact_in_playbook",
            "suggest_outreach",
            "get_outreach_state",
        ),
    ),
    AgentRole.ANALYTICS: AgentDefinition(
        role=AgentRole.ANALYTICS,
        name="Analytics Agent",
        system_prompt=prompt.ANALYTICS_PROMPT,
        allowed_tools=(
            "count_contacts_created",
            "count_contacts_by_keyword",
            "list_segments",
            "get_segment_contacts",
            "analyze_segment_health",
        ),
        context_aware=False,
    ),
    AgentRole.ENRICHMENT: AgentDefinition(
        role=AgentRole.ENRICHMENT,
        name="Enrichment Agent",
        system_prompt=prompt.ENRICHMENT_PROMPT,
        allowed_tools=(
            "get_contact",
            "enrich_contact",
            "calculate_segment_scores",
            "calculate_relationship_score",
            "run_full_analysis",
            "list_segments",
            "create_segment",
            "assign_segment_score",
        ),
    ),
}


def build_delegate_tool() -> dict[str, Any]:
    """Schema of delegate_to_agent, with the agent field closed over sub-agent roles."""
    input_schema = DelegationRequest.model_json_schema()
    input_schema["properties"]["agent"]["enum"] = [r.value for r in SUB_AGENT_ROLES]
    input_schema["required"] = ["agent", "task"]
    return {
        "name": DELEGATE_TOOL_NAME,
        "description": prompt.DELEGATE_TOOL_DESCRIPTION,
        "input_schema": input_schema,
    }


DELEGATE_TOOL = build_delegate_tool()


def validate_definitions(
    definitions: Mapping[AgentRole, AgentDefinition],
    catalog: ToolCatalog,
) -> None:
    """Reject tables that reference unknown tools or leak delegation.

    Raises:
        ConfigurationError: On the first problem found.
    """
    for role, definition in definitions.items():
        if DELEGATE_TOOL_NAME in definition.allowed_tools:
            raise ConfigurationError(
                f"{definition.name} must not list {DELEGATE_TOOL_NAME}; "
                "the orchestrator adds it on its own"
            )
        unknown = [t for t in definition.allowed_tools if t not in catalog]
        if unknown:
            raise ConfigurationError(f"{definition.name} lists unknown tools: {unknown}")
        if role != definition.role:
            raise ConfigurationError(f"Definition for {role.value} is labelled {definition.role.value}")


validate_definitions(AGENT_DEFINITIONS, COSMO_TOOLS)


def localize(definition: AgentDefinition, language: str = "en") -> AgentDefinition:
    directive = prompt.language_directive(language)
    if not directive:
        return definition
    return replace(definition, system_prompt=f"{definition.system_prompt}\n\n{directive}")


def get_definition(role: Union[AgentRole, str], language: str = "en") -> AgentDefinition:
    """Definition for any role.

    Raises:
        ValueError: For an unknown role or language.
    """
    return localize(AGENT_DEFINITIONS[AgentRole(role)], language)


def sub_agent_definition(role: str, language: str = "en") -> AgentDefinition:
    """Definition for a delegation target.

    Raises:
        KeyError: If role is not one of the delegable roles.
    """
    delegable = {r.value: r for r in SUB_AGENT_ROLES}
    if role not in delegable:
        raise KeyError(role)
    return localize(AGENT_DEFINITIONS[delegable[role]], language)
