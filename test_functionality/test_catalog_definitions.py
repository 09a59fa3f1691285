"""
Tool catalog schemas and the agent definition table.
"""

import pytest

from cosmo_agents.agent.definitions import (
    AGENT_DEFINITIONS,
    DELEGATE_TOOL,
    DELEGATE_TOOL_NAME,
    get_definition,
    sub_agent_definition,
    validate_definitions,
)
from cosmo_agents.agent.prompt import language_directive
from cosmo_agents.agent.tools.catalog import COSMO_TOOLS, NoInput, ToolCatalog, ToolSpec
from cosmo_agents.domain.exceptions import ConfigurationError
from cosmo_agents.domain.models import SUB_AGENT_ROLES, AgentDefinition, AgentRole


def test_every_schema_has_name_description_and_object_input():
    for schema in COSMO_TOOLS.schemas():
        assert schema["name"]
        assert schema["description"]
        assert schema["input_schema"]["type"] == "object"
        assert isinstance(schema["input_schema"]["required"], list)


def test_required_fields_follow_input_models():
    schema = COSMO_TOOLS.get("assign_segment_score").schema()["input_schema"]

    assert sorted(schema["required"]) == ["contact_id", "fit_score", "segment_id"]
    assert schema["properties"]["fit_score"]["maximum"] == 100


def test_outreach_tools_are_catalogued():
    assert "suggest_outreach" in COSMO_TOOLS
    assert "get_outreach_state" in COSMO_TOOLS
    kind = COSMO_TOOLS.get("suggest_outreach").schema()["input_schema"]["properties"]["kind"]
    assert kind["enum"] == ["cold", "followup"]


def test_schemas_respect_allowed_subset_in_catalog_order():
    names = [s["name"] for s in COSMO_TOOLS.schemas(["list_segments", "get_contact", "nope"])]

    assert names == [n for n in COSMO_TOOLS.names() if n in ("list_segments", "get_contact")]


def test_catalog_rejects_duplicates_and_unknown_lookups():
    with pytest.raises(ValueError, match="Duplicate"):
        ToolCatalog([ToolSpec("a", "x", NoInput), ToolSpec("a", "y", NoInput)])
    with pytest.raises(KeyError):
        COSMO_TOOLS.get("missing")


def test_delegation_tool_schema():
    schema = DELEGATE_TOOL["input_schema"]

    assert DELEGATE_TOOL["name"] == DELEGATE_TOOL_NAME
    assert DELEGATE_TOOL_NAME not in COSMO_TOOLS
    assert schema["properties"]["agent"]["enum"] == ["research", "outreach", "analytics", "enrichment"]
    assert sorted(schema["required"]) == ["agent", "task"]


def test_no_definition_lists_the_delegation_tool():
    for definition in AGENT_DEFINITIONS.values():
        assert DELEGATE_TOOL_NAME not in definition.allowed_tools
        assert all(tool in COSMO_TOOLS for tool in definition.allowed_tools)


def test_validation_rejects_leaked_delegation_and_unknown_tools():
    leaky = dict(AGENT_DEFINITIONS)
    leaky[AgentRole.RESEARCH] = AgentDefinition(
        role=AgentRole.RESEARCH, name="Research Agent", system_prompt="x",
        allowed_tools=("get_contact", DELEGATE_TOOL_NAME),
    )
    with pytest.raises(ConfigurationError, match=DELEGATE_TOOL_NAME):
        validate_definitions(leaky, COSMO_TOOLS)

    unknown = dict(AGENT_DEFINITIONS)
    unknown[AgentRole.ANALYTICS] = AgentDefinition(
        role=AgentRole.ANALYTICS, name="Analytics Agent", system_prompt="x",
        allowed_tools=("count_everything",),
    )
    with pytest.raises(ConfigurationError, match="count_everything"):
        validate_definitions(unknown, COSMO_TOOLS)


def test_sub_agent_lookup_is_closed():
    for role in SUB_AGENT_ROLES:
        assert sub_agent_definition(role.value).role == role
    for role in ("marketing", "orchestrator", "cosmo"):
        with pytest.raises(KeyError):
            sub_agent_definition(role)


def test_localized_prompt_appends_directive():
    english = get_definition("outreach")
    vietnamese = get_definition("outreach", "vi")

    assert vietnamese.system_prompt == f"{english.system_prompt}\n\n{language_directive('vi')}"
    assert vietnamese.allowed_tools == english.allowed_tools


def test_unknown_language_is_rejected():
    with pytest.raises(ValueError, match="Unsupported language"):
        get_definition("research", "fr")
