"""
SessionContext: context loading, degrade-on-failure and prompt assembly.
"""

import pytest

from cosmo_agents.application.context import MEMORIES_HEADING, ORG_CONTEXT_HEADING, SessionContext
from cosmo_agents.domain.exceptions import BackendUnavailableError
from cosmo_agents.domain.models import MergedContext


@pytest.mark.asyncio
async def test_load_context_stores_merged_context(backend):
    context = SessionContext(session_id="s1")

    merged = await context.load_context(backend)

    assert context.is_loaded
    assert merged.prompt_context == "ICP: B2B SaaS, 50-500 employees."
    assert backend.called("get_merged_context") == [("s1",)]


@pytest.mark.asyncio
async def test_load_failure_degrades_to_no_context(backend):
    backend.fail_context = BackendUnavailableError("down")
    context = SessionContext(merged=MergedContext(prompt_context="stale"))

    assert await context.load_context(backend) is None
    assert not context.is_loaded
    assert context.build_system_prompt("BASE") == "BASE"


def test_prompt_sections_in_fixed_order():
    context = SessionContext(
        merged=MergedContext(
            merged={"relevant_memories": ["Met at SaaStr", "Prefers email"]},
            prompt_context="Messaging: concise, no jargon.",
        ),
        memories=["Prefers email", "Budget cycle starts in July"],
    )

    prompt = context.build_system_prompt("BASE")

    assert prompt == (
        "BASE\n\n"
        f"{ORG_CONTEXT_HEADING}\nMessaging: concise, no jargon.\n\n"
        f"{MEMORIES_HEADING}\n- Met at SaaStr\n- Prefers email\n- Budget cycle starts in July"
    )


def test_memories_can_be_left_out():
    context = SessionContext(
        merged=MergedContext(merged={"relevant_memories": ["x"]}, prompt_context="ORG"),
    )

    assert context.build_system_prompt("BASE", include_memories=False) == f"BASE\n\n{ORG_CONTEXT_HEADING}\nORG"


def test_empty_sections_are_omitted():
    context = SessionContext(merged=MergedContext(prompt_context="   "))

    assert context.build_system_prompt("BASE") == "BASE"


def test_new_session_rotates_id_and_forgets_context():
    context = SessionContext(merged=MergedContext(prompt_context="ORG"))
    old_id, old_request = context.session_id, context.request_id

    context.new_request()
    assert context.request_id != old_request

    context.new_session()
    assert context.session_id != old_id
    assert context.merged is None


def test_merged_context_exposes_history_rows():
    merged = MergedContext.from_api({
        "prompt_context": "ORG",
        "merged": {"conversation_history": [
            {"role": "user", "content": "hi", "tools_used": None},
            "not a row",
        ]},
    })

    rows = merged.conversation_history
    assert len(rows) == 1
    assert rows[0].content == "hi"
    assert rows[0].tools_used == []
