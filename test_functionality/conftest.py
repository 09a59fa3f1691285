"""
Shared fakes for the agent tests.

ScriptedGateway plays back model turns in order and records every call;
FakeBackend stands in for CosmoApiClient (tool handlers + ContextStore).
Nothing here touches the network or a real model.
"""

from __future__ import annotations

import copy
from typing import Any, Optional, Union

import pytest
import pytest_asyncio

from cosmo_agents.agent.tools.executor import ToolExecutor
from cosmo_agents.application.context import SessionContext
from cosmo_agents.application.services.chat_history import ChatHistoryService
from cosmo_agents.domain.models import (
    ModelTurn,
    StopReason,
    ToolInvocation,
)


def text_turn(text: str) -> ModelTurn:
    return ModelTurn(text=text, stop_reason=StopReason.END_TURN)


def tool_turn(*calls: tuple[str, str, dict[str, Any]], text: str = "") -> ModelTurn:
    """tool_turn(("t1", "get_contact", {"contact_id": "c1"}), ...)"""
    return ModelTurn(
        text=text,
        tool_calls=tuple(ToolInvocation(id=i, name=n, input=a) for i, n, a in calls),
        stop_reason=StopReason.TOOL_USE,
    )


class ScriptedGateway:
    """LanguageModelPort that returns pre-scripted turns.

    A script entry that is an exception instance is raised instead of
    returned.
    """

    def __init__(self, script: list[Union[ModelTurn, Exception]]):
        self._script = list(script)
        self.calls: list[dict[str, Any]] = []

    @property
    def remaining(self) -> int:
        return len(self._script)

    async def respond(self, system_prompt, tools, messages) -> ModelTurn:
        self.calls.append({
            "system_prompt": system_prompt,
            "tools": [t["name"] for t in tools],
            "messages": list(messages),
        })
        if not self._script:
            raise AssertionError("ScriptedGateway ran out of turns")
        item = self._script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeBackend:
    """In-memory stand-in for CosmoApiClient."""

    def __init__(self):
        self.contacts: dict[str, dict[str, Any]] = {
            "c1": {
                "id": "c1",
                "first_name": "John",
                "last_name": "Doe",
                "email": "john@acme.io",
                "company": "Acme",
                "title": "CTO",
                "ai_insights": {"suspected_pain_points": ["legacy billing"]},
            },
            "c2": {
                "id": "c2",
                "first_name": "Jane",
                "last_name": "Roe",
                "email": "jane@globex.com",
                "company": "Globex",
                "title": "VP Sales",
            },
        }
        self.suggestions: dict[str, list[dict[str, Any]]] = {
            "cold": [
                {"contact_id": "c1", "contact": {"id": "c1", "name": "John Doe", "company": "Acme"},
                 "next_step": "send intro"},
            ],
            "followup": [
                {"contact_id": "c2", "contact": {"id": "c2", "name": "Jane Roe", "company": "Globex"},
                 "next_step": "follow up on demo"},
            ],
        }
        self.merged_context: dict[str, Any] = {
            "prompt_context": "ICP: B2B SaaS, 50-500 employees.",
            "merged": {"relevant_memories": ["Prefers short emails"]},
        }
        self.enrichment: dict[str, Any] = {
            "contact_id": "c1",
            "insights_generated": True,
            "ai_insights": {
                "suspected_pain_points": ["manual reporting", "legacy billing"],
                "suspected_goals": ["expand to EU"],
                "buying_signals": [],
            },
        }
        self.segment_scores: list[dict[str, Any]] = []
        self.relationship: dict[str, Any] = {"contact_id": "c1", "strength_score": 0}
        self.segments: dict[str, dict[str, Any]] = {
            "s1": {"id": "s1", "name": "Fintech CTOs", "description": "Technical buyers", "is_active": True},
        }
        self.segment_members: dict[str, list[dict[str, Any]]] = {}
        self.workflows: dict[str, dict[str, Any]] = {}
        self.history: dict[str, list[dict[str, Any]]] = {}
        self.created_counts: dict[tuple[str, str], int] = {}
        self.calls: list[tuple[str, tuple]] = []

        self.fail_context: Optional[Exception] = None
        self.fail_saves: Optional[Exception] = None
        self.fail_contact: Optional[Exception] = None

    def _log(self, name: str, *args) -> None:
        self.calls.append((name, args))

    def called(self, name: str) -> list[tuple]:
        return [args for n, args in self.calls if n == name]

    # Contacts ------------------------------------------------------------

    async def get_contact(self, contact_id: str) -> dict[str, Any]:
        self._log("get_contact", contact_id)
        if self.fail_contact:
            raise self.fail_contact
        return copy.deepcopy(self.contacts[contact_id])

    async def list_contacts(self, search=None, segment_id=None, limit=25) -> list[dict[str, Any]]:
        self._log("list_contacts", search, segment_id, limit)
        needle = (search or "").lower()
        found = [
            c for c in self.contacts.values()
            if needle in f"{c.get('first_name')} {c.get('last_name')} {c.get('email')} {c.get('company')}".lower()
        ]
        return copy.deepcopy(found[:limit])

    async def count_contacts_created(self, start: str, end: str) -> int:
        self._log("count_contacts_created", start, end)
        return self.created_counts.get((start, end), 0)

    async def enrich_contact(self, contact_id: str, force_refresh: bool = False) -> dict[str, Any]:
        self._log("enrich_contact", contact_id, force_refresh)
        return copy.deepcopy(self.enrichment)

    async def calculate_segment_scores(self, contact_id: str, segment_ids=None) -> list[dict[str, Any]]:
        self._log("calculate_segment_scores", contact_id, segment_ids)
        return copy.deepcopy(self.segment_scores)

    async def calculate_relationship_score(self, contact_id: str) -> dict[str, Any]:
        self._log("calculate_relationship_score", contact_id)
        return copy.deepcopy(self.relationship)

    # Segments ------------------------------------------------------------

    async def list_segments(self) -> list[dict[str, Any]]:
        self._log("list_segments")
        return copy.deepcopy(list(self.segments.values()))

    async def get_segment(self, segment_id: str) -> dict[str, Any]:
        self._log("get_segment", segment_id)
        return copy.deepcopy(self.segments[segment_id])

    async def get_segment_contacts(self, segment_id: str, limit: int = 100) -> list[dict[str, Any]]:
        self._log("get_segment_contacts", segment_id, limit)
        return copy.deepcopy(self.segment_members.get(segment_id, [])[:limit])

    async def create_segment(self, name: str, description: str, criteria=None) -> dict[str, Any]:
        self._log("create_segment", name, description, criteria)
        segment = {"id": f"seg-{len(self.segments) + 1}", "name": name, "description": description}
        self.segments[segment["id"]] = segment
        return copy.deepcopy(segment)

    async def assign_segment_score(self, contact_id, segment_id, fit_score, status="active") -> dict[str, Any]:
        self._log("assign_segment_score", contact_id, segment_id, fit_score, status)
        return {"contact_id": contact_id, "segment_id": segment_id, "fit_score": fit_score, "status": status}

    # Playbooks -----------------------------------------------------------

    async def enroll_contact_in_playbook(self, contact_id: str, playbook_id: str) -> dict[str, Any]:
        self._log("enroll_contact_in_playbook", contact_id, playbook_id)
        return {}

    # Workflows -----------------------------------------------------------

    async def start_full_analysis_workflow(self, contact_id: str) -> dict[str, Any]:
        self._log("start_full_analysis_workflow", contact_id)
        return {"workflow_id": f"full-analysis-{contact_id}", "run_id": "run-1", "status": "RUNNING"}

    async def start_batch_enrichment_workflow(self, contact_ids: list[str]) -> dict[str, Any]:
        self._log("start_batch_enrichment_workflow", contact_ids)
        return {"workflow_id": "batch-enrichment", "run_id": "run-2", "status": "RUNNING"}

    async def start_segment_analysis_workflow(self, segment_id: str) -> dict[str, Any]:
        self._log("start_segment_analysis_workflow", segment_id)
        return {"workflow_id": f"segment-analysis-{segment_id}", "run_id": "run-3", "status": "RUNNING"}

    async def start_daily_analytics_workflow(self) -> dict[str, Any]:
        self._log("start_daily_analytics_workflow")
        return {"workflow_id": "daily-analytics", "run_id": "run-4", "status": "RUNNING"}

    async def get_workflow_status(self, workflow_id: str) -> dict[str, Any]:
        self._log("get_workflow_status", workflow_id)
        return copy.deepcopy(self.workflows[workflow_id])

    # Outreach ------------------------------------------------------------

    async def suggest_outreach(self, kind: str = "cold", limit: int = 5) -> dict[str, Any]:
        self._log("suggest_outreach", kind, limit)
        rows = self.suggestions.get(kind, [])
        return {"suggestions": copy.deepcopy(rows[:limit]), "total": len(rows)}

    async def get_outreach_state(self, contact_id: str) -> dict[str, Any]:
        self._log("get_outreach_state", contact_id)
        return {"stage": "contacted", "last_touch_at": "2024-05-02T10:00:00.000Z"}

    # ContextStore --------------------------------------------------------

    async def get_merged_context(self, session_id=None) -> dict[str, Any]:
        self._log("get_merged_context", session_id)
        if self.fail_context:
            raise self.fail_context
        return copy.deepcopy(self.merged_context)

    async def get_history(self, session_id: str, limit: int = 20) -> list[dict[str, Any]]:
        self._log("get_history", session_id, limit)
        return copy.deepcopy(self.history.get(session_id, [])[-limit:])

    async def save_message(self, session_id, role, content, contact_id=None, tools_used=None) -> None:
        self._log("save_message", session_id, role, content, tools_used)
        if self.fail_saves:
            raise self.fail_saves
        self.history.setdefault(session_id, []).append(
            {"role": role, "content": content, "tools_used": tools_used or []}
        )

    async def clear_history(self, session_id: str) -> None:
        self._log("clear_history", session_id)
        self.history.pop(session_id, None)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def executor(backend) -> ToolExecutor:
    return ToolExecutor(backend, timeout=5.0)


@pytest_asyncio.fixture
async def history_service(backend):
    service = ChatHistoryService(backend)
    yield service
    await service.aclose()


@pytest.fixture
def persistent_context() -> SessionContext:
    return SessionContext(session_id="sess-1", persist_history=True)
