"""
agent.tools.handlers.outreach - Read-only view of the outreach pipeline.

Stage transitions live in the backend; these tools only report.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cosmo_agents.agent.tools.catalog import ContactIdInput, SuggestOutreachInput

if TYPE_CHECKING:
    from cosmo_agents.infrastructure.api.cosmo_client import CosmoApiClient


async def suggest_outreach(client: CosmoApiClient, params: SuggestOutreachInput) -> dict[str, Any]:
    result = await client.suggest_outreach(params.kind, params.limit)
    suggestions = result["suggestions"]
    return {
        "kind": params.kind,
        "total": result["total"],
        "count": len(suggestions),
        "suggestions": [
            {
                "contact_id": s.get("contact_id") or (s.get("contact") or {}).get("id"),
                "name": (s.get("contact") or {}).get("name"),
                "company": (s.get("contact") or {}).get("company"),
                "next_step": s.get("next_step"),
            }
            for s in suggestions
        ],
    }


async def get_outreach_state(client: CosmoApiClient, params: ContactIdInput) -> dict[str, Any]:
    state = await client.get_outreach_state(params.contact_id)
    return {"contact_id": params.contact_id, **(state or {})}


HANDLERS = {
    "suggest_outreach": suggest_outreach,
    "get_outreach_state": get_outreach_state,
}
