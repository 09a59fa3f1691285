"""
agent.tools.handlers.playbooks - Playbook lookup and enrollment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cosmo_agents.agent.tools.catalog import EnrollContactInput, NoInput, PlaybookIdInput

if TYPE_CHECKING:
    from cosmo_agents.infrastructure.api.cosmo_client import CosmoApiClient


def _stages(playbook: dict[str, Any]) -> list[dict[str, Any]]:
    # Older playbooks keep stages at the top level, newer ones under config.
    stages = playbook.get("stages")
    if stages is None:
        stages = (playbook.get("config") or {}).get("stages")
    return stages or []


async def list_playbooks(client: CosmoApiClient, params: NoInput) -> dict[str, Any]:
    playbooks = await client.list_playbooks()
    return {
        "count": len(playbooks),
        "playbooks": [
            {
                "id": p.get("id"),
                "name": p.get("name"),
                "description": p.get("description"),
                "is_active": p.get("is_active"),
                "stages_count": len(_stages(p)),
            }
            for p in playbooks
        ],
    }


async def get_playbook(client: CosmoApiClient, params: PlaybookIdInput) -> dict[str, Any]:
    playbook = await client.get_playbook(params.playbook_id)
    return {
        "id": playbook.get("id"),
        "name": playbook.get("name"),
        "description": playbook.get("description"),
        "is_active": playbook.get("is_active"),
        "stages": [
            {
                "id": s.get("id"),
                "name": s.get("name"),
                "type": s.get("type"),
                "delay_days": s.get(
                    "delay_days", (s.get("trigger_conditions") or {}).get("wait_duration"),
                ),
            }
            for s in _stages(playbook)
        ],
    }


async def enroll_contact_in_playbook(client: CosmoApiClient, params: EnrollContactInput) -> dict[str, Any]:
    result = await client.enroll_contact_in_playbook(params.contact_id, params.playbook_id)
    return {
        "success": True,
        "contact_id": params.contact_id,
        "playbook_id": params.playbook_id,
        "message": result.get("message") or "Contact enrolled in playbook successfully",
    }


HANDLERS = {
    "list_playbooks": list_playbooks,
    "get_playbook": get_playbook,
    "enroll_contact_in_playbook": enroll_contact_in_playbook,
}
