"""
agent.tools.handlers.contacts - Contact lookup and creation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cosmo_agents.agent.tools.catalog import (
    ContactIdInput,
    CreateContactInput,
    SearchContactsInput,
)

if TYPE_CHECKING:
    from cosmo_agents.infrastructure.api.cosmo_client import CosmoApiClient


def display_name(contact: dict[str, Any], fallback_to_email: bool = True) -> str:
    name = f"{contact.get('first_name') or ''} {contact.get('last_name') or ''}".strip()
    if not name and fallback_to_email:
        return contact.get("email") or ""
    return name


async def search_contacts(client: CosmoApiClient, params: SearchContactsInput) -> dict[str, Any]:
    contacts = await client.list_contacts(
        search=params.query,
        segment_id=params.segment_id,
        limit=params.limit,
    )
    return {
        "count": len(contacts),
        "contacts": [
            {
                "id": c.get("id"),
                "name": display_name(c),
                "email": c.get("email"),
                "company": c.get("company"),
                "title": c.get("title"),
            }
            for c in contacts
        ],
    }


async def get_contact(client: CosmoApiClient, params: ContactIdInput) -> dict[str, Any]:
    contact = await client.get_contact(params.contact_id)
    return {
        "id": contact.get("id"),
        "name": display_name(contact, fallback_to_email=False),
        "email": contact.get("email"),
        "company": contact.get("company"),
        "title": contact.get("title"),
        "linkedin_url": contact.get("linkedin_url"),
        "ai_insights": contact.get("ai_insights"),
        "relationship": (contact.get("profile") or {}).get("relationship"),
    }


async def create_contact(client: CosmoApiClient, params: CreateContactInput) -> dict[str, Any]:
    contact = await client.create_contact(params.model_dump(exclude_none=True))
    return {
        "success": True,
        "contact_id": contact.get("id"),
        "message": f"Contact created: {contact.get('email') or params.email}",
    }


HANDLERS = {
    "search_contacts": search_contacts,
    "get_contact": get_contact,
    "create_contact": create_contact,
}
