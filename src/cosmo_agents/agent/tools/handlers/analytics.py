"""
agent.tools.handlers.analytics - Contact counts over time and by keyword.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cosmo_agents.agent.tools.catalog import CountContactsCreatedInput, KeywordInput
from cosmo_agents.application.date_ranges import DEFAULT_TIMEZONE, resolve_range

if TYPE_CHECKING:
    from cosmo_agents.infrastructure.api.cosmo_client import CosmoApiClient


async def count_contacts_created(client: CosmoApiClient, params: CountContactsCreatedInput) -> dict[str, Any]:
    tz = params.timezone or DEFAULT_TIMEZONE
    window = resolve_range(
        preset=params.preset,
        start_date=params.start_date,
        end_date=params.end_date,
        period=params.period,
        base_date=params.date,
        tz=tz,
    )
    total = await client.count_contacts_created(window.start_iso, window.end_iso)
    return {
        "start": window.start_iso,
        "end": window.end_iso,
        "total_contacts": total,
        "timezone": tz,
    }


async def count_contacts_by_keyword(client: CosmoApiClient, params: KeywordInput) -> dict[str, Any]:
    counts = await client.count_contacts_by_keyword(params.keyword)
    result = {
        "keyword": params.keyword,
        "total_contacts": counts["matched"],
        "contacts_scanned": counts["scanned"],
    }
    if counts["scanned"] < counts["total"]:
        result["note"] = (
            f"Only the first {counts['scanned']} of {counts['total']} contacts were scanned."
        )
    return result


HANDLERS = {
    "count_contacts_created": count_contacts_created,
    "count_contacts_by_keyword": count_contacts_by_keyword,
}
