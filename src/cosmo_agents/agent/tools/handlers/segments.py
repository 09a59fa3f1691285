"""
agent.tools.handlers.segments - Segment listing, membership and health.
"""

from __future__ import annotations

import asyncio
import math
from typing import TYPE_CHECKING, Any

from cosmo_agents.agent.tools.catalog import (
    AssignSegmentScoreInput,
    CreateSegmentInput,
    NoInput,
    SegmentIdInput,
)
from cosmo_agents.agent.tools.handlers.contacts import display_name

if TYPE_CHECKING:
    from cosmo_agents.infrastructure.api.cosmo_client import CosmoApiClient

# Only this many members are echoed back to the model.
SEGMENT_CONTACTS_SHOWN = 20
STRONG_RELATIONSHIP = 60


def _segment_summary(segment: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": segment.get("id"),
        "name": segment.get("name"),
        "description": segment.get("description"),
    }


def _percent(part: int, total: int) -> int:
    """Whole-number percentage, halves rounded up."""
    if not total:
        return 0
    return math.floor(part / total * 100 + 0.5)


async def list_segments(client: CosmoApiClient, params: NoInput) -> dict[str, Any]:
    segments = await client.list_segments()
    return {
        "count": len(segments),
        "segments": [
            {**_segment_summary(s), "is_active": s.get("is_active")}
            for s in segments
        ],
    }


async def get_segment_contacts(client: CosmoApiClient, params: SegmentIdInput) -> dict[str, Any]:
    segment, contacts = await asyncio.gather(
        client.get_segment(params.segment_id),
        client.get_segment_contacts(params.segment_id),
    )
    return {
        "segment": _segment_summary(segment),
        "contact_count": len(contacts),
        "contacts": [
            {
                "id": c.get("id"),
                "name": display_name(c),
                "email": c.get("email"),
                "company": c.get("company"),
            }
            for c in contacts[:SEGMENT_CONTACTS_SHOWN]
        ],
    }


async def create_segment(client: CosmoApiClient, params: CreateSegmentInput) -> dict[str, Any]:
    segment = await client.create_segment(params.name, params.description, params.criteria)
    name = segment.get("name") or params.name
    return {
        "success": True,
        "segment_id": segment.get("id"),
        "name": name,
        "message": f'Segment "{name}" created successfully',
    }


async def assign_segment_score(client: CosmoApiClient, params: AssignSegmentScoreInput) -> dict[str, Any]:
    score = await client.assign_segment_score(
        params.contact_id, params.segment_id, params.fit_score, params.status,
    )
    fit = score.get("fit_score", params.fit_score)
    if isinstance(fit, float) and fit.is_integer():
        fit = int(fit)
    return {
        "success": True,
        "contact_id": params.contact_id,
        "segment_id": score.get("segment_id", params.segment_id),
        "fit_score": fit,
        "status": score.get("status", params.status),
        "message": f"Contact assigned to segment with {fit}% fit score",
    }


async def analyze_segment_health(client: CosmoApiClient, params: SegmentIdInput) -> dict[str, Any]:
    segment, contacts = await asyncio.gather(
        client.get_segment(params.segment_id),
        client.get_segment_contacts(params.segment_id),
    )

    total = len(contacts)
    with_insights = sum(
        1 for c in contacts
        if ((c.get("ai_insights") or {}).get("suspected_pain_points"))
    )
    strong = sum(
        1 for c in contacts
        if (((c.get("profile") or {}).get("relationship") or {}).get("strength_score") or 0)
        >= STRONG_RELATIONSHIP
    )

    return {
        "segment": _segment_summary(segment),
        "health_metrics": {
            "total_contacts": total,
            "with_ai_insights": with_insights,
            "insights_coverage": _percent(with_insights, total),
            "strong_relationships": strong,
            "relationship_health": _percent(strong, total),
        },
        "recommendations": segment_recommendations(total, with_insights, strong),
    }


def segment_recommendations(total: int, with_insights: int, strong: int) -> list[str]:
    if total == 0:
        return ["Add contacts to this segment to get started"]

    recommendations: list[str] = []
    if with_insights / total * 100 < 50:
        recommendations.append("Run AI enrichment on more contacts to improve targeting")
    if strong / total * 100 < 30:
        recommendations.append("Schedule outreach to strengthen relationships in this segment")
    if total < 10:
        recommendations.append("Consider expanding segment criteria to include more contacts")

    return recommendations or ["Segment is healthy - continue current strategy"]


HANDLERS = {
    "list_segments": list_segments,
    "get_segment_contacts": get_segment_contacts,
    "create_segment": create_segment,
    "assign_segment_score": assign_segment_score,
    "analyze_segment_health": analyze_segment_health,
}
