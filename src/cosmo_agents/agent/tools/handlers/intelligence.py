"""
agent.tools.handlers.intelligence - AI enrichment and scoring.

run_full_analysis fans out to enrichment, segment scoring and relationship
scoring concurrently and condenses the three answers into one summary.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from cosmo_agents.agent.tools.catalog import (
    ContactIdInput,
    EnrichContactInput,
    SegmentScoresInput,
)

if TYPE_CHECKING:
    from cosmo_agents.infrastructure.api.cosmo_client import CosmoApiClient

# Segment fit needed to count as a "top match" in a full analysis.
TOP_MATCH_THRESHOLD = 50
TOP_MATCH_LIMIT = 3


def interpret_relationship_score(score: float) -> str:
    if score >= 80:
        return "Strong relationship - highly engaged contact"
    if score >= 60:
        return "Good relationship - regular engagement"
    if score >= 40:
        return "Moderate relationship - some engagement"
    if score >= 20:
        return "Weak relationship - minimal engagement"
    return "Very weak relationship - needs nurturing"


async def enrich_contact(client: CosmoApiClient, params: EnrichContactInput) -> dict[str, Any]:
    result = await client.enrich_contact(params.contact_id, params.force_refresh)
    generated = bool(result.get("insights_generated"))
    return {
        "success": generated,
        "contact_id": result.get("contact_id", params.contact_id),
        "insights": result.get("ai_insights"),
        "message": (
            "AI insights generated successfully" if generated
            else "Contact already has insights (use force_refresh to regenerate)"
        ),
    }


async def calculate_segment_scores(client: CosmoApiClient, params: SegmentScoresInput) -> dict[str, Any]:
    scores = await client.calculate_segment_scores(params.contact_id, params.segment_ids)
    enrolled = sum(1 for s in scores if s.get("enrolled_in_campaign"))
    return {
        "contact_id": params.contact_id,
        "scores": [
            {
                "segment_name": s.get("segment_name"),
                "fit_score": s.get("fit_score"),
                "status": s.get("status"),
                "enrolled": bool(s.get("enrolled_in_campaign")),
            }
            for s in scores
        ],
        "summary": f"Calculated scores for {len(scores)} segments. {enrolled} auto-enrolled.",
    }


async def calculate_relationship_score(client: CosmoApiClient, params: ContactIdInput) -> dict[str, Any]:
    score = await client.calculate_relationship_score(params.contact_id)
    strength = score.get("strength_score") or 0
    return {
        "contact_id": score.get("contact_id", params.contact_id),
        "strength_score": strength,
        "health_score": score.get("health_score"),
        "interactions_30d": score.get("interactions_30d"),
        "interactions_90d": score.get("interactions_90d"),
        "interpretation": interpret_relationship_score(strength),
    }


async def run_full_analysis(client: CosmoApiClient, params: ContactIdInput) -> dict[str, Any]:
    contact_id = params.contact_id
    enrichment, segment_scores, relationship = await asyncio.gather(
        client.enrich_contact(contact_id, False),
        client.calculate_segment_scores(contact_id),
        client.calculate_relationship_score(contact_id),
    )

    top_segments = sorted(
        (s for s in segment_scores if (s.get("fit_score") or 0) >= TOP_MATCH_THRESHOLD),
        key=lambda s: s.get("fit_score") or 0,
        reverse=True,
    )[:TOP_MATCH_LIMIT]

    insights = enrichment.get("ai_insights") or {}
    return {
        "contact_id": contact_id,
        "enrichment": {
            "success": bool(enrichment.get("insights_generated")),
            "pain_points_count": len(insights.get("suspected_pain_points") or []),
            "goals_count": len(insights.get("suspected_goals") or []),
            "buying_signals_count": len(insights.get("buying_signals") or []),
        },
        "segment_fit": {
            "total_segments": len(segment_scores),
            "top_matches": [
                {
                    "name": s.get("segment_name"),
                    "score": s.get("fit_score"),
                    "enrolled": bool(s.get("enrolled_in_campaign")),
                }
                for s in top_segments
            ],
        },
        "relationship": {
            "strength": relationship.get("strength_score"),
            "health": relationship.get("health_score"),
            "recent_activity": relationship.get("interactions_30d"),
        },
        "summary": summarize_analysis(enrichment, top_segments, relationship),
    }


def summarize_analysis(
    enrichment: dict[str, Any],
    top_segments: list[dict[str, Any]],
    relationship: dict[str, Any],
) -> str:
    parts: list[str] = []
    if enrichment.get("insights_generated"):
        parts.append("New AI insights generated")

    if top_segments:
        best = top_segments[0]
        parts.append(f"Best segment match: {best.get('segment_name')} ({best.get('fit_score')}% fit)")

    strength = relationship.get("strength_score") or 0
    if strength >= 60:
        parts.append(f"Strong relationship ({strength}%)")
    elif strength < 30:
        parts.append("Relationship needs nurturing")

    return ". ".join(parts) or "Analysis complete"


HANDLERS = {
    "enrich_contact": enrich_contact,
    "calculate_segment_scores": calculate_segment_scores,
    "calculate_relationship_score": calculate_relationship_score,
    "run_full_analysis": run_full_analysis,
}
