"""
Handler results as the model sees them: scoring bands, full analysis,
segment health, workflows, playbook enrollment and segment writes.
"""

import json

import pytest

from cosmo_agents.agent.tools.handlers.segments import segment_recommendations


async def run(executor, tool, args):
    return json.loads(await executor.execute(tool, args))


# ---------------------------------------------------------------------------
# Intelligence
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("strength, interpretation", [
    (85, "Strong relationship - highly engaged contact"),
    (80, "Strong relationship - highly engaged contact"),
    (79, "Good relationship - regular engagement"),
    (60, "Good relationship - regular engagement"),
    (40, "Moderate relationship - some engagement"),
    (20, "Weak relationship - minimal engagement"),
    (19, "Very weak relationship - needs nurturing"),
    (None, "Very weak relationship - needs nurturing"),
])
async def test_relationship_score_bands(executor, backend, strength, interpretation):
    backend.relationship = {
        "contact_id": "c1", "strength_score": strength, "health_score": 55,
        "interactions_30d": 2, "interactions_90d": 7,
    }

    result = await run(executor, "calculate_relationship_score", {"contact_id": "c1"})

    assert result["interpretation"] == interpretation
    assert result["strength_score"] == (strength or 0)
    assert result["interactions_90d"] == 7


@pytest.mark.asyncio
async def test_full_analysis_keeps_top_three_segments_above_fifty(executor, backend):
    backend.segment_scores = [
        {"segment_name": "SMB", "fit_score": 40},
        {"segment_name": "Fintech CTOs", "fit_score": 90, "enrolled_in_campaign": True},
        {"segment_name": "Series B", "fit_score": 50},
        {"segment_name": "EU Expansion", "fit_score": 70},
        {"segment_name": "Dev Tools", "fit_score": 65},
    ]
    backend.relationship = {"strength_score": 72, "health_score": 80, "interactions_30d": 4}

    result = await run(executor, "run_full_analysis", {"contact_id": "c1"})

    assert result["enrichment"] == {
        "success": True,
        "pain_points_count": 2,
        "goals_count": 1,
        "buying_signals_count": 0,
    }
    assert result["segment_fit"] == {
        "total_segments": 5,
        "top_matches": [
            {"name": "Fintech CTOs", "score": 90, "enrolled": True},
            {"name": "EU Expansion", "score": 70, "enrolled": False},
            {"name": "Dev Tools", "score": 65, "enrolled": False},
        ],
    }
    assert result["relationship"] == {"strength": 72, "health": 80, "recent_activity": 4}
    assert result["summary"] == (
        "New AI insights generated. Best segment match: Fintech CTOs (90% fit). "
        "Strong relationship (72%)"
    )
    assert backend.called("enrich_contact") == [("c1", False)]
    assert backend.called("calculate_segment_scores") == [("c1", None)]


@pytest.mark.asyncio
@pytest.mark.parametrize("strength, summary", [
    (45, "Analysis complete"),
    (10, "Relationship needs nurturing"),
])
async def test_full_analysis_summary_without_highlights(executor, backend, strength, summary):
    backend.enrichment = {"contact_id": "c1", "insights_generated": False, "ai_insights": None}
    backend.segment_scores = [{"segment_name": "SMB", "fit_score": 49}]
    backend.relationship = {"strength_score": strength}

    result = await run(executor, "run_full_analysis", {"contact_id": "c1"})

    assert result["enrichment"]["success"] is False
    assert result["enrichment"]["pain_points_count"] == 0
    assert result["segment_fit"]["top_matches"] == []
    assert result["summary"] == summary


# ---------------------------------------------------------------------------
# Segments
# ---------------------------------------------------------------------------

def _member(cid, pain_points=None, strength=None):
    contact = {"id": cid, "first_name": cid.upper()}
    if pain_points is not None:
        contact["ai_insights"] = {"suspected_pain_points": pain_points}
    if strength is not None:
        contact["profile"] = {"relationship": {"strength_score": strength}}
    return contact


@pytest.mark.asyncio
async def test_segment_health_metrics(executor, backend):
    backend.segment_members["s1"] = [
        _member("a", ["slow onboarding"], 70),
        _member("b", [], 65),
        _member("c", strength=10),
        _member("d", ["churn"]),
    ]

    result = await run(executor, "analyze_segment_health", {"segment_id": "s1"})

    assert result["segment"] == {"id": "s1", "name": "Fintech CTOs", "description": "Technical buyers"}
    assert result["health_metrics"] == {
        "total_contacts": 4,
        "with_ai_insights": 2,
        "insights_coverage": 50,
        "strong_relationships": 2,
        "relationship_health": 50,
    }
    assert result["recommendations"] == [
        "Consider expanding segment criteria to include more contacts",
    ]


@pytest.mark.asyncio
async def test_empty_segment_health(executor, backend):
    result = await run(executor, "analyze_segment_health", {"segment_id": "s1"})

    assert result["health_metrics"]["total_contacts"] == 0
    assert result["health_metrics"]["insights_coverage"] == 0
    assert result["health_metrics"]["relationship_health"] == 0
    assert result["recommendations"] == ["Add contacts to this segment to get started"]


@pytest.mark.parametrize("total, with_insights, strong, expected", [
    (20, 5, 2, [
        "Run AI enrichment on more contacts to improve targeting",
        "Schedule outreach to strengthen relationships in this segment",
    ]),
    (20, 15, 10, ["Segment is healthy - continue current strategy"]),
    (0, 0, 0, ["Add contacts to this segment to get started"]),
])
def test_segment_recommendations(total, with_insights, strong, expected):
    assert segment_recommendations(total, with_insights, strong) == expected


@pytest.mark.asyncio
async def test_create_segment(executor, backend):
    result = await run(executor, "create_segment", {
        "name": "EU Fintech", "description": "Fintechs expanding to the EU",
        "criteria": {"industry": "fintech"},
    })

    assert result == {
        "success": True,
        "segment_id": "seg-2",
        "name": "EU Fintech",
        "message": 'Segment "EU Fintech" created successfully',
    }
    assert backend.called("create_segment") == [
        ("EU Fintech", "Fintechs expanding to the EU", {"industry": "fintech"}),
    ]


@pytest.mark.asyncio
async def test_assign_segment_score(executor, backend):
    result = await run(executor, "assign_segment_score", {
        "contact_id": "c1", "segment_id": "s1", "fit_score": 85,
    })

    assert result == {
        "success": True,
        "contact_id": "c1",
        "segment_id": "s1",
        "fit_score": 85,
        "status": "active",
        "message": "Contact assigned to segment with 85% fit score",
    }
    assert backend.called("assign_segment_score") == [("c1", "s1", 85.0, "active")]


# ---------------------------------------------------------------------------
# Playbooks
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_enroll_contact_in_playbook(executor, backend):
    result = await run(executor, "enroll_contact_in_playbook", {"contact_id": "c1", "playbook_id": "p1"})

    assert result == {
        "success": True,
        "contact_id": "c1",
        "playbook_id": "p1",
        "message": "Contact enrolled in playbook successfully",
    }
    assert backend.called("enroll_contact_in_playbook") == [("c1", "p1")]


# ---------------------------------------------------------------------------
# Workflows
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("args, error", [
    ({"workflow_type": "full_analysis"}, "contact_id is required for full_analysis workflow"),
    ({"workflow_type": "batch_enrichment", "contact_ids": []},
     "contact_ids array is required for batch_enrichment workflow"),
    ({"workflow_type": "segment_analysis"}, "segment_id is required for segment_analysis workflow"),
])
async def test_workflow_requires_its_argument(executor, backend, args, error):
    result = await run(executor, "start_workflow", args)

    assert result == {"error": error}
    assert backend.calls == []


@pytest.mark.asyncio
async def test_start_workflow(executor, backend):
    result = await run(executor, "start_workflow", {"workflow_type": "full_analysis", "contact_id": "c1"})

    assert result == {
        "success": True,
        "workflow_id": "full-analysis-c1",
        "run_id": "run-1",
        "status": "RUNNING",
        "message": "Workflow full_analysis started successfully. Use get_workflow_status to check progress.",
    }


@pytest.mark.asyncio
async def test_daily_analytics_needs_no_arguments(executor, backend):
    result = await run(executor, "start_workflow", {"workflow_type": "daily_analytics"})

    assert result["workflow_id"] == "daily-analytics"
    assert backend.called("start_daily_analytics_workflow") == [()]


@pytest.mark.asyncio
@pytest.mark.parametrize("state, flags", [
    ("RUNNING", (True, False, False)),
    ("COMPLETED", (False, True, False)),
    ("FAILED", (False, False, True)),
])
async def test_workflow_status_flags(executor, backend, state, flags):
    backend.workflows["w1"] = {
        "workflow_id": "w1", "run_id": "r1", "status": state,
        "result": {"processed": 3} if state == "COMPLETED" else None,
        "error": "worker crashed" if state == "FAILED" else None,
    }

    result = await run(executor, "get_workflow_status", {"workflow_id": "w1"})

    assert (result["is_running"], result["is_completed"], result["is_failed"]) == flags
    assert result["status"] == state
    assert result["run_id"] == "r1"
    if state == "FAILED":
        assert result["error"] == "worker crashed"
