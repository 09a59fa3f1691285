"""
agent.tools.catalog - The closed set of CRM tools the model may call.

Each tool is a name, a description and a Pydantic input model. The model
sees the JSON schema generated from the input model; the executor parses
the model's arguments back into the same class, so the schema and the
parser can never drift apart.

Tool names are a wire contract with the model and must stay stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Literal, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Input models
# ---------------------------------------------------------------------------

class ContactIdInput(BaseModel):
    contact_id: str = Field(description="The contact ID")


class SegmentIdInput(BaseModel):
    segment_id: str = Field(description="The segment ID")


class NoInput(BaseModel):
    pass


class SearchContactsInput(BaseModel):
    query: str = Field(description="Search query (name, email, company)")
    segment_id: Optional[str] = Field(default=None, description="Optional: Filter by segment ID")
    limit: int = Field(default=10, ge=1, le=100, description="Maximum number of results (default: 10)")


class CreateContactInput(BaseModel):
    email: str = Field(description="Contact email (required)")
    first_name: Optional[str] = Field(default=None, description="First name")
    last_name: Optional[str] = Field(default=None, description="Last name")
    company: Optional[str] = Field(default=None, description="Company name")
    title: Optional[str] = Field(default=None, description="Job title")
    linkedin_url: Optional[str] = Field(default=None, description="LinkedIn profile URL")


class EnrichContactInput(BaseModel):
    contact_id: str = Field(description="The contact ID to enrich")
    force_refresh: bool = Field(default=False, description="Force re-run enrichment even if insights exist")


class SegmentScoresInput(BaseModel):
    contact_id: str = Field(description="The contact ID to score")
    segment_ids: Optional[list[str]] = Field(
        default=None, description="Optional: Specific segment IDs to score against",
    )


class CreateSegmentInput(BaseModel):
    name: str = Field(description='Segment name (e.g., "Enterprise Tech Leaders", "High Intent Fintech")')
    description: Optional[str] = Field(default=None, description="Description of the segment criteria and purpose")
    criteria: Optional[dict[str, Any]] = Field(
        default=None, description="Optional filter criteria for auto-matching contacts",
    )


class AssignSegmentScoreInput(BaseModel):
    contact_id: str = Field(description="The contact ID")
    segment_id: str = Field(description="The segment ID to assign to")
    fit_score: float = Field(ge=0, le=100, description="Fit score from 0-100 (higher = better match)")
    status: Literal["active", "pending", "excluded"] = Field(
        default="active", description="Status of the contact in this segment",
    )


class PlaybookIdInput(BaseModel):
    playbook_id: str = Field(description="The playbook ID")


class EnrollContactInput(BaseModel):
    contact_id: str = Field(description="The contact ID to enroll")
    playbook_id: str = Field(description="The playbook ID to enroll in")


class StartWorkflowInput(BaseModel):
    workflow_type: Literal["full_analysis", "batch_enrichment", "segment_analysis", "daily_analytics"] = Field(
        description="Type of workflow to run",
    )
    contact_id: Optional[str] = Field(default=None, description="Contact ID (required for full_analysis)")
    contact_ids: Optional[list[str]] = Field(
        default=None, description="Array of contact IDs (required for batch_enrichment)",
    )
    segment_id: Optional[str] = Field(default=None, description="Segment ID (required for segment_analysis)")


class WorkflowIdInput(BaseModel):
    workflow_id: str = Field(description="The workflow ID returned from start_workflow")


class CountContactsCreatedInput(BaseModel):
    preset: Optional[Literal["today", "yesterday", "this_week", "last_week", "this_month", "last_month"]] = Field(
        default=None, description="Relative time preset (preferred for natural language queries).",
    )
    start_date: Optional[str] = Field(
        default=None, description="Start datetime (ISO 8601). If omitted, use period + date.",
    )
    end_date: Optional[str] = Field(
        default=None, description="End datetime (ISO 8601, exclusive). If omitted, use period + date.",
    )
    period: Optional[Literal["day", "week", "month"]] = Field(
        default=None, description="Convenience period when start/end are not provided.",
    )
    date: Optional[str] = Field(default=None, description="Base date (YYYY-MM-DD) for period calculations.")
    timezone: Optional[str] = Field(
        default=None,
        description="IANA timezone name (e.g., Asia/Ho_Chi_Minh, America/New_York). Default: Asia/Ho_Chi_Minh.",
    )


class KeywordInput(BaseModel):
    keyword: str = Field(min_length=1, description="Keyword to match (case-insensitive).")


class SuggestOutreachInput(BaseModel):
    kind: Literal["cold", "followup"] = Field(
        default="cold",
        description='"cold" for first-touch candidates, "followup" for contacts awaiting a follow-up',
    )
    limit: int = Field(default=5, ge=1, le=50, description="Maximum number of suggestions (default: 5)")


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: type[BaseModel]

    def schema(self) -> dict[str, Any]:
        """Catalog entry as handed to the model: {name, description, input_schema}."""
        input_schema = self.input_model.model_json_schema()
        input_schema.setdefault("properties", {})
        input_schema.setdefault("required", [])
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": input_schema,
        }


class ToolCatalog:
    """Ordered, immutable registry of tool specs."""

    def __init__(self, specs: Iterable[ToolSpec]):
        self._specs: dict[str, ToolSpec] = {}
        for spec in specs:
            if spec.name in self._specs:
                raise ValueError(f"Duplicate tool name: {spec.name}")
            self._specs[spec.name] = spec

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __len__(self) -> int:
        return len(self._specs)

    def get(self, name: str) -> ToolSpec:
        if name not in self._specs:
            raise KeyError(f"Tool '{name}' not in catalog")
        return self._specs[name]

    def names(self) -> list[str]:
        return list(self._specs.keys())

    def schemas(self, allowed: Optional[Iterable[str]] = None) -> list[dict[str, Any]]:
        """Schemas in catalog order, restricted to `allowed` when given.

        Names in `allowed` that are not in the catalog are ignored.
        """
        if allowed is None:
            return [spec.schema() for spec in self._specs.values()]
        wanted = set(allowed)
        return [spec.schema() for name, spec in self._specs.items() if name in wanted]


COSMO_TOOLS = ToolCatalog([
    # ── Contacts ────────────────────────────────────────────────
    ToolSpec(
        "search_contacts",
        "Search for contacts in COSMO CRM. Use this to find contacts by name, email, "
        "company, or other attributes.",
        SearchContactsInput,
    ),
    ToolSpec(
        "get_contact",
        "Get detailed information about a specific contact including AI insights, "
        "relationship scores, and segment membership.",
        ContactIdInput,
    ),
    ToolSpec(
        "create_contact",
        "Create a new contact in COSMO CRM.",
        CreateContactInput,
    ),

    # ── Intelligence ────────────────────────────────────────────
    ToolSpec(
        "enrich_contact",
        "Run AI enrichment on a contact to generate insights like pain points, goals, "
        "and buying signals.",
        EnrichContactInput,
    ),
    ToolSpec(
        "calculate_segment_scores",
        "Calculate fit scores for a contact against all segments or specific segments. "
        "High scores may auto-enroll the contact.",
        SegmentScoresInput,
    ),
    ToolSpec(
        "calculate_relationship_score",
        "Calculate relationship strength and health scores based on interaction history "
        "(emails, meetings, replies). Returns metrics for the last 30 and 90 days.",
        ContactIdInput,
    ),

    # ── Segments ────────────────────────────────────────────────
    ToolSpec(
        "list_segments",
        "List all segments in COSMO. Segments group contacts by criteria like industry, "
        "company size, engagement level.",
        NoInput,
    ),
    ToolSpec(
        "get_segment_contacts",
        "Get all contacts enrolled in a specific segment.",
        SegmentIdInput,
    ),
    ToolSpec(
        "create_segment",
        "Create a new segment to group contacts by criteria. Segments can be used for "
        "campaigns, targeting, and analytics.",
        CreateSegmentInput,
    ),
    ToolSpec(
        "assign_segment_score",
        "Assign or update a fit score for a contact in a segment. Use this to manually "
        "enroll contacts into segments or update their scores.",
        AssignSegmentScoreInput,
    ),

    # ── Playbooks ───────────────────────────────────────────────
    ToolSpec(
        "list_playbooks",
        "List all playbooks in COSMO. Playbooks are automated sequences of actions for "
        "engaging contacts (emails, tasks, etc.).",
        NoInput,
    ),
    ToolSpec(
        "get_playbook",
        "Get details of a specific playbook including its stages and actions.",
        PlaybookIdInput,
    ),
    ToolSpec(
        "enroll_contact_in_playbook",
        "Enroll a contact in a playbook to start automated outreach.",
        EnrollContactInput,
    ),

    # ── Composite analysis ──────────────────────────────────────
    ToolSpec(
        "run_full_analysis",
        "Run a complete analysis pipeline on a contact: enrichment, segment scoring and "
        "relationship scoring.",
        ContactIdInput,
    ),
    ToolSpec(
        "analyze_segment_health",
        "Analyze the health of a segment: AI insight coverage, relationship strength and "
        "recommendations for improvement.",
        SegmentIdInput,
    ),

    # ── Workflows ───────────────────────────────────────────────
    ToolSpec(
        "start_workflow",
        "Start a long-running backend workflow: full_analysis (one contact), "
        "batch_enrichment (many contacts), segment_analysis (one segment), "
        "daily_analytics (daily report).",
        StartWorkflowInput,
    ),
    ToolSpec(
        "get_workflow_status",
        "Check the status of a running workflow. Returns current status and result if completed.",
        WorkflowIdInput,
    ),

    # ── Analytics ───────────────────────────────────────────────
    ToolSpec(
        "count_contacts_created",
        "Count how many contacts were created in a specific time range. Use presets for "
        "relative time (today, yesterday, this_week, last_week, this_month, last_month). "
        "Default timezone is Asia/Ho_Chi_Minh (UTC+7).",
        CountContactsCreatedInput,
    ),
    ToolSpec(
        "count_contacts_by_keyword",
        'Count contacts matching a keyword across common fields (company, job title, '
        'headline/about). Example: "fintech".',
        KeywordInput,
    ),

    # ── Outreach (read-only) ────────────────────────────────────
    ToolSpec(
        "suggest_outreach",
        "List contacts that are due for outreach today: cold first-touch candidates or "
        "contacts awaiting a follow-up.",
        SuggestOutreachInput,
    ),
    ToolSpec(
        "get_outreach_state",
        "Get the current outreach state of a contact (stage, last touch, next step).",
        ContactIdInput,
    ),
])
