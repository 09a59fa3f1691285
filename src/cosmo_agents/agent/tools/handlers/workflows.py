"""
agent.tools.handlers.workflows - Long-running backend workflows.

A missing per-type argument is reported as an {"error": ...} payload
rather than raised, so the model sees exactly which argument to add.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cosmo_agents.agent.tools.catalog import StartWorkflowInput, WorkflowIdInput

if TYPE_CHECKING:
    from cosmo_agents.infrastructure.api.cosmo_client import CosmoApiClient


async def start_workflow(client: CosmoApiClient, params: StartWorkflowInput) -> dict[str, Any]:
    workflow_type = params.workflow_type

    if workflow_type == "full_analysis":
        if not params.contact_id:
            return {"error": "contact_id is required for full_analysis workflow"}
        result = await client.start_full_analysis_workflow(params.contact_id)
    elif workflow_type == "batch_enrichment":
        if not params.contact_ids:
            return {"error": "contact_ids array is required for batch_enrichment workflow"}
        result = await client.start_batch_enrichment_workflow(params.contact_ids)
    elif workflow_type == "segment_analysis":
        if not params.segment_id:
            return {"error": "segment_id is required for segment_analysis workflow"}
        result = await client.start_segment_analysis_workflow(params.segment_id)
    else:
        result = await client.start_daily_analytics_workflow()

    return {
        "success": True,
        "workflow_id": result.get("workflow_id"),
        "run_id": result.get("run_id"),
        "status": result.get("status"),
        "message": (
            f"Workflow {workflow_type} started successfully. "
            "Use get_workflow_status to check progress."
        ),
    }


async def get_workflow_status(client: CosmoApiClient, params: WorkflowIdInput) -> dict[str, Any]:
    status = await client.get_workflow_status(params.workflow_id)
    state = status.get("status")
    return {
        "workflow_id": status.get("workflow_id", params.workflow_id),
        "run_id": status.get("run_id"),
        "status": state,
        "result": status.get("result"),
        "error": status.get("error"),
        "is_running": state == "RUNNING",
        "is_completed": state == "COMPLETED",
        "is_failed": state == "FAILED",
    }


HANDLERS = {
    "start_workflow": start_workflow,
    "get_workflow_status": get_workflow_status,
}
