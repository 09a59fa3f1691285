"""
agent.tools.executor - Dispatch one model tool call to its handler.

The executor is the error boundary of the tool cycle: whatever happens
inside a handler (bad arguments, HTTP errors, timeouts), the model gets a
JSON string back, never an exception. Only task cancellation escapes.

Dispatch is a closed table built from the handler modules. Construction
fails if the table and the catalog disagree, so a tool can never be
advertised to the model without something to run it.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional

from pydantic import ValidationError

from cosmo_agents.agent.tools.catalog import COSMO_TOOLS, ToolCatalog
from cosmo_agents.agent.tools.handlers import (
    analytics,
    contacts,
    intelligence,
    outreach,
    playbooks,
    segments,
    workflows,
)
from cosmo_agents.domain.exceptions import ConfigurationError

if TYPE_CHECKING:
    from cosmo_agents.infrastructure.api.cosmo_client import CosmoApiClient

logger = logging.getLogger(__name__)

Handler = Callable[[Any, Any], Awaitable[dict[str, Any]]]

DEFAULT_HANDLERS: dict[str, Handler] = {
    **contacts.HANDLERS,
    **intelligence.HANDLERS,
    **segments.HANDLERS,
    **playbooks.HANDLERS,
    **workflows.HANDLERS,
    **analytics.HANDLERS,
    **outreach.HANDLERS,
}


def error_payload(message: str) -> str:
    return json.dumps({"error": message})


class ToolExecutor:
    """Runs catalog tools against the COSMO backend.

    Args:
        client:    Backend client handed to every handler.
        catalog:   Tool catalog (input models + names).
        handlers:  name -> async handler; must cover the catalog exactly.
        timeout:   Per-call limit in seconds; None disables it.
    """

    def __init__(
        self,
        client: CosmoApiClient,
        catalog: ToolCatalog = COSMO_TOOLS,
        handlers: Optional[Mapping[str, Handler]] = None,
        timeout: Optional[float] = 30.0,
    ):
        self._client = client
        self._catalog = catalog
        self._handlers = dict(handlers if handlers is not None else DEFAULT_HANDLERS)
        self._timeout = timeout

        missing = [n for n in catalog.names() if n not in self._handlers]
        orphaned = [n for n in self._handlers if n not in catalog]
        if missing or orphaned:
            raise ConfigurationError(
                f"Tool table mismatch: no handler for {missing}, no catalog entry for {orphaned}"
            )

    @property
    def catalog(self) -> ToolCatalog:
        return self._catalog

    async def execute(self, tool_name: str, tool_input: Optional[dict[str, Any]] = None) -> str:
        """Run one tool and return its JSON result (or a JSON error)."""
        if tool_name not in self._catalog:
            logger.warning("Model requested unknown tool '%s'", tool_name)
            return error_payload(f"Unknown tool: {tool_name}")

        spec = self._catalog.get(tool_name)
        try:
            params = spec.input_model.model_validate(tool_input or {})
        except ValidationError as e:
            logger.warning("Invalid input for tool '%s': %s", tool_name, e)
            return error_payload(f"Invalid input for {tool_name}: {_summarize(e)}")

        handler = self._handlers[tool_name]
        logger.debug("Executing tool '%s' with %s", tool_name, tool_input)
        try:
            result = await asyncio.wait_for(handler(self._client, params), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Tool '%s' timed out after %ss", tool_name, self._timeout)
            return error_payload(f"Tool '{tool_name}' timed out after {self._timeout:g}s")
        except Exception as e:
            logger.warning("Tool '%s' failed: %s", tool_name, e)
            return error_payload(str(e) or type(e).__name__)

        return json.dumps(result, default=str, ensure_ascii=False)


def _summarize(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "input"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)
