"""
infrastructure.api.cosmo_client - HTTP client for the COSMO CRM backend.

Every endpoint the agents need, wrapped as an async method. Uses requests
via run_in_executor for async compat (same pattern as the other HTTP
adapters in this package).

Wire conventions:
    - Authorization: Bearer <token>, plus optional X-User-ID / X-Org-ID
    - JSON request bodies
    - successful responses are wrapped as {"data": ...}; the client unwraps
    - non-2xx responses raise CosmoApiError("COSMO API Error: <status> - <body>")

Also implements the ContextStore port (merged context + history).
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any, Optional

import requests

from cosmo_agents.domain.exceptions import (
    AuthenticationError,
    BackendUnavailableError,
    CosmoApiError,
)

logger = logging.getLogger(__name__)

# Lifetime assumed for a login token when the backend does not say.
DEFAULT_TOKEN_LIFETIME = 23 * 60 * 60


class CosmoApiClient:
    """Async facade over the COSMO REST API.

    Implements ContextStore (structural typing — no explicit inheritance).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        user_id: Optional[str] = None,
        org_id: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._user_id = user_id or None
        self._org_id = org_id or None
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    def set_token(self, token: str) -> None:
        """Swap the bearer token (after login or /logout in the CLI)."""
        self._api_key = token

    def close(self) -> None:
        self._session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        if self._user_id:
            headers["X-User-ID"] = self._user_id
        if self._org_id:
            headers["X-Org-ID"] = self._org_id
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        body: Any = None,
    ) -> Any:
        """Send one request off the event loop and return the unwrapped data."""
        loop = asyncio.get_event_loop()
        payload = await loop.run_in_executor(
            None, partial(self._send, method, path, params, body),
        )
        if isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload

    def _send(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]],
        body: Any,
    ) -> Any:
        """Synchronous HTTP call (runs in thread pool)."""
        url = f"{self._base_url}{path}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=body,
                headers=self._headers(),
                timeout=self._timeout,
            )
        except requests.exceptions.Timeout:
            raise BackendUnavailableError(
                f"COSMO API timed out after {self._timeout}s ({method} {path})"
            )
        except requests.exceptions.ConnectionError as e:
            raise BackendUnavailableError(
                f"COSMO API unreachable at {self._base_url}: {e}"
            ) from e

        if not response.ok:
            logger.info(
                "COSMO API error %d on %s %s: %s",
                response.status_code, method, path, response.text[:100],
            )
            raise CosmoApiError(response.status_code, response.text)

        if not response.content:
            return None
        return response.json()

    # ------------------------------------------------------------------
    # Contacts
    # ------------------------------------------------------------------

    async def get_contact(self, contact_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v1/contact/{contact_id}")

    async def search_contacts(
        self,
        filter: Optional[dict[str, Any]] = None,
        offset: int = 0,
        limit: int = 25,
    ) -> dict[str, Any]:
        """Raw backend search. Returns {"list": [{"entity": contact}], "total": n}."""
        data = await self._request(
            "POST",
            "/v1/contacts/search",
            params={"offset": offset, "limit": limit},
            body={"filter": filter or {}},
        )
        return data or {"list": [], "total": 0}

    async def list_contacts(
        self,
        search: Optional[str] = None,
        segment_id: Optional[str] = None,
        limit: int = 25,
    ) -> list[dict[str, Any]]:
        """List contacts, optionally filtered by segment and free text.

        The backend filter has no free-text operator, so the text match
        (name, email, company, title) is applied to the returned page.
        """
        filter: dict[str, Any] = {}
        if segment_id:
            filter["segment_id"] = segment_id

        result = await self.search_contacts(filter, 0, limit)
        contacts = [item.get("entity", item) for item in result.get("list") or []]

        if not search:
            return contacts

        needle = search.lower()
        return [c for c in contacts if needle in _searchable_text(c)]

    async def create_contact(self, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/v1/contacts", body=data)

    async def update_contact(self, contact_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PATCH", f"/v1/contacts/{contact_id}", body=data)

    async def count_contacts_created(self, start: str, end: str) -> int:
        """Count contacts with start <= created_at < end (ISO 8601 strings)."""
        criteria = {"created_at": {"$gte": start, "$lt": end}}
        result = await self.search_contacts(criteria, 0, 1)
        return int(result.get("total") or 0)

    async def count_contacts_by_keyword(self, keyword: str, scan_limit: int = 500) -> dict[str, Any]:
        """Count contacts whose company, title, headline or about mention keyword.

        Returns {"matched": n, "scanned": m, "total": backend_total}.
        """
        result = await self.search_contacts({}, 0, scan_limit)
        contacts = [item.get("entity", item) for item in result.get("list") or []]
        needle = keyword.lower()
        matched = 0
        for contact in contacts:
            profile = contact.get("profile") or {}
            fields = [
                contact.get("company"),
                contact.get("title"),
                contact.get("headline") or profile.get("headline"),
                contact.get("about") or profile.get("about"),
            ]
            if needle in " ".join(str(f) for f in fields if f).lower():
                matched += 1
        return {
            "matched": matched,
            "scanned": len(contacts),
            "total": int(result.get("total") or len(contacts)),
        }

    # ------------------------------------------------------------------
    # Intelligence
    # ------------------------------------------------------------------

    async def enrich_contact(self, contact_id: str, force_refresh: bool = False) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/v1/intelligence/contacts/{contact_id}/enrich",
            body={"force_refresh": force_refresh},
        )

    async def calculate_segment_scores(
        self, contact_id: str, segment_ids: Optional[list[str]] = None,
    ) -> list[dict[str, Any]]:
        data = await self._request(
            "POST",
            f"/v1/intelligence/contacts/{contact_id}/scores",
            body={"segment_ids": segment_ids},
        )
        return (data or {}).get("scores") or []

    async def calculate_relationship_score(self, contact_id: str) -> dict[str, Any]:
        return await self._request(
            "POST", f"/v1/intelligence/contacts/{contact_id}/relationship-score",
        )

    # ------------------------------------------------------------------
    # Segments
    # ------------------------------------------------------------------

    async def list_segments(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/v1/segmentations") or []

    async def get_segment(self, segment_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v1/segmentations/{segment_id}")

    async def get_segment_contacts(self, segment_id: str, limit: int = 100) -> list[dict[str, Any]]:
        data = await self._request(
            "GET",
            f"/v1/segmentations/{segment_id}/contacts",
            params={"limit": limit},
        )
        return (data or {}).get("contacts") or []

    async def create_segment(
        self,
        name: str,
        description: Optional[str] = None,
        criteria: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/v1/segmentations",
            body={"name": name, "description": description, "criteria": criteria},
        )

    async def assign_segment_score(
        self,
        contact_id: str,
        segment_id: str,
        fit_score: float,
        status: str = "active",
    ) -> dict[str, Any]:
        return await self._request(
            "PUT",
            f"/v1/segmentations/{segment_id}/contacts/{contact_id}/score",
            body={"fit_score": fit_score, "status": status or "active"},
        )

    # ------------------------------------------------------------------
    # Playbooks
    # ------------------------------------------------------------------

    async def list_playbooks(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/v1/playbooks") or []

    async def get_playbook(self, playbook_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v1/playbooks/{playbook_id}")

    async def enroll_contact_in_playbook(self, contact_id: str, playbook_id: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/v1/contacts/{contact_id}/enroll",
            body={"playbook_id": playbook_id},
        ) or {}

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    async def start_full_analysis_workflow(self, contact_id: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/v1/workflows/full-analysis", body={"contact_id": contact_id},
        )

    async def start_batch_enrichment_workflow(self, contact_ids: list[str]) -> dict[str, Any]:
        return await self._request(
            "POST", "/v1/workflows/batch-enrichment", body={"contact_ids": contact_ids},
        )

    async def start_segment_analysis_workflow(self, segment_id: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/v1/workflows/segment-analysis", body={"segment_id": segment_id},
        )

    async def start_daily_analytics_workflow(self) -> dict[str, Any]:
        return await self._request("POST", "/v1/workflows/daily-analytics", body={})

    async def get_workflow_status(self, workflow_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v1/workflows/{workflow_id}/status")

    # ------------------------------------------------------------------
    # Outreach (read-only)
    # ------------------------------------------------------------------

    async def suggest_outreach(self, kind: str = "cold", limit: int = 5) -> dict[str, Any]:
        """Contacts due for outreach. kind is "cold" or "followup".

        Returns {"suggestions": [...], "total": n}.
        """
        data = await self._request(
            "GET", "/v1/outreach/suggestions", params={"type": kind, "limit": limit},
        )
        data = data or {}
        return {
            "suggestions": data.get("suggestions") or [],
            "total": int(data.get("total") or 0),
        }

    async def get_outreach_state(self, contact_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v1/outreach/contacts/{contact_id}/state")

    # ------------------------------------------------------------------
    # Organization / user context and conversation history
    # ------------------------------------------------------------------

    async def get_org_context(self) -> dict[str, Any]:
        return await self._request("GET", "/v1/context/org")

    async def update_org_context(self, updates: dict[str, Any]) -> None:
        await self._request("PATCH", "/v1/context/org", body=updates)

    async def get_user_context(self) -> dict[str, Any]:
        return await self._request("GET", "/v1/context/user")

    async def update_user_context(self, updates: dict[str, Any]) -> None:
        await self._request("PATCH", "/v1/context/user", body=updates)

    async def get_merged_context(self, session_id: Optional[str] = None) -> dict[str, Any]:
        return await self._request(
            "GET", "/v1/context/merged", params={"session_id": session_id},
        ) or {}

    async def get_history(self, session_id: str, limit: int = 20) -> list[dict[str, Any]]:
        return await self._request(
            "GET",
            "/v1/context/history",
            params={"session_id": session_id, "limit": limit},
        ) or []

    async def save_message(
        self,
        session_id: str,
        role: str,
        content: str,
        contact_id: Optional[str] = None,
        tools_used: Optional[list[str]] = None,
    ) -> None:
        await self._request(
            "POST",
            "/v1/context/history",
            body={
                "session_id": session_id,
                "role": role,
                "content": content,
                "contact_id": contact_id,
                "tools_used": tools_used,
            },
        )

    async def clear_history(self, session_id: str) -> None:
        await self._request(
            "DELETE", "/v1/context/history", params={"session_id": session_id},
        )

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> tuple[str, int]:
        """Exchange credentials for a token. Returns (token, expires_in_seconds).

        Raises:
            AuthenticationError: On rejected credentials or a token-less response.
        """
        try:
            data = await self._request(
                "POST", "/v1/auth/login", body={"email": email, "password": password},
            )
        except CosmoApiError as e:
            raise AuthenticationError(f"Login failed: {e.status} - {e.body}") from e

        data = data or {}
        token = data.get("token") or data.get("access_token")
        if not token:
            raise AuthenticationError("No token in login response")
        return token, int(data.get("expires_in") or DEFAULT_TOKEN_LIFETIME)


def _searchable_text(contact: dict[str, Any]) -> str:
    parts = [
        contact.get("first_name"),
        contact.get("last_name"),
        contact.get("email"),
        contact.get("company"),
        contact.get("title"),
    ]
    return " ".join(str(p) for p in parts if p).lower()
