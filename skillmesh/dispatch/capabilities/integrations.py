from __future__ import annotations

"""Credentialed integration skills.

Each integration is registered only when the request supplies its
credential. A provider owns an ``httpx.AsyncClient`` for the lifetime of one
dispatch; the dispatcher awaits ``aclose()`` when the dispatch ends, whatever
the outcome.

Credentials reach the dispatcher as a mapping from integration name to an
opaque token. ``credentials_from_headers`` builds that mapping from the
per-integration auth headers a transport layer receives.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from ..context import Context
from .base import Capability, CapabilityProvider
from .registry import ConditionalRegistration

logger = logging.getLogger(__name__)

AUTH_HEADERS: Dict[str, str] = {
    "github": "x-sk-copilot-github-auth",
    "jira": "x-sk-copilot-jira-auth",
    "graph": "x-sk-copilot-graph-auth",
    "klarna": "x-sk-copilot-klarna-auth",
}


def credentials_from_headers(headers: Mapping[str, str]) -> Dict[str, Optional[str]]:
    """Map per-integration auth headers (case-insensitive) to integration credentials."""
    lowered = {str(k).lower(): v for k, v in headers.items()}
    return {integration: lowered.get(header) for integration, header in AUTH_HEADERS.items()}


def _top(ctx: Context, default: int = 10) -> int:
    raw = (ctx.get("top") or "").strip()
    try:
        value = int(raw) if raw else default
    except ValueError:
        return default
    return max(1, min(value, 50))


class HttpSkillProvider:
    """
    Base class for skills backed by an authenticated HTTP API.

    Subclasses set ``namespace`` and ``base_url`` and implement ``functions``.
    """

    namespace = ""
    base_url = ""

    def __init__(
        self,
        credential: str,
        *,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._credential = credential
        self._client = httpx.AsyncClient(
            base_url=(base_url or self.base_url).rstrip("/"),
            headers=self._headers(),
            timeout=timeout,
            transport=transport,
        )

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._credential}", "Accept": "application/json"}

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def aclose(self) -> None:
        await self._client.aclose()
        logger.debug(f"Closed HTTP client for '{self.namespace}'")

    async def _get_json(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        resp = await self._client.get(url, params=params)
        resp.raise_for_status()
        return resp.json()


class GitHubSkill(HttpSkillProvider):
    """GitHub REST API skills."""

    namespace = "GitHubSkill"
    base_url = "https://api.github.com"

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._credential}", "Accept": "application/vnd.github+json"}

    def functions(self) -> List[Capability]:
        return [
            Capability(
                "ListPullRequests",
                self.list_pull_requests,
                "List pull requests of a GitHub repository given 'owner' and 'repo'",
            )
        ]

    async def list_pull_requests(self, ctx: Context) -> Context:
        owner = (ctx.get("owner") or "").strip()
        repo = (ctx.get("repo") or "").strip()
        if not owner or not repo:
            return ctx.fail("missing 'owner' or 'repo'")

        pulls = await self._get_json(
            f"/repos/{owner}/{repo}/pulls",
            params={"state": ctx.get("state") or "open", "per_page": _top(ctx)},
        )
        lines = [f"#{p.get('number')} {p.get('title', '')} ({(p.get('user') or {}).get('login', '')})" for p in pulls]
        ctx.update("\n".join(lines))
        ctx.set("pull_request_count", str(len(lines)))
        return ctx


class JiraSkill(HttpSkillProvider):
    """
    Jira REST API skills.

    The Jira server is request specific: ``jira_server_url`` must be set in
    the context. The credential is sent as a pre-encoded basic auth value.
    """

    namespace = "JiraSkill"

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Basic {self._credential}", "Accept": "application/json"}

    def functions(self) -> List[Capability]:
        return [Capability("GetIssue", self.get_issue, "Get a Jira issue by 'issue_key' (or the input text)")]

    async def get_issue(self, ctx: Context) -> Context:
        server = (ctx.get("jira_server_url") or "").strip().rstrip("/")
        key = (ctx.get("issue_key") or ctx.result).strip()
        if not server:
            return ctx.fail("missing 'jira_server_url'")
        if not key:
            return ctx.fail("missing 'issue_key'")

        issue = await self._get_json(f"{server}/rest/api/latest/issue/{key}")
        fields = issue.get("fields") or {}
        status = (fields.get("status") or {}).get("name", "")
        ctx.update(f"{issue.get('key', key)}: {fields.get('summary', '')} [{status}]")
        ctx.set("issue_status", status)
        return ctx


class CalendarSkill(HttpSkillProvider):
    """Microsoft Graph calendar skills."""

    namespace = "CalendarSkill"
    base_url = "https://graph.microsoft.com/v1.0"

    def functions(self) -> List[Capability]:
        return [
            Capability(
                "GetUpcomingEvents",
                self.get_upcoming_events,
                "List the user's upcoming calendar events (optional 'top')",
            )
        ]

    async def get_upcoming_events(self, ctx: Context) -> Context:
        payload = await self._get_json(
            "/me/events",
            params={"$top": _top(ctx), "$orderby": "start/dateTime", "$select": "subject,start,end"},
        )
        events = payload.get("value") or []
        lines = [f"{(e.get('start') or {}).get('dateTime', '')} {e.get('subject', '')}".strip() for e in events]
        ctx.update("\n".join(lines))
        ctx.set("event_count", str(len(lines)))
        return ctx


class ShoppingSkill(HttpSkillProvider):
    """Klarna product search skills."""

    namespace = "ShoppingSkill"
    base_url = "https://www.klarna.com/us/shopping/public/openai/v0"

    def functions(self) -> List[Capability]:
        return [Capability("SearchProducts", self.search_products, "Search products matching the input text")]

    async def search_products(self, ctx: Context) -> Context:
        query = ctx.result.strip()
        if not query:
            return ctx.fail("missing search query")

        params: Dict[str, Any] = {"q": query, "size": _top(ctx, default=5)}
        for key in ("min_price", "max_price"):
            value = (ctx.get(key) or "").strip()
            if value:
                params[key] = value
        payload = await self._get_json("/products", params=params)
        products = payload.get("products") or []
        lines = [f"{p.get('name', '')} - {p.get('price', '')}" for p in products]
        ctx.update("\n".join(lines))
        ctx.set("product_count", str(len(lines)))
        return ctx


def _factory(cls: type[HttpSkillProvider]):
    def build(credential: str) -> CapabilityProvider:
        return cls(credential)

    return build


DEFAULT_INTEGRATIONS: Dict[str, ConditionalRegistration] = {
    "github": ConditionalRegistration("github", GitHubSkill.namespace, _factory(GitHubSkill)),
    "jira": ConditionalRegistration("jira", JiraSkill.namespace, _factory(JiraSkill)),
    "graph": ConditionalRegistration("graph", CalendarSkill.namespace, _factory(CalendarSkill)),
    "klarna": ConditionalRegistration("klarna", ShoppingSkill.namespace, _factory(ShoppingSkill)),
}
