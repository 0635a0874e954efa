"""
Microsoft Graph list-store gateway.

All outbound HTTP calls to the SharePoint lists go through this class.
Direct `requests` calls in services or blueprints are FORBIDDEN.

Behaviour:
  - Bearer token injected from the signed-in user's session (token_service)
  - 401 from Graph → one forced token renewal and one retry; no other retries
  - Non-2xx → GraphError carrying the remote payload as a string
  - 404 on single-item calls → reported as "absent" (None / False)
  - List reads page through @odata.nextLink up to LIST_MAX_ITEMS items

Testability: pass a fake `session` and `token_provider` to GraphGateway()
in tests, or swap them on the module-level singleton.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import requests
from flask import current_app

from sigreq.core.exceptions import GraphError

logger = logging.getLogger(__name__)

# Graph rejects $filter/$orderby on non-indexed columns of large lists unless
# the caller opts in to best-effort evaluation.
PREFER_NON_INDEXED = {"Prefer": "HonorNonIndexedQueriesWarningMayFailRandomly"}


def _default_token_provider(force_refresh: bool = False) -> str:
    from sigreq.services.token_service import get_access_token
    return get_access_token(force_refresh=force_refresh)


class GraphGateway:
    """SharePoint-lists-over-Graph gateway.

    Instantiate once at module level (module-level singleton pattern).

    Usage:
        from sigreq.integrations.graph_gateway import graph_gateway
        items = graph_gateway.list_items("Lista de Setores", error_message="Erro ao obter setores")
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        token_provider: Callable[..., str] | None = None,
    ) -> None:
        self._session: requests.Session | None = session
        self.token_provider: Callable[..., str] = token_provider or _default_token_provider

    # ── HTTP session ─────────────────────────────────────────────────────────

    @property
    def session(self) -> requests.Session:
        """Return (or lazily create) the requests.Session."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    @session.setter
    def session(self, value: requests.Session | None) -> None:
        self._session = value

    # ── URLs ─────────────────────────────────────────────────────────────────

    @staticmethod
    def site_url() -> str:
        cfg = current_app.config
        return f"{cfg['GRAPH_BASE_URL'].rstrip('/')}/sites/{cfg['SHAREPOINT_SITE']}"

    def list_url(self, list_name: str) -> str:
        return f"{self.site_url()}/lists/{quote(list_name, safe='')}"

    def item_url(self, list_name: str, item_id: str | int | None = None) -> str:
        url = f"{self.list_url(list_name)}/items"
        if item_id is not None:
            url += f"/{quote(str(item_id), safe='')}"
        return url

    # ── Core request dispatcher ──────────────────────────────────────────────

    def request(
        self,
        method: str,
        url: str,
        *,
        json_body: dict | None = None,
        params: dict | None = None,
        headers: dict | None = None,
        error_message: str = "Erro ao comunicar com o SharePoint",
    ) -> requests.Response:
        """Execute an authenticated request against Graph.

        Returns the raw response for any status except 401 (renewed once)
        and network failures, which raise GraphError. Status interpretation
        is left to the caller.
        """
        timeout = current_app.config.get("GRAPH_TIMEOUT", 30)
        token_refreshed = False

        while True:
            token = self.token_provider(force_refresh=token_refreshed)
            req_headers = {
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
            if headers:
                req_headers.update(headers)

            kwargs: dict[str, Any] = {"headers": req_headers, "timeout": timeout}
            if json_body is not None:
                kwargs["json"] = json_body
            if params:
                kwargs["params"] = params

            t0 = time.perf_counter()
            try:
                resp = self.session.request(method, url, **kwargs)
            except requests.Timeout:
                logger.warning("Graph request timed out method=%s url=%s", method, url)
                raise GraphError(error_message, None, f"Request timed out after {timeout}s")
            except requests.RequestException as exc:
                logger.warning("Graph network error method=%s url=%s error=%s", method, url, exc)
                raise GraphError(error_message, None, str(exc)[:500])
            duration_ms = (time.perf_counter() - t0) * 1000

            if resp.status_code == 401 and not token_refreshed:
                # Token rejected: force a silent renewal and retry once
                logger.info("Graph returned 401, renewing token url=%s", url)
                token_refreshed = True
                continue

            logger.debug(
                "Graph %s %s → %d", method, url, resp.status_code,
                extra={"graph_status": resp.status_code, "duration_ms": duration_ms},
            )
            return resp

    def _raise_for(self, resp: requests.Response, method: str, url: str, error_message: str):
        logger.warning(
            "Graph request failed method=%s status=%d url=%s",
            method, resp.status_code, url,
            extra={"graph_status": resp.status_code},
        )
        raise GraphError(error_message, resp.status_code, resp.text[:2000])

    @staticmethod
    def _json(resp: requests.Response) -> dict:
        try:
            return resp.json() if resp.content else {}
        except ValueError:
            return {}

    # ── List item operations ─────────────────────────────────────────────────

    def list_items(
        self,
        list_name: str,
        *,
        error_message: str,
        headers: dict | None = None,
    ) -> list[dict]:
        """Return every item of a list (with fields), paging up to LIST_MAX_ITEMS."""
        cfg = current_app.config
        page_size = cfg.get("LIST_PAGE_SIZE", 1000)
        max_items = cfg.get("LIST_MAX_ITEMS", 5000)

        url: str | None = self.item_url(list_name)
        params: dict | None = {"expand": "fields", "$top": page_size}
        items: list[dict] = []

        while url:
            resp = self.request("GET", url, params=params, headers=headers, error_message=error_message)
            if not resp.ok:
                self._raise_for(resp, "GET", url, error_message)
            body = self._json(resp)
            items.extend(body.get("value", []))
            if len(items) >= max_items:
                if body.get("@odata.nextLink"):
                    logger.warning(
                        "List %r truncated at %d items", list_name, max_items,
                        extra={"list_name": list_name},
                    )
                return items[:max_items]
            # nextLink already carries the query string
            url = body.get("@odata.nextLink")
            params = None

        return items

    def get_item(self, list_name: str, item_id, *, error_message: str) -> dict | None:
        """Return one item (with fields), or None when Graph reports 404."""
        url = self.item_url(list_name, item_id)
        resp = self.request("GET", url, params={"expand": "fields"}, error_message=error_message)
        if resp.status_code == 404:
            return None
        if not resp.ok:
            self._raise_for(resp, "GET", url, error_message)
        return self._json(resp)

    def create_item(self, list_name: str, fields: dict, *, error_message: str) -> dict:
        """POST a new item; returns the created item as Graph echoes it."""
        url = self.item_url(list_name)
        resp = self.request("POST", url, json_body={"fields": fields}, error_message=error_message)
        if not resp.ok:
            self._raise_for(resp, "POST", url, error_message)
        return self._json(resp)

    def update_item(self, list_name: str, item_id, fields: dict, *, error_message: str) -> bool:
        """PATCH an item's fields. Returns False when the item does not exist."""
        url = self.item_url(list_name, item_id)
        resp = self.request("PATCH", url, json_body={"fields": fields}, error_message=error_message)
        if resp.status_code == 404:
            return False
        if not resp.ok:
            self._raise_for(resp, "PATCH", url, error_message)
        return True

    def delete_item(self, list_name: str, item_id, *, error_message: str) -> bool:
        """DELETE an item. Returns False when it was already absent."""
        url = self.item_url(list_name, item_id)
        resp = self.request("DELETE", url, error_message=error_message)
        if resp.status_code == 404:
            return False
        if not resp.ok:
            self._raise_for(resp, "DELETE", url, error_message)
        return True

    # ── Site / list metadata ─────────────────────────────────────────────────

    def get_lists(self, *, error_message: str = "Erro ao obter listas") -> dict:
        url = f"{self.site_url()}/lists"
        resp = self.request("GET", url, error_message=error_message)
        if not resp.ok:
            self._raise_for(resp, "GET", url, error_message)
        return self._json(resp)

    def get_list(
        self,
        list_name: str,
        *,
        expand: str = "columns",
        error_message: str = "Erro ao obter detalhes da lista",
    ) -> dict | None:
        url = self.list_url(list_name)
        resp = self.request("GET", url, params={"expand": expand}, error_message=error_message)
        if resp.status_code == 404:
            return None
        if not resp.ok:
            self._raise_for(resp, "GET", url, error_message)
        return self._json(resp)


# Module-level singleton; services import this instance.
# In tests, swap the transport via:
#   graph_gateway.session = fake_session
#   graph_gateway.token_provider = lambda force_refresh=False: "token"
graph_gateway = GraphGateway()
