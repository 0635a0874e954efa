"""
Shared pytest fixtures for the SIGREQ test suite.

Provides:
    - app: Flask application (session-scoped)
    - app_context: per-test application context (autouse)
    - client: Flask test client (function-scoped)
    - graph: in-memory fake of the Graph list API, installed as the
      gateway's HTTP session with a stub token provider
    - sign_in: helper putting a signed-in user into the client's session
"""

import itertools
import json
import time
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qsl, quote, unquote, urlsplit

import pytest
import requests

from sigreq import create_app
from sigreq.config import TestingConfig
from sigreq.integrations.graph_gateway import graph_gateway
from sigreq.services import token_store

LIST_REQUISITOS = TestingConfig.LIST_REQUISITOS
LIST_FUNCIONARIOS = TestingConfig.LIST_FUNCIONARIOS
LIST_SETORES = TestingConfig.LIST_SETORES
LIST_MOVIMENTACOES = TestingConfig.LIST_MOVIMENTACOES

SITE_URL = f"{TestingConfig.GRAPH_BASE_URL}/sites/{TestingConfig.SHAREPOINT_SITE}"


# ── Fake Graph ───────────────────────────────────────────────────────────


class FakeGraph:
    """Serves SharePoint list endpoints from memory.

    Drop-in for the gateway's ``requests.Session``: only ``request()`` is
    used. Every call is recorded in ``calls`` as
    ``(method, url, params, headers, json_body)``.
    """

    def __init__(self, site_url=SITE_URL):
        self.site_url = site_url
        self.lists: dict[str, dict[str, dict]] = {}
        self.columns: dict[str, list[dict]] = {}
        self.calls: list[tuple] = []
        self.failures: dict[tuple, tuple[int, str]] = {}
        self.rejected_tokens: set[str] = set()
        self.network_error: Exception | None = None
        self._ids = itertools.count(1)
        self._clock = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    # ── Seeding and fault injection ──────────────────────────────────────

    def add(self, list_name: str, fields: dict, *, created: str | None = "auto") -> str:
        """Insert an item directly; returns its id."""
        item_id = str(next(self._ids))
        fields = dict(fields)
        if created == "auto":
            self._clock += timedelta(minutes=1)
            fields["Created"] = self._clock.strftime("%Y-%m-%dT%H:%M:%SZ")
        elif created is not None:
            fields["Created"] = created
        self.lists.setdefault(list_name, {})[item_id] = {"id": item_id, "fields": fields}
        return item_id

    def ensure_list(self, list_name: str) -> None:
        self.lists.setdefault(list_name, {})

    def fail(self, list_name: str, status: int = 500, body: str = '{"error": "boom"}', method=None):
        """Answer every call (or every ``method`` call) to a list with an error."""
        self.failures[(method, list_name)] = (status, body)

    def fields(self, list_name: str, item_id) -> dict:
        return self.lists[list_name][str(item_id)]["fields"]

    def requests_to(self, list_name: str, method: str | None = None) -> list[tuple]:
        prefix = f"{self.site_url}/lists/{quote(list_name, safe='')}"
        return [c for c in self.calls if c[1].startswith(prefix) and (method is None or c[0] == method)]

    # ── Session interface ────────────────────────────────────────────────

    def request(self, method, url, headers=None, timeout=None, json=None, params=None):
        self.calls.append((method, url, params, dict(headers or {}), json))
        if self.network_error is not None:
            raise self.network_error

        token = (headers or {}).get("Authorization", "").removeprefix("Bearer ")
        if token in self.rejected_tokens:
            return self._response(401, {"error": {"code": "InvalidAuthenticationToken"}}, url)

        split = urlsplit(url)
        path = f"{split.scheme}://{split.netloc}{split.path}"
        query = dict(parse_qsl(split.query))
        query.update(params or {})

        if not path.startswith(f"{self.site_url}/lists"):
            return self._response(400, {"error": {"message": "unexpected url"}}, url)
        parts = [unquote(p) for p in path[len(f"{self.site_url}/lists"):].split("/") if p]

        if not parts:
            return self._response(200, {
                "value": [{"id": f"list-{n}", "displayName": n, "name": n} for n in self.lists],
            }, url)

        list_name = parts[0]
        for key in ((method, list_name), (None, list_name)):
            if key in self.failures:
                status, body = self.failures[key]
                return self._response(status, body, url)
        if list_name not in self.lists:
            return self._response(404, {"error": {"code": "itemNotFound"}}, url)

        if len(parts) == 1:
            return self._response(200, {
                "displayName": list_name,
                "columns": self.columns.get(list_name, []),
            }, url)

        items = self.lists[list_name]
        if len(parts) == 2:
            if method == "GET":
                return self._page(list_name, items, query, url)
            if method == "POST":
                item_id = self.add(list_name, (json or {}).get("fields", {}))
                return self._response(201, items[item_id], url)

        item_id = parts[2]
        if item_id not in items:
            return self._response(404, {"error": {"code": "itemNotFound"}}, url)
        if method == "GET":
            return self._response(200, items[item_id], url)
        if method == "PATCH":
            items[item_id]["fields"].update((json or {}).get("fields", {}))
            return self._response(200, items[item_id]["fields"], url)
        if method == "DELETE":
            del items[item_id]
            return self._response(204, None, url)
        return self._response(405, {"error": {"code": "methodNotAllowed"}}, url)

    def _page(self, list_name, items, query, url):
        top = int(query.get("$top", 200))
        skip = int(query.get("$skiptoken", 0))
        ordered = sorted(items.values(), key=lambda i: int(i["id"]))
        body = {"value": ordered[skip:skip + top]}
        if skip + top < len(ordered):
            base = f"{self.site_url}/lists/{quote(list_name, safe='')}/items"
            body["@odata.nextLink"] = f"{base}?expand=fields&$top={top}&$skiptoken={skip + top}"
        return self._response(200, body, url)

    @staticmethod
    def _response(status, body, url):
        resp = requests.Response()
        resp.status_code = status
        resp.url = url
        resp.encoding = "utf-8"
        if body is None:
            resp._content = b""
        elif isinstance(body, str):
            resp._content = body.encode()
        else:
            resp._content = json.dumps(body).encode()
        return resp


def stub_token(force_refresh=False):
    return "test-token"


def store_token_entry(access_token="access-1", refresh_token="refresh-1", expires_in=3600):
    """Put a token entry in the token store and return its key."""
    key = token_store.new_key()
    token_store.save(key, {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "expires_at": time.time() + expires_in,
    })
    return key


# ── App fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(autouse=True)
def app_context(app):
    with app.app_context():
        yield
        token_store.clear()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def graph():
    """Install a FakeGraph (with the four console lists) on the gateway."""
    fake = FakeGraph()
    for name in (LIST_REQUISITOS, LIST_FUNCIONARIOS, LIST_SETORES, LIST_MOVIMENTACOES):
        fake.ensure_list(name)

    previous_session = graph_gateway._session
    previous_provider = graph_gateway.token_provider
    graph_gateway.session = fake
    graph_gateway.token_provider = stub_token
    yield fake
    graph_gateway.session = previous_session
    graph_gateway.token_provider = previous_provider


@pytest.fixture()
def sign_in(client):
    """Put a signed-in user with a valid Graph token into the client session."""

    def _sign_in(expires_in=3600, refresh_token="refresh-1", access_token="access-1"):
        key = store_token_entry(access_token, refresh_token, expires_in)
        with client.session_transaction() as sess:
            sess["graph_token_key"] = key
            sess["user"] = {"name": "Ana Souza", "email": "ana@contoso.com", "oid": "oid-1"}
        return key

    return _sign_in


# ── Seed helpers ─────────────────────────────────────────────────────────


def seed_setor(graph, nome="TI", descricao="Tecnologia", responsavel_id=None):
    fields = {"Title": nome, "Descri_x00e7__x00e3_o": descricao}
    if responsavel_id:
        fields["Funcin_x00e1_rio_x0028_s_x0029_LookupId"] = responsavel_id
    return graph.add(LIST_SETORES, fields)


def seed_funcionario(graph, nome="Ana", setor_id=None, status="Ativo", email="ana@contoso.com"):
    fields = {"Title": nome, "Email": email, "Telefone": "11 99999-0000", "Status": status}
    if setor_id:
        fields["SetorLookupId"] = setor_id
    return graph.add(LIST_FUNCIONARIOS, fields)


def seed_requisito(graph, codigo="REQ-001", status="Cadastrada", situacao="Ativa",
                   funcionario_id=None, descricao="Requisito de teste"):
    fields = {
        "Title": codigo,
        "Descri_x00e7__x00e3_o": descricao,
        "Descri_x00e7__x00e3_ocompleta": "",
        "Status": status,
        "Situa_x00e7__x00e3_o": situacao,
    }
    if funcionario_id:
        fields["Funcion_x00e1_rio_x0028_s_x0029_LookupId"] = funcionario_id
    return graph.add(LIST_REQUISITOS, fields)


def seed_movimentacao(graph, requisito_id, descricao="Andamento", funcionario_id=None, created="auto"):
    fields = {"Title": descricao, "RequisitoLookupId": requisito_id}
    if funcionario_id:
        fields["Funcion_x00e1_rioLookupId"] = funcionario_id
    return graph.add(LIST_MOVIMENTACOES, fields, created=created)
