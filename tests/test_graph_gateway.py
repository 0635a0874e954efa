"""Unit tests for sigreq.integrations.graph_gateway.

All HTTP goes to the FakeGraph session installed by the ``graph`` fixture,
so URLs, paging and status handling are exercised without a network.
"""

import pytest
import requests

from conftest import LIST_SETORES, SITE_URL
from sigreq.core.exceptions import GraphError
from sigreq.integrations.graph_gateway import PREFER_NON_INDEXED, graph_gateway


def test_item_url_quotes_list_name():
    assert graph_gateway.item_url("Lista de Funcionários", 7) == (
        f"{SITE_URL}/lists/Lista%20de%20Funcion%C3%A1rios/items/7"
    )
    assert graph_gateway.list_url("A/B") == f"{SITE_URL}/lists/A%2FB"


def test_request_sends_bearer_token(graph):
    graph_gateway.list_items(LIST_SETORES, error_message="x")
    _, _, params, headers, _ = graph.calls[0]
    assert headers["Authorization"] == "Bearer test-token"
    assert params == {"expand": "fields", "$top": 2}


def test_list_items_follows_next_link(graph):
    for n in range(5):
        graph.add(LIST_SETORES, {"Title": f"S{n}"})

    items = graph_gateway.list_items(LIST_SETORES, error_message="x")

    assert [i["fields"]["Title"] for i in items] == ["S0", "S1", "S2", "S3", "S4"]
    # page size 2 in TestingConfig → 3 pages
    assert len(graph.requests_to(LIST_SETORES, "GET")) == 3
    # follow-up pages reuse the nextLink query string untouched
    assert graph.calls[1][2] is None


def test_list_items_stops_at_max_items(app, graph):
    for n in range(7):
        graph.add(LIST_SETORES, {"Title": f"S{n}"})
    app.config["LIST_MAX_ITEMS"] = 3
    try:
        items = graph_gateway.list_items(LIST_SETORES, error_message="x")
    finally:
        app.config["LIST_MAX_ITEMS"] = 50
    assert len(items) == 3
    assert len(graph.requests_to(LIST_SETORES, "GET")) == 2


def test_list_items_passes_extra_headers(graph):
    graph_gateway.list_items(LIST_SETORES, error_message="x", headers=PREFER_NON_INDEXED)
    assert graph.calls[0][3]["Prefer"] == "HonorNonIndexedQueriesWarningMayFailRandomly"


def test_non_2xx_raises_graph_error_with_payload(graph):
    graph.fail(LIST_SETORES, status=500, body='{"error": {"message": "Server busy"}}')

    with pytest.raises(GraphError) as exc_info:
        graph_gateway.list_items(LIST_SETORES, error_message="Erro ao obter setores")

    err = exc_info.value
    assert err.status_code == 500
    assert err.message == "Erro ao obter setores"
    assert "Server busy" in err.payload
    assert str(err).startswith("Erro ao obter setores: ")


def test_get_item_returns_none_on_404(graph):
    assert graph_gateway.get_item(LIST_SETORES, "999", error_message="x") is None


def test_get_item_raises_on_other_errors(graph):
    graph.fail(LIST_SETORES, status=403, method="GET")
    with pytest.raises(GraphError) as exc_info:
        graph_gateway.get_item(LIST_SETORES, "1", error_message="x")
    assert exc_info.value.status_code == 403


def test_create_update_delete_round_trip(graph):
    created = graph_gateway.create_item(LIST_SETORES, {"Title": "RH"}, error_message="x")
    item_id = created["id"]
    assert graph.calls[-1][4] == {"fields": {"Title": "RH"}}

    assert graph_gateway.update_item(LIST_SETORES, item_id, {"Title": "Pessoas"}, error_message="x")
    assert graph.fields(LIST_SETORES, item_id)["Title"] == "Pessoas"

    assert graph_gateway.delete_item(LIST_SETORES, item_id, error_message="x") is True
    assert graph_gateway.delete_item(LIST_SETORES, item_id, error_message="x") is False
    assert graph_gateway.update_item(LIST_SETORES, item_id, {"Title": "?"}, error_message="x") is False


def test_401_forces_one_token_renewal(graph):
    seen = []

    def provider(force_refresh=False):
        seen.append(force_refresh)
        return "fresh" if force_refresh else "stale"

    graph.rejected_tokens.add("stale")
    graph_gateway.token_provider = provider

    graph_gateway.list_items(LIST_SETORES, error_message="x")

    assert seen == [False, True]
    assert [c[3]["Authorization"] for c in graph.calls] == ["Bearer stale", "Bearer fresh"]


def test_second_401_is_not_retried(graph):
    graph.rejected_tokens.update({"stale", "fresh"})
    graph_gateway.token_provider = lambda force_refresh=False: "fresh" if force_refresh else "stale"

    with pytest.raises(GraphError) as exc_info:
        graph_gateway.list_items(LIST_SETORES, error_message="x")

    assert exc_info.value.status_code == 401
    assert len(graph.calls) == 2


def test_network_errors_become_graph_errors(graph):
    graph.network_error = requests.ConnectionError("connection refused")
    with pytest.raises(GraphError) as exc_info:
        graph_gateway.get_item(LIST_SETORES, "1", error_message="Erro ao obter setor")
    assert exc_info.value.status_code is None
    assert "connection refused" in exc_info.value.payload


def test_timeouts_become_graph_errors(graph):
    graph.network_error = requests.Timeout()
    with pytest.raises(GraphError) as exc_info:
        graph_gateway.list_items(LIST_SETORES, error_message="x")
    assert "timed out" in exc_info.value.payload


def test_get_list_and_get_lists(graph):
    graph.columns[LIST_SETORES] = [{"name": "Title"}]
    assert graph_gateway.get_list(LIST_SETORES)["columns"] == [{"name": "Title"}]
    assert graph_gateway.get_list("Inexistente") is None
    names = [entry["displayName"] for entry in graph_gateway.get_lists()["value"]]
    assert LIST_SETORES in names
