"""Requisito endpoints, including nested movimentações."""

from conftest import (
    LIST_MOVIMENTACOES,
    LIST_REQUISITOS,
    seed_funcionario,
    seed_movimentacao,
    seed_requisito,
)


def _seed(graph):
    ana = seed_funcionario(graph, "Ana")
    bruno = seed_funcionario(graph, "Bruno")
    seed_requisito(graph, "REQ-1", status="Cadastrada", funcionario_id=ana, descricao="Tela de login")
    seed_requisito(graph, "REQ-2", status="Andamento", funcionario_id=bruno, descricao="Relatório mensal")
    seed_requisito(graph, "REQ-3", status="Andamento", situacao="Inativa", descricao="Integração")
    return ana, bruno


class TestListRequisitos:
    def test_list_all(self, client, graph):
        _seed(graph)
        res = client.get("/api/v1/requisitos")
        assert res.status_code == 200
        body = res.get_json()
        assert body["total"] == 3
        assert [r["codigo"] for r in body["items"]] == ["REQ-1", "REQ-2", "REQ-3"]
        assert body["items"][0]["funcionarioNome"] == "Ana"
        assert body["items"][2]["funcionarioNome"] == "Sem responsável"

    def test_filter_by_status_and_situacao(self, client, graph):
        _seed(graph)
        res = client.get("/api/v1/requisitos?status=Andamento&situacao=Ativa")
        assert [r["codigo"] for r in res.get_json()["items"]] == ["REQ-2"]

    def test_filter_by_funcionario(self, client, graph):
        ana, _ = _seed(graph)
        res = client.get(f"/api/v1/requisitos?funcionario_id={ana}")
        assert [r["codigo"] for r in res.get_json()["items"]] == ["REQ-1"]

    def test_search_is_accent_insensitive(self, client, graph):
        _seed(graph)
        res = client.get("/api/v1/requisitos?q=relatorio")
        assert [r["codigo"] for r in res.get_json()["items"]] == ["REQ-2"]
        res = client.get("/api/v1/requisitos?q=bruno")
        assert [r["codigo"] for r in res.get_json()["items"]] == ["REQ-2"]

    def test_sort_desc(self, client, graph):
        _seed(graph)
        res = client.get("/api/v1/requisitos?sort=codigo&order=desc")
        assert [r["codigo"] for r in res.get_json()["items"]] == ["REQ-3", "REQ-2", "REQ-1"]

    def test_invalid_sort_is_422(self, client, graph):
        res = client.get("/api/v1/requisitos?sort=senha")
        assert res.status_code == 422
        assert res.get_json()["code"] == "ERR_VALIDATION_RULE"

    def test_remote_failure_is_502_with_payload(self, client, graph):
        graph.fail(LIST_REQUISITOS, status=500, body='{"error": {"message": "Server busy"}}')
        res = client.get("/api/v1/requisitos")
        assert res.status_code == 502
        body = res.get_json()
        assert body["error"] == "Erro ao comunicar com o SharePoint"
        assert body["code"] == "ERR_REMOTE"
        assert "Server busy" in body["details"]
        assert body["operation"] == "Erro ao obter requisitos"


class TestRequisitoCrud:
    def test_create(self, client, graph):
        ana = seed_funcionario(graph, "Ana")
        res = client.post("/api/v1/requisitos", json={
            "codigo": "REQ-9", "descricao": "Nova tela", "funcionarioId": ana,
        })
        assert res.status_code == 201
        body = res.get_json()
        assert body["status"] == "Cadastrada"
        assert body["situacao"] == "Ativa"
        assert body["funcionarioNome"] == "Ana"
        assert graph.fields(LIST_REQUISITOS, body["id"])["Title"] == "REQ-9"

    def test_create_requires_codigo_and_descricao(self, client, graph):
        res = client.post("/api/v1/requisitos", json={"descricao": "x"})
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_REQUIRED"
        res = client.post("/api/v1/requisitos", json={"codigo": "REQ-1", "descricao": "   "})
        assert res.status_code == 400
        assert graph.requests_to(LIST_REQUISITOS, "POST") == []

    def test_create_invalid_status_is_422(self, client, graph):
        res = client.post("/api/v1/requisitos", json={"codigo": "R", "descricao": "d", "status": "Feito"})
        assert res.status_code == 422
        assert "status" in res.get_json()["details"]

    def test_create_rejects_non_json(self, client, graph):
        res = client.post("/api/v1/requisitos", data="codigo=R", content_type="text/plain")
        assert res.status_code == 415

    def test_get(self, client, graph):
        rid = seed_requisito(graph, "REQ-1")
        res = client.get(f"/api/v1/requisitos/{rid}")
        assert res.status_code == 200
        assert res.get_json()["codigo"] == "REQ-1"

    def test_get_missing_is_404(self, client, graph):
        res = client.get("/api/v1/requisitos/999")
        assert res.status_code == 404
        assert res.get_json()["code"] == "ERR_NOT_FOUND"

    def test_update(self, client, graph):
        rid = seed_requisito(graph, "REQ-1")
        res = client.put(f"/api/v1/requisitos/{rid}", json={"status": "Realizada"})
        assert res.status_code == 200
        assert res.get_json()["status"] == "Realizada"
        assert res.get_json()["codigo"] == "REQ-1"

    def test_update_cannot_blank_required_field(self, client, graph):
        rid = seed_requisito(graph, "REQ-1")
        res = client.put(f"/api/v1/requisitos/{rid}", json={"codigo": ""})
        assert res.status_code == 400

    def test_update_missing_is_404(self, client, graph):
        res = client.put("/api/v1/requisitos/999", json={"status": "Realizada"})
        assert res.status_code == 404
        assert res.get_json()["resource"] == "Requisito"

    def test_delete(self, client, graph):
        rid = seed_requisito(graph, "REQ-1")
        assert client.delete(f"/api/v1/requisitos/{rid}").status_code == 200
        assert client.delete(f"/api/v1/requisitos/{rid}").status_code == 404


class TestRequisitoMovimentacoes:
    def test_list_newest_first(self, client, graph):
        rid = seed_requisito(graph)
        other = seed_requisito(graph, "REQ-2")
        seed_movimentacao(graph, rid, "primeira", created="2024-01-01T10:00:00Z")
        seed_movimentacao(graph, other, "de outro", created="2024-01-02T10:00:00Z")
        seed_movimentacao(graph, rid, "segunda", created="2024-01-03T10:00:00Z")

        res = client.get(f"/api/v1/requisitos/{rid}/movimentacoes")

        assert res.status_code == 200
        body = res.get_json()
        assert body["total"] == 2
        assert [m["descricao"] for m in body["items"]] == ["segunda", "primeira"]
        assert body["items"][0]["dataCriacao"] == "03/01/2024 07:00"

    def test_add(self, client, graph):
        ana = seed_funcionario(graph, "Ana")
        rid = seed_requisito(graph)

        res = client.post(f"/api/v1/requisitos/{rid}/movimentacoes",
                          json={"descricao": "Enviado para revisão", "funcionarioId": ana})

        assert res.status_code == 201
        body = res.get_json()
        assert body["requisitoId"] == rid
        assert body["funcionarioNome"] == "Ana"
        assert graph.fields(LIST_MOVIMENTACOES, body["id"])["RequisitoLookupId"] == rid

    def test_add_to_missing_requisito_is_404(self, client, graph):
        res = client.post("/api/v1/requisitos/999/movimentacoes", json={"descricao": "x"})
        assert res.status_code == 404
        assert graph.requests_to(LIST_MOVIMENTACOES, "POST") == []

    def test_add_requires_descricao(self, client, graph):
        rid = seed_requisito(graph)
        res = client.post(f"/api/v1/requisitos/{rid}/movimentacoes", json={})
        assert res.status_code == 400
