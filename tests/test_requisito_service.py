"""Requisito service: mapping, validation and funcionarioNome resolution."""

import pytest

from conftest import LIST_FUNCIONARIOS, LIST_REQUISITOS, seed_funcionario, seed_requisito
from sigreq.core.exceptions import GraphError, NotFoundError, ValidationError
from sigreq.models.requisito import SEM_RESPONSAVEL
from sigreq.services import requisito_service


def test_list_resolves_funcionario_names(graph):
    ana = seed_funcionario(graph, "Ana")
    seed_requisito(graph, "REQ-1", funcionario_id=ana)
    seed_requisito(graph, "REQ-2")
    seed_requisito(graph, "REQ-3", funcionario_id="999")

    result = requisito_service.list_requisitos()

    assert [(r.codigo, r.funcionario_nome) for r in result] == [
        ("REQ-1", "Ana"),
        ("REQ-2", SEM_RESPONSAVEL),
        ("REQ-3", SEM_RESPONSAVEL),
    ]
    assert len(graph.requests_to(LIST_FUNCIONARIOS, "GET")) == 1


def test_list_ignores_stored_name_column(graph):
    ana = seed_funcionario(graph, "Ana Souza")
    rid = seed_requisito(graph, funcionario_id=ana)
    graph.fields(LIST_REQUISITOS, rid)["Funcion_x00e1_rio_x0028_s_x0029_"] = "Ana (nome antigo)"

    assert requisito_service.list_requisitos()[0].funcionario_nome == "Ana Souza"


def test_list_degrades_names_when_funcionarios_unreadable(graph):
    seed_requisito(graph, funcionario_id="1")
    graph.fail(LIST_FUNCIONARIOS, status=500)

    result = requisito_service.list_requisitos()

    assert result[0].funcionario_id == "1"
    assert result[0].funcionario_nome == SEM_RESPONSAVEL


def test_list_fails_when_primary_list_fails(graph):
    seed_funcionario(graph, "Ana")
    graph.fail(LIST_REQUISITOS, status=502)
    with pytest.raises(GraphError) as exc_info:
        requisito_service.list_requisitos()
    assert exc_info.value.message == "Erro ao obter requisitos"


def test_data_criacao_formatted_in_display_timezone(graph):
    graph.add(LIST_REQUISITOS, {"Title": "REQ-1"}, created="2024-03-01T15:30:00Z")
    assert requisito_service.list_requisitos()[0].data_criacao == "01/03/2024 12:30"


def test_get_by_id(graph):
    ana = seed_funcionario(graph, "Ana")
    rid = seed_requisito(graph, "REQ-7", status="Andamento", funcionario_id=ana)

    requisito = requisito_service.get_requisito_by_id(rid)

    assert requisito.codigo == "REQ-7"
    assert requisito.status == "Andamento"
    assert requisito.funcionario_nome == "Ana"
    assert requisito_service.get_requisito_by_id("404") is None


def test_create_applies_defaults(graph):
    requisito = requisito_service.create_requisito({"codigo": "REQ-10", "descricao": "Nova tela"})

    fields = graph.fields(LIST_REQUISITOS, requisito.id)
    assert fields["Title"] == "REQ-10"
    assert fields["Descri_x00e7__x00e3_o"] == "Nova tela"
    assert fields["Descri_x00e7__x00e3_ocompleta"] == ""
    assert fields["Status"] == "Cadastrada"
    assert fields["Situa_x00e7__x00e3_o"] == "Ativa"
    assert requisito.funcionario_nome == SEM_RESPONSAVEL


@pytest.mark.parametrize("data, field", [
    ({"status": "Concluída"}, "status"),
    ({"situacao": "Arquivada"}, "situacao"),
])
def test_create_validates_enumerations(graph, data, field):
    with pytest.raises(ValidationError) as exc_info:
        requisito_service.create_requisito({"codigo": "REQ-1", "descricao": "x", **data})
    assert field in exc_info.value.details
    assert graph.requests_to(LIST_REQUISITOS, "POST") == []


def test_update(graph):
    ana = seed_funcionario(graph, "Ana")
    rid = seed_requisito(graph)

    updated = requisito_service.update_requisito(rid, {"status": "Realizada", "funcionarioId": ana})

    assert updated.status == "Realizada"
    assert updated.funcionario_nome == "Ana"
    assert graph.fields(LIST_REQUISITOS, rid)["Funcion_x00e1_rio_x0028_s_x0029_LookupId"] == ana


def test_update_validates_and_reports_missing(graph):
    rid = seed_requisito(graph)
    with pytest.raises(ValidationError):
        requisito_service.update_requisito(rid, {"situacao": "Talvez"})
    with pytest.raises(NotFoundError):
        requisito_service.update_requisito("404", {"status": "Realizada"})


def test_update_surfaces_remote_errors(graph):
    rid = seed_requisito(graph)
    graph.fail(LIST_REQUISITOS, status=400, body='{"error": "bad field"}', method="PATCH")
    with pytest.raises(GraphError) as exc_info:
        requisito_service.update_requisito(rid, {"codigo": "REQ-X"})
    assert exc_info.value.payload == '{"error": "bad field"}'


def test_delete(graph):
    rid = seed_requisito(graph)
    assert requisito_service.delete_requisito(rid) is True
    assert requisito_service.delete_requisito(rid) is False


def test_create_then_get_by_id_round_trips(graph):
    ana = seed_funcionario(graph, "Ana")
    created = requisito_service.create_requisito({
        "codigo": "REQ-20", "descricao": "Relatório", "descricaoCompleta": "Relatório mensal",
        "status": "Andamento", "situacao": "Ativa", "funcionarioId": ana,
    })
    assert requisito_service.get_requisito_by_id(created.id) == created
