"""
Requisito Service — requirements in the "Lista de Requisitos" list.

The list also carries a denormalized employee-name column, but it goes stale
when the employee is renamed; ``funcionarioNome`` is always resolved from
the Funcionários list instead.
"""

import logging

from sigreq.core.exceptions import NotFoundError, ValidationError
from sigreq.integrations.graph_gateway import graph_gateway
from sigreq.models.funcionario import FUNCIONARIO_SCHEMA
from sigreq.models.requisito import (
    REQUISITO_SCHEMA,
    REQUISITO_SITUACOES,
    REQUISITO_STATUSES,
    Requisito,
)
from sigreq.services.fields import lookup_id
from sigreq.services.lookups import fetch_name, fetch_name_map

logger = logging.getLogger(__name__)


def _validate(data: dict) -> None:
    errors = {}
    status = data.get("status")
    if status is not None and status not in REQUISITO_STATUSES:
        errors["status"] = f"deve ser um de {', '.join(REQUISITO_STATUSES)}"
    situacao = data.get("situacao")
    if situacao is not None and situacao not in REQUISITO_SITUACOES:
        errors["situacao"] = f"deve ser um de {', '.join(REQUISITO_SITUACOES)}"
    if errors:
        raise ValidationError("Dados do requisito inválidos", details=errors)


def _funcionario_id(item: dict) -> str | None:
    return lookup_id(REQUISITO_SCHEMA.get(item.get("fields") or {}, "funcionarioId"))


def _from_item_resolving_funcionario(item: dict) -> Requisito:
    nome = fetch_name(FUNCIONARIO_SCHEMA, _funcionario_id(item), what="funcionário")
    return Requisito.from_item(item, funcionario_nome=nome)


def list_requisitos() -> list[Requisito]:
    items = graph_gateway.list_items(
        REQUISITO_SCHEMA.list_name, error_message="Erro ao obter requisitos",
    )
    funcionarios = fetch_name_map(FUNCIONARIO_SCHEMA, what="funcionários")
    return [
        Requisito.from_item(item, funcionario_nome=funcionarios.get(_funcionario_id(item) or ""))
        for item in items
    ]


def get_requisito_by_id(requisito_id) -> Requisito | None:
    item = graph_gateway.get_item(
        REQUISITO_SCHEMA.list_name, requisito_id, error_message="Erro ao obter requisito",
    )
    if item is None:
        return None
    return _from_item_resolving_funcionario(item)


def create_requisito(data: dict) -> Requisito:
    """Create a requirement. status/situacao default to Cadastrada/Ativa."""
    data = {"status": "Cadastrada", "situacao": "Ativa", "descricaoCompleta": "", **data}
    _validate(data)
    created = graph_gateway.create_item(
        REQUISITO_SCHEMA.list_name,
        REQUISITO_SCHEMA.to_fields(data),
        error_message="Erro ao adicionar requisito",
    )
    requisito = _from_item_resolving_funcionario(created)
    logger.info("Requisito created id=%s codigo=%s", requisito.id, requisito.codigo)
    return requisito


def update_requisito(requisito_id, data: dict) -> Requisito:
    _validate(data)
    found = graph_gateway.update_item(
        REQUISITO_SCHEMA.list_name,
        requisito_id,
        REQUISITO_SCHEMA.to_fields(data),
        error_message="Erro ao atualizar requisito",
    )
    if not found:
        raise NotFoundError(resource="Requisito", resource_id=requisito_id)

    requisito = get_requisito_by_id(requisito_id)
    if requisito is None:
        raise NotFoundError(resource="Requisito", resource_id=requisito_id)
    return requisito


def delete_requisito(requisito_id) -> bool:
    """Delete a requirement. Its Movimentações are not removed."""
    deleted = graph_gateway.delete_item(
        REQUISITO_SCHEMA.list_name, requisito_id, error_message="Erro ao excluir requisito",
    )
    if deleted:
        logger.info("Requisito deleted id=%s", requisito_id)
    return deleted
