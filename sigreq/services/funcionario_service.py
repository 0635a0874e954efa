"""
Funcionario Service — employees in the "Lista de Funcionários" list.

Each employee optionally points at a Setor (SetorLookupId); ``setorNome`` is
resolved at read time from the Setores list and falls back to "Sem setor".
"""

import logging

from sigreq.core.exceptions import NotFoundError, ValidationError
from sigreq.integrations.graph_gateway import graph_gateway
from sigreq.models.funcionario import FUNCIONARIO_SCHEMA, FUNCIONARIO_STATUSES, Funcionario
from sigreq.models.setor import SETOR_SCHEMA
from sigreq.services.fields import lookup_id
from sigreq.services.lookups import fetch_name, fetch_name_map

logger = logging.getLogger(__name__)


def _validate(data: dict) -> None:
    status = data.get("status")
    if status is not None and status not in FUNCIONARIO_STATUSES:
        raise ValidationError(
            f"Status inválido: {status}",
            details={"status": f"deve ser um de {', '.join(FUNCIONARIO_STATUSES)}"},
        )


def _from_item_resolving_setor(item: dict) -> Funcionario:
    setor_id = lookup_id(FUNCIONARIO_SCHEMA.get(item.get("fields") or {}, "setorId"))
    setor_nome = fetch_name(SETOR_SCHEMA, setor_id, what="setor")
    return Funcionario.from_item(item, setor_nome=setor_nome)


def list_funcionarios() -> list[Funcionario]:
    """All employees with their setor names resolved from one Setores read."""
    items = graph_gateway.list_items(
        FUNCIONARIO_SCHEMA.list_name, error_message="Erro ao obter funcionários",
    )
    setores = fetch_name_map(SETOR_SCHEMA, what="setores")

    result = []
    for item in items:
        setor_id = lookup_id(FUNCIONARIO_SCHEMA.get(item.get("fields") or {}, "setorId"))
        result.append(Funcionario.from_item(item, setor_nome=setores.get(setor_id or "")))
    return result


def get_funcionario_by_id(funcionario_id) -> Funcionario | None:
    item = graph_gateway.get_item(
        FUNCIONARIO_SCHEMA.list_name, funcionario_id, error_message="Erro ao obter funcionário",
    )
    if item is None:
        return None
    return _from_item_resolving_setor(item)


def create_funcionario(data: dict) -> Funcionario:
    """Create an employee. ``status`` defaults to "Ativo"."""
    data = {"status": "Ativo", **data}
    _validate(data)
    created = graph_gateway.create_item(
        FUNCIONARIO_SCHEMA.list_name,
        FUNCIONARIO_SCHEMA.to_fields(data),
        error_message="Erro ao adicionar funcionário",
    )
    funcionario = _from_item_resolving_setor(created)
    logger.info("Funcionario created id=%s", funcionario.id)
    return funcionario


def update_funcionario(funcionario_id, data: dict) -> Funcionario:
    _validate(data)
    found = graph_gateway.update_item(
        FUNCIONARIO_SCHEMA.list_name,
        funcionario_id,
        FUNCIONARIO_SCHEMA.to_fields(data),
        error_message="Erro ao atualizar funcionário",
    )
    if not found:
        raise NotFoundError(resource="Funcionario", resource_id=funcionario_id)

    funcionario = get_funcionario_by_id(funcionario_id)
    if funcionario is None:
        raise NotFoundError(resource="Funcionario", resource_id=funcionario_id)
    return funcionario


def delete_funcionario(funcionario_id) -> bool:
    """Delete an employee. Setores and Requisitos still pointing at it are left as-is."""
    deleted = graph_gateway.delete_item(
        FUNCIONARIO_SCHEMA.list_name, funcionario_id, error_message="Erro ao excluir funcionário",
    )
    if deleted:
        logger.info("Funcionario deleted id=%s", funcionario_id)
    return deleted
