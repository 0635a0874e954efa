"""
Setor Service — sectors in the "Lista de Setores" list.

``totalFuncionarios`` is never stored: every read recounts the Funcionários
whose SetorLookupId points at the sector. When the Funcionários list cannot
be read the counts degrade to 0.
"""

import logging
from collections import Counter

from sigreq.core.exceptions import NotFoundError
from sigreq.integrations.graph_gateway import graph_gateway
from sigreq.models.funcionario import FUNCIONARIO_SCHEMA, Funcionario
from sigreq.models.setor import SETOR_SCHEMA, Setor
from sigreq.services import funcionario_service
from sigreq.services.fields import lookup_id
from sigreq.services.lookups import fetch_items_or_none

logger = logging.getLogger(__name__)


def _count_funcionarios_por_setor() -> Counter:
    items = fetch_items_or_none(FUNCIONARIO_SCHEMA, what="funcionários")
    if items is None:
        return Counter()
    return Counter(
        lookup_id(FUNCIONARIO_SCHEMA.get(item.get("fields") or {}, "setorId"))
        for item in items
    )


def list_setores() -> list[Setor]:
    items = graph_gateway.list_items(SETOR_SCHEMA.list_name, error_message="Erro ao obter setores")
    counts = _count_funcionarios_por_setor()
    return [
        Setor.from_item(item, total_funcionarios=counts.get(str(item["id"]), 0))
        for item in items
    ]


def get_setor_by_id(setor_id) -> Setor | None:
    item = graph_gateway.get_item(SETOR_SCHEMA.list_name, setor_id, error_message="Erro ao obter setor")
    if item is None:
        return None
    counts = _count_funcionarios_por_setor()
    return Setor.from_item(item, total_funcionarios=counts.get(str(item["id"]), 0))


def create_setor(data: dict) -> Setor:
    created = graph_gateway.create_item(
        SETOR_SCHEMA.list_name,
        SETOR_SCHEMA.to_fields(data),
        error_message="Erro ao adicionar setor",
    )
    counts = _count_funcionarios_por_setor()
    setor = Setor.from_item(created, total_funcionarios=counts.get(str(created["id"]), 0))
    logger.info("Setor created id=%s", setor.id)
    return setor


def update_setor(setor_id, data: dict) -> Setor:
    found = graph_gateway.update_item(
        SETOR_SCHEMA.list_name,
        setor_id,
        SETOR_SCHEMA.to_fields(data),
        error_message="Erro ao atualizar setor",
    )
    if not found:
        raise NotFoundError(resource="Setor", resource_id=setor_id)

    setor = get_setor_by_id(setor_id)
    if setor is None:
        raise NotFoundError(resource="Setor", resource_id=setor_id)
    return setor


def delete_setor(setor_id) -> bool:
    """Delete a sector. Funcionários still assigned to it keep the dangling id."""
    deleted = graph_gateway.delete_item(
        SETOR_SCHEMA.list_name, setor_id, error_message="Erro ao excluir setor",
    )
    if deleted:
        logger.info("Setor deleted id=%s", setor_id)
    return deleted


def list_funcionarios_por_setor(setor_id) -> list[Funcionario]:
    setor_id = str(setor_id)
    return [f for f in funcionario_service.list_funcionarios() if f.setor_id == setor_id]
