"""
Movimentacao Service — activity notes in the "Lista de Movimentação" list.

Graph's $filter/$orderby on this list's lookup column fail intermittently
(non-indexed column), so ``list_movimentacoes_by_requisito_id`` reads the
whole list and filters and sorts in memory. Callers only see the function
signature; the workaround can be dropped once the column is indexed.
"""

import logging
from datetime import datetime, timezone

from sigreq.core.exceptions import NotFoundError
from sigreq.integrations.graph_gateway import PREFER_NON_INDEXED, graph_gateway
from sigreq.models.funcionario import FUNCIONARIO_SCHEMA
from sigreq.models.movimentacao import MOVIMENTACAO_SCHEMA, Movimentacao
from sigreq.services.fields import lookup_id, parse_created
from sigreq.services.lookups import fetch_name, fetch_name_map

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _fields(item: dict) -> dict:
    return item.get("fields") or {}


def _funcionario_id(item: dict) -> str | None:
    return lookup_id(MOVIMENTACAO_SCHEMA.get(_fields(item), "funcionarioId"))


def _map_all(items: list[dict]) -> list[Movimentacao]:
    funcionarios = fetch_name_map(FUNCIONARIO_SCHEMA, what="funcionários") if items else {}
    return [
        Movimentacao.from_item(item, funcionario_nome=funcionarios.get(_funcionario_id(item) or ""))
        for item in items
    ]


def _from_item_resolving_funcionario(item: dict) -> Movimentacao:
    nome = fetch_name(FUNCIONARIO_SCHEMA, _funcionario_id(item), what="funcionário")
    return Movimentacao.from_item(item, funcionario_nome=nome)


def _fetch_all() -> list[dict]:
    return graph_gateway.list_items(
        MOVIMENTACAO_SCHEMA.list_name,
        error_message="Erro ao obter movimentações",
        headers=PREFER_NON_INDEXED,
    )


def list_movimentacoes() -> list[Movimentacao]:
    return _map_all(_fetch_all())


def list_movimentacoes_by_requisito_id(requisito_id) -> list[Movimentacao]:
    """Movimentações of one requisito, newest first (undated ones last)."""
    wanted = str(requisito_id)
    items = [
        item for item in _fetch_all()
        if lookup_id(MOVIMENTACAO_SCHEMA.get(_fields(item), "requisitoId")) == wanted
    ]

    def _created(item):
        created = parse_created(_fields(item).get("Created"))
        return (created is not None, created or _EPOCH)

    items.sort(key=_created, reverse=True)
    logger.debug("Requisito %s has %d movimentacoes", wanted, len(items))
    return _map_all(items)


def get_movimentacao_by_id(movimentacao_id) -> Movimentacao | None:
    item = graph_gateway.get_item(
        MOVIMENTACAO_SCHEMA.list_name, movimentacao_id, error_message="Erro ao obter movimentação",
    )
    if item is None:
        return None
    return _from_item_resolving_funcionario(item)


def create_movimentacao(data: dict) -> Movimentacao:
    created = graph_gateway.create_item(
        MOVIMENTACAO_SCHEMA.list_name,
        MOVIMENTACAO_SCHEMA.to_fields(data),
        error_message="Erro ao adicionar movimentação",
    )
    movimentacao = _from_item_resolving_funcionario(created)
    logger.info(
        "Movimentacao created id=%s requisito=%s", movimentacao.id, movimentacao.requisito_id,
    )
    return movimentacao


def update_movimentacao(movimentacao_id, data: dict) -> Movimentacao:
    found = graph_gateway.update_item(
        MOVIMENTACAO_SCHEMA.list_name,
        movimentacao_id,
        MOVIMENTACAO_SCHEMA.to_fields(data),
        error_message="Erro ao atualizar movimentação",
    )
    if not found:
        raise NotFoundError(resource="Movimentacao", resource_id=movimentacao_id)

    movimentacao = get_movimentacao_by_id(movimentacao_id)
    if movimentacao is None:
        raise NotFoundError(resource="Movimentacao", resource_id=movimentacao_id)
    return movimentacao


def delete_movimentacao(movimentacao_id) -> bool:
    deleted = graph_gateway.delete_item(
        MOVIMENTACAO_SCHEMA.list_name, movimentacao_id, error_message="Erro ao excluir movimentação",
    )
    if deleted:
        logger.info("Movimentacao deleted id=%s", movimentacao_id)
    return deleted
