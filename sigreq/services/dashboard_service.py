"""
Dashboard Service — headline counts for the console home page.

The three list reads are independent, so they run concurrently on a small
thread pool and are joined before aggregation. Any failed read fails the
whole dashboard; partial numbers are never returned.
"""

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

from flask import copy_current_request_context, current_app, has_request_context

from sigreq.integrations.graph_gateway import graph_gateway
from sigreq.models.funcionario import FUNCIONARIO_SCHEMA, Funcionario
from sigreq.models.requisito import REQUISITO_SCHEMA, REQUISITO_SITUACOES, REQUISITO_STATUSES
from sigreq.models.setor import SETOR_SCHEMA

logger = logging.getLogger(__name__)


def _bind_context(fn):
    """Carry the Flask request (or app) context into a worker thread."""
    if has_request_context():
        return copy_current_request_context(fn)
    app = current_app._get_current_object()

    def run():
        with app.app_context():
            return fn()
    return run


def _reader(schema, what):
    def read():
        return graph_gateway.list_items(schema.list_name, error_message=f"Erro ao obter {what}")
    return _bind_context(read)


def get_dashboard() -> dict:
    """Totals and breakdowns of requisitos, funcionarios and setores."""
    # Renew the token once here so the workers don't race on the session
    graph_gateway.token_provider()

    with ThreadPoolExecutor(max_workers=3, thread_name_prefix="dashboard") as pool:
        f_requisitos = pool.submit(_reader(REQUISITO_SCHEMA, "requisitos"))
        f_funcionarios = pool.submit(_reader(FUNCIONARIO_SCHEMA, "funcionários"))
        f_setores = pool.submit(_reader(SETOR_SCHEMA, "setores"))
        requisitos = f_requisitos.result()
        funcionarios = f_funcionarios.result()
        setores = f_setores.result()

    por_status = Counter(
        REQUISITO_SCHEMA.get(item.get("fields") or {}, "status", "Cadastrada") for item in requisitos
    )
    por_situacao = Counter(
        REQUISITO_SCHEMA.get(item.get("fields") or {}, "situacao", "Ativa") for item in requisitos
    )
    ativos = sum(1 for item in funcionarios if Funcionario.from_item(item).status == "Ativo")

    logger.debug(
        "Dashboard: %d requisitos, %d funcionarios, %d setores",
        len(requisitos), len(funcionarios), len(setores),
    )
    return {
        "requisitos": {
            "total": len(requisitos),
            "porStatus": {s: por_status.get(s, 0) for s in REQUISITO_STATUSES},
            "porSituacao": {s: por_situacao.get(s, 0) for s in REQUISITO_SITUACOES},
        },
        "funcionarios": {
            "total": len(funcionarios),
            "ativos": ativos,
            "inativos": len(funcionarios) - ativos,
        },
        "setores": {
            "total": len(setores),
        },
    }
