"""
Requisito Blueprint — CRUD for requisitos and their movimentações.

Endpoints:
    GET    /api/v1/requisitos                         — List (status, situacao, funcionario_id, q, sort, order)
    POST   /api/v1/requisitos                         — Create
    GET    /api/v1/requisitos/<id>                    — Detail
    PUT    /api/v1/requisitos/<id>                    — Update
    DELETE /api/v1/requisitos/<id>                    — Delete
    GET    /api/v1/requisitos/<id>/movimentacoes      — Movimentações, newest first
    POST   /api/v1/requisitos/<id>/movimentacoes      — Add a movimentação
"""

import logging

from flask import Blueprint, jsonify, request

from sigreq.blueprints import get_json_body, list_response, require_fields
from sigreq.services import movimentacao_service, requisito_service
from sigreq.utils.errors import not_found

logger = logging.getLogger(__name__)

requisito_bp = Blueprint("requisito", __name__, url_prefix="/api/v1")

SEARCH_FIELDS = ("codigo", "descricao", "descricaoCompleta", "funcionarioNome")
SORTABLE = ("codigo", "descricao", "status", "situacao", "funcionarioNome", "dataCriacao")


@requisito_bp.route("/requisitos", methods=["GET"])
def list_requisitos():
    records = [r.to_dict() for r in requisito_service.list_requisitos()]
    return list_response(
        records,
        equals={
            "status": request.args.get("status"),
            "situacao": request.args.get("situacao"),
            "funcionarioId": request.args.get("funcionario_id"),
        },
        search_fields=SEARCH_FIELDS,
        sortable=SORTABLE,
    )


@requisito_bp.route("/requisitos", methods=["POST"])
def create_requisito():
    data = get_json_body()
    err = require_fields(data, "codigo", "descricao")
    if err:
        return err
    requisito = requisito_service.create_requisito(data)
    return jsonify(requisito.to_dict()), 201


@requisito_bp.route("/requisitos/<requisito_id>", methods=["GET"])
def get_requisito(requisito_id):
    requisito = requisito_service.get_requisito_by_id(requisito_id)
    if requisito is None:
        return not_found("Requisito")
    return jsonify(requisito.to_dict())


@requisito_bp.route("/requisitos/<requisito_id>", methods=["PUT"])
def update_requisito(requisito_id):
    data = get_json_body()
    err = require_fields(data, "codigo", "descricao", partial=True)
    if err:
        return err
    requisito = requisito_service.update_requisito(requisito_id, data)
    return jsonify(requisito.to_dict())


@requisito_bp.route("/requisitos/<requisito_id>", methods=["DELETE"])
def delete_requisito(requisito_id):
    if not requisito_service.delete_requisito(requisito_id):
        return not_found("Requisito")
    return jsonify({"message": "Requisito excluído"}), 200


# ── Movimentações of a requisito ─────────────────────────────────────────


@requisito_bp.route("/requisitos/<requisito_id>/movimentacoes", methods=["GET"])
def list_requisito_movimentacoes(requisito_id):
    items = movimentacao_service.list_movimentacoes_by_requisito_id(requisito_id)
    return jsonify({"items": [m.to_dict() for m in items], "total": len(items)})


@requisito_bp.route("/requisitos/<requisito_id>/movimentacoes", methods=["POST"])
def add_requisito_movimentacao(requisito_id):
    if requisito_service.get_requisito_by_id(requisito_id) is None:
        return not_found("Requisito")

    data = get_json_body()
    err = require_fields(data, "descricao")
    if err:
        return err
    data["requisitoId"] = requisito_id
    movimentacao = movimentacao_service.create_movimentacao(data)
    return jsonify(movimentacao.to_dict()), 201
