"""
Movimentacao Blueprint — activity notes addressed by their own id.

Endpoints:
    GET    /api/v1/movimentacoes        — List all
    GET    /api/v1/movimentacoes/<id>   — Detail
    PUT    /api/v1/movimentacoes/<id>   — Update
    DELETE /api/v1/movimentacoes/<id>   — Delete

Creating one goes through POST /api/v1/requisitos/<id>/movimentacoes.
"""

from flask import Blueprint, jsonify, request

from sigreq.blueprints import get_json_body, list_response, require_fields
from sigreq.services import movimentacao_service
from sigreq.utils.errors import not_found

movimentacao_bp = Blueprint("movimentacao", __name__, url_prefix="/api/v1")


@movimentacao_bp.route("/movimentacoes", methods=["GET"])
def list_movimentacoes():
    records = [m.to_dict() for m in movimentacao_service.list_movimentacoes()]
    return list_response(
        records,
        equals={"requisitoId": request.args.get("requisito_id")},
        search_fields=("descricao", "funcionarioNome"),
        sortable=("descricao", "funcionarioNome", "dataCriacao"),
    )


@movimentacao_bp.route("/movimentacoes/<movimentacao_id>", methods=["GET"])
def get_movimentacao(movimentacao_id):
    movimentacao = movimentacao_service.get_movimentacao_by_id(movimentacao_id)
    if movimentacao is None:
        return not_found("Movimentação", feminine=True)
    return jsonify(movimentacao.to_dict())


@movimentacao_bp.route("/movimentacoes/<movimentacao_id>", methods=["PUT"])
def update_movimentacao(movimentacao_id):
    data = get_json_body()
    err = require_fields(data, "descricao", partial=True)
    if err:
        return err
    movimentacao = movimentacao_service.update_movimentacao(movimentacao_id, data)
    return jsonify(movimentacao.to_dict())


@movimentacao_bp.route("/movimentacoes/<movimentacao_id>", methods=["DELETE"])
def delete_movimentacao(movimentacao_id):
    if not movimentacao_service.delete_movimentacao(movimentacao_id):
        return not_found("Movimentação", feminine=True)
    return jsonify({"message": "Movimentação excluída"}), 200
