"""
Setor Blueprint — CRUD for sectors and their members.

Endpoints:
    GET    /api/v1/setores                   — List (q, sort, order)
    POST   /api/v1/setores                   — Create
    GET    /api/v1/setores/<id>              — Detail
    PUT    /api/v1/setores/<id>              — Update
    DELETE /api/v1/setores/<id>              — Delete
    GET    /api/v1/setores/<id>/funcionarios — Funcionários assigned to it
"""

from flask import Blueprint, jsonify

from sigreq.blueprints import get_json_body, list_response, require_fields
from sigreq.services import setor_service
from sigreq.utils.errors import not_found

setor_bp = Blueprint("setor", __name__, url_prefix="/api/v1")


@setor_bp.route("/setores", methods=["GET"])
def list_setores():
    records = [s.to_dict() for s in setor_service.list_setores()]
    return list_response(
        records,
        search_fields=("nome", "descricao"),
        sortable=("nome", "descricao", "totalFuncionarios"),
    )


@setor_bp.route("/setores", methods=["POST"])
def create_setor():
    data = get_json_body()
    err = require_fields(data, "nome")
    if err:
        return err
    setor = setor_service.create_setor(data)
    return jsonify(setor.to_dict()), 201


@setor_bp.route("/setores/<setor_id>", methods=["GET"])
def get_setor(setor_id):
    setor = setor_service.get_setor_by_id(setor_id)
    if setor is None:
        return not_found("Setor")
    return jsonify(setor.to_dict())


@setor_bp.route("/setores/<setor_id>", methods=["PUT"])
def update_setor(setor_id):
    data = get_json_body()
    err = require_fields(data, "nome", partial=True)
    if err:
        return err
    setor = setor_service.update_setor(setor_id, data)
    return jsonify(setor.to_dict())


@setor_bp.route("/setores/<setor_id>", methods=["DELETE"])
def delete_setor(setor_id):
    if not setor_service.delete_setor(setor_id):
        return not_found("Setor")
    return jsonify({"message": "Setor excluído"}), 200


@setor_bp.route("/setores/<setor_id>/funcionarios", methods=["GET"])
def list_setor_funcionarios(setor_id):
    if setor_service.get_setor_by_id(setor_id) is None:
        return not_found("Setor")
    items = setor_service.list_funcionarios_por_setor(setor_id)
    return jsonify({"items": [f.to_dict() for f in items], "total": len(items)})
