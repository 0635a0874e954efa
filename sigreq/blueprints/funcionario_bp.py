"""
Funcionario Blueprint — CRUD for employees.

Endpoints:
    GET    /api/v1/funcionarios        — List (status, setor_id, q, sort, order)
    POST   /api/v1/funcionarios        — Create
    GET    /api/v1/funcionarios/<id>   — Detail
    PUT    /api/v1/funcionarios/<id>   — Update
    DELETE /api/v1/funcionarios/<id>   — Delete
"""

from flask import Blueprint, jsonify, request

from sigreq.blueprints import get_json_body, list_response, require_fields
from sigreq.services import funcionario_service
from sigreq.utils.errors import not_found

funcionario_bp = Blueprint("funcionario", __name__, url_prefix="/api/v1")

SEARCH_FIELDS = ("nome", "email", "telefone", "setorNome")
SORTABLE = ("nome", "email", "status", "setorNome")


@funcionario_bp.route("/funcionarios", methods=["GET"])
def list_funcionarios():
    records = [f.to_dict() for f in funcionario_service.list_funcionarios()]
    return list_response(
        records,
        equals={
            "status": request.args.get("status"),
            "setorId": request.args.get("setor_id"),
        },
        search_fields=SEARCH_FIELDS,
        sortable=SORTABLE,
    )


@funcionario_bp.route("/funcionarios", methods=["POST"])
def create_funcionario():
    data = get_json_body()
    err = require_fields(data, "nome")
    if err:
        return err
    funcionario = funcionario_service.create_funcionario(data)
    return jsonify(funcionario.to_dict()), 201


@funcionario_bp.route("/funcionarios/<funcionario_id>", methods=["GET"])
def get_funcionario(funcionario_id):
    funcionario = funcionario_service.get_funcionario_by_id(funcionario_id)
    if funcionario is None:
        return not_found("Funcionário")
    return jsonify(funcionario.to_dict())


@funcionario_bp.route("/funcionarios/<funcionario_id>", methods=["PUT"])
def update_funcionario(funcionario_id):
    data = get_json_body()
    err = require_fields(data, "nome", partial=True)
    if err:
        return err
    funcionario = funcionario_service.update_funcionario(funcionario_id, data)
    return jsonify(funcionario.to_dict())


@funcionario_bp.route("/funcionarios/<funcionario_id>", methods=["DELETE"])
def delete_funcionario(funcionario_id):
    if not funcionario_service.delete_funcionario(funcionario_id):
        return not_found("Funcionário")
    return jsonify({"message": "Funcionário excluído"}), 200
