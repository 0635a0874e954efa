"""
Debug Blueprint — raw SharePoint payloads for checking field mappings.

Endpoints:
    GET /api/v1/debug/lists                         — Lists of the site
    GET /api/v1/debug/lists/<name>                  — Every item of a list, raw
    GET /api/v1/debug/lists/<name>/columns          — Column definitions, with decoded names
    GET /api/v1/debug/lists/<name>/items/<item_id>  — One item, raw
"""

from flask import Blueprint, jsonify

from sigreq.services import debug_service
from sigreq.utils.errors import E, api_error, not_found

debug_bp = Blueprint("debug", __name__, url_prefix="/api/v1/debug")


@debug_bp.route("/lists", methods=["GET"])
def all_lists():
    return jsonify(debug_service.get_all_lists())


@debug_bp.route("/lists/<list_name>", methods=["GET"])
def list_raw(list_name):
    return jsonify(debug_service.get_list_raw(list_name))


@debug_bp.route("/lists/<list_name>/columns", methods=["GET"])
def list_columns(list_name):
    details = debug_service.get_list_columns(list_name)
    if details is None:
        return api_error(E.NOT_FOUND, f"Lista '{list_name}' não encontrada")
    return jsonify(details)


@debug_bp.route("/lists/<list_name>/items/<item_id>", methods=["GET"])
def item_raw(list_name, item_id):
    item = debug_service.get_item_raw(list_name, item_id)
    if item is None:
        return not_found("Item")
    return jsonify(item)
