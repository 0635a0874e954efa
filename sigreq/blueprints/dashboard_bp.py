"""
Dashboard Blueprint — headline counts for the console home.

Endpoints:
    GET /api/v1/dashboard
"""

from flask import Blueprint, jsonify

from sigreq.services.dashboard_service import get_dashboard

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/v1")


@dashboard_bp.route("/dashboard", methods=["GET"])
def dashboard():
    return jsonify(get_dashboard())
