"""
Spreadsheet export endpoints.

    GET /api/v1/export/requisitos.xlsx
    GET /api/v1/export/funcionarios.xlsx
    GET /api/v1/export/setores.xlsx

Content is built in memory and returned as a download; nothing touches disk.
"""

import logging

from flask import Blueprint, Response

from sigreq.services.export_service import EXPORTERS, export_filename
from sigreq.utils.errors import E, api_error

logger = logging.getLogger(__name__)

export_bp = Blueprint("export", __name__, url_prefix="/api/v1")

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@export_bp.route("/export/<entity>.xlsx", methods=["GET"])
def export_xlsx(entity: str):
    exporter = EXPORTERS.get(entity)
    if exporter is None:
        return api_error(
            E.NOT_FOUND,
            f"Exportação não disponível para '{entity}'",
            details={"entity": f"use um de {', '.join(EXPORTERS)}"},
        )

    content = exporter()
    filename = export_filename(entity)
    logger.info("Export %s (%d bytes)", entity, len(content))
    return Response(
        content,
        mimetype=XLSX_MIMETYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
