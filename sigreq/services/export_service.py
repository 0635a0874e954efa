"""
Spreadsheet export of the console's lists.

One sheet per file: a dark, frozen header row followed by the same records
the JSON endpoints return (names already resolved, dates already in
dd/mm/aaaa HH:MM).
"""

import io
import logging
from datetime import datetime

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from sigreq.services import funcionario_service, requisito_service, setor_service

logger = logging.getLogger(__name__)

_THIN = Side(style="thin")
HEADER_FILL = PatternFill(start_color="354A5F", end_color="354A5F", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
CELL_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)
MAX_COLUMN_WIDTH = 60

# openpyxl stores "=..." as a formula; user text starting with these stays text
_FORMULA_PREFIXES = ("=", "+", "-", "@")

# (header, record key) per exportable entity
REQUISITO_COLUMNS = [
    ("Código", "codigo"),
    ("Descrição", "descricao"),
    ("Descrição completa", "descricaoCompleta"),
    ("Status", "status"),
    ("Situação", "situacao"),
    ("Responsável", "funcionarioNome"),
    ("Data de criação", "dataCriacao"),
]
FUNCIONARIO_COLUMNS = [
    ("Nome", "nome"),
    ("E-mail", "email"),
    ("Telefone", "telefone"),
    ("Status", "status"),
    ("Setor", "setorNome"),
]
SETOR_COLUMNS = [
    ("Nome", "nome"),
    ("Descrição", "descricao"),
    ("Total de funcionários", "totalFuncionarios"),
]


def _write_header(ws, headers: list[str]) -> None:
    ws.append(headers)
    for cell in ws[1]:
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.border = CELL_BORDER
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
    ws.freeze_panes = "A2"


def _fit_columns(ws) -> None:
    """Widen each column to its longest value, within [12, MAX_COLUMN_WIDTH + 4]."""
    for index, cells in enumerate(ws.iter_cols(), start=1):
        longest = max((len(str(c.value)) for c in cells if c.value not in (None, "")), default=0)
        ws.column_dimensions[get_column_letter(index)].width = max(
            min(longest, MAX_COLUMN_WIDTH) + 4, 12
        )


def records_to_xlsx(title: str, columns: list[tuple[str, str]], records: list[dict]) -> bytes:
    """Write records into a single styled sheet and return the .xlsx bytes."""
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]  # Excel's sheet-name limit

    _write_header(ws, [header for header, _ in columns])
    for record in records:
        ws.append([record.get(key) for _, key in columns])
        for cell in ws[ws.max_row]:
            cell.border = CELL_BORDER
            if isinstance(cell.value, str) and cell.value.startswith(_FORMULA_PREFIXES):
                cell.data_type = "s"
    _fit_columns(ws)

    out = io.BytesIO()
    wb.save(out)
    logger.info("Exported %d rows to sheet %r", len(records), title)
    return out.getvalue()


def export_requisitos_xlsx() -> bytes:
    records = [r.to_dict() for r in requisito_service.list_requisitos()]
    return records_to_xlsx("Requisitos", REQUISITO_COLUMNS, records)


def export_funcionarios_xlsx() -> bytes:
    records = [f.to_dict() for f in funcionario_service.list_funcionarios()]
    return records_to_xlsx("Funcionários", FUNCIONARIO_COLUMNS, records)


def export_setores_xlsx() -> bytes:
    records = [s.to_dict() for s in setor_service.list_setores()]
    return records_to_xlsx("Setores", SETOR_COLUMNS, records)


EXPORTERS = {
    "requisitos": export_requisitos_xlsx,
    "funcionarios": export_funcionarios_xlsx,
    "setores": export_setores_xlsx,
}


def export_filename(entity: str) -> str:
    return f"{entity}_{datetime.now().strftime('%Y%m%d')}.xlsx"
