"""Requisito — tracked requirement/ticket with workflow status and activity state."""

from __future__ import annotations

from dataclasses import dataclass

from sigreq.services.fields import ListSchema, format_data, lookup_id

REQUISITO_STATUSES = ("Cadastrada", "Andamento", "Realizada")
REQUISITO_SITUACOES = ("Ativa", "Inativa")

SEM_RESPONSAVEL = "Sem responsável"

REQUISITO_SCHEMA = ListSchema(
    list_config_key="LIST_REQUISITOS",
    fields={
        "codigo": "Title",
        "descricao": "Descri_x00e7__x00e3_o",
        "descricaoCompleta": "Descri_x00e7__x00e3_ocompleta",
        "status": "Status",
        "situacao": "Situa_x00e7__x00e3_o",
        "funcionarioId": "Funcion_x00e1_rio_x0028_s_x0029_LookupId",
    },
)


@dataclass
class Requisito:
    id: str
    codigo: str
    descricao: str
    descricao_completa: str
    status: str
    situacao: str
    funcionario_id: str | None
    funcionario_nome: str
    data_criacao: str

    @classmethod
    def from_item(
        cls,
        item: dict,
        *,
        funcionario_nome: str | None = None,
        tz_name: str | None = None,
    ) -> "Requisito":
        raw = item.get("fields") or {}
        funcionario_id = lookup_id(REQUISITO_SCHEMA.get(raw, "funcionarioId"))
        return cls(
            id=str(item["id"]),
            codigo=REQUISITO_SCHEMA.get(raw, "codigo", ""),
            descricao=REQUISITO_SCHEMA.get(raw, "descricao", ""),
            descricao_completa=REQUISITO_SCHEMA.get(raw, "descricaoCompleta", ""),
            status=REQUISITO_SCHEMA.get(raw, "status", "Cadastrada"),
            situacao=REQUISITO_SCHEMA.get(raw, "situacao", "Ativa"),
            funcionario_id=funcionario_id,
            funcionario_nome=(
                (funcionario_nome or SEM_RESPONSAVEL) if funcionario_id else SEM_RESPONSAVEL
            ),
            data_criacao=format_data(raw.get("Created"), tz_name),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "codigo": self.codigo,
            "descricao": self.descricao,
            "descricaoCompleta": self.descricao_completa,
            "status": self.status,
            "situacao": self.situacao,
            "funcionarioId": self.funcionario_id,
            "funcionarioNome": self.funcionario_nome,
            "dataCriacao": self.data_criacao,
        }
