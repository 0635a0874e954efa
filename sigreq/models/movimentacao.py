"""Movimentacao — timestamped activity note attached to a Requisito."""

from __future__ import annotations

from dataclasses import dataclass

from sigreq.services.fields import ListSchema, format_data, lookup_id

USUARIO_DO_SISTEMA = "Usuário do sistema"

MOVIMENTACAO_SCHEMA = ListSchema(
    list_config_key="LIST_MOVIMENTACOES",
    fields={
        "descricao": "Title",
        "requisitoId": "RequisitoLookupId",
        "funcionarioId": "Funcion_x00e1_rioLookupId",
    },
)


@dataclass
class Movimentacao:
    id: str
    descricao: str
    requisito_id: str | None
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
    ) -> "Movimentacao":
        raw = item.get("fields") or {}
        funcionario_id = lookup_id(MOVIMENTACAO_SCHEMA.get(raw, "funcionarioId"))
        return cls(
            id=str(item["id"]),
            descricao=MOVIMENTACAO_SCHEMA.get(raw, "descricao", ""),
            requisito_id=lookup_id(MOVIMENTACAO_SCHEMA.get(raw, "requisitoId")),
            funcionario_id=funcionario_id,
            funcionario_nome=(
                (funcionario_nome or USUARIO_DO_SISTEMA) if funcionario_id else USUARIO_DO_SISTEMA
            ),
            data_criacao=format_data(raw.get("Created"), tz_name),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "descricao": self.descricao,
            "requisitoId": self.requisito_id,
            "funcionarioId": self.funcionario_id,
            "funcionarioNome": self.funcionario_nome,
            "dataCriacao": self.data_criacao,
        }
