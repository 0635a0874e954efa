"""Setor — organizational sector, optionally with a responsible Funcionario."""

from __future__ import annotations

from dataclasses import dataclass

from sigreq.services.fields import ListSchema, lookup_id

SETOR_SCHEMA = ListSchema(
    list_config_key="LIST_SETORES",
    fields={
        "nome": "Title",
        "descricao": "Descri_x00e7__x00e3_o",
        # Internal name predates a column rename; note the missing "o"
        "funcionarioId": "Funcin_x00e1_rio_x0028_s_x0029_LookupId",
    },
)


@dataclass
class Setor:
    id: str
    nome: str
    descricao: str
    funcionario_id: str | None
    total_funcionarios: int = 0

    @classmethod
    def from_item(cls, item: dict, *, total_funcionarios: int = 0) -> "Setor":
        raw = item.get("fields") or {}
        return cls(
            id=str(item["id"]),
            nome=SETOR_SCHEMA.get(raw, "nome", "Sem nome"),
            descricao=SETOR_SCHEMA.get(raw, "descricao", "Sem descrição"),
            funcionario_id=lookup_id(SETOR_SCHEMA.get(raw, "funcionarioId")),
            total_funcionarios=total_funcionarios,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nome": self.nome,
            "descricao": self.descricao,
            "funcionarioId": self.funcionario_id,
            "totalFuncionarios": self.total_funcionarios,
        }
