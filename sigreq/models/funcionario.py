"""Funcionario — employee record, optionally assigned to a Setor."""

from __future__ import annotations

from dataclasses import dataclass

from sigreq.services.fields import ListSchema, lookup_id

FUNCIONARIO_STATUSES = ("Ativo", "Inativo")

SEM_SETOR = "Sem setor"

FUNCIONARIO_SCHEMA = ListSchema(
    list_config_key="LIST_FUNCIONARIOS",
    fields={
        "nome": "Title",
        "usuarioId": "Usu_x00e1_rioLookupId",
        "email": "Email",
        "telefone": "Telefone",
        "status": "Status",
        "setorId": "SetorLookupId",
    },
)


@dataclass
class Funcionario:
    id: str
    nome: str
    usuario_id: str | None
    email: str
    telefone: str
    status: str
    setor_id: str | None
    setor_nome: str = SEM_SETOR

    @classmethod
    def from_item(cls, item: dict, *, setor_nome: str | None = None) -> "Funcionario":
        raw = item.get("fields") or {}
        setor_id = lookup_id(FUNCIONARIO_SCHEMA.get(raw, "setorId"))
        return cls(
            id=str(item["id"]),
            nome=FUNCIONARIO_SCHEMA.get(raw, "nome", "Sem nome"),
            usuario_id=lookup_id(FUNCIONARIO_SCHEMA.get(raw, "usuarioId")),
            email=FUNCIONARIO_SCHEMA.get(raw, "email", ""),
            telefone=FUNCIONARIO_SCHEMA.get(raw, "telefone", ""),
            # Anything other than an explicit "Ativo" is treated as inactive
            status="Ativo" if FUNCIONARIO_SCHEMA.get(raw, "status") == "Ativo" else "Inativo",
            setor_id=setor_id,
            setor_nome=(setor_nome or SEM_SETOR) if setor_id else SEM_SETOR,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nome": self.nome,
            "usuarioId": self.usuario_id,
            "email": self.email,
            "telefone": self.telefone,
            "status": self.status,
            "setorId": self.setor_id,
            "setorNome": self.setor_nome,
        }
