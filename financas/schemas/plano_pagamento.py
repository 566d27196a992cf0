# -*- coding: utf-8 -*-
"""
Schemas Pydantic para as linhas do plano de pagamento (parcelas mensais).
"""
from datetime import date
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from financas.dinheiro import month_key, to_money


class PaymentPlanStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


# Nomes internos -> nomes do backend. O status gravado na BD é apenas uma
# pista: o status real é sempre recalculado a partir dos pagamentos e datas.
PLAN_FIELD_ALIASES = {
    "course_id": "curso_id",
    "base_amount_due": "amount_due",
    "recorded_status": "status",
    "observations": "observacoes",
}


def _backend_alias(campo):
    return AliasChoices(PLAN_FIELD_ALIASES[campo], campo)


class PaymentPlanRow(BaseModel):
    id: int
    student_id: int
    course_id: str = Field(validation_alias=_backend_alias("course_id"))
    month_reference: str
    due_date: date
    base_amount_due: float = Field(0.0, validation_alias=_backend_alias("base_amount_due"))
    recorded_status: Optional[str] = Field(None, validation_alias=_backend_alias("recorded_status"))
    observations: Optional[str] = Field(None, validation_alias=_backend_alias("observations"))
    student_name: Optional[str] = None
    course_name: Optional[str] = None

    @field_validator("course_id", mode="before")
    @classmethod
    def course_id_as_text(cls, v):
        return str(v) if v is not None else v

    @field_validator("month_reference", mode="before")
    @classmethod
    def normalize_month(cls, v):
        return month_key(v)

    @field_validator("base_amount_due", mode="before")
    @classmethod
    def non_negative_money(cls, v):
        return max(to_money(v), 0.0)

    @field_validator("observations", "recorded_status", "student_name", "course_name", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        """Converte strings vazias para None antes da validação principal."""
        if isinstance(v, str) and v.strip() == '':
            return None
        return v

    class Config:
        from_attributes = True
