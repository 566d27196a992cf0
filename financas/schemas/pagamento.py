# -*- coding: utf-8 -*-
"""
Schemas Pydantic para pagamentos (transações) e para o registo de novos pagamentos.
"""
from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from financas.dinheiro import month_key, to_money
from financas.schemas.plano_pagamento import PaymentPlanStatus


class PaymentMethod(str, Enum):
    CASH = "cash"
    TRANSFER = "transfer"
    CARD = "card"
    MPESA = "mpesa"
    OTHER = "other"


class TransactionStatus(str, Enum):
    PAID = "paid"
    PARTIAL = "partial"
    REVERSED = "reversed"


class AllocationMode(str, Enum):
    SINGLE_MONTH = "single_month"
    OLDEST_FIRST = "oldest_first"
    SELECTED_MONTHS = "selected_months"


# Tabela de tipos de pagamento do backend (payment_type_id)
PAYMENT_TYPE_IDS = {
    1: PaymentMethod.CASH,
    2: PaymentMethod.MPESA,
    3: PaymentMethod.TRANSFER,
    4: PaymentMethod.CARD,
    5: PaymentMethod.OTHER,
}
PAYMENT_METHOD_IDS = {method: type_id for type_id, method in PAYMENT_TYPE_IDS.items()}

PAYMENT_METHOD_LABELS = {
    PaymentMethod.CASH: "Numerário",
    PaymentMethod.MPESA: "M-Pesa",
    PaymentMethod.TRANSFER: "Transferência",
    PaymentMethod.CARD: "Cartão",
    PaymentMethod.OTHER: "Outro",
}

# Algumas rotas antigas devolvem 'confirmed' em vez de 'paid'
_STATUS_SYNONYMS = {"confirmed": "paid", "confirmado": "paid", "estornado": "reversed"}


def _empty_to_none(v):
    if isinstance(v, str) and v.strip() == '':
        return None
    return v


def _method_from_payload(data):
    if not isinstance(data, dict):
        return data
    data = dict(data)
    if not data.get("payment_method") and data.get("payment_type_id") is not None:
        try:
            data["payment_method"] = PAYMENT_TYPE_IDS.get(int(data["payment_type_id"]), PaymentMethod.OTHER)
        except (TypeError, ValueError):
            data["payment_method"] = PaymentMethod.OTHER
    return data


class PaymentTransaction(BaseModel):
    id: int
    student_id: int
    course_id: str = Field(validation_alias=AliasChoices("curso_id", "course_id"))
    amount_paid: float
    payment_method: PaymentMethod = PaymentMethod.OTHER
    paid_date: Optional[date] = None
    month_reference: Optional[str] = None
    receipt_number: Optional[str] = None
    observations: Optional[str] = Field(None, validation_alias=AliasChoices("observacoes", "observations"))
    status: TransactionStatus = TransactionStatus.PAID

    @model_validator(mode="before")
    @classmethod
    def map_payment_type(cls, data):
        return _method_from_payload(data)

    @field_validator("course_id", mode="before")
    @classmethod
    def course_id_as_text(cls, v):
        return str(v) if v is not None else v

    @field_validator("amount_paid", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        return to_money(v)

    @field_validator("month_reference", mode="before")
    @classmethod
    def normalize_month(cls, v):
        v = _empty_to_none(v)
        return month_key(v) if v is not None else None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return _STATUS_SYNONYMS.get(v, v)
        return v

    @field_validator("paid_date", "receipt_number", "observations", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return _empty_to_none(v)

    @property
    def is_reversed(self) -> bool:
        return self.status == TransactionStatus.REVERSED

    class Config:
        from_attributes = True


class RecordPaymentPayload(BaseModel):
    student_id: int
    course_id: str = Field(validation_alias=AliasChoices("curso_id", "course_id"))
    amount_paid: float = 0.0
    payment_method: PaymentMethod = PaymentMethod.CASH
    paid_date: Optional[date] = None
    alloc_mode: AllocationMode = AllocationMode.SINGLE_MONTH
    month_reference: Optional[str] = None
    plan_ids: List[int] = []
    receipt_number: Optional[str] = None
    observations: Optional[str] = Field(None, validation_alias=AliasChoices("observacoes", "observations"))
    status: TransactionStatus = TransactionStatus.PAID

    @field_validator("course_id", mode="before")
    @classmethod
    def course_id_as_text(cls, v):
        return str(v) if v is not None else v

    @field_validator("amount_paid", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        return to_money(v)

    @field_validator("month_reference", mode="before")
    @classmethod
    def normalize_month(cls, v):
        v = _empty_to_none(v)
        return month_key(v) if v is not None else None

    @field_validator("paid_date", "receipt_number", "observations", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return _empty_to_none(v)

    def to_backend(self) -> dict:
        """Corpo do POST para /student-payments/create.php."""
        body = {
            "student_id": self.student_id,
            "curso_id": self.course_id,
            "amount_paid": self.amount_paid,
            "payment_type_id": PAYMENT_METHOD_IDS[self.payment_method],
            "alloc_mode": self.alloc_mode.value,
            "month_reference": self.month_reference,
            "paid_date": self.paid_date.isoformat() if self.paid_date else None,
            "receipt_number": self.receipt_number,
            "observacoes": self.observations,
        }
        if self.alloc_mode == AllocationMode.SELECTED_MONTHS:
            body["plan_ids"] = list(self.plan_ids)
        return {k: v for k, v in body.items() if v is not None}


class ReversePaymentRequest(BaseModel):
    reason: Optional[str] = None


class Allocation(BaseModel):
    plan_id: int
    month_reference: str
    amount_allocated: float
    new_status: PaymentPlanStatus


class AllocationResult(BaseModel):
    alloc_mode: AllocationMode
    amount: float
    allocations: List[Allocation] = []
    wallet_credit: float = 0.0
    deferred: bool = False
    new_balance: float = 0.0
    payment_id: Optional[int] = None
    receipt_number: Optional[str] = None
