# -*- coding: utf-8 -*-
"""
Schemas Pydantic do extrato financeiro do estudante (valores derivados, nunca gravados).
"""
from datetime import date
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, model_validator

from financas.schemas.pagamento import PaymentTransaction
from financas.schemas.plano_pagamento import PaymentPlanRow, PaymentPlanStatus


class PenaltyPolicy(BaseModel):
    """
    Política de multas por atraso. Os dias contam a partir do vencimento;
    as percentagens incidem sobre o valor base e somam-se (não compõem).
    """
    enabled: bool = True
    tier1_percent: float = Field(10.0, ge=0, validation_alias=AliasChoices("step1_percent", "tier1_percent"))
    tier2_percent: float = Field(10.0, ge=0, validation_alias=AliasChoices("step2_percent", "tier2_percent"))
    tier1_day: int = Field(10, ge=0, validation_alias=AliasChoices("step1_day", "tier1_day"))
    tier2_day: int = Field(20, ge=0, validation_alias=AliasChoices("step2_day", "tier2_day"))

    @model_validator(mode="after")
    def check_tier_order(self):
        if self.tier2_day < self.tier1_day:
            raise ValueError("O segundo escalão de multa não pode começar antes do primeiro")
        return self


class ClassifiedPlanRow(BaseModel):
    row: PaymentPlanRow
    status: PaymentPlanStatus
    paid_so_far: float
    penalty: float
    total_owed: float
    remaining: float
    days_overdue: int

    @property
    def month_reference(self) -> str:
        return self.row.month_reference

    @property
    def due_date(self) -> date:
        return self.row.due_date


class StudentLedgerSummary(BaseModel):
    student_id: Optional[int] = None
    course_id: Optional[str] = None
    student_name: Optional[str] = None
    today: date
    penalty_policy: PenaltyPolicy

    monthly_fee: float = 0.0
    total_paid: float = 0.0
    total_due_base: float = 0.0
    total_penalties: float = 0.0
    total_due_with_penalty: float = 0.0
    current_balance: float = 0.0
    total_pending: float = 0.0
    total_overdue: float = 0.0
    overdue_count: int = 0
    wallet_balance: float = 0.0
    class_started: bool = False

    overdue_rows: List[ClassifiedPlanRow] = []
    advance_rows: List[ClassifiedPlanRow] = []
    history: List[ClassifiedPlanRow] = []
    transactions: List[PaymentTransaction] = []


class AllocationContext(BaseModel):
    """Estado atual do estudante usado para decidir onde aplicar um pagamento."""
    plans: List[PaymentPlanRow] = []
    transactions: List[PaymentTransaction] = []
    today: date
    policy: PenaltyPolicy = PenaltyPolicy()


class PenaltyStep(BaseModel):
    starts_on: date
    days_late: int
    percent: float
    penalty: float
    total_owed: float


class PenaltySimulation(BaseModel):
    base_amount: float
    due_date: date
    today: date
    days_late: int
    penalty: float
    total_owed: float
    schedule: List[PenaltyStep] = []
