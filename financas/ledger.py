# -*- coding: utf-8 -*-
"""
Agregação do extrato financeiro de um estudante num curso.

`build_summary` é uma função pura de (planos, pagamentos, hoje, política): não
lê relógio, configuração nem estado global, e pode ser chamada quantas vezes
for preciso com o mesmo resultado.
"""
from datetime import date
from typing import List, Optional

from financas.classificacao import classify_rows
from financas.dinheiro import round_money, to_date, to_money
from financas.schemas.ledger import PenaltyPolicy, StudentLedgerSummary
from financas.schemas.pagamento import PaymentTransaction
from financas.schemas.plano_pagamento import PaymentPlanRow, PaymentPlanStatus


def unallocated_transactions(plans: List[PaymentPlanRow],
                             transactions: List[PaymentTransaction]) -> List[PaymentTransaction]:
    """Pagamentos válidos sem mês ou com um mês que não existe no plano (carteira)."""
    meses = {p.month_reference for p in plans}
    return [
        t for t in transactions
        if not t.is_reversed and (t.month_reference is None or t.month_reference not in meses)
    ]


def wallet_balance(plans: List[PaymentPlanRow], transactions: List[PaymentTransaction]) -> float:
    return round_money(sum(to_money(t.amount_paid) for t in unallocated_transactions(plans, transactions)))


def _same_pair(student_id, course_id):
    def match(record):
        if student_id is not None and record.student_id != student_id:
            return False
        if course_id is not None and record.course_id != str(course_id):
            return False
        return True
    return match


def build_summary(plans: List[PaymentPlanRow], transactions: List[PaymentTransaction], today,
                  policy: PenaltyPolicy, student_id: Optional[int] = None,
                  course_id: Optional[str] = None) -> StudentLedgerSummary:
    hoje = to_date(today)

    # Um extrato é sempre de um único par estudante/curso
    if student_id is None:
        student_id = plans[0].student_id if plans else (transactions[0].student_id if transactions else None)
    if course_id is None:
        course_id = plans[0].course_id if plans else (transactions[0].course_id if transactions else None)
    match = _same_pair(student_id, course_id)
    plans = [p for p in plans if match(p)]
    transactions = [t for t in transactions if match(t)]

    history = classify_rows(plans, transactions, hoje, policy)

    total_paid = round_money(sum(to_money(t.amount_paid) for t in transactions if not t.is_reversed))
    total_due_base = round_money(sum(c.row.base_amount_due for c in history))
    total_penalties = round_money(sum(c.penalty for c in history))
    total_due = round_money(sum(c.total_owed for c in history))

    overdue_rows = [c for c in history if c.status == PaymentPlanStatus.OVERDUE]
    advance_rows = [c for c in history if c.status == PaymentPlanStatus.PAID and c.due_date > hoje]

    student_name = next((p.student_name for p in plans if p.student_name), None)

    return StudentLedgerSummary(
        student_id=student_id,
        course_id=course_id,
        student_name=student_name,
        today=hoje,
        penalty_policy=policy,
        monthly_fee=history[0].row.base_amount_due if history else 0.0,
        total_paid=total_paid,
        total_due_base=total_due_base,
        total_penalties=total_penalties,
        total_due_with_penalty=total_due,
        current_balance=round_money(total_paid - total_due),
        total_pending=round_money(sum(c.remaining for c in history if c.status != PaymentPlanStatus.PAID)),
        total_overdue=round_money(sum(c.remaining for c in overdue_rows)),
        overdue_count=len(overdue_rows),
        wallet_balance=wallet_balance(plans, transactions),
        class_started=bool(history),
        overdue_rows=overdue_rows,
        advance_rows=advance_rows,
        history=history,
        transactions=sorted(transactions, key=lambda t: (t.paid_date or date.min, t.id)),
    )
