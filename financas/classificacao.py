# -*- coding: utf-8 -*-
"""
Classificação de cada parcela do plano a partir dos pagamentos e das datas.

O status gravado no backend (`recorded_status`) nunca é usado aqui: as multas
crescem com o tempo, por isso uma parcela 'pending' ontem pode estar
'overdue' hoje sem nenhuma escrita na BD.

Enquanto a parcela não estiver quitada a multa é calculada até hoje. Depois de
quitada (valor base mais a multa desse dia) a multa fica fixa e a parcela
continua paga.
"""
from typing import List

from financas.dinheiro import days_late, is_past, round_money, to_date, to_money
from financas.multas import compute_penalty
from financas.schemas.ledger import ClassifiedPlanRow, PenaltyPolicy
from financas.schemas.pagamento import PaymentTransaction
from financas.schemas.plano_pagamento import PaymentPlanRow, PaymentPlanStatus


def allocated_to(row: PaymentPlanRow, transactions: List[PaymentTransaction]) -> List[PaymentTransaction]:
    """Pagamentos não estornados do mesmo estudante/curso para o mês da parcela."""
    return [
        t for t in transactions
        if not t.is_reversed
        and t.month_reference == row.month_reference
        and t.student_id == row.student_id
        and t.course_id == row.course_id
    ]


def settlement_date(row: PaymentPlanRow, payments: List[PaymentTransaction], today, policy: PenaltyPolicy):
    """
    Dia em que os pagamentos quitaram a parcela (valor base + multa desse dia),
    ou None se ainda não está quitada em `today`.
    """
    hoje = to_date(today)
    acumulado = 0.0
    for t in sorted(payments, key=lambda p: (p.paid_date or hoje, p.id)):
        acumulado += to_money(t.amount_paid)
        dia = min(t.paid_date or hoje, hoje)
        devido = row.base_amount_due + compute_penalty(row.base_amount_due, row.due_date, dia, policy)
        if round_money(acumulado) >= round_money(devido):
            return dia
    return None


def status_for(paid_so_far: float, total_owed: float, due_date, today) -> PaymentPlanStatus:
    pago = round_money(paid_so_far)
    if pago >= round_money(total_owed):
        return PaymentPlanStatus.PAID
    if pago > 0:
        return PaymentPlanStatus.PARTIAL
    if is_past(due_date, today):
        return PaymentPlanStatus.OVERDUE
    return PaymentPlanStatus.PENDING


def classify(row: PaymentPlanRow, allocated_payments: List[PaymentTransaction], today,
             policy: PenaltyPolicy) -> ClassifiedPlanRow:
    validos = [t for t in allocated_payments if not t.is_reversed]
    paid_so_far = round_money(sum(to_money(t.amount_paid) for t in validos))
    referencia = settlement_date(row, validos, today, policy) or to_date(today)
    penalty = compute_penalty(row.base_amount_due, row.due_date, referencia, policy)
    total_owed = round_money(row.base_amount_due + penalty)

    return ClassifiedPlanRow(
        row=row,
        status=status_for(paid_so_far, total_owed, row.due_date, today),
        paid_so_far=paid_so_far,
        penalty=penalty,
        total_owed=total_owed,
        remaining=round_money(max(total_owed - paid_so_far, 0.0)),
        days_overdue=days_late(row.due_date, referencia),
    )


def classify_rows(plans: List[PaymentPlanRow], transactions: List[PaymentTransaction], today,
                  policy: PenaltyPolicy) -> List[ClassifiedPlanRow]:
    """Classifica todas as parcelas, da mais antiga para a mais recente."""
    ordenadas = sorted(plans, key=lambda p: (p.month_reference, p.due_date, p.id))
    return [classify(p, allocated_to(p, transactions), today, policy) for p in ordenadas]
