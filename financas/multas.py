# -*- coding: utf-8 -*-
"""
Cálculo de multas por atraso em escalões.

Até `tier1_day` dias de atraso não há multa; acima disso aplica-se a primeira
percentagem; acima de `tier2_day` soma-se a segunda. As percentagens incidem
sempre sobre o valor base.
"""
from datetime import timedelta

from financas.dinheiro import days_late, round_money, to_date, to_money
from financas.schemas.ledger import PenaltyPolicy, PenaltySimulation, PenaltyStep


def penalty_percent(dias_atraso: int, policy: PenaltyPolicy) -> float:
    if not policy.enabled:
        return 0.0
    if dias_atraso > policy.tier2_day:
        return policy.tier1_percent + policy.tier2_percent
    if dias_atraso > policy.tier1_day:
        return policy.tier1_percent
    return 0.0


def compute_penalty(base_amount, due_date, today, policy: PenaltyPolicy) -> float:
    base = max(to_money(base_amount), 0.0)
    if not policy.enabled or base == 0:
        return 0.0
    percent = penalty_percent(days_late(due_date, today), policy)
    return round_money(base * percent / 100)


def penalty_schedule(base_amount, due_date, policy: PenaltyPolicy):
    """Datas a partir das quais cada escalão passa a valer."""
    base = max(to_money(base_amount), 0.0)
    vencimento = to_date(due_date)
    passos = [PenaltyStep(starts_on=vencimento, days_late=0, percent=0.0, penalty=0.0, total_owed=round_money(base))]
    if not policy.enabled:
        return passos
    for dia in (policy.tier1_day + 1, policy.tier2_day + 1):
        inicio = vencimento + timedelta(days=dia)
        percent = penalty_percent(dia, policy)
        if percent == passos[-1].percent:
            continue
        multa = compute_penalty(base, vencimento, inicio, policy)
        passos.append(PenaltyStep(
            starts_on=inicio,
            days_late=dia,
            percent=percent,
            penalty=multa,
            total_owed=round_money(base + multa),
        ))
    return passos


def simulate_penalty(base_amount, due_date, today, policy: PenaltyPolicy) -> PenaltySimulation:
    base = max(to_money(base_amount), 0.0)
    multa = compute_penalty(base, due_date, today, policy)
    return PenaltySimulation(
        base_amount=round_money(base),
        due_date=to_date(due_date),
        today=to_date(today),
        days_late=days_late(due_date, today),
        penalty=multa,
        total_owed=round_money(base + multa),
        schedule=penalty_schedule(base, due_date, policy),
    )
