# -*- coding: utf-8 -*-
"""
Alocação de pagamentos às parcelas do plano e gestão do crédito em carteira.

Regras:
- 'single_month': todo o valor vai para o mês indicado; sem mês, fica em carteira.
- 'oldest_first': o valor quita as parcelas em aberto da mais antiga para a mais
  recente (valor base + multa acumulada) e o que sobrar fica em carteira.
- 'selected_months': como 'oldest_first', mas só nas parcelas escolhidas.
- Só 'single_month' aceita mês de referência; nos outros modos o mês é recusado.
- Sem parcelas geradas (turma ainda não começou) o pagamento fica todo em carteira.
"""
import logging
from typing import List

from financas.classificacao import status_for
from financas.dinheiro import add_months, month_key, round_money, to_money
from financas.exceptions import InconsistentAllocation, InvalidAmount, InvalidPaymentStatus
from financas.ledger import build_summary
from financas.schemas.ledger import AllocationContext, ClassifiedPlanRow, StudentLedgerSummary
from financas.schemas.pagamento import (
    Allocation,
    AllocationMode,
    AllocationResult,
    RecordPaymentPayload,
    TransactionStatus,
)

logger = logging.getLogger(__name__)


def _allocation(classified: ClassifiedPlanRow, amount: float, today) -> Allocation:
    return Allocation(
        plan_id=classified.row.id,
        month_reference=classified.month_reference,
        amount_allocated=round_money(amount),
        new_status=status_for(classified.paid_so_far + amount, classified.total_owed,
                              classified.due_date, today),
    )


def allocate_oldest_first(rows: List[ClassifiedPlanRow], amount: float, today):
    """Distribui `amount` pelas parcelas em aberto; devolve (alocações, sobra)."""
    restante = round_money(amount)
    alocacoes = []
    for classified in sorted(rows, key=lambda c: (c.month_reference, c.due_date, c.row.id)):
        if restante <= 0:
            break
        if classified.remaining <= 0:
            continue
        parte = min(classified.remaining, restante)
        alocacoes.append(_allocation(classified, parte, today))
        restante = round_money(restante - parte)
    return alocacoes, restante


def record_payment(payment: RecordPaymentPayload, context: AllocationContext) -> AllocationResult:
    """
    Decide como um novo pagamento é aplicado. Não grava nada: o resultado é a
    proposta que o backend persiste.
    """
    amount = round_money(to_money(payment.amount_paid))
    if amount <= 0:
        raise InvalidAmount("O valor do pagamento deve ser maior que zero.")
    if payment.status == TransactionStatus.REVERSED:
        raise InvalidPaymentStatus("Um pagamento estornado não pode ser registado como novo pagamento.")
    # Um pagamento com mês fica todo nesse mês ao reler o extrato
    if payment.month_reference is not None and payment.alloc_mode != AllocationMode.SINGLE_MONTH:
        raise InconsistentAllocation(
            f"O modo '{payment.alloc_mode.value}' não aceita mês de referência; use 'single_month'.",
            month_reference=payment.month_reference,
        )

    summary = build_summary(context.plans, context.transactions, context.today, context.policy,
                            student_id=payment.student_id, course_id=payment.course_id)
    rows = summary.history
    alocacoes, carteira, adiado = [], amount, False

    if not rows:
        adiado = True
        logger.info(f"Estudante {payment.student_id} sem parcelas no curso {payment.course_id}: "
                    f"{amount} fica em carteira até o início da turma.")

    elif payment.alloc_mode == AllocationMode.SINGLE_MONTH:
        if payment.month_reference is None:
            logger.info(f"Pagamento sem mês de referência: {amount} registado como crédito.")
        else:
            alvo = next((c for c in rows if c.month_reference == payment.month_reference), None)
            if alvo is None:
                raise InconsistentAllocation(
                    f"Não existe parcela para o mês {payment.month_reference}.",
                    month_reference=payment.month_reference,
                )
            alocacoes, carteira = [_allocation(alvo, amount, context.today)], 0.0

    elif payment.alloc_mode == AllocationMode.OLDEST_FIRST:
        alocacoes, carteira = allocate_oldest_first(rows, amount, context.today)

    else:
        pedidos = set(payment.plan_ids)
        existentes = {c.row.id for c in rows}
        em_falta = sorted(pedidos - existentes)
        if not pedidos or em_falta:
            raise InconsistentAllocation(
                "Parcelas seleccionadas inválidas." if pedidos else "Nenhuma parcela seleccionada.",
                plan_ids=em_falta,
            )
        alocacoes, carteira = allocate_oldest_first([c for c in rows if c.row.id in pedidos], amount,
                                                    context.today)

    return AllocationResult(
        alloc_mode=payment.alloc_mode,
        amount=amount,
        allocations=alocacoes,
        wallet_credit=round_money(carteira),
        deferred=adiado,
        new_balance=round_money(summary.current_balance + amount),
    )


def preview_wallet_application(summary: StudentLedgerSummary) -> AllocationResult:
    """
    Mostra como o crédito em carteira seria aplicado às parcelas existentes.
    A aplicação efetiva é feita pelo backend quando os planos são gerados.
    """
    alocacoes, sobra = allocate_oldest_first(summary.history, summary.wallet_balance, summary.today)
    return AllocationResult(
        alloc_mode=AllocationMode.OLDEST_FIRST,
        amount=summary.wallet_balance,
        allocations=alocacoes,
        wallet_credit=sobra,
        deferred=not summary.class_started,
        new_balance=summary.current_balance,
    )


def project_wallet_coverage(credit, monthly_fee, start_month) -> dict:
    """Quantos meses inteiros um crédito cobre quando ainda não há parcelas."""
    credito = round_money(credit)
    mensalidade = round_money(monthly_fee)
    if credito <= 0 or mensalidade <= 0:
        return {"months": [], "remainder": max(credito, 0.0)}
    inteiros = int(credito // mensalidade)
    inicio = month_key(start_month)
    return {
        "months": [add_months(inicio, i) for i in range(inteiros)],
        "remainder": round_money(credito - inteiros * mensalidade),
    }
