# -*- coding: utf-8 -*-
"""
Extrato financeiro do estudante: busca planos e pagamentos em paralelo e só
calcula quando as duas leituras terminam com sucesso.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

from pydantic import ValidationError

from financas.alocacao import preview_wallet_application, project_wallet_coverage, record_payment
from financas.dinheiro import month_key
from financas.exceptions import ApiError, IncompleteData, SessionExpired
from financas.ledger import build_summary
from financas.schemas.ledger import AllocationContext, PenaltyPolicy
from financas.schemas.pagamento import RecordPaymentPayload
from financas.services import pagamento_service, plano_pagamento_service


def fetch_student_records(client, student_id: int, curso_id: str):
    """Devolve (planos, pagamentos) ou falha por inteiro."""
    with ThreadPoolExecutor(max_workers=2) as executor:
        planos_futuro = executor.submit(plano_pagamento_service.list_plans, client,
                                        student_id=student_id, curso_id=curso_id)
        pagamentos_futuro = executor.submit(pagamento_service.list_payments, client,
                                            student_id=student_id, curso_id=curso_id)
        try:
            return planos_futuro.result(), pagamentos_futuro.result()
        except SessionExpired:
            raise
        except (ApiError, ValidationError) as e:
            logging.error(f"Erro ao carregar dados financeiros do estudante {student_id} "
                          f"(curso {curso_id}): {e}")
            raise IncompleteData("Não foi possível carregar os dados financeiros") from e


def get_student_ledger(client, student_id: int, curso_id: str, today, policy: PenaltyPolicy):
    planos, pagamentos = fetch_student_records(client, student_id, curso_id)
    return build_summary(planos, pagamentos, today, policy, student_id=student_id, course_id=curso_id)


def record_student_payment(client, payload: RecordPaymentPayload, today, policy: PenaltyPolicy):
    """
    Valida e calcula a alocação com os dados atuais e só depois envia ao
    backend. Erros de validação não geram nenhuma chamada de escrita.
    """
    planos, pagamentos = fetch_student_records(client, payload.student_id, payload.course_id)
    resultado = record_payment(payload, AllocationContext(
        plans=planos, transactions=pagamentos, today=today, policy=policy,
    ))

    resposta = pagamento_service.create_payment(client, payload)
    resultado.payment_id = resposta.get("payment_id")
    resultado.receipt_number = resposta.get("receipt_number")
    logging.info(f"Pagamento {resultado.payment_id} registado: {resultado.amount} "
                 f"({payload.alloc_mode.value}), carteira {resultado.wallet_credit}")
    return resultado


def wallet_overview(client, student_id: int, curso_id: str, today, policy: PenaltyPolicy,
                    monthly_fee=None):
    summary = get_student_ledger(client, student_id, curso_id, today, policy)
    previsao = preview_wallet_application(summary)
    overview = {
        "wallet_balance": summary.wallet_balance,
        "class_started": summary.class_started,
        "current_balance": summary.current_balance,
        "application": previsao,
        "coverage": None,
    }
    if not summary.class_started and monthly_fee:
        overview["coverage"] = project_wallet_coverage(summary.wallet_balance, monthly_fee, month_key(today))
    return overview
