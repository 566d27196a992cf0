# -*- coding: utf-8 -*-
"""
Rotas FastAPI do extrato financeiro do estudante (saldo, atrasos, multas e carteira).
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from financas.config import Settings, get_settings
from financas.dinheiro import due_date_for_month
from financas.exceptions import (
    ApiError,
    InconsistentAllocation,
    IncompleteData,
    InvalidAmount,
    InvalidPaymentStatus,
    SessionExpired,
)
from financas.multas import simulate_penalty
from financas.schemas.ledger import PenaltySimulation, StudentLedgerSummary
from financas.schemas.pagamento import (
    AllocationResult,
    RecordPaymentPayload,
    ReversePaymentRequest,
    TransactionStatus,
)
from financas.services import financeiro_aluno_service, pagamento_service, plano_pagamento_service
from financas.services.api import ApiClient, get_api_client

router = APIRouter(
    prefix="/api/v1/financeiro-aluno",
    tags=["Financeiro do Aluno"],
    responses={404: {"description": "Não encontrado"}},
)


class GeneratePlansRequest(BaseModel):
    registration_id: int


class UpdateStatusRequest(BaseModel):
    status: TransactionStatus


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, (InvalidAmount, InvalidPaymentStatus)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, InconsistentAllocation):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if isinstance(e, IncompleteData):
        # Nunca devolver um extrato zerado ou parcial: o cliente deve tentar de novo
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                             detail="Não foi possível carregar os dados financeiros")
    if isinstance(e, SessionExpired):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e),
                             headers={"WWW-Authenticate": "Bearer"})
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.get("/multas/simular", response_model=PenaltySimulation)
def simular_multa(
    valor: float = Query(..., ge=0),
    vencimento: Optional[date] = None,
    mes: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$"),
    hoje: Optional[date] = None,
    settings: Settings = Depends(get_settings),
):
    """
    Mostra a multa de uma parcela numa data e a tabela de escalões.
    Sem `vencimento`, usa o dia de vencimento padrão do mês `mes`.
    """
    if vencimento is None:
        if mes is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                                detail="Informe o vencimento ou o mês de referência")
        try:
            vencimento = due_date_for_month(mes, settings.DIA_VENCIMENTO_PADRAO)
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Mês de referência inválido")
    return simulate_penalty(valor, vencimento, hoje or date.today(), settings.penalty_policy())


@router.post("/pagamentos", response_model=AllocationResult, status_code=status.HTTP_201_CREATED)
def registar_pagamento(
    pagamento: RecordPaymentPayload,
    hoje: Optional[date] = None,
    client: ApiClient = Depends(get_api_client),
    settings: Settings = Depends(get_settings),
):
    """
    Regista um pagamento de mensalidade ('single_month') ou um crédito/adiantamento
    ('oldest_first'). A alocação é validada antes de qualquer escrita no backend.
    """
    try:
        return financeiro_aluno_service.record_student_payment(
            client, pagamento, hoje or date.today(), settings.penalty_policy()
        )
    except (InvalidAmount, InvalidPaymentStatus, InconsistentAllocation, IncompleteData, ApiError) as e:
        raise _http_error(e)


@router.post("/pagamentos/{payment_id}/estornar")
def estornar_pagamento(
    payment_id: int,
    pedido: Optional[ReversePaymentRequest] = None,
    client: ApiClient = Depends(get_api_client),
):
    try:
        resposta = pagamento_service.reverse_payment(client, payment_id, pedido.reason if pedido else None)
    except ApiError as e:
        raise _http_error(e)
    return {"success": True, "message": resposta.get("message") or "Pagamento estornado"}


@router.post("/pagamentos/{payment_id}/status")
def atualizar_status_pagamento(
    payment_id: int,
    pedido: UpdateStatusRequest,
    client: ApiClient = Depends(get_api_client),
):
    try:
        pagamento_service.update_status(client, payment_id, pedido.status)
    except ApiError as e:
        raise _http_error(e)
    return {"success": True, "status": pedido.status.value}


@router.delete("/pagamentos/{payment_id}")
def excluir_pagamento(payment_id: int, client: ApiClient = Depends(get_api_client)):
    """Remove um pagamento lançado por engano. Para anular um pagamento real use o estorno."""
    try:
        pagamento_service.delete_payment(client, payment_id)
    except ApiError as e:
        raise _http_error(e)
    return {"success": True}


@router.post("/planos/gerar")
def gerar_planos(pedido: GeneratePlansRequest, client: ApiClient = Depends(get_api_client)):
    try:
        return plano_pagamento_service.generate_plans(client, pedido.registration_id)
    except ApiError as e:
        raise _http_error(e)


@router.post("/planos/gerar-todos")
def gerar_todos_planos(client: ApiClient = Depends(get_api_client)):
    try:
        resultado = plano_pagamento_service.generate_all_plans(client)
    except ApiError as e:
        raise _http_error(e)
    if resultado["errors"]:
        logging.warning(f"Geração de planos concluída com {len(resultado['errors'])} erro(s)")
    return resultado


@router.get("/{student_id}", response_model=StudentLedgerSummary)
def read_extrato(
    student_id: int,
    curso_id: str,
    hoje: Optional[date] = None,
    client: ApiClient = Depends(get_api_client),
    settings: Settings = Depends(get_settings),
):
    """
    Extrato calculado a partir dos planos e pagamentos atuais. O status de cada
    parcela é sempre recalculado; o que está gravado na BD é ignorado.
    """
    try:
        return financeiro_aluno_service.get_student_ledger(
            client, student_id, curso_id, hoje or date.today(), settings.penalty_policy()
        )
    except (IncompleteData, ApiError) as e:
        raise _http_error(e)


@router.get("/{student_id}/carteira")
def read_carteira(
    student_id: int,
    curso_id: str,
    mensalidade: Optional[float] = Query(None, ge=0),
    hoje: Optional[date] = None,
    client: ApiClient = Depends(get_api_client),
    settings: Settings = Depends(get_settings),
):
    """Saldo em carteira e como seria aplicado às parcelas mais antigas."""
    try:
        return financeiro_aluno_service.wallet_overview(
            client, student_id, curso_id, hoje or date.today(), settings.penalty_policy(),
            monthly_fee=mensalidade,
        )
    except (IncompleteData, ApiError) as e:
        raise _http_error(e)
