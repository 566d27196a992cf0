# -*- coding: utf-8 -*-
"""
Exceções do módulo financeiro.

As rotas FastAPI traduzem estas exceções em respostas HTTP; o restante do
código apenas as levanta e propaga.
"""


class LedgerError(Exception):
    """Erro base para falhas de cálculo do extrato financeiro."""


class InvalidAmount(LedgerError):
    """Valor de pagamento ausente, não numérico ou menor ou igual a zero."""


class InvalidPaymentStatus(LedgerError):
    """Pagamento estornado enviado para alocação."""


class InconsistentAllocation(LedgerError):
    """O mês ou as parcelas pedidas não existem no plano do estudante."""

    def __init__(self, message, month_reference=None, plan_ids=None):
        super().__init__(message)
        self.month_reference = month_reference
        self.plan_ids = plan_ids or []


class IncompleteData(LedgerError):
    """Planos ou pagamentos não puderam ser carregados por completo."""


class ApiError(Exception):
    """Falha de comunicação com o backend ou resposta com success=false."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class SessionExpired(ApiError):
    """Não há refresh token válido; é preciso fazer login novamente."""
