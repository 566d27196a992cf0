# -*- coding: utf-8 -*-
"""
Chamadas ao backend para os pagamentos dos estudantes.
"""
from typing import List, Optional

from financas.schemas.pagamento import PaymentTransaction, RecordPaymentPayload, TransactionStatus

PAYMENTS_ENDPOINT = "/api/student-payments/index.php"
CREATE_ENDPOINT = "/api/student-payments/create.php"
UPDATE_STATUS_ENDPOINT = "/api/student-payments/update-status.php"
REVERSE_ENDPOINT = "/api/student-payments/reverse.php"
DELETE_ENDPOINT = "/api/student-payments/delete.php"


def list_payments(client, student_id: Optional[int] = None, curso_id: Optional[str] = None,
                  month_reference: Optional[str] = None, registration_id: Optional[int] = None,
                  status: Optional[str] = None) -> List[PaymentTransaction]:
    body = client.get_json(
        PAYMENTS_ENDPOINT,
        params={
            "student_id": student_id,
            "curso_id": curso_id,
            "month_reference": month_reference,
            "registration_id": registration_id,
            "status": status,
        },
        default_message="Erro ao carregar pagamentos",
    )
    return [PaymentTransaction.model_validate(item) for item in body.get("data") or []]


def create_payment(client, payload: RecordPaymentPayload) -> dict:
    return client.post_json(CREATE_ENDPOINT, payload.to_backend(),
                            default_message="Erro ao registar pagamento")


def update_status(client, payment_id: int, status: TransactionStatus) -> dict:
    return client.post_json(UPDATE_STATUS_ENDPOINT, {"id": payment_id, "status": TransactionStatus(status).value},
                            default_message="Erro ao atualizar o status do pagamento")


def reverse_payment(client, payment_id: int, reason: Optional[str] = None) -> dict:
    """Estorno: o pagamento continua no histórico mas deixa de contar nos totais."""
    payload = {"payment_id": payment_id}
    if reason:
        payload["reason"] = reason
    return client.post_json(REVERSE_ENDPOINT, payload, default_message="Erro ao estornar pagamento")


def delete_payment(client, payment_id: int) -> dict:
    return client.post_json(DELETE_ENDPOINT, {"id": payment_id}, default_message="Erro ao excluir pagamento")
