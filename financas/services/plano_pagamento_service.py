# -*- coding: utf-8 -*-
"""
Chamadas ao backend para os planos de pagamento (parcelas mensais).
"""
from typing import List, Optional

from financas.schemas.plano_pagamento import PaymentPlanRow

PLANS_ENDPOINT = "/api/student-payment-plans/index.php"
GENERATE_ENDPOINT = "/api/student-payment-plans/generate.php"
GENERATE_ALL_ENDPOINT = "/api/student-payment-plans/generate-all.php"


def list_plans(client, student_id: int, curso_id: str, status: Optional[str] = None,
               month_reference: Optional[str] = None,
               registration_id: Optional[int] = None) -> List[PaymentPlanRow]:
    body = client.get_json(
        PLANS_ENDPOINT,
        params={
            "student_id": student_id,
            "curso_id": curso_id,
            "status": status,
            "month_reference": month_reference,
            "registration_id": registration_id,
        },
        default_message="Erro ao carregar planos de pagamento",
    )
    return [PaymentPlanRow.model_validate(item) for item in body.get("data") or []]


def generate_plans(client, registration_id: int) -> dict:
    """
    Gera as parcelas de uma matrícula. O backend aplica nesse momento o crédito
    em carteira às parcelas mais antigas.
    """
    body = client.post_json(GENERATE_ENDPOINT, {"registration_id": registration_id},
                            default_message="Erro ao gerar planos de pagamento")
    return {"created": int(body.get("created") or 0), "message": body.get("message")}


def generate_all_plans(client) -> dict:
    body = client.post_json(GENERATE_ALL_ENDPOINT, default_message="Erro ao gerar planos")
    return {"created": int(body.get("created") or 0), "errors": body.get("errors") or []}
