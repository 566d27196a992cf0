import pytest
from fastapi.testclient import TestClient

from financas import auth
from financas.exceptions import ApiError
from financas.services import pagamento_service, plano_pagamento_service
from financas.services.api import get_api_client
from main import app

BASE = "/api/v1/financeiro-aluno"


def _plano(id, month, amount=3500):
    return {"id": id, "student_id": 7, "curso_id": "ING", "month_reference": month,
            "due_date": f"{month}-10", "amount_due": amount, "status": "pending"}


@pytest.fixture
def backend(fake_client):
    return fake_client(
        get={
            plano_pagamento_service.PLANS_ENDPOINT: {"success": True, "data": [_plano(1, "2025-01"),
                                                                               _plano(2, "2025-02")]},
            pagamento_service.PAYMENTS_ENDPOINT: {"success": True, "data": []},
        },
        post={pagamento_service.CREATE_ENDPOINT: {"success": True, "payment_id": 90,
                                                  "receipt_number": "REC-90"}},
    )


@pytest.fixture
def client(backend, store):
    app.dependency_overrides[get_api_client] = lambda: backend
    app.dependency_overrides[auth.get_token_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    assert client.get("/").json()["mensagem"] == "API Financeiro Escolar"


def test_read_ledger(client):
    resposta = client.get(f"{BASE}/7", params={"curso_id": "ING", "hoje": "2025-02-05"})
    assert resposta.status_code == 200
    corpo = resposta.json()
    assert corpo["total_due_base"] == 7000.0
    assert corpo["total_penalties"] == 700.0
    assert corpo["overdue_count"] == 1
    assert corpo["current_balance"] == -7700.0


def test_ledger_unavailable_when_fetch_fails(client, backend):
    backend.get[pagamento_service.PAYMENTS_ENDPOINT] = ApiError("Erro ao carregar pagamentos", status_code=500)
    resposta = client.get(f"{BASE}/7", params={"curso_id": "ING"})
    assert resposta.status_code == 503


def test_record_payment(client, backend):
    resposta = client.post(
        f"{BASE}/pagamentos",
        params={"hoje": "2025-02-05"},
        json={"student_id": 7, "curso_id": "ING", "amount_paid": 4200, "month_reference": "2025-01",
              "payment_type_id": 2},
    )
    assert resposta.status_code == 201
    corpo = resposta.json()
    assert corpo["payment_id"] == 90
    assert corpo["allocations"][0]["new_status"] == "paid"
    assert backend.post_calls[0][1]["month_reference"] == "2025-01"


def test_record_payment_invalid_amount(client, backend):
    resposta = client.post(f"{BASE}/pagamentos", json={"student_id": 7, "curso_id": "ING", "amount_paid": 0})
    assert resposta.status_code == 400
    assert backend.post_calls == []


def test_record_payment_unknown_month(client, backend):
    resposta = client.post(f"{BASE}/pagamentos",
                           json={"student_id": 7, "curso_id": "ING", "amount_paid": 100,
                                 "month_reference": "2026-09"})
    assert resposta.status_code == 409
    assert backend.post_calls == []


def test_simulate_penalty(client):
    resposta = client.get(f"{BASE}/multas/simular",
                          params={"valor": 3500, "vencimento": "2025-01-10", "hoje": "2025-01-25"})
    assert resposta.status_code == 200
    corpo = resposta.json()
    assert corpo["days_late"] == 15
    assert corpo["penalty"] == 350.0
    assert corpo["total_owed"] == 3850.0


def test_reverse_payment(client, backend):
    backend.post[pagamento_service.REVERSE_ENDPOINT] = {"success": True, "message": "Estornado"}
    resposta = client.post(f"{BASE}/pagamentos/10/estornar", json={"reason": "Duplicado"})
    assert resposta.json() == {"success": True, "message": "Estornado"}
    assert backend.post_calls == [(pagamento_service.REVERSE_ENDPOINT, {"payment_id": 10, "reason": "Duplicado"})]


def test_me_requires_session(client, store):
    assert client.get("/api/v1/auth/me").status_code == 401
    store.save_tokens("abc", "ref", {"id": 1, "role": "admin"})
    assert client.get("/api/v1/auth/me").json() == {"user": {"id": 1, "role": "admin"}, "is_admin": True}


def test_login_failure_is_401(client, backend):
    backend.post[auth.LOGIN_ENDPOINT] = ApiError("Credenciais inválidas", status_code=401)
    resposta = client.post("/api/v1/auth/login", json={"identifier": "x", "senha": "y"})
    assert resposta.status_code == 401
    assert resposta.json()["detail"] == "Credenciais inválidas"


def test_simulate_penalty_from_month(client, monkeypatch):
    monkeypatch.setenv("DIA_VENCIMENTO_PADRAO", "5")
    resposta = client.get(f"{BASE}/multas/simular", params={"valor": 1000, "mes": "2025-01", "hoje": "2025-01-25"})
    corpo = resposta.json()
    assert corpo["due_date"] == "2025-01-05"
    assert corpo["days_late"] == 20
    assert corpo["penalty"] == 100.0


def test_simulate_penalty_needs_due_date_or_month(client):
    resposta = client.get(f"{BASE}/multas/simular", params={"valor": 1000})
    assert resposta.status_code == 400


def test_update_status_and_delete(client, backend):
    backend.post[pagamento_service.UPDATE_STATUS_ENDPOINT] = {"success": True}
    backend.post[pagamento_service.DELETE_ENDPOINT] = {"success": True}

    assert client.post(f"{BASE}/pagamentos/10/status", json={"status": "partial"}).json() == {
        "success": True, "status": "partial"}
    assert client.delete(f"{BASE}/pagamentos/11").status_code == 200
    assert backend.post_calls == [
        (pagamento_service.UPDATE_STATUS_ENDPOINT, {"id": 10, "status": "partial"}),
        (pagamento_service.DELETE_ENDPOINT, {"id": 11}),
    ]


def test_update_status_rejects_unknown_status(client, backend):
    resposta = client.post(f"{BASE}/pagamentos/10/status", json={"status": "cancelado"})
    assert resposta.status_code == 422
    assert backend.post_calls == []


def test_generate_all_plans(client, backend):
    backend.post[plano_pagamento_service.GENERATE_ALL_ENDPOINT] = {"success": True, "created": 12,
                                                                   "errors": ["Matrícula 4 sem curso"]}
    assert client.post(f"{BASE}/planos/gerar-todos").json() == {"created": 12, "errors": ["Matrícula 4 sem curso"]}


def test_backend_failure_is_bad_gateway(client, backend):
    backend.post[plano_pagamento_service.GENERATE_ENDPOINT] = ApiError("Matrícula não encontrada", status_code=404)
    resposta = client.post(f"{BASE}/planos/gerar", json={"registration_id": 99})
    assert resposta.status_code == 502
    assert resposta.json()["detail"] == "Matrícula não encontrada"


@pytest.mark.parametrize("mes", ["2025-13", "2025-00"])
def test_simulate_penalty_rejects_invalid_month(client, mes):
    resposta = client.get(f"{BASE}/multas/simular", params={"valor": 100, "mes": mes})
    assert resposta.status_code == 400
    assert resposta.json()["detail"] == "Mês de referência inválido"
