import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import json
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from financas.auth import TokenStore
from financas.database import Base
from financas.models import sessao  # noqa: F401
from financas.schemas.ledger import PenaltyPolicy
from financas.schemas.pagamento import PaymentTransaction
from financas.schemas.plano_pagamento import PaymentPlanRow


@pytest.fixture
def policy():
    return PenaltyPolicy(enabled=True, tier1_percent=10, tier2_percent=10)


@pytest.fixture
def make_plan():
    def factory(id, month, amount=2500, due=None, student_id=7, curso_id="ING", status="pending", **extra):
        data = {
            "id": id,
            "student_id": student_id,
            "curso_id": curso_id,
            "month_reference": month,
            "due_date": due or f"{month}-10",
            "amount_due": amount,
            "status": status,
        }
        data.update(extra)
        return PaymentPlanRow.model_validate(data)
    return factory


@pytest.fixture
def make_payment():
    def factory(id, amount, month=None, status="paid", paid_date="2025-01-05", student_id=7, curso_id="ING", **extra):
        data = {
            "id": id,
            "student_id": student_id,
            "curso_id": curso_id,
            "amount_paid": amount,
            "month_reference": month,
            "payment_method": "cash",
            "status": status,
            "paid_date": paid_date,
        }
        data.update(extra)
        return PaymentTransaction.model_validate(data)
    return factory


@pytest.fixture
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = Session()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def store(db_session):
    return TokenStore(db_session)


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else (json.dumps(body) if body is not None else "")

    def json(self):
        if self._body is None:
            raise ValueError("Expecting value")
        return self._body


class FakeHttp:
    """Substitui requests.Session: devolve respostas em fila e guarda as chamadas."""

    def __init__(self, responses=None, refresh_responses=None):
        self.responses = list(responses or [])
        self.refresh_responses = list(refresh_responses or [])
        self.calls = []
        self.refresh_calls = []

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json, "headers": headers})
        resposta = self.responses.pop(0)
        if isinstance(resposta, Exception):
            raise resposta
        return resposta

    def post(self, url, json=None, timeout=None):
        self.refresh_calls.append({"url": url, "json": json})
        resposta = self.refresh_responses.pop(0)
        if isinstance(resposta, Exception):
            raise resposta
        return resposta


class FakeClient:
    """Cliente da API com respostas por endpoint, no lugar do ApiClient."""

    def __init__(self, get=None, post=None):
        self.get = get or {}
        self.post = post or {}
        self.get_calls = []
        self.post_calls = []

    def _resolve(self, table, endpoint):
        resposta = table[endpoint]
        if isinstance(resposta, Exception):
            raise resposta
        return resposta

    def get_json(self, endpoint, params=None, default_message=None):
        self.get_calls.append((endpoint, params))
        return self._resolve(self.get, endpoint)

    def post_json(self, endpoint, payload=None, default_message=None):
        self.post_calls.append((endpoint, payload))
        return self._resolve(self.post, endpoint)


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_http():
    return FakeHttp


@pytest.fixture
def fake_client():
    return FakeClient


@pytest.fixture
def today():
    return date(2025, 2, 5)
