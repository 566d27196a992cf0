# -*- coding: utf-8 -*-
"""
Sessão do utilizador: guarda os tokens emitidos pelo backend e os dados do
utilizador numa tabela própria, em vez de estado global.
"""
import json
import logging
import threading
from datetime import datetime, timezone

from fastapi import Depends
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from financas import database
from financas.exceptions import ApiError
from financas.models.sessao import SessaoValor

ACCESS_TOKEN = "access_token"
REFRESH_TOKEN = "refresh_token"
USER = "user"

LOGIN_ENDPOINT = "/auth/login.php"
REFRESH_ENDPOINT = "/auth/refresh.php"


class TokenStore:
    """Acesso à tabela de sessão. Seguro para uso a partir de várias threads."""

    def __init__(self, db: Session):
        self.db = db
        self._lock = threading.RLock()

    def get(self, chave):
        with self._lock:
            registro = self.db.query(SessaoValor).filter(SessaoValor.chave == chave).first()
            return registro.valor if registro else None

    def set(self, chave, valor):
        with self._lock:
            registro = self.db.query(SessaoValor).filter(SessaoValor.chave == chave).first()
            if registro is None:
                registro = SessaoValor(chave=chave, valor=valor)
                self.db.add(registro)
            else:
                registro.valor = valor
            self.db.commit()

    def delete(self, *chaves):
        with self._lock:
            self.db.query(SessaoValor).filter(SessaoValor.chave.in_(chaves)).delete(synchronize_session=False)
            self.db.commit()

    @property
    def access_token(self):
        return self.get(ACCESS_TOKEN)

    @property
    def refresh_token(self):
        return self.get(REFRESH_TOKEN)

    def save_tokens(self, access_token, refresh_token=None, user=None):
        with self._lock:
            self.set(ACCESS_TOKEN, access_token)
            if refresh_token:
                self.set(REFRESH_TOKEN, refresh_token)
            if user is not None:
                self.set(USER, json.dumps(user))

    def clear(self):
        self.delete(ACCESS_TOKEN, REFRESH_TOKEN, USER)

    def current_user(self):
        valor = self.get(USER)
        if not valor:
            return None
        try:
            return json.loads(valor)
        except ValueError:
            logging.error("Erro ao ler os dados do utilizador guardados na sessão.")
            return None

    def is_authenticated(self):
        return bool(self.access_token)

    def is_admin(self):
        user = self.current_user()
        return bool(user) and user.get("role") == "admin"


def get_token_store(db: Session = Depends(database.get_db)) -> TokenStore:
    return TokenStore(db)


def token_expired(token, leeway_seconds=30, now=None) -> bool:
    """
    Verifica a claim 'exp' sem validar a assinatura (a chave é do backend).
    Tokens sem 'exp' ou que não são JWT ficam a cargo do backend decidir.
    """
    if not token:
        return True
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return False
    exp = claims.get("exp")
    if exp is None:
        return False
    agora = now or datetime.now(timezone.utc)
    return agora.timestamp() + leeway_seconds >= float(exp)


def extract_login_tokens(body: dict):
    """
    Aceita os dois formatos de resposta do login:
    { success, data: { access_token, refresh_token, user } } ou os campos direto na raiz.
    """
    dados = body.get("data") if isinstance(body.get("data"), dict) else {}
    if dados.get("access_token"):
        return dados["access_token"], dados.get("refresh_token"), dados.get("user")
    if body.get("access_token"):
        return body["access_token"], body.get("refresh_token"), body.get("user")
    raise ApiError("Token não encontrado na resposta do servidor")


def login(client, store: TokenStore, identifier: str, senha: str):
    """Faz login no backend (email ou número de matrícula) e guarda a sessão."""
    body = client.post_json(LOGIN_ENDPOINT, {"identifier": identifier, "senha": senha},
                            default_message="Erro ao fazer login")
    access_token, refresh_token, user = extract_login_tokens(body)
    store.save_tokens(access_token, refresh_token, user)
    logging.info(f"Login efetuado para {identifier}")
    return user


def logout(store: TokenStore):
    store.clear()
    logging.info("Sessão terminada e tokens removidos.")
