# -*- coding: utf-8 -*-
"""
Rotas FastAPI de sessão: login e logout no backend e dados do utilizador atual.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from financas import auth
from financas.exceptions import ApiError
from financas.services.api import ApiClient, get_api_client

router = APIRouter(
    prefix="/api/v1/auth",
    tags=["Authentication"]
)


class LoginRequest(BaseModel):
    identifier: str  # email ou número de matrícula
    senha: str


@router.post("/login")
def login(
    dados: LoginRequest,
    client: ApiClient = Depends(get_api_client),
    store: auth.TokenStore = Depends(auth.get_token_store),
):
    try:
        user = auth.login(client, store, dados.identifier, dados.senha)
    except ApiError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e) or "Email ou senha incorretos",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {"success": True, "user": user}


@router.post("/logout")
def logout(store: auth.TokenStore = Depends(auth.get_token_store)):
    auth.logout(store)
    return {"success": True}


@router.get("/me")
def read_users_me(store: auth.TokenStore = Depends(auth.get_token_store)):
    """
    Retorna os dados do utilizador atualmente autenticado.
    """
    if not store.is_authenticated():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sessão não iniciada",
                            headers={"WWW-Authenticate": "Bearer"})
    return {"user": store.current_user(), "is_admin": store.is_admin()}
