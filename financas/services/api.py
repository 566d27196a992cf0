# -*- coding: utf-8 -*-
"""
Cliente HTTP para a API do backend, com o token da sessão e refresh silencioso.
"""
import json
import logging
import threading

import requests
from fastapi import Depends

from financas import auth
from financas.config import Settings, get_settings
from financas.exceptions import ApiError, SessionExpired

# Rotas de autenticação nunca disparam refresh
AUTH_ROUTES = ("login", "refresh", "register")


def parse_body(response):
    """Lê o JSON da resposta; alguns scripts PHP devolvem JSON como text/html."""
    try:
        return response.json()
    except ValueError:
        texto = (response.text or "").strip()
        if texto.startswith("{"):
            try:
                return json.loads(texto)
            except ValueError:
                pass
    raise ApiError(f"Resposta inválida do servidor (HTTP {response.status_code})",
                   status_code=response.status_code)


class ApiClient:

    def __init__(self, base_url, store=None, timeout=10, http=None):
        self.base_url = base_url.rstrip("/")
        self.store = store
        self.timeout = timeout
        self.http = http or requests.Session()
        self._refresh_lock = threading.Lock()

    def _is_auth_route(self, endpoint):
        return any(nome in endpoint for nome in AUTH_ROUTES)

    def request(self, method, endpoint, params=None, json=None, retry=True):
        url = f"{self.base_url}{endpoint}"
        is_auth_route = self._is_auth_route(endpoint)

        token = self.store.access_token if self.store else None
        if token and not is_auth_route and self.store.refresh_token and auth.token_expired(token):
            token = self.refresh(failed_token=token)

        headers = {"Content-Type": "application/json"}
        if token and not is_auth_route:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self.http.request(method, url, params=params, json=json, headers=headers,
                                         timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logging.error(f"Erro na requisição {method} {url}: {e}")
            raise ApiError(f"Erro de comunicação com o servidor: {e}") from e

        logging.info(f"API Request: {method} {url} - Status: {response.status_code}")

        if response.status_code == 401 and retry and not is_auth_route and self.store is not None:
            self.refresh(failed_token=token)
            return self.request(method, endpoint, params=params, json=json, retry=False)
        return response

    def refresh(self, failed_token=None):
        """
        Troca o refresh token por um novo access token. Se outra thread já o
        renovou enquanto esperávamos, usa o token novo sem chamar o backend.
        """
        with self._refresh_lock:
            atual = self.store.access_token
            if atual and failed_token and atual != failed_token:
                return atual

            refresh_token = self.store.refresh_token
            if not refresh_token:
                self.store.clear()
                raise SessionExpired("Refresh token ausente", status_code=401)

            logging.info("Access token expirado, a renovar a sessão...")
            try:
                response = self.http.post(f"{self.base_url}{auth.REFRESH_ENDPOINT}",
                                          json={"refresh_token": refresh_token}, timeout=self.timeout)
                body = parse_body(response)
            except (requests.exceptions.RequestException, ApiError) as e:
                logging.warning(f"Falha ao renovar a sessão: {e}")
                self.store.clear()
                raise SessionExpired("Não foi possível renovar a sessão", status_code=401) from e

            dados = body.get("data") if isinstance(body.get("data"), dict) else body
            access_token = dados.get("access_token")
            if response.status_code >= 400 or not access_token:
                logging.warning("Renovação da sessão recusada pelo servidor.")
                self.store.clear()
                raise SessionExpired("Novo access_token não recebido", status_code=401)

            self.store.save_tokens(access_token, dados.get("refresh_token"))
            return access_token

    def _unwrap(self, response, default_message):
        body = parse_body(response)
        if not isinstance(body, dict):
            raise ApiError(default_message, status_code=response.status_code)
        if response.status_code >= 400 or not body.get("success"):
            raise ApiError(body.get("message") or body.get("error") or default_message,
                           status_code=response.status_code)
        return body

    def get_json(self, endpoint, params=None, default_message="Erro ao carregar dados"):
        params = {k: v for k, v in (params or {}).items() if v is not None}
        return self._unwrap(self.request("GET", endpoint, params=params), default_message)

    def post_json(self, endpoint, payload=None, default_message="Erro ao enviar dados"):
        return self._unwrap(self.request("POST", endpoint, json=payload), default_message)


def get_api_client(store: auth.TokenStore = Depends(auth.get_token_store),
                   settings: Settings = Depends(get_settings)) -> ApiClient:
    return ApiClient(settings.API_BASE_URL, store=store, timeout=settings.API_TIMEOUT)
