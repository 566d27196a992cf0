# -*- coding: utf-8 -*-
"""
Configuração lida das variáveis de ambiente (e do arquivo .env, se existir).
"""
import os
from dotenv import load_dotenv

from financas.schemas.ledger import PenaltyPolicy

load_dotenv()


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "sim", "yes", "on")


class Settings:
    def __init__(self):
        self.API_BASE_URL = os.environ.get("API_BASE_URL", "http://localhost/api-login").rstrip("/")
        self.API_TIMEOUT = float(os.environ.get("API_TIMEOUT", "10"))

        # Usa variável de ambiente ou default para SQLite
        database_url = os.environ.get("DATABASE_URL", "sqlite:///./database/sessoes.db")
        if database_url.startswith("postgres://"):
            database_url = database_url.replace("postgres://", "postgresql://", 1)
        self.DATABASE_URL = database_url

        self.ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")
        self.FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")
        self.LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
        self.LOG_FILE = os.environ.get("LOG_FILE") or None

        self.MULTA_ATIVA = _env_bool("MULTA_ATIVA", True)
        self.MULTA_PERCENT_1 = float(os.environ.get("MULTA_PERCENT_1", "10"))
        self.MULTA_PERCENT_2 = float(os.environ.get("MULTA_PERCENT_2", "10"))
        self.MULTA_DIA_1 = int(os.environ.get("MULTA_DIA_1", "10"))
        self.MULTA_DIA_2 = int(os.environ.get("MULTA_DIA_2", "20"))
        self.DIA_VENCIMENTO_PADRAO = int(os.environ.get("DIA_VENCIMENTO_PADRAO", "10"))

    @property
    def is_production(self):
        return self.ENVIRONMENT == "production"

    def penalty_policy(self) -> PenaltyPolicy:
        return PenaltyPolicy(
            enabled=self.MULTA_ATIVA,
            tier1_percent=self.MULTA_PERCENT_1,
            tier2_percent=self.MULTA_PERCENT_2,
            tier1_day=self.MULTA_DIA_1,
            tier2_day=self.MULTA_DIA_2,
        )


def get_settings() -> Settings:
    return Settings()
