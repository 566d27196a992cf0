# -*- coding: utf-8 -*-
"""
Arquivo principal da aplicação FastAPI do módulo financeiro da escola.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from financas.config import get_settings
from financas.database import engine, Base
from financas.models import sessao  # noqa: F401  registra a tabela de sessão
from financas.routes import auth_fastapi, financeiro_aluno_fastapi

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    filename=settings.LOG_FILE
)

# Cria as tabelas no banco de dados com tratamento de erros
try:
    Base.metadata.create_all(bind=engine)
    logging.info("Tabelas criadas com sucesso!")
except Exception as e:
    logging.error(f"Erro ao criar tabelas: {e}")


# Inicializa a aplicação FastAPI
app = FastAPI(
    title="API Financeiro Escolar",
    description="Extrato financeiro dos estudantes: mensalidades, multas, atrasos e créditos",
    version="1.0.0",
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    openapi_url=None if settings.is_production else "/openapi.json"
)

origins = [
    settings.FRONTEND_URL,
    "http://localhost:5173",
    "http://localhost",
    "http://127.0.0.1",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Montagem dos routers
app.include_router(auth_fastapi.router)
app.include_router(financeiro_aluno_fastapi.router)


@app.get("/", tags=["Root"])
async def root():
    return {
        "mensagem": "API Financeiro Escolar",
        "documentacao": "/docs",
        "endpoints": [
            {"extrato": "/api/v1/financeiro-aluno/{student_id}?curso_id="},
            {"pagamentos": "/api/v1/financeiro-aluno/pagamentos"},
            {"carteira": "/api/v1/financeiro-aluno/{student_id}/carteira?curso_id="},
            {"multas": "/api/v1/financeiro-aluno/multas/simular"},
            {"auth": "/api/v1/auth/login"}
        ]
    }
