# -*- coding: utf-8 -*-
"""
Configuração do banco de dados SQLAlchemy usado para guardar a sessão (tokens).
"""
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from financas.config import get_settings

DATABASE_URL = get_settings().DATABASE_URL

# Configuração de argumentos de conexão
connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}
    # Cria a pasta do arquivo SQLite (ex: ./database/sessoes.db)
    if DATABASE_URL.startswith("sqlite:///") and not DATABASE_URL.endswith(":memory:"):
        Path(DATABASE_URL[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)

# pool_pre_ping verifica se a conexão está viva antes de usar
engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=True,
    pool_recycle=3600,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
