# -*- coding: utf-8 -*-
"""
Modelo SQLAlchemy para os valores da sessão do utilizador (tokens e dados do utilizador).
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from financas.database import Base


class SessaoValor(Base):
    __tablename__ = "sessao_valores"

    id = Column(Integer, primary_key=True, index=True)
    chave = Column(String(50), unique=True, index=True, nullable=False)  # 'access_token', 'refresh_token', 'user'
    valor = Column(Text, nullable=False)
    data_atualizacao = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
