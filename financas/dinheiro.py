# -*- coding: utf-8 -*-
"""
Primitivas de dinheiro e datas usadas pelo extrato financeiro.

Todas as funções são totais no domínio documentado: valores vindos do JSON do
backend passam por `to_money` e nunca geram exceção.
"""
import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from dateutil.relativedelta import relativedelta

DIA_VENCIMENTO_PADRAO = 10


def to_money(value) -> float:
    """Converte qualquer entrada num valor monetário finito; o resto vira 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(Decimal(str(value)))
    except (InvalidOperation, ValueError, TypeError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def round_money(value) -> float:
    return round(to_money(value), 2)


def to_date(value):
    """Aceita date, datetime ou texto ISO ('YYYY-MM-DD', com ou sem hora)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    texto = str(value).strip()
    if len(texto) == 7:
        # 'YYYY-MM' representa o primeiro dia do mês
        texto = f"{texto}-01"
    return date.fromisoformat(texto[:10])


def month_key(value) -> str:
    """Normaliza uma data ou referência para o formato 'YYYY-MM'."""
    data = to_date(value)
    if data is None:
        raise ValueError("Referência de mês vazia")
    return f"{data.year:04d}-{data.month:02d}"


def add_months(month_reference, months: int) -> str:
    inicio = to_date(month_key(month_reference))
    return month_key(inicio + relativedelta(months=months))


def due_date_for_month(month_reference, day: int = DIA_VENCIMENTO_PADRAO) -> date:
    """Data de vencimento de um mês quando não há linha de plano para consultar."""
    inicio = to_date(month_key(month_reference))
    ultimo_dia = (inicio + relativedelta(months=1, days=-1)).day
    return inicio.replace(day=min(day, ultimo_dia))


def is_past(due_date, today) -> bool:
    return to_date(today) > to_date(due_date)


def days_late(due_date, today) -> int:
    """Dias corridos após o vencimento; 0 se ainda não venceu."""
    return max((to_date(today) - to_date(due_date)).days, 0)
