import sys
import logging
import argparse
from datetime import date

from dotenv import load_dotenv

from financas.auth import TokenStore
from financas.config import get_settings
from financas.database import Base, SessionLocal, engine
from financas.exceptions import ApiError, IncompleteData
from financas.models import sessao  # noqa: F401
from financas.schemas.pagamento import PAYMENT_METHOD_LABELS
from financas.schemas.plano_pagamento import PaymentPlanStatus
from financas.services.api import ApiClient
from financas.services.financeiro_aluno_service import get_student_ledger

# Configuração básica de logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

MESES = ['Jan', 'Fev', 'Mar', 'Abr', 'Mai', 'Jun', 'Jul', 'Ago', 'Set', 'Out', 'Nov', 'Dez']

STATUS_LABELS = {
    PaymentPlanStatus.PENDING: 'Pendente',
    PaymentPlanStatus.OVERDUE: 'Em Atraso',
    PaymentPlanStatus.PARTIAL: 'Parcial',
    PaymentPlanStatus.PAID: 'Pago',
}


def format_currency(valor):
    texto = f"{abs(valor):,.2f}".replace(",", " ").replace(".", ",")
    return f"{'-' if valor < 0 else ''}{texto} MZN"


def format_month_reference(month_reference):
    if not month_reference:
        return '-'
    ano, mes = month_reference.split('-')
    return f"{MESES[int(mes) - 1]} {ano}"


def print_summary(summary):
    print(f"Estudante: {summary.student_name or summary.student_id} | Curso: {summary.course_id} | Data: {summary.today}")
    print(f"Total pago:           {format_currency(summary.total_paid)}")
    print(f"Total devido (+multa): {format_currency(summary.total_due_with_penalty)}")
    print(f"Multas:               {format_currency(summary.total_penalties)}")
    print(f"Saldo atual:          {format_currency(summary.current_balance)}")
    print(f"Crédito em carteira:  {format_currency(summary.wallet_balance)}")
    if not summary.class_started:
        print("Turma ainda não iniciada: sem parcelas geradas.")
    print()
    for item in summary.history:
        multa = f" (+multa {format_currency(item.penalty)})" if item.penalty > 0 else ""
        print(f"  {format_month_reference(item.month_reference):<9} venc. {item.due_date}  "
              f"{format_currency(item.total_owed):>14}{multa}  pago {format_currency(item.paid_so_far):>14}  "
              f"{STATUS_LABELS[item.status]}")
    if summary.transactions:
        print("\nPagamentos:")
        for t in summary.transactions:
            estornado = " [ESTORNADO]" if t.is_reversed else ""
            print(f"  #{t.id} {t.paid_date or '-'} {format_currency(t.amount_paid):>14} "
                  f"{PAYMENT_METHOD_LABELS[t.payment_method]} {format_month_reference(t.month_reference)}{estornado}")


def gerar_relatorio():
    """
    Mostra o extrato financeiro de um estudante num curso.
    Usa a sessão guardada pelo login da API (tokens na BD de sessões).
    """
    parser = argparse.ArgumentParser(description='Extrato financeiro do estudante')
    parser.add_argument('--student-id', type=int, required=True, help='ID do estudante')
    parser.add_argument('--curso-id', required=True, help='ID do curso')
    parser.add_argument('--hoje', type=date.fromisoformat, help='Data de referência (YYYY-MM-DD)')
    args = parser.parse_args()

    load_dotenv()
    settings = get_settings()
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        client = ApiClient(settings.API_BASE_URL, store=TokenStore(db), timeout=settings.API_TIMEOUT)
        hoje = args.hoje or date.today()
        logging.info(f"A calcular extrato do estudante {args.student_id} no curso {args.curso_id} em {hoje}")
        summary = get_student_ledger(client, args.student_id, args.curso_id, hoje, settings.penalty_policy())
    except (IncompleteData, ApiError) as e:
        logging.error(f"Não foi possível gerar o extrato: {e}")
        return 1
    finally:
        db.close()

    print_summary(summary)
    return 0


if __name__ == "__main__":
    sys.exit(gerar_relatorio())
