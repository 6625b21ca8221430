# consultorio/commands.py
import logging
from datetime import date, time, timedelta

import click
from flask.cli import with_appcontext

from consultorio.extensions import db, cache
from consultorio.models.tables import Paciente, Agendamento
from consultorio.types.scheduling_types import AppointmentStatus

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")


def _proximo_dia_util(hoje: date) -> date:
    dia = hoje + timedelta(days=1)
    while dia.weekday() >= 5:
        dia += timedelta(days=1)
    return dia


def reset_database_logic(hoje: date = None):
    """
    Apaga todas as tabelas, recria a estrutura e popula com dados de
    demonstração (dois pacientes e três consultas no próximo dia útil).
    """
    try:
        logging.info("Iniciando reset do banco de dados do consultório...")

        db.drop_all()
        logging.info("Tabelas antigas apagadas.")

        db.create_all()
        logging.info("Tabelas recriadas com a estrutura atual.")

        # --- POPULANDO COM DADOS INICIAIS ---
        sofia = Paciente(nome="Sofía Ramírez", idade=7, responsavel="Laura Ramírez", telefone="5512345678")
        mateo = Paciente(nome="Mateo López", idade=10, responsavel="Carlos López", telefone="5587654321")
        db.session.add_all([sofia, mateo])
        db.session.flush()  # Garante os IDs

        dia = _proximo_dia_util(hoje or date.today())
        db.session.add_all([
            Agendamento(paciente_id=sofia.id, data=dia, hora=time(9, 0), duracao_minutos=30,
                        tipo="Consulta de avaliação", status=AppointmentStatus.CONFIRMED.value),
            Agendamento(paciente_id=mateo.id, data=dia, hora=time(10, 0), duracao_minutos=60,
                        tipo="Limpeza", status=AppointmentStatus.PENDING.value),
            Agendamento(paciente_id=sofia.id, data=dia, hora=time(16, 30), duracao_minutos=90,
                        tipo="Urgência", notas="Dor no molar", status=AppointmentStatus.PENDING.value),
        ])
        db.session.commit()
        cache.clear()
        logging.info(f"✅ Banco populado: 2 pacientes e 3 consultas em {dia.isoformat()}.")
        return True
    except Exception as e:
        db.session.rollback()
        logging.error(f"ERRO CRÍTICO ao resetar o banco: {e}", exc_info=True)
        return False


@click.command('reset-db')
@with_appcontext
def reset_db_command():
    """Apaga e recria o banco com dados de demonstração."""
    if reset_database_logic():
        click.echo("Banco de dados resetado com sucesso.")
    else:
        raise click.ClickException("Falha ao resetar o banco de dados (veja o log).")
