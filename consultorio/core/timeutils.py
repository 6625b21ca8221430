"""Utilidades de data/hora da agenda. Tudo em hora local ingênua (sem fuso)."""
from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Tuple

import pytz

from ..types.scheduling_types import InvalidAppointmentRequest

MESES = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]


def combine(dia: date, hora: time) -> datetime:
    """
    Monta o instante local a partir de data + hora.
    Não aplica fuso nenhum: '2024-06-10' + '10:00' é sempre 10/06 às 10h.
    """
    return datetime(dia.year, dia.month, dia.day, hora.hour, hora.minute)


def add_minutes(instante: datetime, minutos: int) -> datetime:
    try:
        return instante + timedelta(minutes=minutos)
    except OverflowError:
        raise InvalidAppointmentRequest(
            f"{instante.isoformat()} + {minutos} min sai do calendário suportado."
        )


def is_within(instante: datetime, inicio: datetime, fim: datetime) -> bool:
    """Pertinência com as duas pontas fechadas: inicio <= instante <= fim."""
    return inicio <= instante <= fim


def parse_date(valor) -> date:
    if isinstance(valor, datetime):
        return valor.date()
    if isinstance(valor, date):
        return valor
    try:
        return datetime.strptime(str(valor).strip(), "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise InvalidAppointmentRequest(f"Data inválida: {valor!r} (use AAAA-MM-DD).")


def parse_time(valor) -> time:
    if isinstance(valor, time):
        return valor.replace(second=0, microsecond=0)
    texto = str(valor).strip()
    for formato in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(texto, formato).time().replace(second=0)
        except ValueError:
            continue
    raise InvalidAppointmentRequest(f"Hora inválida: {valor!r} (use HH:MM).")


def format_time_12h(hora: time) -> str:
    """14:05 -> '2:05 p.m.'"""
    if hora is None:
        return "-"
    hora_12 = (hora.hour + 11) % 12 + 1
    periodo = "a.m." if hora.hour < 12 else "p.m."
    return f"{hora_12}:{hora.minute:02d} {periodo}"


def format_date_long(dia: date) -> str:
    """2024-06-10 -> '10 de junho de 2024'"""
    if dia is None:
        return "-"
    return f"{dia.day} de {MESES[dia.month - 1]} de {dia.year}"


def clinic_now(tz_name: str = "America/Mexico_City") -> datetime:
    """'Agora' no relógio da parede do consultório, já sem tzinfo."""
    fuso = pytz.timezone(tz_name)
    return datetime.now(fuso).replace(tzinfo=None, second=0, microsecond=0)


def is_time_in_past(dia: date, hora: time, agora: datetime) -> bool:
    return combine(dia, hora) < agora


def week_range(dia: date) -> Tuple[date, date]:
    """Semana de segunda a domingo que contém o dia."""
    inicio = dia - timedelta(days=dia.weekday())
    return inicio, inicio + timedelta(days=6)


def month_range(dia: date) -> Tuple[date, date]:
    ultimo = calendar.monthrange(dia.year, dia.month)[1]
    return dia.replace(day=1), dia.replace(day=ultimo)
