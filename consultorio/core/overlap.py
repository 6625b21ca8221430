"""Detecção de choque entre agendamentos."""
from __future__ import annotations

from datetime import date, datetime, time
from typing import Iterable, List, Optional

from .timeutils import add_minutes, combine, is_within
from ..types.scheduling_types import Appointment


def intervals_overlap(inicio_a: datetime, fim_a: datetime, inicio_b: datetime, fim_b: datetime) -> bool:
    """
    Compara com as duas pontas FECHADAS: uma consulta que termina às 10:30
    choca com outra que começa às 10:30. É conservador de propósito e a
    busca de próximo horário conta com isso.
    """
    return (
        is_within(inicio_a, inicio_b, fim_b)
        or is_within(fim_a, inicio_b, fim_b)
        or (inicio_a <= inicio_b and fim_a >= fim_b)
    )


def find_collisions(
    dia: date,
    hora: time,
    duration_minutes: int,
    appointments: Iterable[Appointment],
    exclude_id: Optional[int] = None,
) -> List[Appointment]:
    """Devolve os agendamentos ativos que chocam com o candidato."""
    inicio = combine(dia, hora)
    fim = add_minutes(inicio, duration_minutes)
    conflitos = []
    for ap in appointments:
        if not ap.is_active:
            continue
        if exclude_id is not None and ap.id == exclude_id:
            continue
        if intervals_overlap(inicio, fim, ap.start, ap.end):
            conflitos.append(ap)
    return conflitos


def has_overlap(
    dia: date,
    hora: time,
    duration_minutes: int,
    appointments: Iterable[Appointment],
    exclude_id: Optional[int] = None,
) -> bool:
    return bool(find_collisions(dia, hora, duration_minutes, appointments, exclude_id))
