"""Busca do próximo horário livre."""
from __future__ import annotations

import logging
from datetime import date, time, timedelta
from typing import Iterable, Optional

from .overlap import has_overlap
from .policy import ClinicPolicy, DEFAULT_POLICY
from .timeutils import add_minutes, combine
from ..types.scheduling_types import Appointment, Slot

logger = logging.getLogger(__name__)


def find_next_slot(
    dia: date,
    hora: time,
    duration_minutes: int,
    appointments: Iterable[Appointment],
    policy: ClinicPolicy = DEFAULT_POLICY,
    exclude_id: Optional[int] = None,
) -> Optional[Slot]:
    """
    Anda de `policy.step_minutes` em `policy.step_minutes` a partir de
    data+hora até achar um início dentro do expediente que não choque com
    ninguém. No almoço pula direto para o fim do almoço. Ao chegar no
    fechamento, continua no dia seguinte a partir da abertura.

    Desiste depois de `policy.max_lookahead_days` dias e devolve None.
    """
    # A lista é percorrida várias vezes
    appointments = list(appointments)
    passo = policy.step_minutes

    for dias_a_frente in range(policy.max_lookahead_days + 1):
        atual = combine(dia, hora)
        fim_do_dia = combine(dia, policy.closes_at)
        fim_almoco = combine(dia, policy.lunch_end)

        while atual < fim_do_dia:
            if policy.is_lunch_time(atual.time()):
                atual = fim_almoco
                continue
            if policy.is_bookable_time(atual.time()) and not has_overlap(
                dia, atual.time(), duration_minutes, appointments, exclude_id
            ):
                if dias_a_frente:
                    logger.info(f"Próximo horário livre só em {dia.isoformat()} (+{dias_a_frente} dia(s)).")
                return Slot(date=dia, time=atual.time())
            atual = add_minutes(atual, passo)

        dia = dia + timedelta(days=1)
        hora = policy.opens_at

    logger.warning(
        f"⚠️ Nenhum horário livre de {duration_minutes} min nos próximos "
        f"{policy.max_lookahead_days} dias."
    )
    return None
