"""Regras de expediente do consultório."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Mapping

from .timeutils import parse_time


@dataclass(frozen=True)
class ClinicPolicy:
    """
    Janelas de atendimento. Só o HORÁRIO DE INÍCIO é controlado aqui:
    uma consulta longa pode começar às 12:30 e avançar pelo almoço.
    """
    opens_at: time = time(9, 0)
    closes_at: time = time(20, 30)
    lunch_start: time = time(13, 0)
    lunch_end: time = time(16, 30)
    step_minutes: int = 15
    max_lookahead_days: int = 90

    def __post_init__(self):
        if not (self.opens_at <= self.lunch_start <= self.lunch_end <= self.closes_at):
            raise ValueError(
                f"Expediente inconsistente: abre {self.opens_at}, almoço "
                f"{self.lunch_start}-{self.lunch_end}, fecha {self.closes_at}."
            )
        if self.opens_at >= self.closes_at:
            raise ValueError("O consultório precisa abrir antes de fechar.")
        if self.step_minutes <= 0:
            raise ValueError("SLOT_STEP_MINUTES deve ser positivo.")
        if self.max_lookahead_days < 0:
            raise ValueError("SLOT_MAX_LOOKAHEAD_DAYS não pode ser negativo.")

    @classmethod
    def from_config(cls, config: Mapping) -> "ClinicPolicy":
        """Lê as chaves CLINIC_* / SLOT_* (app.config ou dict)."""
        padrao = cls()
        lookahead = config.get("SLOT_MAX_LOOKAHEAD_DAYS")
        return cls(
            opens_at=parse_time(config.get("CLINIC_OPENS_AT") or padrao.opens_at),
            closes_at=parse_time(config.get("CLINIC_CLOSES_AT") or padrao.closes_at),
            lunch_start=parse_time(config.get("CLINIC_LUNCH_START") or padrao.lunch_start),
            lunch_end=parse_time(config.get("CLINIC_LUNCH_END") or padrao.lunch_end),
            step_minutes=int(config.get("SLOT_STEP_MINUTES") or padrao.step_minutes),
            max_lookahead_days=int(lookahead) if lookahead is not None else padrao.max_lookahead_days,
        )

    def is_lunch_time(self, hora: time) -> bool:
        return self.lunch_start <= hora < self.lunch_end

    def is_bookable_time(self, hora: time) -> bool:
        """Manhã [abertura, almoço) ou tarde [fim do almoço, fechamento)."""
        return (
            (self.opens_at <= hora < self.lunch_start)
            or (self.lunch_end <= hora < self.closes_at)
        )


DEFAULT_POLICY = ClinicPolicy()


def is_bookable_time(hora: time, policy: ClinicPolicy = DEFAULT_POLICY) -> bool:
    return policy.is_bookable_time(hora)
