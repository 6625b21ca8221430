from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional


class AppointmentStatus(Enum):
    """
    Estados possíveis de um agendamento.
    pending -> confirmed, pending -> cancelled, confirmed -> cancelled.
    Nada sai de cancelled.
    """
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    @classmethod
    def default(cls):
        return cls.PENDING

    @classmethod
    def parse(cls, value) -> "AppointmentStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidAppointmentRequest(f"Status desconhecido: {value!r}")


ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED},
    AppointmentStatus.CONFIRMED: {AppointmentStatus.CANCELLED},
    AppointmentStatus.CANCELLED: set(),
}


class RejectionReason(Enum):
    """Por que um pedido de horário não foi aceito."""
    SLOT_UNAVAILABLE = "slot_unavailable"  # choca com outro agendamento
    OUT_OF_HOURS = "out_of_hours"          # fora do expediente ou no almoço
    NO_SLOT_FOUND = "no_slot_found"        # nem a sugestão encontrou vaga


# ---------------------------------------------------------------------
# ERROS
# Resultados normais de negócio (choque, fora de horário) NÃO são erros:
# eles voltam dentro de SchedulingResult. Só entrada inválida e id
# inexistente viram exceção.
# ---------------------------------------------------------------------

class SchedulingError(Exception):
    """Base para os erros da agenda."""


class InvalidAppointmentRequest(SchedulingError, ValueError):
    """Duração não positiva, data/hora mal formatada, campo desconhecido..."""


class InvalidStatusTransition(InvalidAppointmentRequest):
    """Mudança de status que a máquina de estados não permite."""


class AppointmentNotFound(SchedulingError, LookupError):
    """Agendamento inexistente ou já cancelado."""

    def __init__(self, appointment_id):
        super().__init__(f"Agendamento {appointment_id} não encontrado.")
        self.appointment_id = appointment_id


@dataclass(frozen=True)
class Slot:
    """Um ponto de início candidato (data + hora)."""
    date: date
    time: time

    def to_dict(self) -> Dict[str, str]:
        return {"data": self.date.isoformat(), "hora": self.time.strftime("%H:%M")}


@dataclass
class Appointment:
    """Uma consulta marcada. O paciente é só uma chave estrangeira opaca."""
    id: Optional[int]
    patient_id: int
    date: date
    time: time
    duration_minutes: int
    kind: str = ""
    notes: str = ""
    status: AppointmentStatus = AppointmentStatus.PENDING

    @property
    def start(self) -> datetime:
        # Combinação ingênua (sem fuso) para não "pular" de dia
        return datetime(self.date.year, self.date.month, self.date.day,
                        self.time.hour, self.time.minute)

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration_minutes)

    @property
    def is_active(self) -> bool:
        return self.status != AppointmentStatus.CANCELLED

    def with_changes(self, **changes) -> "Appointment":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "paciente_id": self.patient_id,
            "data": self.date.isoformat(),
            "hora": self.time.strftime("%H:%M"),
            "duracao_minutos": self.duration_minutes,
            "tipo": self.kind,
            "notas": self.notes or "",
            "status": self.status.value,
            "fim": self.end.isoformat(timespec="minutes"),
        }


@dataclass
class AppointmentRequest:
    """Dados que a interface envia para marcar uma consulta."""
    patient_id: int
    date: date
    time: time
    duration_minutes: int = 30
    kind: str = "Consulta de avaliação"
    notes: str = ""


@dataclass
class SchedulingResult:
    """
    Resposta do orquestrador para create/edit.
    accepted=False traz o motivo, as consultas que chocaram e (no create)
    a sugestão do próximo horário livre.
    """
    accepted: bool
    appointment: Optional[Appointment] = None
    reason: Optional[RejectionReason] = None
    collisions: List[Appointment] = field(default_factory=list)
    suggestion: Optional[Slot] = None
    overridden: bool = False
    in_past: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aceito": self.accepted,
            "agendamento": self.appointment.to_dict() if self.appointment else None,
            "motivo": self.reason.value if self.reason else None,
            "conflitos": [ap.id for ap in self.collisions],
            "sugestao": self.suggestion.to_dict() if self.suggestion else None,
            "forcado": self.overridden,
            "no_passado": self.in_past,
        }
