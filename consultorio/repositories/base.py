from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, List, Optional

from consultorio.types.scheduling_types import Appointment


class AppointmentRepository(ABC):
    """
    Contrato que a agenda exige de quem guarda os agendamentos.
    O orquestrador só fala com esta interface, nunca com o banco direto.

    ATENÇÃO: nada aqui impede duas marcações simultâneas no mesmo horário
    (as duas leem a agenda livre e as duas gravam). Quem implementa é que
    precisa serializar isso se o consultório tiver mais de uma recepção.
    """

    @abstractmethod
    def list_active_appointments(self) -> List[Appointment]:
        """Todos os agendamentos que não estão cancelados."""
        pass

    @abstractmethod
    def get(self, appointment_id: int) -> Optional[Appointment]:
        pass

    @abstractmethod
    def insert(self, appointment: Appointment) -> int:
        """Grava e devolve o id gerado."""
        pass

    @abstractmethod
    def update(self, appointment_id: int, fields: Dict[str, Any]) -> Appointment:
        """
        Aplica os campos (nomes do dataclass Appointment: date, time,
        duration_minutes, kind, notes, status) e devolve o estado novo.
        """
        pass

    @abstractmethod
    def list_between(self, start_date: date, end_date: date, include_cancelled: bool = False) -> List[Appointment]:
        """Agendamentos com data entre start_date e end_date (inclusive), ordenados."""
        pass
