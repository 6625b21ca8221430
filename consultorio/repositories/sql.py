import logging
from datetime import date
from typing import Any, Dict, List, Optional

from consultorio.models.tables import Agendamento
from consultorio.repositories.base import AppointmentRepository
from consultorio.types.scheduling_types import Appointment, AppointmentNotFound, AppointmentStatus

logger = logging.getLogger(__name__)

# Nome do campo no dataclass -> coluna em Agendamento
_COLUNAS = {
    'date': 'data',
    'time': 'hora',
    'duration_minutes': 'duracao_minutos',
    'kind': 'tipo',
    'notes': 'notas',
    'status': 'status',
}


class SqlAlchemyAppointmentRepository(AppointmentRepository):
    """Agendamentos guardados na tabela `agendamentos` via Flask-SQLAlchemy."""

    def __init__(self, session):
        self.session = session

    def list_active_appointments(self) -> List[Appointment]:
        rows = (
            Agendamento.query
            .filter(Agendamento.status != AppointmentStatus.CANCELLED.value)
            .order_by(Agendamento.data.asc(), Agendamento.hora.asc())
            .all()
        )
        return [row.to_appointment() for row in rows]

    def get(self, appointment_id: int) -> Optional[Appointment]:
        row = self.session.get(Agendamento, appointment_id)
        return row.to_appointment() if row else None

    def insert(self, appointment: Appointment) -> int:
        row = Agendamento(
            paciente_id=appointment.patient_id,
            data=appointment.date,
            hora=appointment.time,
            duracao_minutos=appointment.duration_minutes,
            tipo=appointment.kind,
            notas=appointment.notes,
            status=appointment.status.value,
        )
        try:
            self.session.add(row)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info(f"✅ Agendamento {row.id} gravado: {row.data.isoformat()} {row.hora.strftime('%H:%M')}")
        return row.id

    def update(self, appointment_id: int, fields: Dict[str, Any]) -> Appointment:
        row = self.session.get(Agendamento, appointment_id)
        if row is None:
            raise AppointmentNotFound(appointment_id)

        for campo, valor in fields.items():
            coluna = _COLUNAS.get(campo)
            if coluna is None:
                raise KeyError(f"Campo de agendamento desconhecido: {campo}")
            if isinstance(valor, AppointmentStatus):
                valor = valor.value
            setattr(row, coluna, valor)

        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return row.to_appointment()

    def list_between(self, start_date: date, end_date: date, include_cancelled: bool = False) -> List[Appointment]:
        q = Agendamento.query.filter(
            Agendamento.data >= start_date,
            Agendamento.data <= end_date,
        )
        if not include_cancelled:
            q = q.filter(Agendamento.status != AppointmentStatus.CANCELLED.value)
        rows = q.order_by(Agendamento.data.asc(), Agendamento.hora.asc()).all()
        return [row.to_appointment() for row in rows]
