from dataclasses import replace
from datetime import date, datetime, time

import pytest

from config import Config
from consultorio import create_app
from consultorio.extensions import db
from consultorio.repositories.base import AppointmentRepository
from consultorio.types.scheduling_types import Appointment, AppointmentStatus


class TestConfig(Config):
    TESTING = True
    CACHE_TYPE = 'SimpleCache'

    @classmethod
    def init_app(cls) -> None:
        cls.SQLALCHEMY_DATABASE_URI = 'sqlite://'


class InMemoryAppointmentRepository(AppointmentRepository):
    """Repositório em memória para testar o orquestrador sem banco."""

    def __init__(self, appointments=()):
        self.rows = {}
        self._next_id = 1
        for ap in appointments:
            self.insert(ap)

    def list_active_appointments(self):
        return [replace(ap) for ap in self.rows.values() if ap.is_active]

    def get(self, appointment_id):
        ap = self.rows.get(appointment_id)
        return replace(ap) if ap else None

    def insert(self, appointment):
        novo_id = appointment.id or self._next_id
        self._next_id = max(self._next_id, novo_id) + 1
        self.rows[novo_id] = replace(appointment, id=novo_id)
        return novo_id

    def update(self, appointment_id, fields):
        self.rows[appointment_id] = replace(self.rows[appointment_id], **fields)
        return replace(self.rows[appointment_id])

    def list_between(self, start_date, end_date, include_cancelled=False):
        return sorted(
            (replace(ap) for ap in self.rows.values()
             if start_date <= ap.date <= end_date and (include_cancelled or ap.is_active)),
            key=lambda ap: ap.start,
        )


def make_appointment(id=None, dia=date(2024, 6, 10), hora=time(10, 0), duracao=30,
                     status=AppointmentStatus.PENDING, patient_id=1):
    return Appointment(
        id=id,
        patient_id=patient_id,
        date=dia,
        time=hora,
        duration_minutes=duracao,
        kind="Consulta de avaliação",
        status=status,
    )


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 6, 1, 8, 0)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def paciente(app):
    from consultorio.services.patient_service import patient_service
    return patient_service.create({
        'nome': 'Sofía Ramírez',
        'idade': 7,
        'responsavel': 'Laura Ramírez',
        'telefone': '5512345678',
    })
