from datetime import date, time

import pytest

from consultorio.extensions import db
from consultorio.models.tables import Agendamento
from consultorio.repositories.sql import SqlAlchemyAppointmentRepository
from consultorio.types.scheduling_types import AppointmentNotFound, AppointmentStatus

from conftest import make_appointment


@pytest.fixture
def repo(app):
    return SqlAlchemyAppointmentRepository(db.session)


def test_insert_and_get(repo, paciente):
    novo_id = repo.insert(make_appointment(patient_id=paciente.id, hora=time(9, 30), duracao=45))
    ap = repo.get(novo_id)
    assert ap.id == novo_id
    assert ap.patient_id == paciente.id
    assert ap.date == date(2024, 6, 10)
    assert ap.time == time(9, 30)
    assert ap.duration_minutes == 45
    assert ap.status == AppointmentStatus.PENDING


def test_get_missing_returns_none(repo):
    assert repo.get(123) is None


def test_update_maps_fields_to_columns(repo, paciente):
    novo_id = repo.insert(make_appointment(patient_id=paciente.id))
    ap = repo.update(novo_id, {'time': time(11, 0), 'notes': 'Trazer exames', 'status': AppointmentStatus.CONFIRMED})
    assert ap.time == time(11, 0)
    assert ap.notes == 'Trazer exames'
    assert db.session.get(Agendamento, novo_id).status == 'confirmed'


def test_update_missing_raises(repo):
    with pytest.raises(AppointmentNotFound):
        repo.update(99, {'notes': 'x'})


def test_active_list_skips_cancelled(repo, paciente):
    a = repo.insert(make_appointment(patient_id=paciente.id, hora=time(9, 0)))
    b = repo.insert(make_appointment(patient_id=paciente.id, hora=time(10, 0)))
    repo.update(a, {'status': AppointmentStatus.CANCELLED})
    assert [ap.id for ap in repo.list_active_appointments()] == [b]


def test_list_between_is_inclusive_and_ordered(repo, paciente):
    ids = [
        repo.insert(make_appointment(patient_id=paciente.id, dia=date(2024, 6, 12), hora=time(9, 0))),
        repo.insert(make_appointment(patient_id=paciente.id, dia=date(2024, 6, 10), hora=time(17, 0))),
        repo.insert(make_appointment(patient_id=paciente.id, dia=date(2024, 6, 10), hora=time(9, 0))),
        repo.insert(make_appointment(patient_id=paciente.id, dia=date(2024, 6, 20), hora=time(9, 0))),
    ]
    encontrados = repo.list_between(date(2024, 6, 10), date(2024, 6, 12))
    assert [ap.id for ap in encontrados] == [ids[2], ids[1], ids[0]]

    repo.update(ids[0], {'status': AppointmentStatus.CANCELLED})
    assert len(repo.list_between(date(2024, 6, 10), date(2024, 6, 12))) == 2
    assert len(repo.list_between(date(2024, 6, 10), date(2024, 6, 12), include_cancelled=True)) == 3
