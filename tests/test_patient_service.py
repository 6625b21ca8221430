import pytest

from consultorio.extensions import db
from consultorio.models.tables import Paciente
from consultorio.services.patient_service import PacienteInvalido, PacienteNaoEncontrado, patient_service


def test_create_requires_fields(app):
    with pytest.raises(PacienteInvalido) as exc:
        patient_service.create({'nome': 'Ana'})
    assert 'responsavel' in str(exc.value)
    assert Paciente.query.count() == 0


def test_create_validates_age(app):
    with pytest.raises(PacienteInvalido):
        patient_service.create({'nome': 'Ana', 'responsavel': 'Rosa', 'idade': 'sete', 'telefone': '1'})


def test_resolve_uses_cache_until_update(app, paciente):
    assert patient_service.resolve(paciente.id)['nome'] == 'Sofía Ramírez'

    # Mudança direta no banco não aparece: a ficha está em cache
    paciente.nome = 'Sofía R.'
    db.session.commit()
    assert patient_service.resolve(paciente.id)['nome'] == 'Sofía Ramírez'

    patient_service.update(paciente.id, {'nome': 'Sofía Ramírez Gómez'})
    assert patient_service.resolve(paciente.id)['nome'] == 'Sofía Ramírez Gómez'


def test_resolve_missing(app):
    assert patient_service.resolve(404) is None
    assert not patient_service.exists(404)


def test_update_missing(app):
    with pytest.raises(PacienteNaoEncontrado):
        patient_service.update(404, {'nome': 'x'})


def test_search_matches_name_or_guardian(app, paciente):
    patient_service.create({'nome': 'Mateo López', 'idade': 10, 'responsavel': 'Carlos López', 'telefone': '2'})
    assert [p['nome'] for p in patient_service.search('laura')] == ['Sofía Ramírez']
    assert len(patient_service.search('López')) == 1


def test_paginate_caps_limit(app, paciente):
    pagina = patient_service.paginate(limit=1000, offset=0)
    assert pagina['total'] == 1
    assert len(pagina['patients']) == 1


def test_names_for(app, paciente):
    assert patient_service.names_for([paciente.id, paciente.id, 999]) == {paciente.id: 'Sofía Ramírez', 999: ''}


@pytest.mark.parametrize('dados', [
    {'idade': -3},
    {'idade': 'sete'},
    {'data_nascimento': '03/05/2016'},
    {'nome': ''},
])
def test_update_validates_like_create(app, paciente, dados):
    with pytest.raises(PacienteInvalido):
        patient_service.update(paciente.id, dados)
    db.session.rollback()
    assert db.session.get(Paciente, paciente.id).idade == 7


def test_update_birth_date_and_extra_phones(app, paciente):
    patient_service.update(paciente.id, {
        'data_nascimento': '2016-05-03',
        'telefones_adicionais': ['5511112222'],
    })
    ficha = patient_service.resolve(paciente.id)
    assert ficha['data_nascimento'] == '2016-05-03'
    assert '5511112222' in ficha['telefones_adicionais']
