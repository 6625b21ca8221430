# consultorio/blueprints/citas/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app

from consultorio.extensions import db
from consultorio.core.policy import ClinicPolicy
from consultorio.core.scheduling import SchedulingService
from consultorio.core.timeutils import (
    clinic_now, format_date_long, format_time_12h, month_range, parse_date, parse_time, week_range
)
from consultorio.repositories.sql import SqlAlchemyAppointmentRepository
from consultorio.services.patient_service import patient_service
from consultorio.types.scheduling_types import (
    AppointmentNotFound, AppointmentRequest, InvalidAppointmentRequest
)

# Cria o Blueprint 'citas' com prefixo /api/citas
bp = Blueprint('citas', __name__, url_prefix='/api/citas')

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

# Campos do JSON (como a tela envia) -> campos do Appointment
CAMPOS_JSON = {
    'data': 'date',
    'hora': 'time',
    'duracao_minutos': 'duration_minutes',
    'tipo': 'kind',
    'notas': 'notes',
    'status': 'status',
}


def get_scheduling_service() -> SchedulingService:
    """Monta o orquestrador com o repositório SQL e o expediente do app.config."""
    tz_name = current_app.config.get('CLINIC_TIMEZONE', 'America/Mexico_City')
    return SchedulingService(
        SqlAlchemyAppointmentRepository(db.session),
        policy=ClinicPolicy.from_config(current_app.config),
        clock=lambda: clinic_now(tz_name),
    )


def _serializar(appointment, nomes=None):
    item = appointment.to_dict()
    if nomes is not None:
        item['paciente_nome'] = nomes.get(appointment.patient_id, '')
    item['hora_12h'] = format_time_12h(appointment.time)
    item['data_extenso'] = format_date_long(appointment.date)
    return item


def _erro(mensagem, status):
    return jsonify({'erro': mensagem}), status


def _forcar(payload) -> bool:
    valor = payload.get('forcar', False)
    if isinstance(valor, str):
        return valor.strip().lower() in ('1', 'true', 'sim', 'yes')
    return bool(valor)


@bp.get('')
def listar():
    """
    Sem parâmetros: todos os agendamentos ativos.
    Com ?data=AAAA-MM-DD&view=day|week|month: só o período da visão.
    """
    servico = get_scheduling_service()
    try:
        data_str = request.args.get('data')
        if data_str:
            dia = parse_date(data_str)
            view = request.args.get('view', 'week')
            if view == 'day':
                inicio, fim = dia, dia
            elif view == 'week':
                inicio, fim = week_range(dia)
            elif view == 'month':
                inicio, fim = month_range(dia)
            else:
                return _erro(f"Visão desconhecida: {view}", 400)
            incluir_cancelados = request.args.get('incluir_cancelados', 'false').lower() == 'true'
            agendamentos = servico.list_range(inicio, fim, include_cancelled=incluir_cancelados)
        else:
            agendamentos = servico.active_appointments()
    except InvalidAppointmentRequest as e:
        return _erro(str(e), 400)

    nomes = patient_service.names_for(ap.patient_id for ap in agendamentos)
    return jsonify([_serializar(ap, nomes) for ap in agendamentos]), 200


@bp.get('/<int:agendamento_id>')
def detalhe(agendamento_id):
    servico = get_scheduling_service()
    ap = servico.repository.get(agendamento_id)
    if ap is None:
        return _erro(f"Agendamento {agendamento_id} não encontrado.", 404)
    item = _serializar(ap)
    item['paciente'] = patient_service.resolve(ap.patient_id)
    return jsonify(item), 200


@bp.post('')
def criar():
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return _erro("O corpo da requisição deve ser um objeto JSON.", 400)
    servico = get_scheduling_service()

    try:
        paciente_id = payload.get('paciente_id')
        if not paciente_id:
            return _erro("Paciente é obrigatório.", 400)
        try:
            paciente_id = int(paciente_id)
        except (TypeError, ValueError):
            return _erro(f"paciente_id inválido: {paciente_id!r}", 400)
        if not patient_service.exists(paciente_id):
            return _erro(f"Paciente {paciente_id} não encontrado.", 404)

        pedido = AppointmentRequest(
            patient_id=paciente_id,
            date=parse_date(payload.get('data')),
            time=parse_time(payload.get('hora')),
            duration_minutes=payload.get('duracao_minutos', 30),
            kind=payload.get('tipo') or 'Consulta de avaliação',
            notes=payload.get('notas') or '',
        )
        resultado = servico.create(pedido, force=_forcar(payload))
    except InvalidAppointmentRequest as e:
        return _erro(str(e), 400)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Erro ao criar agendamento: {e}", exc_info=True)
        return _erro("Não foi possível agendar a consulta.", 500)

    if not resultado.accepted:
        corpo = resultado.to_dict()
        corpo['erro'] = "O horário selecionado choca com outra consulta ou está fora do expediente."
        return jsonify(corpo), 409
    return jsonify(resultado.to_dict()), 201


@bp.put('/<int:agendamento_id>')
def editar(agendamento_id):
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return _erro("O corpo da requisição deve ser um objeto JSON.", 400)
    servico = get_scheduling_service()

    mudancas = {}
    for chave, valor in payload.items():
        if chave in ('forcar', 'id', 'paciente_id'):
            continue
        if chave not in CAMPOS_JSON:
            return _erro(f"Campo desconhecido: {chave}", 400)
        mudancas[CAMPOS_JSON[chave]] = valor

    try:
        resultado = servico.edit(agendamento_id, mudancas, force=_forcar(payload))
    except AppointmentNotFound as e:
        return _erro(str(e), 404)
    except InvalidAppointmentRequest as e:
        return _erro(str(e), 400)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Erro ao editar agendamento {agendamento_id}: {e}", exc_info=True)
        return _erro("Não foi possível atualizar a consulta.", 500)

    if not resultado.accepted:
        return jsonify(resultado.to_dict()), 409
    return jsonify(resultado.to_dict()), 200


@bp.post('/<int:agendamento_id>/confirmar')
def confirmar(agendamento_id):
    try:
        ap = get_scheduling_service().confirm(agendamento_id)
    except AppointmentNotFound as e:
        return _erro(str(e), 404)
    except InvalidAppointmentRequest as e:
        return _erro(str(e), 409)
    return jsonify(_serializar(ap)), 200


@bp.delete('/<int:agendamento_id>')
def cancelar(agendamento_id):
    try:
        ap = get_scheduling_service().cancel(agendamento_id)
    except AppointmentNotFound as e:
        return _erro(str(e), 404)
    return jsonify(_serializar(ap)), 200


@bp.get('/sugestao')
def sugestao():
    """Próximo horário livre: ?data=AAAA-MM-DD&hora=HH:MM&duracao=30"""
    try:
        dia = parse_date(request.args.get('data'))
        hora = parse_time(request.args.get('hora'))
        slot = get_scheduling_service().suggest(dia, hora, request.args.get('duracao', 30))
    except InvalidAppointmentRequest as e:
        return _erro(str(e), 400)

    if slot is None:
        return _erro("Nenhum horário disponível no período de busca.", 404)

    corpo = slot.to_dict()
    corpo['hora_12h'] = format_time_12h(slot.time)
    corpo['data_extenso'] = format_date_long(slot.date)
    return jsonify(corpo), 200
