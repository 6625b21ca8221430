# consultorio/blueprints/pacientes/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app

from consultorio.extensions import db
from consultorio.services.patient_service import (
    patient_service, PacienteInvalido, PacienteNaoEncontrado
)

# Cria o Blueprint 'pacientes' com prefixo /api/pacientes
bp = Blueprint('pacientes', __name__, url_prefix='/api/pacientes')

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")


@bp.get('')
def listar():
    """
    ?id=1        -> um paciente
    ?ids=1,2,3   -> vários (para nomes na agenda)
    ?search=ana  -> busca por nome do paciente ou do responsável
    senão        -> paginação com ?limit=&offset=
    """
    paciente_id = request.args.get('id')
    if paciente_id:
        try:
            ficha = patient_service.resolve(int(paciente_id))
        except ValueError:
            return jsonify({'erro': f"id inválido: {paciente_id!r}"}), 400
        if ficha is None:
            return jsonify({'erro': 'Paciente não encontrado'}), 404
        return jsonify(ficha), 200

    ids = request.args.get('ids')
    if ids:
        try:
            lista_ids = [int(i) for i in ids.split(',') if i.strip()]
        except ValueError:
            return jsonify({'erro': f"ids inválidos: {ids!r}"}), 400
        pacientes = patient_service.by_ids(lista_ids)
        return jsonify({'patients': pacientes, 'total': len(pacientes)}), 200

    termo = (request.args.get('search') or '').strip()
    if termo:
        pacientes = patient_service.search(termo)
        return jsonify({'patients': pacientes, 'total': len(pacientes)}), 200

    try:
        limit = int(request.args.get('limit', 10))
        offset = int(request.args.get('offset', 0))
    except ValueError:
        return jsonify({'erro': 'limit/offset devem ser inteiros'}), 400
    return jsonify(patient_service.paginate(limit, offset)), 200


@bp.get('/<int:paciente_id>')
def detalhe(paciente_id):
    ficha = patient_service.resolve(paciente_id)
    if ficha is None:
        return jsonify({'erro': 'Paciente não encontrado'}), 404
    return jsonify(ficha), 200


@bp.post('')
def criar():
    dados = request.get_json(silent=True) or {}
    if not isinstance(dados, dict):
        return jsonify({'erro': 'O corpo da requisição deve ser um objeto JSON.'}), 400
    try:
        paciente = patient_service.create(dados)
    except PacienteInvalido as e:
        return jsonify({'erro': str(e), 'erros': e.erros}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Erro ao registrar paciente: {e}", exc_info=True)
        return jsonify({'erro': 'Erro ao registrar paciente'}), 500

    return jsonify({
        'success': True,
        'id': paciente.id,
        'message': 'Paciente registrado corretamente',
    }), 201


@bp.put('/<int:paciente_id>')
def editar(paciente_id):
    dados = request.get_json(silent=True) or {}
    if not isinstance(dados, dict):
        return jsonify({'erro': 'O corpo da requisição deve ser um objeto JSON.'}), 400
    try:
        paciente = patient_service.update(paciente_id, dados)
    except PacienteNaoEncontrado as e:
        return jsonify({'erro': str(e)}), 404
    except PacienteInvalido as e:
        return jsonify({'erro': str(e), 'erros': e.erros}), 400
    return jsonify(paciente.to_dict()), 200
