# consultorio/services/patient_service.py
"""
Cadastro de pacientes. Para a agenda o paciente é só um id; este serviço
resolve id -> {nome, responsável, telefone, ...} para exibição.
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import or_

from consultorio.extensions import cache, db
from consultorio.models.tables import Paciente

logger = logging.getLogger(__name__)

CAMPOS_OBRIGATORIOS = ('nome', 'responsavel', 'idade', 'telefone')
LIMITE_MAXIMO = 100


class PacienteInvalido(ValueError):
    """Dados de cadastro incompletos ou mal formatados."""

    def __init__(self, erros: List[str]):
        super().__init__("; ".join(erros))
        self.erros = erros


class PacienteNaoEncontrado(LookupError):
    pass


def _cache_key(paciente_id) -> str:
    return f"paciente:{paciente_id}"


class PatientService:

    def resolve(self, paciente_id: int) -> Optional[Dict[str, Any]]:
        """Ficha resumida do paciente (com cache)."""
        cache_key = _cache_key(paciente_id)
        ficha = cache.get(cache_key)
        if ficha is not None:
            return ficha

        paciente = db.session.get(Paciente, paciente_id)
        if paciente is None:
            return None

        ficha = paciente.to_dict()
        cache.set(cache_key, ficha)
        return ficha

    def exists(self, paciente_id: int) -> bool:
        return self.resolve(paciente_id) is not None

    def names_for(self, ids: Iterable[int]) -> Dict[int, str]:
        """id -> nome, para pintar a agenda sem buscar um por um."""
        nomes = {}
        for paciente_id in set(ids):
            ficha = self.resolve(paciente_id)
            nomes[paciente_id] = ficha['nome'] if ficha else ''
        return nomes

    def search(self, termo: str) -> List[Dict[str, Any]]:
        """Busca por nome do paciente ou do responsável."""
        padrao = f"%{termo.strip()}%"
        pacientes = (
            Paciente.query
            .filter(or_(Paciente.nome.ilike(padrao), Paciente.responsavel.ilike(padrao)))
            .order_by(Paciente.id.desc())
            .all()
        )
        return [p.to_dict() for p in pacientes]

    def by_ids(self, ids: Iterable[int]) -> List[Dict[str, Any]]:
        ids = list(ids)
        if not ids:
            return []
        pacientes = Paciente.query.filter(Paciente.id.in_(ids)).order_by(Paciente.id.asc()).all()
        return [p.to_dict() for p in pacientes]

    def paginate(self, limit: int = 10, offset: int = 0) -> Dict[str, Any]:
        limit = max(1, min(int(limit), LIMITE_MAXIMO))
        offset = max(0, int(offset))
        total = Paciente.query.count()
        pacientes = Paciente.query.order_by(Paciente.id.desc()).limit(limit).offset(offset).all()
        return {'patients': [p.to_dict() for p in pacientes], 'total': total}

    @staticmethod
    def _validar(dados: Dict[str, Any], parcial: bool = False) -> Dict[str, Any]:
        """
        Confere e normaliza os campos do cadastro. Com parcial=True (edição)
        só os campos presentes em `dados` são checados e devolvidos.
        """
        erros = []
        if parcial:
            vazios = [campo for campo in CAMPOS_OBRIGATORIOS if campo in dados and not dados[campo]]
            if vazios:
                erros.append(f"Campos obrigatórios não podem ficar vazios: {', '.join(vazios)}.")
        else:
            faltando = [campo for campo in CAMPOS_OBRIGATORIOS if not dados.get(campo)]
            if faltando:
                erros.append(f"Faltam campos obrigatórios: {', '.join(faltando)}.")

        campos: Dict[str, Any] = {}
        for campo in ('nome', 'responsavel', 'telefone'):
            if dados.get(campo):
                campos[campo] = str(dados[campo]).strip()
        for campo in ('email', 'sexo'):
            if campo in dados:
                campos[campo] = dados[campo]

        if dados.get('idade'):
            try:
                campos['idade'] = int(dados['idade'])
                if campos['idade'] < 0:
                    erros.append("A idade não pode ser negativa.")
            except (TypeError, ValueError):
                erros.append("A idade deve ser um número inteiro.")

        if 'data_nascimento' in dados:
            campos['data_nascimento'] = None
            if dados['data_nascimento']:
                try:
                    campos['data_nascimento'] = datetime.strptime(dados['data_nascimento'], '%Y-%m-%d').date()
                except (TypeError, ValueError):
                    erros.append("Data de nascimento inválida (use AAAA-MM-DD).")

        if 'telefones_adicionais' in dados:
            adicionais = dados['telefones_adicionais']
            campos['telefones_adicionais'] = json.dumps(adicionais) if adicionais else None

        if erros:
            raise PacienteInvalido(erros)
        return campos

    def create(self, dados: Dict[str, Any]) -> Paciente:
        paciente = Paciente(**self._validar(dados))
        try:
            db.session.add(paciente)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(f"Paciente {paciente.id} cadastrado: {paciente.nome}")
        return paciente

    def update(self, paciente_id: int, dados: Dict[str, Any]) -> Paciente:
        paciente = db.session.get(Paciente, paciente_id)
        if paciente is None:
            raise PacienteNaoEncontrado(f"Paciente {paciente_id} não encontrado.")

        for campo, valor in self._validar(dados, parcial=True).items():
            setattr(paciente, campo, valor)

        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        # A ficha em cache ficou velha
        cache.delete(_cache_key(paciente_id))
        return paciente


patient_service = PatientService()
