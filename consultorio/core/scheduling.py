"""Regras de negócio para agendamentos."""
import logging
from datetime import date, datetime, time
from typing import Any, Callable, Dict, List, Optional

from .overlap import find_collisions
from .policy import ClinicPolicy, DEFAULT_POLICY
from .slots import find_next_slot
from .timeutils import is_time_in_past, parse_date, parse_time
from ..repositories.base import AppointmentRepository
from ..types.scheduling_types import (
    ALLOWED_TRANSITIONS,
    Appointment,
    AppointmentNotFound,
    AppointmentRequest,
    AppointmentStatus,
    InvalidAppointmentRequest,
    InvalidStatusTransition,
    RejectionReason,
    SchedulingResult,
    Slot,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('date', 'time', 'duration_minutes', 'kind', 'notes', 'status')

# Limite da coluna Integer de agendamentos.duracao_minutos
MAX_DURATION_MINUTES = 2 ** 31 - 1


def validate_duration(valor) -> int:
    if isinstance(valor, bool):
        raise InvalidAppointmentRequest(f"Duração inválida: {valor!r}")
    try:
        minutos = int(valor)
    except (TypeError, ValueError):
        raise InvalidAppointmentRequest(f"Duração inválida: {valor!r}")
    if minutos != valor and str(minutos) != str(valor).strip():
        raise InvalidAppointmentRequest(f"Duração deve ser um número inteiro de minutos: {valor!r}")
    if minutos <= 0:
        raise InvalidAppointmentRequest("A duração deve ser um número inteiro positivo (em minutos).")
    if minutos > MAX_DURATION_MINUTES:
        raise InvalidAppointmentRequest(f"Duração grande demais: {minutos} min.")
    return minutos


class SchedulingService:
    """
    Orquestra expediente, detecção de choque e sugestão de horário para
    criar/editar/cancelar/confirmar. É o único que altera agendamentos;
    a persistência chega injetada (AppointmentRepository).

    Choque e fora de expediente voltam como SchedulingResult, nunca como
    exceção: quem chama decide se aceita a sugestão, força ou desiste.
    """

    def __init__(
        self,
        repository: AppointmentRepository,
        policy: Optional[ClinicPolicy] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository
        self.policy = policy or DEFAULT_POLICY
        self.clock = clock or datetime.now

    # ------------------------------------------------------------------
    # Consultas (sem efeito colateral)
    # ------------------------------------------------------------------

    def active_appointments(self) -> List[Appointment]:
        return self.repository.list_active_appointments()

    def suggest(self, dia: date, hora: time, duration_minutes: int, exclude_id: Optional[int] = None) -> Optional[Slot]:
        """Próximo horário livre a partir de data+hora (None se não houver)."""
        duracao = validate_duration(duration_minutes)
        return find_next_slot(
            dia, hora, duracao, self.active_appointments(), self.policy, exclude_id=exclude_id
        )

    def list_range(self, start_date: date, end_date: date, include_cancelled: bool = False) -> List[Appointment]:
        if end_date < start_date:
            raise InvalidAppointmentRequest("A data final não pode ser anterior à inicial.")
        return self.repository.list_between(start_date, end_date, include_cancelled=include_cancelled)

    def _evaluate(
        self,
        dia: date,
        hora: time,
        duracao: int,
        existentes: List[Appointment],
        exclude_id: Optional[int] = None,
        check_hours: bool = True,
    ):
        """Devolve (motivo, conflitos); motivo None quando o horário está livre."""
        conflitos = find_collisions(dia, hora, duracao, existentes, exclude_id=exclude_id)
        if conflitos:
            return RejectionReason.SLOT_UNAVAILABLE, conflitos
        if check_hours and not self.policy.is_bookable_time(hora):
            return RejectionReason.OUT_OF_HOURS, conflitos
        return None, conflitos

    # ------------------------------------------------------------------
    # Operações
    # ------------------------------------------------------------------

    def create(self, request: AppointmentRequest, force: bool = False) -> SchedulingResult:
        dia = parse_date(request.date)
        hora = parse_time(request.time)
        duracao = validate_duration(request.duration_minutes)
        if request.patient_id is None:
            raise InvalidAppointmentRequest("Paciente é obrigatório.")

        existentes = self.active_appointments()
        motivo, conflitos = self._evaluate(dia, hora, duracao, existentes)
        no_passado = is_time_in_past(dia, hora, self.clock())

        if motivo and not force:
            sugestao = find_next_slot(dia, hora, duracao, existentes, self.policy)
            if sugestao is None:
                motivo = RejectionReason.NO_SLOT_FOUND
            logger.info(
                f"Pedido {dia.isoformat()} {hora.strftime('%H:%M')} ({duracao} min) recusado: "
                f"{motivo.value}; sugestão: {sugestao.to_dict() if sugestao else 'nenhuma'}"
            )
            return SchedulingResult(
                accepted=False,
                reason=motivo,
                collisions=conflitos,
                suggestion=sugestao,
                in_past=no_passado,
            )

        novo = Appointment(
            id=None,
            patient_id=request.patient_id,
            date=dia,
            time=hora,
            duration_minutes=duracao,
            kind=request.kind or '',
            notes=request.notes or '',
            status=AppointmentStatus.default(),
        )
        novo.id = self.repository.insert(novo)

        if motivo:
            logger.warning(
                f"⚠️ Agendamento {novo.id} gravado por cima do aviso ({motivo.value}); "
                f"conflitos: {[ap.id for ap in conflitos]}"
            )
        else:
            logger.info(f"Agendamento criado: paciente {novo.patient_id} - {novo.start.isoformat()}")

        return SchedulingResult(
            accepted=True,
            appointment=novo,
            reason=motivo,
            collisions=conflitos,
            overridden=bool(motivo),
            in_past=no_passado,
        )

    def edit(self, appointment_id: int, changes: Dict[str, Any], force: bool = False) -> SchedulingResult:
        """
        Mescla as mudanças e reavalia o choque ignorando o próprio agendamento.
        Na edição NÃO há sugestão de horário (só o create sugere).
        """
        atual = self._get_active(appointment_id)

        desconhecidos = set(changes) - set(EDITABLE_FIELDS)
        if desconhecidos:
            raise InvalidAppointmentRequest(f"Campos não editáveis: {', '.join(sorted(desconhecidos))}")

        campos: Dict[str, Any] = {}
        if 'date' in changes:
            campos['date'] = parse_date(changes['date'])
        if 'time' in changes:
            campos['time'] = parse_time(changes['time'])
        if 'duration_minutes' in changes:
            campos['duration_minutes'] = validate_duration(changes['duration_minutes'])
        if 'kind' in changes:
            campos['kind'] = changes['kind'] or ''
        if 'notes' in changes:
            campos['notes'] = changes['notes'] or ''
        if 'status' in changes:
            novo_status = AppointmentStatus.parse(changes['status'])
            self._check_transition(atual, novo_status)
            campos['status'] = novo_status

        candidato = atual.with_changes(**campos)

        # Cancelar pela edição libera a vaga; não tem o que checar
        if candidato.status == AppointmentStatus.CANCELLED:
            atualizado = self.repository.update(appointment_id, campos)
            logger.info(f"Agendamento {appointment_id} cancelado via edição.")
            return SchedulingResult(accepted=True, appointment=atualizado)

        mudou_horario = candidato.date != atual.date or candidato.time != atual.time
        mudou_janela = mudou_horario or candidato.duration_minutes != atual.duration_minutes

        # Só notas/tipo/status: a janela é a mesma, nada a reavaliar
        motivo, conflitos = None, []
        if mudou_janela:
            motivo, conflitos = self._evaluate(
                candidato.date,
                candidato.time,
                candidato.duration_minutes,
                self.active_appointments(),
                exclude_id=appointment_id,
                check_hours=mudou_horario,
            )

        if motivo and not force:
            logger.info(f"Edição do agendamento {appointment_id} recusada: {motivo.value}")
            return SchedulingResult(accepted=False, appointment=atual, reason=motivo, collisions=conflitos)

        atualizado = self.repository.update(appointment_id, campos) if campos else atual
        if motivo:
            logger.warning(f"⚠️ Agendamento {appointment_id} editado por cima do aviso ({motivo.value}).")

        return SchedulingResult(
            accepted=True,
            appointment=atualizado,
            reason=motivo,
            collisions=conflitos,
            overridden=bool(motivo),
            in_past=is_time_in_past(atualizado.date, atualizado.time, self.clock()) if mudou_horario else False,
        )

    def cancel(self, appointment_id: int) -> Appointment:
        atual = self._get_active(appointment_id)
        self._check_transition(atual, AppointmentStatus.CANCELLED)
        atualizado = self.repository.update(appointment_id, {'status': AppointmentStatus.CANCELLED})
        logger.info(f"Agendamento {appointment_id} cancelado.")
        return atualizado

    def confirm(self, appointment_id: int) -> Appointment:
        atual = self._get_active(appointment_id)
        if atual.status == AppointmentStatus.CONFIRMED:
            return atual
        self._check_transition(atual, AppointmentStatus.CONFIRMED)
        atualizado = self.repository.update(appointment_id, {'status': AppointmentStatus.CONFIRMED})
        logger.info(f"Agendamento {appointment_id} confirmado.")
        return atualizado

    # ------------------------------------------------------------------

    def _get_active(self, appointment_id: int) -> Appointment:
        ap = self.repository.get(appointment_id)
        if ap is None or not ap.is_active:
            raise AppointmentNotFound(appointment_id)
        return ap

    @staticmethod
    def _check_transition(atual: Appointment, novo: AppointmentStatus) -> None:
        if novo == atual.status:
            return
        if novo not in ALLOWED_TRANSITIONS[atual.status]:
            raise InvalidStatusTransition(
                f"Não é possível passar de '{atual.status.value}' para '{novo.value}'."
            )
