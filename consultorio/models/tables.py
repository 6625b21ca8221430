# consultorio/models/tables.py
from consultorio.extensions import db
from datetime import datetime
from consultorio.types.scheduling_types import Appointment, AppointmentStatus


class Paciente(db.Model):
    __tablename__ = 'pacientes'

    id = db.Column(db.Integer, primary_key=True)
    nome = db.Column(db.String(150), nullable=False, index=True)
    idade = db.Column(db.Integer, nullable=False)

    # Consultório de odontopediatria: quase sempre quem marca é o responsável
    responsavel = db.Column(db.String(150), nullable=False, index=True)
    telefone = db.Column(db.String(20), nullable=False)
    telefones_adicionais = db.Column(db.Text, nullable=True)  # JSON (lista)

    email = db.Column(db.String(120), nullable=True)
    sexo = db.Column(db.String(20), nullable=True)
    data_nascimento = db.Column(db.Date, nullable=True)

    criado_em = db.Column(db.DateTime, default=datetime.utcnow)
    atualizado_em = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    agendamentos = db.relationship('Agendamento', backref='paciente', lazy=True, cascade="all, delete-orphan")

    def to_dict(self):
        return {
            'id': self.id,
            'nome': self.nome,
            'idade': self.idade,
            'responsavel': self.responsavel,
            'telefone': self.telefone,
            'telefones_adicionais': self.telefones_adicionais,
            'email': self.email,
            'sexo': self.sexo,
            'data_nascimento': self.data_nascimento.isoformat() if self.data_nascimento else None,
        }


class Agendamento(db.Model):
    __tablename__ = 'agendamentos'
    # A agenda do dia/semana/mês sempre filtra por data e ordena por hora
    __table_args__ = (db.Index('ix_agendamentos_data_hora', 'data', 'hora'),)

    id = db.Column(db.Integer, primary_key=True)
    paciente_id = db.Column(db.Integer, db.ForeignKey('pacientes.id'), nullable=False)

    # Data e hora separadas e SEM fuso (hora local do consultório)
    data = db.Column(db.Date, nullable=False)
    hora = db.Column(db.Time, nullable=False)
    duracao_minutos = db.Column(db.Integer, nullable=False, default=30)

    # Tipo é texto livre ("Consulta de avaliação", "Urgência", ...)
    tipo = db.Column(db.String(100), nullable=False, default='Consulta de avaliação')
    notas = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=AppointmentStatus.PENDING.value, index=True)

    criado_em = db.Column(db.DateTime, default=datetime.utcnow)
    atualizado_em = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_appointment(self) -> Appointment:
        return Appointment(
            id=self.id,
            patient_id=self.paciente_id,
            date=self.data,
            time=self.hora,
            duration_minutes=self.duracao_minutos,
            kind=self.tipo or '',
            notes=self.notas or '',
            status=AppointmentStatus(self.status),
        )
