# config.py
# Configuração central do consultório (banco, cache e regras da agenda)

from __future__ import annotations

import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent
ENV_FILE = BASE_DIR / ".env"

# Carrega .env se existir (não sobrescreve variáveis já definidas no ambiente)
if ENV_FILE.exists():
    load_dotenv(ENV_FILE)

class Config:
    # Ambiente explícito (evite FLASK_ENV no Flask 3)
    APP_ENV: str = os.getenv("APP_ENV", "development").lower()

    # Segurança
    SECRET_KEY: str = os.getenv("APP_SECRET_KEY") or os.getenv("SECRET_KEY") or "fallback-secret-key-mude-isto"

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI: str | None = None
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    # Diretório para SQLite local (dev)
    INSTANCE_DIR = BASE_DIR / "instance"
    INSTANCE_DIR.mkdir(exist_ok=True)

    # --- CACHE (Redis) ---
    CACHE_TYPE: str = os.environ.get('CACHE_TYPE', 'redis')
    CACHE_REDIS_HOST: str = os.environ.get('REDIS_HOST', 'localhost')
    CACHE_REDIS_PORT: int = int(os.environ.get('REDIS_PORT', 6379))
    CACHE_REDIS_PASSWORD: str | None = os.environ.get('REDIS_PASSWORD', None)
    CACHE_REDIS_DB: int = int(os.environ.get('REDIS_DB', 0))

    # Ficha do paciente fica 10 minutos no cache
    CACHE_DEFAULT_TIMEOUT: int = int(os.environ.get('CACHE_DEFAULT_TIMEOUT', 600))

    # No Render basta CACHE_REDIS_URL. Ela sobrescreve as de cima.
    CACHE_REDIS_URL: str | None = os.environ.get('CACHE_REDIS_URL', None)

    # --- AGENDA DO CONSULTÓRIO ---
    # Horários no formato HH:MM (hora local do consultório)
    CLINIC_OPENS_AT: str = os.environ.get('CLINIC_OPENS_AT', '09:00')
    CLINIC_CLOSES_AT: str = os.environ.get('CLINIC_CLOSES_AT', '20:30')
    CLINIC_LUNCH_START: str = os.environ.get('CLINIC_LUNCH_START', '13:00')
    CLINIC_LUNCH_END: str = os.environ.get('CLINIC_LUNCH_END', '16:30')

    # Granularidade da busca de horário livre (minutos)
    SLOT_STEP_MINUTES: int = int(os.environ.get('SLOT_STEP_MINUTES', 15))

    # Quantos dias à frente a sugestão pode procurar antes de desistir
    SLOT_MAX_LOOKAHEAD_DAYS: int = int(os.environ.get('SLOT_MAX_LOOKAHEAD_DAYS', 90))

    CLINIC_TIMEZONE: str = os.environ.get('CLINIC_TIMEZONE', 'America/Mexico_City')

    @classmethod
    def init_app(cls) -> None:
        """
        Define SQLALCHEMY_DATABASE_URI de forma consistente:
        - Em produção: exige DATABASE_URL e corrige 'postgres://' -> 'postgresql://'
        - Em dev: usa DATABASE_URL se existir; senão, SQLite local
        """
        db_url = (os.getenv("DATABASE_URL") or "").strip()

        if db_url.startswith("postgres://"):
            db_url = db_url.replace("postgres://", "postgresql://", 1)

        if cls.APP_ENV == "production":
            if not db_url:
                raise RuntimeError(
                    "DATABASE_URL não definido em produção. "
                    "No Render, configure a variável de ambiente DATABASE_URL."
                )

            # Adiciona 'sslmode=require' (necessário para o banco pago do Render)
            if "postgresql://" in db_url and "sslmode=" not in db_url:
                db_url = db_url + "?sslmode=require"

            cls.SQLALCHEMY_DATABASE_URI = db_url
            return

        # development/test
        cls.SQLALCHEMY_DATABASE_URI = db_url or f"sqlite:///{cls.INSTANCE_DIR / 'consultorio.db'}"
