# consultorio/__init__.py
from __future__ import annotations

import logging
from flask import Flask
from config import Config
from consultorio.extensions import db, cache
from flask_migrate import Migrate

migrate = Migrate()


def create_app(config_class=Config) -> Flask:
    config_class.init_app()
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)

    database_url = app.config.get('SQLALCHEMY_DATABASE_URI')
    if not database_url:
        raise ValueError("SQLALCHEMY_DATABASE_URI não foi definida!")

    # Render às vezes manda channel_binding, que o psycopg2 não entende
    if 'channel_binding' in database_url:
        base_url, params = database_url.split('?', 1) if '?' in database_url else (database_url, '')
        params_list = [p for p in params.split('&') if not p.startswith('channel_binding=')]
        database_url = base_url + ('?' + '&'.join(params_list) if params_list else '')
        app.config['SQLALCHEMY_DATABASE_URI'] = database_url

    db.init_app(app)
    migrate.init_app(app, db)
    cache.init_app(app)

    # ============================================
    # 🔍 REGISTRO DE BLUEPRINTS
    # ============================================
    app.logger.info("🔍 Registrando blueprints...")

    from consultorio.blueprints.citas.routes import bp as citas_bp
    app.register_blueprint(citas_bp)
    app.logger.info(f"✅ [CITAS] Registrado! Prefixo: {citas_bp.url_prefix}")

    from consultorio.blueprints.pacientes.routes import bp as pacientes_bp
    app.register_blueprint(pacientes_bp)
    app.logger.info(f"✅ [PACIENTES] Registrado! Prefixo: {pacientes_bp.url_prefix}")

    from consultorio.commands import reset_db_command
    app.cli.add_command(reset_db_command)

    # Healthcheck
    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    with app.app_context():
        from consultorio.models import tables  # noqa: F401

    logging.info(f"Consultório iniciado ({config_class.APP_ENV}).")
    return app
