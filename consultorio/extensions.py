# consultorio/extensions.py
# Extensões criadas aqui e ligadas ao app dentro de create_app()

from flask_sqlalchemy import SQLAlchemy
from flask_caching import Cache

db = SQLAlchemy()
cache = Cache()
