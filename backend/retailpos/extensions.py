# Overview: Flask extension instances for database and migrations.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
# Batch mode lets ALTER TABLE migrations run on SQLite
migrate = Migrate(render_as_batch=True)
