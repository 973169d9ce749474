# alembic/env.py
from logging.config import fileConfig
from alembic import context
from sqlalchemy import engine_from_config, pool
import os, sys, pathlib

# the app must not create tables behind the migration's back
os.environ["SKIP_CREATE_ALL"] = "1"

BASE_DIR = pathlib.Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

config = context.config
if getattr(config, "config_file_name", None):
    fileConfig(config.config_file_name)

from wsgi import app
from evalsys.extensions import db


def database_url():
    url = os.getenv("DATABASE_URL") or app.config.get("SQLALCHEMY_DATABASE_URI")
    # Flask-SQLAlchemy resolves relative sqlite files into instance/
    if url and url.startswith("sqlite:///") and not url.startswith("sqlite:////"):
        instance = pathlib.Path(app.instance_path)
        instance.mkdir(parents=True, exist_ok=True)
        url = f"sqlite:///{(instance / url[len('sqlite:///'):]).as_posix()}"
    return url


with app.app_context():
    import evalsys.models  # noqa: F401
    url = database_url()
    target_metadata = db.metadata


def run_offline():
    context.configure(url=url, target_metadata=target_metadata, literal_binds=True,
                      compare_type=True, render_as_batch=True)
    with context.begin_transaction():
        context.run_migrations()


def run_online():
    engine = engine_from_config({"sqlalchemy.url": url}, prefix="sqlalchemy.", poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata,
                          compare_type=True, render_as_batch=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
