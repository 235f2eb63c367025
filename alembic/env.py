# alembic/env.py
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool

load_dotenv()

from app.core.config import database_url  # noqa: E402
from app.models import Base  # noqa: E402  (registers the license tables)

config = context.config

# app.db.migrate runs us inside the service; keep its logging untouched there
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", database_url())

URL = config.get_main_option("sqlalchemy.url")
SQLITE = URL.startswith("sqlite")


def include_object(object, name, type_, reflected, compare_to):
    """Autogenerate only adds; objects missing from the models are never dropped."""
    if type_ == "table" and name == "alembic_version":
        return False
    return not (reflected and compare_to is None)


def process_revision_directives(context, revision, directives):
    # no file for an autogenerate run that found nothing
    if getattr(context.config.cmd_opts, "autogenerate", False) and directives[0].upgrade_ops.is_empty():
        directives[:] = []


def _options() -> dict:
    return {
        "target_metadata": Base.metadata,
        "compare_type": True,
        "include_object": include_object,
        "process_revision_directives": process_revision_directives,
        # SQLite cannot ALTER most columns in place
        "render_as_batch": SQLITE,
    }


if context.is_offline_mode():
    context.configure(url=URL, literal_binds=True, dialect_opts={"paramstyle": "named"}, **_options())
    with context.begin_transaction():
        context.run_migrations()
else:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, **_options())
        with context.begin_transaction():
            context.run_migrations()
