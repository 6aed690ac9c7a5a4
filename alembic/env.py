from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool

load_dotenv()

# models must be imported after .env is loaded (configs reads the environment)
from configs import db, default_config  # noqa: E402
from db.models import *  # noqa: E402,F401,F403  register every table on the metadata

config = context.config
config.set_main_option("sqlalchemy.url", default_config()["SQLALCHEMY_DATABASE_URI"])

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = db.metadata

COMPARE_KW = dict(
    compare_type=True,
    compare_server_default=True,
)


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=_is_sqlite(url),
        **COMPARE_KW,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
            **COMPARE_KW,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
