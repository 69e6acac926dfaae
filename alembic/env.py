from logging.config import fileConfig
from quincy.core.config import settings
from quincy.core.database import Base
from quincy.models.user_db.user_db import User  # noqa: F401
from quincy.models.event_db.event_db import Event  # noqa: F401
from quincy.models.event_db.rsvp_db import Rsvp  # noqa: F401
from quincy.models.event_db.record_db import VinylRecord  # noqa: F401
from quincy.models.interest_db.interest_db import Interest  # noqa: F401
from quincy.models.interest_db.connection_db import Connection  # noqa: F401
from quincy.models.interest_db.message_db import Message  # noqa: F401
from sqlalchemy import engine_from_config, pool
from alembic import context

config = context.config
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
