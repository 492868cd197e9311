import sys
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import create_engine, pool
from sqlalchemy.engine import Connection

from alembic import context

# Корень репозитория в sys.path, чтобы импортировался пакет flowerdesk
sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from flowerdesk.app.core.base import Base
from flowerdesk.app.core.settings import get_settings

# Импортируем все модели, чтобы они зарегистрировались в метаданных
import flowerdesk.app.models  # noqa: F401

# Синхронный URL для миграций (psycopg2), собирается из тех же DB_*/DATABASE_URL, что и приложение
SYNC_DB_URL = get_settings().sync_db_url

config = context.config

# ConfigParser трактует % как интерполяцию; экранируем для записи в конфиг
config.set_main_option("sqlalchemy.url", SYNC_DB_URL.replace("%", "%%"))

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode: emit SQL to stdout without a DBAPI."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Выполнение миграций с переданным соединением."""
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode using sync engine (psycopg2)."""
    connectable = create_engine(SYNC_DB_URL, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        do_run_migrations(connection)
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
