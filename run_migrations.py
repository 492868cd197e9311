#!/usr/bin/env python3
"""
Скрипт для выполнения миграций базы данных.
Использование: python3 run_migrations.py [revision]   (по умолчанию head)

Подключение берется из DB_* / DATABASE_URL, как и у приложения.
"""
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.util import CommandError
from sqlalchemy.exc import OperationalError


def run_migrations(revision: str = "head") -> None:
    """Upgrade the database to ``revision`` using flowerdesk/alembic.ini."""
    backend_dir = Path(__file__).resolve().parent / "flowerdesk"
    config = Config(str(backend_dir / "alembic.ini"))
    config.set_main_option("script_location", str(backend_dir / "migrations"))

    print(f"🔄 Выполняю миграции базы данных (до {revision})...")
    try:
        command.upgrade(config, revision)
    except (CommandError, OperationalError) as e:
        print(f"❌ Ошибка при выполнении миграций: {e}")
        sys.exit(1)
    print("✅ Миграции успешно выполнены!")


if __name__ == "__main__":
    run_migrations(sys.argv[1] if len(sys.argv) > 1 else "head")
