import sys

from app.core.config import settings
from app.core.database import create_db_engine, dispose_db_engine
from app.core.exceptions import ConfigurationError, MigrationError
from app.core.migrations import apply_migrations


def migrate(directory: str | None = None) -> list[str]:
    engine = create_db_engine(settings)
    try:
        return apply_migrations(engine, directory or settings.MIGRATIONS_DIR)
    finally:
        dispose_db_engine(engine)


if __name__ == "__main__":
    try:
        aplicadas = migrate(sys.argv[1] if len(sys.argv) > 1 else None)
    except (ConfigurationError, MigrationError) as e:
        print(f"Error applying migrations: {e.message}")
        sys.exit(1)

    for filename in aplicadas:
        print(f"Applied: {filename}")
    print(f"Migrations complete ({len(aplicadas)} applied).")
