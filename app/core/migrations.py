"""
Runner de migraciones SQL.

Aplica los archivos *.sql de un directorio en orden lexicográfico, una sola vez
cada uno. El ledger es la tabla schema_migrations (filename como PK). Cada
archivo y su fila del ledger se escriben en la misma transacción.
Nombrar los archivos con prefijo numérico con ceros: 0001_x.sql, 0002_y.sql.
"""
import logging
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from app.core.exceptions import MigrationError
from app.models.models import SchemaMigration

logger = logging.getLogger(__name__)

MIGRATION_SUFFIX = ".sql"


def discover_migrations(directory: str | Path) -> list[str]:
    """Nombres de los archivos de migración, ordenados."""
    path = Path(directory)
    try:
        archivos = [p.name for p in path.iterdir() if p.is_file() and p.suffix == MIGRATION_SUFFIX]
    except OSError as e:
        raise MigrationError(f"read migrations dir {path}: {e}") from e
    return sorted(archivos)


def applied_migrations(engine: Engine) -> set[str]:
    with engine.connect() as conn:
        return set(conn.execute(select(SchemaMigration.filename)).scalars())


def apply_migrations(engine: Engine, directory: str | Path) -> list[str]:
    """
    Aplica las migraciones pendientes y devuelve los nombres aplicados en esta corrida.
    Cualquier error corta la corrida con MigrationError; las ya commiteadas quedan.
    """
    try:
        SchemaMigration.__table__.create(engine, checkfirst=True)
        aplicadas = applied_migrations(engine)
    except SQLAlchemyError as e:
        raise MigrationError(f"create schema_migrations: {e}") from e

    path = Path(directory)
    nuevas = []
    for filename in discover_migrations(path):
        if filename in aplicadas:
            continue

        try:
            contenido = (path / filename).read_text(encoding="utf-8")
        except OSError as e:
            raise MigrationError(f"read migration {filename}: {e}", filename) from e

        try:
            with engine.begin() as conn:
                conn.exec_driver_sql(contenido, execution_options={"no_parameters": True})
                conn.execute(
                    insert(SchemaMigration).values(filename=filename, applied_at=datetime.now(timezone.utc))
                )
        except SQLAlchemyError as e:
            logger.error(f"Migración {filename} falló: {e}")
            raise MigrationError(f"apply migration {filename}: {e}", filename) from e

        logger.info(f"Migración aplicada: {filename}")
        nuevas.append(filename)

    if not nuevas:
        logger.info("Sin migraciones pendientes")
    return nuevas
