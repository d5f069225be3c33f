"""
Repositorio de suscripciones: CRUD, listado paginado y costo total por rango de meses.
Cada operación abre su propia sesión y su propia transacción sobre el engine
recibido en el constructor; nunca se comparte una sesión entre requests.
"""
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date

from sqlalchemy import Integer, and_, delete, extract, literal, or_, text, update
from sqlalchemy import select as sa_select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, func, select

from app.core.exceptions import ConstraintViolationError, EntityNotFoundError, StorageError
from app.models.models import Subscription
from app.schemas.subscription import SubscriptionCreate, SubscriptionFilter, SubscriptionPatch
from app.utils.months import month_index, month_start

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
MAX_LIMIT = 200

# Dialectos con statement_timeout por transacción (set_config local)
STATEMENT_TIMEOUT_DIALECTS = frozenset({"postgresql"})


def clamp_limit(limit: int | None) -> int:
    """Fuera de (0, 200] vuelve al default de 50."""
    if limit is None or limit <= 0 or limit > MAX_LIMIT:
        return DEFAULT_LIMIT
    return limit


def clamp_offset(offset: int | None) -> int:
    if offset is None or offset < 0:
        return 0
    return offset


def _parse_id(subscription_id: uuid.UUID | str) -> uuid.UUID:
    if isinstance(subscription_id, uuid.UUID):
        return subscription_id
    try:
        return uuid.UUID(str(subscription_id).strip())
    except ValueError:
        # Un id mal formado no puede existir
        raise EntityNotFoundError("Suscripción no encontrada") from None


def _month_index_expr(column):
    # Mismo índice que month_index, calculado en SQL sobre la columna
    return extract("year", column) * 12 + extract("month", column) - 1


def _months_cte(first: int, last: int):
    """Índices de mes first..last (inclusive) generados en la propia consulta."""
    months = sa_select(literal(first, Integer).label("idx")).cte("months", recursive=True)
    siguiente = sa_select((months.c.idx + 1).label("idx")).where(months.c.idx < last)
    return months.union_all(siguiente)


def _total_cost_query(first: int, last: int, user_id: str | None, service_name: str | None):
    months = _months_cte(first, last)
    stmt = (
        select(func.coalesce(func.sum(Subscription.price), 0))
        .select_from(months)
        .join(
            Subscription,
            and_(
                _month_index_expr(col(Subscription.start_date)) <= months.c.idx,
                or_(
                    col(Subscription.end_date).is_(None),
                    _month_index_expr(col(Subscription.end_date)) >= months.c.idx,
                ),
            ),
        )
    )
    if user_id and user_id.strip():
        stmt = stmt.where(Subscription.user_id == user_id)
    if service_name and service_name.strip():
        stmt = stmt.where(Subscription.service_name == service_name)
    return stmt


class SubscriptionRepository:
    def __init__(self, engine: Engine, statement_timeout_ms: int | None = None):
        self.engine = engine
        self.statement_timeout_ms = statement_timeout_ms

    @contextmanager
    def _transaction(self, timeout: float | None = None) -> Iterator[Session]:
        """
        Sesión con una transacción: commit al salir bien, rollback ante cualquier excepción.
        Los errores de SQLAlchemy se traducen a StorageError.
        """
        with Session(self.engine, expire_on_commit=False) as session:
            try:
                with session.begin():
                    self._apply_timeout(session, timeout)
                    yield session
            except IntegrityError as e:
                logger.error(f"Violación de constraint: {e.orig}")
                raise ConstraintViolationError("constraint violated") from e
            except SQLAlchemyError as e:
                logger.error(f"Error de base de datos: {e}")
                raise StorageError("storage error") from e

    def _apply_timeout(self, session: Session, timeout: float | None) -> None:
        ms = int(timeout * 1000) if timeout is not None else self.statement_timeout_ms
        if not ms or self.engine.dialect.name not in STATEMENT_TIMEOUT_DIALECTS:
            return
        # Vale solo para esta transacción; el server cancela la query al vencer
        session.connection().execute(
            text("SELECT set_config('statement_timeout', :value, true)"),
            {"value": f"{ms}ms"},
        )

    def create(self, data: SubscriptionCreate, *, timeout: float | None = None) -> Subscription:
        suscripcion = Subscription(
            service_name=data.service_name,
            price=data.price,
            user_id=data.user_id,
            start_date=month_start(data.start_date),
            end_date=month_start(data.end_date) if data.end_date is not None else None,
        )
        with self._transaction(timeout) as session:
            session.add(suscripcion)

        logger.info(f"Suscripción {suscripcion.id} creada para usuario {suscripcion.user_id}")
        return suscripcion

    def get(self, subscription_id: uuid.UUID | str, *, timeout: float | None = None) -> Subscription:
        sub_id = _parse_id(subscription_id)
        with self._transaction(timeout) as session:
            suscripcion = session.get(Subscription, sub_id)

        if suscripcion is None:
            raise EntityNotFoundError("Suscripción no encontrada")
        return suscripcion

    def delete(self, subscription_id: uuid.UUID | str, *, timeout: float | None = None) -> None:
        sub_id = _parse_id(subscription_id)
        stmt = delete(Subscription).where(col(Subscription.id) == sub_id)
        with self._transaction(timeout) as session:
            result = session.connection().execute(stmt)
            if result.rowcount == 0:
                raise EntityNotFoundError("Suscripción no encontrada")

        logger.info(f"Suscripción {sub_id} eliminada")

    def update(
        self,
        subscription_id: uuid.UUID | str,
        patch: SubscriptionPatch,
        *,
        timeout: float | None = None,
    ) -> Subscription:
        """
        Aplica solo los campos presentes del patch en un único UPDATE ... RETURNING.
        Un patch vacío equivale a get.
        """
        sub_id = _parse_id(subscription_id)
        if patch.is_empty():
            return self.get(sub_id, timeout=timeout)

        pares = patch.values()
        stmt = (
            update(Subscription)
            .where(col(Subscription.id) == sub_id)
            .values(dict(pares))
            .returning(Subscription)
        )
        with self._transaction(timeout) as session:
            suscripcion = session.scalars(stmt).one_or_none()
            if suscripcion is None:
                raise EntityNotFoundError("Suscripción no encontrada")

        logger.info(f"Suscripción {sub_id} actualizada: {', '.join(column for column, _ in pares)}")
        return suscripcion

    def list(self, filters: SubscriptionFilter, *, timeout: float | None = None) -> list[Subscription]:
        stmt = select(Subscription)
        if filters.user_id and filters.user_id.strip():
            stmt = stmt.where(Subscription.user_id == filters.user_id)
        if filters.service_name and filters.service_name.strip():
            stmt = stmt.where(Subscription.service_name == filters.service_name)

        stmt = (
            stmt.order_by(col(Subscription.start_date).desc())
            .offset(clamp_offset(filters.offset))
            .limit(clamp_limit(filters.limit))
        )
        with self._transaction(timeout) as session:
            return list(session.exec(stmt).all())

    def total_cost(
        self,
        from_month: date,
        to_month: date,
        user_id: str | None = None,
        service_name: str | None = None,
        *,
        timeout: float | None = None,
    ) -> int:
        """
        Suma price una vez por cada mes del rango [from_month, to_month] en que
        la suscripción estuvo activa: activa 3 meses del rango cuenta 3 veces.
        Los meses se generan en la misma sentencia, así el total sale de un único snapshot.
        """
        first, last = month_index(from_month), month_index(to_month)
        if first > last:
            return 0

        stmt = _total_cost_query(first, last, user_id, service_name)
        with self._transaction(timeout) as session:
            return int(session.exec(stmt).one())
