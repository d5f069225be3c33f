from fastapi import Query, Request

from app.core.config import settings
from app.services.subscription_service import DEFAULT_LIMIT, SubscriptionRepository

class PaginationParams:
    # Sin ge/le: el repositorio recorta limit y offset por su cuenta
    def __init__(
        self,
        limit: int = Query(DEFAULT_LIMIT, description="Cantidad máxima de registros (1-200, fuera de rango vuelve a 50)"),
        offset: int = Query(0, description="Número de registros a saltar"),
    ):
        self.limit = limit
        self.offset = offset


def get_repository(request: Request) -> SubscriptionRepository:
    return SubscriptionRepository(
        request.app.state.engine,
        statement_timeout_ms=settings.DB_STATEMENT_TIMEOUT_MS,
    )
