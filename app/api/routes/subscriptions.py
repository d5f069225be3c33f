from fastapi import APIRouter, Depends, Query, Response

from app.api.deps import PaginationParams, get_repository
from app.core.exceptions import BusinessLogicError
from app.schemas.subscription import (
    SubscriptionCreate,
    SubscriptionFilter,
    SubscriptionRead,
    SubscriptionUpdate,
    TotalCostRead,
)
from app.services.subscription_service import SubscriptionRepository
from app.utils.months import parse_month

router = APIRouter(prefix="/subscriptions", tags=["Suscripciones"])


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


@router.post("", response_model=SubscriptionRead, status_code=201)
def crear_suscripcion(
    datos: SubscriptionCreate,
    repo: SubscriptionRepository = Depends(get_repository),
):
    nueva = repo.create(datos)
    return SubscriptionRead.model_validate(nueva)


@router.get("", response_model=list[SubscriptionRead])
def listar_suscripciones(
    user_id: str | None = None,
    service_name: str | None = None,
    pagination: PaginationParams = Depends(),
    repo: SubscriptionRepository = Depends(get_repository),
):
    filtros = SubscriptionFilter(
        user_id=_clean(user_id),
        service_name=_clean(service_name),
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return [SubscriptionRead.model_validate(s) for s in repo.list(filtros)]


@router.get("/total", response_model=TotalCostRead)
def costo_total(
    desde: str | None = Query(None, alias="from", description="MM-YYYY"),
    hasta: str | None = Query(None, alias="to", description="MM-YYYY"),
    user_id: str | None = None,
    service_name: str | None = None,
    repo: SubscriptionRepository = Depends(get_repository),
):
    """
    Costo total facturado en el rango de meses [from, to].
    Cada suscripción suma su precio una vez por cada mes del rango en que estuvo activa.
    """
    desde, hasta = _clean(desde), _clean(hasta)
    if not desde or not hasta:
        raise BusinessLogicError("from and to are required (MM-YYYY)")

    try:
        from_month = parse_month(desde)
    except ValueError:
        raise BusinessLogicError("from must be MM-YYYY")
    try:
        to_month = parse_month(hasta)
    except ValueError:
        raise BusinessLogicError("to must be MM-YYYY")

    if from_month > to_month:
        raise BusinessLogicError("from must be <= to")

    total = repo.total_cost(from_month, to_month, _clean(user_id), _clean(service_name))
    return TotalCostRead(total=total)


@router.get("/{subscription_id}", response_model=SubscriptionRead)
def obtener_suscripcion(
    subscription_id: str,
    repo: SubscriptionRepository = Depends(get_repository),
):
    return SubscriptionRead.model_validate(repo.get(subscription_id))


@router.patch("/{subscription_id}", response_model=SubscriptionRead)
def actualizar_suscripcion(
    subscription_id: str,
    datos: SubscriptionUpdate,
    repo: SubscriptionRepository = Depends(get_repository),
):
    """Solo se modifican los campos enviados. "end_date": null deja la suscripción abierta."""
    actualizada = repo.update(subscription_id, datos.to_patch())
    return SubscriptionRead.model_validate(actualizada)


@router.delete("/{subscription_id}", status_code=204)
def eliminar_suscripcion(
    subscription_id: str,
    repo: SubscriptionRepository = Depends(get_repository),
):
    repo.delete(subscription_id)
    return Response(status_code=204)
