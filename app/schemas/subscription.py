import uuid
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import field_serializer, field_validator, model_validator
from sqlmodel import SQLModel

from app.utils.months import format_month, month_start, parse_month


def _clean_text(value: Any, field: str) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError(f"{field} cannot be empty")
    return value


def _coerce_month(value: Any, field: str) -> Any:
    if isinstance(value, str):
        try:
            return parse_month(value)
        except ValueError:
            raise ValueError(f"{field} must be MM-YYYY")
    if isinstance(value, (date, datetime)):
        return month_start(value)
    return value


class SubscriptionBase(SQLModel):
    service_name: str
    price: int
    user_id: str
    start_date: date
    end_date: date | None = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "service_name": "Yandex Plus",
                "price": 400,
                "user_id": "60601fee-2bf1-4721-ae6f-7636e79a0cba",
                "start_date": "07-2025",
                "end_date": None,
            }
        }
    }

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parsear_mes(cls, value: Any, info) -> Any:
        return _coerce_month(value, info.field_name)


class SubscriptionCreate(SubscriptionBase):
    @field_validator("service_name", "user_id", mode="before")
    @classmethod
    def limpiar_texto(cls, value: Any, info) -> Any:
        return _clean_text(value, info.field_name)

    @field_validator("price")
    @classmethod
    def precio_positivo(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("price must be > 0")
        return value

    @model_validator(mode="after")
    def fin_despues_de_inicio(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must be >= start_date")
        return self


class SubscriptionUpdate(SQLModel):
    """
    Body de PATCH. Los campos ausentes no se tocan; end_date: null lo borra.
    Solo end_date acepta null explícito.
    """
    service_name: str | None = None
    price: int | None = None
    user_id: str | None = None
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("service_name", "user_id", mode="before")
    @classmethod
    def limpiar_texto(cls, value: Any, info) -> Any:
        return _clean_text(value, info.field_name)

    @field_validator("price")
    @classmethod
    def precio_positivo(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            raise ValueError("price must be > 0")
        return value

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parsear_mes(cls, value: Any, info) -> Any:
        return _coerce_month(value, info.field_name)

    @model_validator(mode="after")
    def validar_nulos(self):
        for field in self.model_fields_set:
            if field != "end_date" and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        if self.start_date is not None and self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must be >= start_date")
        return self

    def to_patch(self) -> "SubscriptionPatch":
        return SubscriptionPatch(**{field: getattr(self, field) for field in self.model_fields_set})


class SubscriptionRead(SubscriptionBase):
    id: uuid.UUID

    @field_serializer("start_date")
    def serializar_inicio(self, value: date) -> str:
        return format_month(value)

    @field_serializer("end_date")
    def serializar_fin(self, value: date | None) -> str | None:
        return format_month(value) if value is not None else None


class TotalCostRead(SQLModel):
    total: int


# === Tipos del repositorio ===

class Unset(Enum):
    UNSET = "unset"


UNSET = Unset.UNSET


@dataclass(frozen=True)
class SubscriptionPatch:
    """
    Cambio parcial: cada campo es UNSET (no se toca) o un valor.
    end_date además acepta None, que lo vuelve abierto (sin fin).
    """
    service_name: str | Unset = UNSET
    price: int | Unset = UNSET
    user_id: str | Unset = UNSET
    start_date: date | Unset = UNSET
    end_date: date | None | Unset = UNSET

    def values(self) -> list[tuple[str, Any]]:
        """Pares (columna, valor) de los campos presentes, en orden fijo."""
        pares = []
        for column in ("service_name", "price", "user_id", "start_date", "end_date"):
            value = getattr(self, column)
            if value is UNSET:
                continue
            if isinstance(value, (date, datetime)):
                value = month_start(value)
            pares.append((column, value))
        return pares

    def is_empty(self) -> bool:
        return not self.values()


@dataclass(frozen=True)
class SubscriptionFilter:
    user_id: str | None = None
    service_name: str | None = None
    limit: int = 50
    offset: int = 0
