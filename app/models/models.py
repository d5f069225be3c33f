import uuid
from datetime import date, datetime, timezone
from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import Field, SQLModel


class Subscription(SQLModel, table=True):
    __tablename__ = "subscriptions"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_subscriptions_price_positive"),
        CheckConstraint(
            "end_date IS NULL OR end_date >= start_date",
            name="ck_subscriptions_end_after_start",
        ),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    service_name: str = Field(index=True)
    price: int
    user_id: str = Field(index=True)

    # Siempre el día 1 del mes
    start_date: date = Field(index=True)
    end_date: date | None = None


class SchemaMigration(SQLModel, table=True):
    """Ledger de migraciones aplicadas, una fila por archivo"""
    __tablename__ = "schema_migrations"

    filename: str = Field(primary_key=True)
    applied_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), sa_type=DateTime(timezone=True)
    )
