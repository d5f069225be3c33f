import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from app.main import app
from app.api.deps import get_repository
from app.services.subscription_service import SubscriptionRepository

# Base de datos en memoria para los tests
DATABASE_URL = "sqlite://"

@pytest.fixture(name="engine")
def engine_fixture():
    # El StaticPool es necesario para usar SQLite en memoria con múltiples hilos/conexiones
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()

@pytest.fixture(name="repository")
def repository_fixture(engine):
    return SubscriptionRepository(engine)

@pytest.fixture(name="client")
def client_fixture(repository: SubscriptionRepository):
    # Sobrescribimos la dependencia get_repository para que use la DB de prueba
    def get_repository_override():
        return repository

    app.dependency_overrides[get_repository] = get_repository_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
