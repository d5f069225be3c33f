import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.routes import subscriptions
from app.api.middleware import LoggingMiddleware
from app.core.config import settings
from app.core.database import create_db_engine, dispose_db_engine
from app.core.exceptions import BusinessLogicError, ConstraintViolationError, EntityNotFoundError, StorageError
from app.core.migrations import apply_migrations

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ConfigurationError y MigrationError cortan el arranque
    engine = create_db_engine(settings)
    try:
        aplicadas = apply_migrations(engine, settings.MIGRATIONS_DIR)
        logger.info(f"Migraciones aplicadas al iniciar: {aplicadas}")
        app.state.engine = engine
        yield
    finally:
        dispose_db_engine(engine)


app = FastAPI(
    title="Subscriptions API",
    description="Registro de suscripciones de usuarios y costo total por período",
    version="1.0.0",
    lifespan=lifespan,
)

@app.exception_handler(EntityNotFoundError)
async def entity_not_found_exception_handler(request: Request, exc: EntityNotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})

@app.exception_handler(BusinessLogicError)
async def business_logic_exception_handler(request: Request, exc: BusinessLogicError):
    return JSONResponse(status_code=400, content={"detail": exc.message})

@app.exception_handler(ConstraintViolationError)
async def constraint_violation_exception_handler(request: Request, exc: ConstraintViolationError):
    return JSONResponse(status_code=409, content={"detail": exc.message})

@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError):
    logger.error(f"{request.method} {request.url.path}: {exc.message}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "internal error"})

app.add_middleware(LoggingMiddleware)

app.include_router(subscriptions.router)
