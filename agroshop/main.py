# agroshop/main.py
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
import uvicorn

from agroshop.api.responses import validation_exception_handler
from agroshop.api.routers import carts, categories, health, orders, products, users
from agroshop.data.database import Base, build_engine, build_session_factory
from agroshop.data.store import DocumentStore
from agroshop.utils.logging import get_logger

# import modeli przed create_all, zeby byly w Base.metadata
from agroshop.data.models import CategoryModel, OrderModel, ProductModel, UserModel  # noqa: F401

logger = get_logger(__name__)


def build_store(url: str | None = None) -> DocumentStore:
    engine = build_engine(url)

    logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception:
        logger.exception("Failed to create tables")
        raise
    logger.info("Database tables ready")

    return DocumentStore(build_session_factory(engine))


def create_app(store: DocumentStore | None = None) -> FastAPI:
    app = FastAPI(
        title="Agroshop Storefront API",
        version="1.0.0",
    )
    app.state.store = store or build_store()

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(categories.router)
    app.include_router(users.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    return app


if __name__ == "__main__":
    uvicorn.run(create_app(), host="0.0.0.0", port=3001)
