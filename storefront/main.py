# storefront/main.py
from fastapi import FastAPI
import uvicorn

from storefront.api.routers import carts, checkout, health
from storefront.data.database import Base, engine
from storefront.utils.logging import get_logger
from storefront.utils.settings import CART_BACKEND

# importa os modelos antes do create_all
from storefront.data.models import KeyValueModel  # noqa: F401

logger = get_logger(__name__)


def init_db() -> None:
    logger.info(f"Tabelas registradas: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=engine)


def create_app() -> FastAPI:
    if CART_BACKEND == "sql":
        init_db()

    app = FastAPI(
        title="Storefront Checkout",
        version="1.0.0",
    )

    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(checkout.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
