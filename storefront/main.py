# storefront/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from storefront.config import settings
from storefront.database import engine as default_engine, create_tables
from storefront.presentation.api import router
from storefront.presentation.errors import register_exception_handlers

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(engine: Optional[AsyncEngine] = None, create_schema: bool = settings.CREATE_TABLES) -> FastAPI:
    engine = engine or default_engine

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Управление жизненным циклом приложения"""
        if create_schema:
            await create_tables(engine)
            logger.info("Таблицы проверены")
        yield
        logger.info("Приложение останавливается...")
        await engine.dispose()

    app = FastAPI(
        title="Storefront Order Service",
        description="Заказы, остатки и возвраты интернет-магазина",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    register_exception_handlers(app)
    app.include_router(router, prefix="/api")

    @app.get("/")
    async def root():
        return {"message": "Storefront Order Service работает"}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


app = create_app()
