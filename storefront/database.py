from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from storefront.config import settings
from storefront.infrastructure.db_schema import metadata


engine = create_async_engine(settings.DATABASE_URL, pool_pre_ping=True)


async def create_tables(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(metadata.create_all)
