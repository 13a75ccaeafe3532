# src/newsroom_backend/app/db/init_db.py
import asyncio

from newsroom_backend.app.core.config import get_settings
from newsroom_backend.app.db.session import Base, get_engine
from newsroom_backend.app.db import models  # noqa: F401  ensure model classes are registered


async def init_models(url: str | None = None) -> None:
    """
    Creates all tables defined in SQLAlchemy models.
    Safe to run multiple times due to CREATE IF NOT EXISTS behavior.
    """
    settings = get_settings()
    engine = get_engine(url or settings.database_url, settings.db_echo)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Allows:
#   python -m newsroom_backend.app.db.init_db
if __name__ == "__main__":
    asyncio.run(init_models())
