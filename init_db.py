# init_db.py
import asyncio
import logging
from weekly_report.config import settings
from weekly_report.database import Database

logger = logging.getLogger("init_db")

async def init_db():
    database = Database(settings.effective_database_url, echo=settings.SQL_ECHO)
    try:
        await database.open()
        logger.info("✅ Database schema is ready")
    except Exception:
        logger.exception("❌ Failed to initialize database")
        raise
    finally:
        await database.close()

if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    asyncio.run(init_db())
