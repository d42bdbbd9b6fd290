import logging
from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from weekly_report.models.project import Project

logger = logging.getLogger(__name__)


async def fetch_external_projects(source_url: str) -> list:
    engine = create_async_engine(source_url)
    try:
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT * FROM projects"))
            return [dict(row) for row in result.mappings()]
    finally:
        await engine.dispose()


async def import_projects(db: AsyncSession, source_url: str) -> int:
    """Copy projects missing locally (matched by id) from another database.

    Ids are preserved, so running the import twice adds nothing the second
    time. Returns the number of projects added.
    """
    external = await fetch_external_projects(source_url)

    existing = await db.execute(select(Project.id))
    known_ids = set(existing.scalars().all())

    imported = 0
    for row in external:
        if row["id"] in known_ids:
            continue
        db.add(Project(
            id=row["id"],
            name=row["name"],
            client=row.get("client") or "",
            pm=row.get("pm") or "",
            period=row.get("period") or "",
            code=row.get("code") or "",
        ))
        known_ids.add(row["id"])
        imported += 1

    await db.commit()
    logger.info("Imported %d of %d external project(s)", imported, len(external))
    return imported
