# weekly_report/main.py
import logging
from typing import Optional
from fastapi import FastAPI
from weekly_report.config import Settings, settings as default_settings
from weekly_report.core.errors import register_exception_handlers
from weekly_report.database import Database
from weekly_report.routers import reports, projects, backup


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    if database is None:
        database = Database(
            settings.effective_database_url,
            echo=settings.SQL_ECHO,
            atomic=settings.ATOMIC_SAVES,
        )

    app = FastAPI(title="Weekly Report - Team Status Reports", version="1.0")
    app.state.settings = settings
    app.state.database = database

    register_exception_handlers(app)

    # Include Routers
    app.include_router(reports.router)
    app.include_router(projects.router)
    app.include_router(backup.router)

    # Tables are created on startup (alembic/ holds the schema history)
    @app.on_event("startup")
    async def startup_event():
        await app.state.database.open()

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.database.close()

    @app.get("/")
    def read_root():
        return {"message": "Welcome to the Weekly Report service"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("weekly_report.main:app", host="0.0.0.0", port=8000, reload=True)
