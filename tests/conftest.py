import pytest
from httpx import ASGITransport, AsyncClient
from weekly_report.config import Settings
from weekly_report.database import Database
from weekly_report.main import create_app
from weekly_report.models.project import Project
from weekly_report.models.report import Report


def make_sqlite_url(path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def sqlite_url():
    return make_sqlite_url


@pytest.fixture
async def database(tmp_path):
    db = Database(make_sqlite_url(tmp_path / "reports.db"))
    await db.open()
    yield db
    await db.close()


@pytest.fixture
async def sequential_database(tmp_path):
    db = Database(make_sqlite_url(tmp_path / "sequential.db"), atomic=False)
    await db.open()
    yield db
    await db.close()


@pytest.fixture
async def session(database):
    async with database.session() as s:
        yield s


@pytest.fixture
def settings(tmp_path):
    return Settings(DATABASE_URL=make_sqlite_url(tmp_path / "reports.db"), IMPORT_DATABASE_URL=None)


@pytest.fixture
async def client(database, settings):
    app = create_app(settings=settings, database=database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
def seed_reports(database):
    """Insert report rows for a week straight into the store."""
    async def _seed(week_start: str, *rows: dict):
        async with database.session() as s:
            for i, row in enumerate(rows):
                values = {"id": f"{week_start}-{i}", "division": "", "project": "",
                          "prev_progress": "", "curr_progress": "", "remarks": ""}
                values.update(row)
                s.add(Report(week_start=week_start, **values))
            await s.commit()
    return _seed


@pytest.fixture
def seed_projects(database):
    async def _seed(*rows: dict):
        async with database.session() as s:
            for row in rows:
                s.add(Project(**row))
            await s.commit()
    return _seed
