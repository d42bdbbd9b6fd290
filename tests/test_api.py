import logging
from urllib.parse import quote
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import exc as sa_exc
from weekly_report.config import Settings
from weekly_report.database import Database
from weekly_report.main import create_app
from weekly_report.models.project import Project
from weekly_report.routers import reports as reports_router
from weekly_report.services.docx_export import DOCX_CONTENT_TYPE


async def test_root(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert "message" in resp.json()


# ------------------ reports ------------------

async def test_missing_week_start_is_a_client_error(client):
    resp = await client.get("/reports")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing weekStart param"}


async def test_bad_week_start_is_a_client_error(client):
    resp = await client.get("/reports", params={"weekStart": "next monday"})
    assert resp.status_code == 400
    assert "error" in resp.json()


async def test_empty_week(client):
    resp = await client.get("/reports", params={"weekStart": "2024-06-10"})
    assert resp.status_code == 200
    assert resp.json() == {"items": [], "isDraft": False}


async def test_save_and_read_back(client):
    body = {
        "weekStart": "2024-06-10",
        "items": [
            {"id": "r1", "division": "Planning", "project": "Alpha", "prev_progress": "",
             "curr_progress": "Drafted spec", "remarks": ""},
            {"division": "Dev", "project": "Beta", "week_start": "1999-01-04"},
        ],
    }
    resp = await client.post("/reports", json=body)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "count": 2}

    resp = await client.get("/reports", params={"weekStart": "2024-06-10"})
    data = resp.json()
    assert data["isDraft"] is False
    assert [i["project"] for i in data["items"]] == ["Alpha", "Beta"]
    assert data["items"][0]["id"] == "r1"
    assert all(i["week_start"] == "2024-06-10" for i in data["items"])


async def test_next_week_is_a_carry_over_draft(client):
    await client.post("/reports", json={"weekStart": "2024-06-10", "items": [
        {"id": "r1", "division": "Planning", "project": "Alpha", "curr_progress": "Drafted spec"},
    ]})

    resp = await client.get("/reports", params={"weekStart": "2024-06-17"})
    data = resp.json()

    assert data["isDraft"] is True
    assert len(data["items"]) == 1
    draft = data["items"][0]
    assert draft["id"] != "r1"
    assert draft["prev_progress"] == "Drafted spec"
    assert draft["curr_progress"] == ""
    assert draft["created_at"] is None

    status = await client.get("/reports/status")
    assert status.json() == ["2024-06-10"]


async def test_saving_empty_items_clears_week(client):
    await client.post("/reports", json={"weekStart": "2024-06-17", "items": [{}, {}, {}]})

    resp = await client.post("/reports", json={"weekStart": "2024-06-17", "items": []})
    assert resp.json() == {"success": True, "count": 0}

    resp = await client.get("/reports", params={"weekStart": "2024-06-17"})
    assert resp.json() == {"items": [], "isDraft": False}


@pytest.mark.parametrize("body", [
    {"items": []},
    {"weekStart": "2024-06-17"},
    {"weekStart": "2024-06-17", "items": "not a list"},
])
async def test_invalid_save_body(client, body):
    resp = await client.post("/reports", json=body)
    assert resp.status_code == 400
    assert "error" in resp.json()


async def test_failed_save_is_a_server_error(client):
    await client.post("/reports", json={"weekStart": "2024-06-17", "items": [{"id": "keep"}]})

    resp = await client.post("/reports", json={"weekStart": "2024-06-17", "items": [{"id": "d"}, {"id": "d"}]})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Database error"}
    kept = await client.get("/reports", params={"weekStart": "2024-06-17"})
    assert [i["id"] for i in kept.json()["items"]] == ["keep"]


async def test_partial_save_is_reported(sequential_database, settings, caplog):
    app = create_app(settings=settings, database=sequential_database)
    with caplog.at_level(logging.ERROR, logger="weekly_report.core.errors"):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            resp = await c.post("/reports", json={"weekStart": "2024-06-17", "items": [{"id": "d"}, {"id": "d"}]})

    assert resp.status_code == 500
    assert resp.json()["error"].startswith("Save partially applied")
    rejected = [r.getMessage() for r in caplog.records if r.name == "weekly_report.core.errors"]
    assert len(rejected) == 1
    assert "partial via sequential-best-effort, 1 row(s) written" in rejected[0]


async def test_storage_error_on_read(client, monkeypatch):
    async def broken(db, week_start):
        raise sa_exc.OperationalError("SELECT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(reports_router, "resolve_week", broken)

    resp = await client.get("/reports", params={"weekStart": "2024-06-17"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Database error"}


async def test_status_lists_distinct_weeks_in_order(client):
    for week in ("2024-06-17", "2024-06-03", "2024-06-10"):
        await client.post("/reports", json={"weekStart": week, "items": [{}, {}]})

    resp = await client.get("/reports/status")
    assert resp.json() == ["2024-06-03", "2024-06-10", "2024-06-17"]


async def test_export_resolved_week(client):
    await client.post("/reports", json={"weekStart": "2024-06-17", "items": [{"project": "Alpha"}]})

    resp = await client.get("/reports/export", params={"weekStart": "2024-06-17"})

    assert resp.status_code == 200
    assert resp.headers["content-type"] == DOCX_CONTENT_TYPE
    disposition = resp.headers["content-disposition"]
    assert 'filename="weekly_report_20240617.docx"' in disposition
    assert quote("주간보고_20240617.docx") in disposition
    assert resp.content[:2] == b"PK"


async def test_export_unsaved_items(client):
    resp = await client.post("/reports/export", json={"weekStart": "2024-06-17", "items": [{"project": "Draft"}]})

    assert resp.status_code == 200
    assert resp.content[:2] == b"PK"
    status = await client.get("/reports/status")
    assert status.json() == []


async def test_export_requires_week_start(client):
    resp = await client.get("/reports/export")
    assert resp.status_code == 400


# ------------------ projects ------------------

async def test_project_crud(client):
    resp = await client.post("/projects", json={"name": "Alpha", "client": "ACME", "pm": "Kim"})
    assert resp.status_code == 200
    project_id = resp.json()["id"]

    listed = (await client.get("/projects")).json()
    assert [(p["id"], p["name"], p["client"], p["period"]) for p in listed] == [
        (project_id, "Alpha", "ACME", "")
    ]

    resp = await client.put("/projects", json={"id": project_id, "name": "Alpha II", "code": "A-2"})
    assert resp.json() == {"success": True}
    updated = (await client.get("/projects")).json()[0]
    assert updated["name"] == "Alpha II"
    assert updated["code"] == "A-2"
    assert updated["client"] == ""

    resp = await client.delete("/projects", params={"id": project_id})
    assert resp.json() == {"success": True}
    assert (await client.get("/projects")).json() == []


async def test_project_presence_checks(client):
    resp = await client.post("/projects", json={"client": "ACME"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Name is required"}

    resp = await client.put("/projects", json={"name": "No id"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "ID and Name are required"}

    resp = await client.put("/projects", json={"id": "missing", "name": "Ghost"})
    assert resp.status_code == 404

    resp = await client.delete("/projects")
    assert resp.status_code == 400
    assert resp.json() == {"error": "ID is required"}


async def test_deleting_project_keeps_reports(client):
    project_id = (await client.post("/projects", json={"name": "Alpha"})).json()["id"]
    await client.post("/reports", json={"weekStart": "2024-06-17", "items": [{"project": "Alpha"}]})

    await client.delete("/projects", params={"id": project_id})

    items = (await client.get("/reports", params={"weekStart": "2024-06-17"})).json()["items"]
    assert [i["project"] for i in items] == ["Alpha"]


async def test_import_without_source_configured(client):
    resp = await client.post("/projects/import")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Import credentials not configured"}


async def test_import_copies_missing_projects(tmp_path, database, seed_projects, sqlite_url):
    external = Database(sqlite_url(tmp_path / "external.db"))
    await external.open()
    async with external.session() as s:
        s.add(Project(id="p1", name="Alpha", client="ACME"))
        s.add(Project(id="p2", name="Beta"))
        await s.commit()
    await external.close()

    await seed_projects({"id": "p1", "name": "Local Alpha"})

    settings = Settings(
        DATABASE_URL=sqlite_url(tmp_path / "reports.db"),
        IMPORT_DATABASE_URL=f"sqlite:///{tmp_path / 'external.db'}",
    )
    app = create_app(settings=settings, database=database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        first = await c.post("/projects/import")
        second = await c.post("/projects/import")
        projects = (await c.get("/projects")).json()

    assert first.json() == {"success": True, "count": 1}
    assert second.json() == {"success": True, "count": 0}
    assert sorted((p["id"], p["name"]) for p in projects) == [("p1", "Local Alpha"), ("p2", "Beta")]


# ------------------ backup ------------------

async def test_backup_dump(client):
    await client.post("/projects", json={"name": "Alpha"})
    await client.post("/reports", json={"weekStart": "2024-06-17", "items": [{"id": "r1", "division": "Dev"}]})

    dump = (await client.get("/backup")).json()

    assert dump["version"] == 2
    assert "timestamp" in dump
    assert [r["id"] for r in dump["reports"]] == ["r1"]
    assert [p["name"] for p in dump["projects"]] == ["Alpha"]


async def test_restore_versioned_backup(client):
    resp = await client.post("/restore", json={
        "version": 2,
        "reports": [{"id": "r1", "week_start": "2024-06-17", "division": "Dev"}],
        "projects": [{"id": "p1", "name": "Alpha"}],
    })

    assert resp.json() == {"success": True, "reports": 1, "projects": 1}
    items = (await client.get("/reports", params={"weekStart": "2024-06-17"})).json()["items"]
    assert [i["id"] for i in items] == ["r1"]
    assert [p["id"] for p in (await client.get("/projects")).json()] == ["p1"]


async def test_legacy_backup_only_touches_reports(client):
    project_id = (await client.post("/projects", json={"name": "Alpha"})).json()["id"]

    resp = await client.post("/backup", json=[
        {"id": "r1", "week_start": "2024-06-10", "curr_progress": "done"},
    ])

    assert resp.json() == {"success": True, "reports": 1, "projects": 0}
    assert [p["id"] for p in (await client.get("/projects")).json()] == [project_id]


async def test_malformed_backup_writes_nothing(client):
    resp = await client.post("/backup", json={"reports": [
        {"id": "r1", "week_start": "2024-06-10"},
        {"week_start": "2024-06-10"},
    ], "projects": []})

    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Invalid backup format")
    assert (await client.get("/reports/status")).json() == []
