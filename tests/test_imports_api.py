"""Tests for import, lead and panel endpoints."""

import csv
import io
import sys
from unittest.mock import patch

import orjson
import pytest
from httpx import AsyncClient

from adminkit.importers import LeadImporter
from adminkit.imports import importer_path
from adminkit.imports.processor import ImportChunkProcessor

CSV_CONTENT = (
    b"First Name,Last Name,Email,Phone\n"
    b"Jane,Doe,jane@example.com,+1 555 0100\n"
    b"John,Roe,not-an-email,+1 555 0101\n"
)


async def upload(client: AsyncClient, content: bytes = CSV_CONTENT, **data):
    data.setdefault("importer", "leads")
    return await client.post(
        "/api/v1/imports",
        files={"file": ("contacts.csv", content, "text/csv")},
        data=data,
    )


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_missing_and_invalid_api_key(client: AsyncClient):
    response = await client.get("/api/v1/imports", headers={"X-API-Key": ""})
    assert response.status_code == 401

    response = await client.get("/api/v1/imports", headers={"X-API-Key": "ak_wrong"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid API key"


@pytest.mark.asyncio
async def test_create_import_guesses_columns_and_dispatches(client: AsyncClient):
    with patch("adminkit.api.v1.imports.dispatch_import_chunks") as dispatch:
        response = await upload(client, webhook_url="https://hooks.example.com/done")

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "queued"
    assert data["total_rows"] == 2
    assert data["processed_rows"] == 0
    assert data["importer"] == importer_path(LeadImporter)
    assert data["webhook_url"] == "https://hooks.example.com/done"
    assert data["column_map"] == {
        "first_name": "First Name",
        "last_name": "Last Name",
        "email": "Email",
        "phone": "Phone",
    }

    import_, rows, column_map, options = dispatch.call_args.args
    assert str(import_.id) == data["id"]
    assert rows[0]["Email"] == "jane@example.com"
    assert column_map == data["column_map"]
    assert options == {}


@pytest.mark.asyncio
async def test_create_import_with_explicit_map_and_options(client: AsyncClient):
    with patch("adminkit.api.v1.imports.dispatch_import_chunks") as dispatch:
        response = await upload(
            client,
            column_map=orjson.dumps({"email": "Email", "first_name": ""}).decode(),
            options=orjson.dumps({"update_existing": False}).decode(),
        )

    assert response.status_code == 201
    assert response.json()["column_map"] == {"email": "Email"}
    assert dispatch.call_args.args[3] == {"update_existing": False}


@pytest.mark.asyncio
async def test_create_import_rejects_missing_required_mapping(client: AsyncClient):
    with patch("adminkit.api.v1.imports.dispatch_import_chunks") as dispatch:
        response = await upload(client, b"Name,Phone\nJane,123\n")

    assert response.status_code == 422
    assert response.json()["detail"]["missing"] == ["email"]
    dispatch.assert_not_called()


@pytest.mark.asyncio
async def test_create_import_rejects_empty_file(client: AsyncClient):
    response = await upload(client, b"")

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_import_rejects_unknown_importer(client: AsyncClient):
    response = await upload(client, importer="nope")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_import_never_imports_unregistered_modules(client: AsyncClient):
    sys.modules.pop("this", None)

    with patch("adminkit.api.v1.imports.dispatch_import_chunks") as dispatch:
        response = await upload(client, importer="this.Anything")

    assert response.status_code == 404
    assert response.json()["detail"] == "Importer [this.Anything] is not registered"
    assert "this" not in sys.modules
    dispatch.assert_not_called()


@pytest.mark.asyncio
async def test_create_import_rejects_dotted_path_of_registered_importer(client: AsyncClient):
    response = await upload(client, importer=importer_path(LeadImporter))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_import_rejects_too_many_rows(client: AsyncClient):
    with patch("adminkit.api.v1.imports.settings.import_max_rows", 1):
        response = await upload(client)

    assert response.status_code == 413


@pytest.mark.asyncio
async def test_create_import_rejects_bad_json(client: AsyncClient):
    response = await upload(client, column_map="{not json")

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_and_get_imports(client: AsyncClient, make_import):
    import_ = await make_import(total_rows=4)

    response = await client.get("/api/v1/imports")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["id"] == str(import_.id)
    assert data["items"][0]["progress_percentage"] == 0.0

    response = await client.get(f"/api/v1/imports/{import_.id}")
    assert response.status_code == 200
    assert response.json()["total_rows"] == 4
    assert response.json()["is_completed"] is False


@pytest.mark.asyncio
async def test_get_unknown_import(client: AsyncClient):
    response = await client.get("/api/v1/imports/00000000-0000-0000-0000-000000000000")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_failed_rows_listing_and_download(client: AsyncClient, session_maker, make_import):
    import_ = await make_import(total_rows=2)
    column_map = {"first_name": "First Name", "email": "Email", "phone": "Phone"}
    rows = [
        {"First Name": "Jane", "Email": "jane@example.com", "Phone": "1"},
        {"First Name": "John", "Email": "not-an-email", "Phone": "2"},
    ]
    await ImportChunkProcessor(session_maker, import_.id, rows, column_map).handle()

    response = await client.get(f"/api/v1/imports/{import_.id}/failed-rows")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["data"] == {"First Name": "John", "Email": "not-an-email"}

    response = await client.get(f"/api/v1/imports/{import_.id}/failed-rows/download")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert list(csv.reader(io.StringIO(response.text))) == [
        ["First Name", "Email", "error"],
        ["John", "not-an-email", "The Email address field must be a valid email address."],
    ]


@pytest.mark.asyncio
async def test_importers_and_example(client: AsyncClient):
    response = await client.get("/api/v1/imports/importers")
    assert response.status_code == 200
    leads = next(item for item in response.json() if item["name"] == "leads")
    email = next(column for column in leads["columns"] if column["name"] == "email")
    assert email["required_mapping"] is True
    assert email["rules"] == ["required", "email", "max:255"]
    assert leads["options"] == {"update_existing": True}

    response = await client.get("/api/v1/imports/importers/leads/example")
    assert response.status_code == 200
    assert response.text.splitlines()[0].startswith("first_name,last_name,email")

    response = await client.get("/api/v1/imports/importers/unknown/example")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_leads_endpoints(client: AsyncClient, session_maker, make_import):
    import_ = await make_import(total_rows=1)
    await ImportChunkProcessor(
        session_maker,
        import_.id,
        [{"Email": "jane@example.com", "Tags": "a,b"}],
        {"email": "Email", "tags": "Tags"},
    ).handle()

    response = await client.get("/api/v1/leads", params={"import_id": str(import_.id)})
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    lead = data["items"][0]
    assert lead["email"] == "jane@example.com"
    assert lead["tags"] == ["a", "b"]
    assert lead["source"] == "csv_import"

    response = await client.get(f"/api/v1/leads/{lead['id']}")
    assert response.status_code == 200
    assert response.json()["id"] == lead["id"]


@pytest.mark.asyncio
async def test_panel_endpoints(client: AsyncClient):
    response = await client.get("/api/v1/panels/admin")
    assert response.status_code == 200
    data = response.json()
    assert data["path"] == "admin"
    assert data["spa"]["enabled"] is False
    assert "*/admin/imports/*/failed-rows/download" in data["spa"]["url_exceptions"]

    response = await client.get("/api/v1/panels/admin/navigation", params={"url": "https://app.test/admin"})
    assert response.json() == {"url": "https://app.test/admin", "spa": False, "prefetch": False}

    with patch("adminkit.panels.registry.settings.panel_spa_mode", True):
        response = await client.get(
            "/api/v1/panels/admin/navigation",
            params={"url": "https://app.test/admin/imports/1/failed-rows/download"},
        )
        assert response.json()["spa"] is False

        response = await client.get("/api/v1/panels/admin/navigation", params={"url": "https://app.test/admin/leads"})
        assert response.json()["spa"] is True

    response = await client.get("/api/v1/panels/missing")
    assert response.status_code == 404
