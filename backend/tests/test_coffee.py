"""Integration tests for the /coffee/ endpoints."""

from collections.abc import Sequence

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from coffee_shop.models import Coffee
from coffee_shop.services import coffee as coffee_service
from tests.seeds import MENU

FORM_ENVELOPE_KEYS = {"timestamp", "status", "error", "message", "path"}


# ---------------------------------------------------------------------------
# GET /coffee/
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_list_coffees_returns_menu(client: AsyncClient, seeded_db: None) -> None:
    resp = await client.get("/coffee/")
    assert resp.status_code == 200
    body = resp.json()
    assert [item["name"] for item in body] == list(MENU)
    espresso = body[0]
    assert set(espresso) == {"id", "createTime", "updateTime", "name", "price"}
    assert espresso["price"] == "100.00"


@pytest.mark.asyncio
async def test_list_coffees_is_idempotent(client: AsyncClient, seeded_db: None) -> None:
    first = await client.get("/coffee/")
    second = await client.get("/coffee/")
    assert first.json() == second.json()


@pytest.mark.asyncio
async def test_list_coffees_empty_database(client: AsyncClient) -> None:
    resp = await client.get("/coffee/")
    assert resp.status_code == 200
    assert resp.json() == []


# ---------------------------------------------------------------------------
# POST /coffee/ form-encoded
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_form_create_returns_201(client: AsyncClient) -> None:
    resp = await client.post("/coffee/", data={"name": "Americano", "price": "125.00"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["name"] == "Americano"
    assert body["price"] == "125.00"
    assert isinstance(body["id"], int)


@pytest.mark.asyncio
async def test_form_missing_price_returns_generic_envelope(client: AsyncClient) -> None:
    resp = await client.post(
        "/coffee/",
        content="name=Americano&price=",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert resp.status_code == 400
    body = resp.json()
    assert set(body) == FORM_ENVELOPE_KEYS
    assert body["status"] == 400
    assert body["error"] == "Bad Request"
    assert body["path"] == "/coffee/"
    assert "price" not in resp.text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "form",
    [
        {"name": "", "price": "10.00"},
        {"name": "Mocha", "price": "-3.00"},
        {"name": "Mocha", "price": "cheap"},
        {"price": "10.00"},
        {"name": "Mocha", "price": "9" * 20},
    ],
    ids=["empty_name", "negative_price", "non_numeric_price", "no_name", "price_above_bigint"],
)
async def test_form_invalid_request_does_not_leak_fields(
    client: AsyncClient, form: dict[str, str]
) -> None:
    resp = await client.post("/coffee/", data=form)
    assert resp.status_code == 400
    assert set(resp.json()) == FORM_ENVELOPE_KEYS
    assert "name" not in resp.json()["message"]
    assert "price" not in resp.json()["message"]
    assert "cheap" not in resp.text
    assert "-3.00" not in resp.text


# ---------------------------------------------------------------------------
# POST /coffee/ JSON
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_json_create_round_trips_price(client: AsyncClient) -> None:
    resp = await client.post("/coffee/", json={"name": "Flat White", "price": 150.00})
    assert resp.status_code == 201
    assert resp.json()["price"] == "150.00"

    listed = (await client.get("/coffee/")).json()
    assert [(c["name"], c["price"]) for c in listed] == [("Flat White", "150.00")]


@pytest.mark.asyncio
async def test_json_empty_name_returns_message_envelope(client: AsyncClient) -> None:
    resp = await client.post("/coffee/", json={"name": "", "price": 150.00})
    assert resp.status_code == 400
    body = resp.json()
    assert set(body) == {"message"}
    assert "name" in body["message"]


@pytest.mark.asyncio
async def test_json_reports_every_violation(client: AsyncClient) -> None:
    resp = await client.post("/coffee/", json={"name": "", "price": -1})
    message = resp.json()["message"]
    assert resp.status_code == 400
    assert "'name'" in message
    assert "'price'" in message
    assert "2 error(s)" in message


@pytest.mark.asyncio
async def test_json_price_beyond_storage_range_returns_400(client: AsyncClient) -> None:
    resp = await client.post("/coffee/", json={"name": "Gold", "price": 10**25})
    assert resp.status_code == 400
    body = resp.json()
    assert set(body) == {"message"}
    assert "'price'" in body["message"]
    assert "92233720368547758.07" in body["message"]

    assert (await client.get("/coffee/")).json() == []


@pytest.mark.asyncio
async def test_json_missing_price(client: AsyncClient) -> None:
    resp = await client.post("/coffee/", json={"name": "Latte"})
    assert resp.status_code == 400
    assert "must not be null" in resp.json()["message"]


@pytest.mark.asyncio
async def test_json_malformed_body_returns_400(client: AsyncClient) -> None:
    resp = await client.post(
        "/coffee/", content="{not json", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Bad Request"


@pytest.mark.asyncio
async def test_json_array_body_returns_400(client: AsyncClient) -> None:
    resp = await client.post("/coffee/", json=[{"name": "Latte", "price": 1}])
    assert resp.status_code == 400
    assert set(resp.json()) == FORM_ENVELOPE_KEYS


@pytest.mark.asyncio
async def test_duplicate_name_returns_409(client: AsyncClient, seeded_db: None) -> None:
    resp = await client.post("/coffee/", json={"name": "latte", "price": 1})
    assert resp.status_code == 409
    assert resp.json()["error"] == "Conflict"


@pytest.mark.asyncio
async def test_unsupported_content_type_returns_415(client: AsyncClient) -> None:
    resp = await client.post(
        "/coffee/", content="name=Latte", headers={"Content-Type": "text/plain"}
    )
    assert resp.status_code == 415
    assert resp.json()["error"] == "Unsupported Media Type"


# ---------------------------------------------------------------------------
# POST /coffee/ multipart batch
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_batch_upload_creates_every_line(client: AsyncClient) -> None:
    files = {"file": ("coffee.txt", b"Americano 125.0\nItalian 150.0", "text/plain")}
    resp = await client.post("/coffee/", files=files)
    assert resp.status_code == 201
    body = resp.json()
    assert [(c["name"], c["price"]) for c in body] == [
        ("Americano", "125.00"),
        ("Italian", "150.00"),
    ]

    listed = (await client.get("/coffee/")).json()
    assert len(listed) == 2


@pytest.mark.asyncio
async def test_batch_upload_keeps_spaces_in_names_and_skips_blank_lines(
    client: AsyncClient,
) -> None:
    files = {"file": ("coffee.txt", b"Flat White 30\n\n   \nCold Brew   28.50\n", "text/plain")}
    resp = await client.post("/coffee/", files=files)
    assert resp.status_code == 201
    assert [c["name"] for c in resp.json()] == ["Flat White", "Cold Brew"]


@pytest.mark.asyncio
async def test_batch_with_malformed_line_persists_nothing(client: AsyncClient) -> None:
    files = {"file": ("coffee.txt", b"Americano 125.0\nItalian cheap", "text/plain")}
    resp = await client.post("/coffee/", files=files)
    assert resp.status_code == 400
    assert set(resp.json()) == FORM_ENVELOPE_KEYS
    assert "cheap" not in resp.text

    listed = (await client.get("/coffee/")).json()
    assert listed == []


@pytest.mark.asyncio
async def test_batch_with_empty_file_returns_400(client: AsyncClient) -> None:
    files = {"file": ("coffee.txt", b"\n\n", "text/plain")}
    resp = await client.post("/coffee/", files=files)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_multipart_without_file_part_returns_400(client: AsyncClient) -> None:
    resp = await client.post(
        "/coffee/",
        data={"name": "Latte"},
        files={"other": ("x.txt", b"Latte 1", "text/plain")},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_batch_with_price_beyond_storage_range_persists_nothing(
    client: AsyncClient,
) -> None:
    files = {"file": ("coffee.txt", b"Americano 125.0\nGold 99999999999999999999", "text/plain")}
    resp = await client.post("/coffee/", files=files)
    assert resp.status_code == 400
    assert set(resp.json()) == FORM_ENVELOPE_KEYS
    assert "99999999999999999999" not in resp.text

    listed = (await client.get("/coffee/")).json()
    assert listed == []


@pytest.mark.asyncio
async def test_batch_upload_ignores_utf8_byte_order_mark(client: AsyncClient) -> None:
    files = {"file": ("coffee.txt", b"\xef\xbb\xbfAmericano 125.0\nItalian 150.0", "text/plain")}
    resp = await client.post("/coffee/", files=files)
    assert resp.status_code == 201
    assert [c["name"] for c in resp.json()] == ["Americano", "Italian"]


@pytest.mark.asyncio
async def test_insert_race_on_unique_name_returns_409(
    client: AsyncClient, seeded_db: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> None:
    # Another request inserts "latte" between the existence check and the insert
    async def no_existing_coffees(db: AsyncSession, names: Sequence[str]) -> list[Coffee]:
        return []

    monkeypatch.setattr(coffee_service, "find_coffees_by_names", no_existing_coffees)

    resp = await client.post("/coffee/", json={"name": "latte", "price": 1})
    assert resp.status_code == 409
    assert resp.json()["error"] == "Conflict"

    await seeded_db.rollback()
    listed = (await client.get("/coffee/")).json()
    assert [c["name"] for c in listed].count("latte") == 1
