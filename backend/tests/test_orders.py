"""Integration tests for the /order/ endpoints."""

import pytest
from httpx import AsyncClient


async def _new_order(client: AsyncClient, *items: str) -> dict[str, object]:
    resp = await client.post("/order/", json={"customer": "Li Lei", "items": list(items)})
    assert resp.status_code == 201
    return resp.json()  # type: ignore[no-any-return]


@pytest.mark.asyncio
async def test_create_order_starts_in_init(client: AsyncClient, seeded_db: None) -> None:
    order = await _new_order(client, "latte", "mocha", "latte")

    assert order["customer"] == "Li Lei"
    assert order["state"] == "INIT"
    assert [(c["name"], c["price"]) for c in order["items"]] == [  # type: ignore[attr-defined]
        ("latte", "125.00"),
        ("mocha", "150.00"),
    ]
    assert {"createTime", "updateTime"} <= set(order)


@pytest.mark.asyncio
async def test_create_order_with_unknown_coffee_returns_404(
    client: AsyncClient, seeded_db: None
) -> None:
    resp = await client.post("/order/", json={"customer": "Li Lei", "items": ["latte", "tea"]})
    assert resp.status_code == 404
    assert resp.json()["error"] == "Not Found"


@pytest.mark.asyncio
async def test_create_order_invalid_body_returns_400(client: AsyncClient) -> None:
    resp = await client.post("/order/", json={"customer": "", "items": []})
    assert resp.status_code == 400
    assert set(resp.json()) == {"timestamp", "status", "error", "message", "path"}


@pytest.mark.asyncio
async def test_get_order(client: AsyncClient, seeded_db: None) -> None:
    order = await _new_order(client, "espresso")
    resp = await client.get(f"/order/{order['id']}")
    assert resp.status_code == 200
    assert resp.json()["items"][0]["name"] == "espresso"


@pytest.mark.asyncio
async def test_get_missing_order_returns_404(client: AsyncClient) -> None:
    resp = await client.get("/order/999")
    assert resp.status_code == 404
    assert resp.json()["path"] == "/order/999"


@pytest.mark.asyncio
async def test_order_moves_forward(client: AsyncClient, seeded_db: None) -> None:
    order = await _new_order(client, "espresso")
    for state in ("PAID", "BREWING", "BREWED", "TAKEN"):
        resp = await client.put(f"/order/{order['id']}", json={"state": state})
        assert resp.status_code == 200
        assert resp.json()["state"] == state


@pytest.mark.asyncio
async def test_backward_move_uses_order_conflict_handler(
    client: AsyncClient, seeded_db: None
) -> None:
    order = await _new_order(client, "espresso")
    await client.put(f"/order/{order['id']}", json={"state": "PAID"})

    resp = await client.put(f"/order/{order['id']}", json={"state": "INIT"})

    assert resp.status_code == 409
    assert resp.json() == {
        "message": f"Order {order['id']} cannot move from PAID to INIT",
        "currentState": "PAID",
        "targetState": "INIT",
    }


@pytest.mark.asyncio
async def test_cancel_before_taken(client: AsyncClient, seeded_db: None) -> None:
    order = await _new_order(client, "espresso")
    resp = await client.put(f"/order/{order['id']}", json={"state": "CANCELLED"})
    assert resp.status_code == 200
    assert resp.json()["state"] == "CANCELLED"


@pytest.mark.asyncio
async def test_cancel_after_taken_is_rejected(client: AsyncClient, seeded_db: None) -> None:
    order = await _new_order(client, "espresso")
    for state in ("PAID", "BREWING", "BREWED", "TAKEN"):
        await client.put(f"/order/{order['id']}", json={"state": state})

    resp = await client.put(f"/order/{order['id']}", json={"state": "CANCELLED"})
    assert resp.status_code == 409
    assert resp.json()["currentState"] == "TAKEN"


@pytest.mark.asyncio
async def test_unknown_state_returns_400(client: AsyncClient, seeded_db: None) -> None:
    order = await _new_order(client, "espresso")
    resp = await client.put(f"/order/{order['id']}", json={"state": "FROZEN"})
    assert resp.status_code == 400
