"""
Integration tests for the HTTP API.

Each request runs in its own session, like in production, so these tests
also check that routes commit what they change.
"""
import pytest
from httpx import AsyncClient

from flowerdesk.app.core.settings import get_settings


def order_body(**header) -> dict:
    order = {
        "from": "Анна",
        "to": "Мария",
        "address": "ул. Ленина, 1",
        "dateTime": "2026-03-08T10:00:00",
        "timeFrom": "10:00",
        "timeTo": "12:00",
    }
    order.update(header)
    return {"order": order, "items": [{"flower": "Rose", "amount": 3}, {"flower": "Tulip", "amount": 2}]}


async def warehouse(client: AsyncClient) -> dict:
    response = await client.get("/api/flowers")
    assert response.status_code == 200
    return {f["flower"]: f["amount"] for f in response.json()}


async def receive(client: AsyncClient, **flowers: int) -> None:
    for name, amount in flowers.items():
        response = await client.post("/api/flowers", json={"flower": name, "amount": amount})
        assert response.status_code == 201


# ============================================
# SERVICE ENDPOINTS
# ============================================

@pytest.mark.asyncio
async def test_root(client: AsyncClient):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["checks"]["database"] == "ok"


@pytest.mark.asyncio
async def test_request_id_header(client: AsyncClient):
    response = await client.get("/", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


@pytest.mark.asyncio
async def test_metrics(client: AsyncClient):
    await receive(client, Rose=1)
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "http_requests_total" in response.text


# ============================================
# WAREHOUSE
# ============================================

@pytest.mark.asyncio
async def test_flowers_add_and_increment(client: AsyncClient):
    await receive(client, Rose=10)
    response = await client.post("/api/flowers", json={"flower": "Rose", "amount": 5})
    assert response.status_code == 201
    body = response.json()
    assert body["flower"] == "Rose"
    assert body["amount"] == 15
    assert "dateTime" in body
    assert await warehouse(client) == {"Rose": 15}


@pytest.mark.asyncio
async def test_flowers_validation_error_is_400(client: AsyncClient):
    response = await client.post("/api/flowers", json={"flower": "Rose", "amount": 0})
    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Validation error"
    assert [e["field"] for e in body["errors"]] == ["amount"]


@pytest.mark.asyncio
async def test_flowers_get_update_delete(client: AsyncClient):
    await receive(client, Rose=10, Tulip=3)
    flowers = (await client.get("/api/flowers")).json()
    rose_id = flowers[0]["id"]

    response = await client.get(f"/api/flowers/{rose_id}")
    assert response.json()["flower"] == "Rose"

    response = await client.put(f"/api/flowers/{rose_id}", json={"amount": 0})
    assert response.status_code == 200
    assert response.json()["amount"] == 0

    response = await client.put(f"/api/flowers/{rose_id}", json={"flower": "Tulip"})
    assert response.status_code == 400

    response = await client.delete(f"/api/flowers/{rose_id}")
    assert response.json() == {"success": True}
    assert await warehouse(client) == {"Tulip": 3}


@pytest.mark.asyncio
async def test_flower_not_found(client: AsyncClient):
    assert (await client.get("/api/flowers/999")).status_code == 404
    assert (await client.put("/api/flowers/999", json={"amount": 1})).status_code == 404
    assert (await client.delete("/api/flowers/999")).status_code == 404


# ============================================
# WRITE-OFFS
# ============================================

@pytest.mark.asyncio
async def test_writeoffs_flow(client: AsyncClient):
    await receive(client, Rose=10)
    response = await client.post("/api/writeoffs", json={"flower": "Rose", "amount": 4})
    assert response.status_code == 201
    assert response.json()["amount"] == 4
    assert await warehouse(client) == {"Rose": 6}

    assert len((await client.get("/api/writeoffs")).json()) == 1
    response = await client.delete("/api/writeoffs")
    assert response.json()["success"] is True
    assert (await client.get("/api/writeoffs")).json() == []
    assert await warehouse(client) == {"Rose": 6}


# ============================================
# NOTES
# ============================================

@pytest.mark.asyncio
async def test_notes_flow(client: AsyncClient):
    response = await client.post("/api/notes", json={"title": "Поставщик", "content": "Пятница 14:00"})
    assert response.status_code == 201
    note_id = response.json()["id"]

    response = await client.put(f"/api/notes/{note_id}", json={"content": "Четверг"})
    assert response.json()["content"] == "Четверг"
    assert (await client.get(f"/api/notes/{note_id}")).json()["title"] == "Поставщик"

    assert (await client.delete(f"/api/notes/{note_id}")).json() == {"success": True}
    assert (await client.get(f"/api/notes/{note_id}")).status_code == 404
    assert (await client.delete(f"/api/notes/{note_id}")).status_code == 404
    assert (await client.delete("/api/notes/999")).status_code == 404


@pytest.mark.asyncio
async def test_note_requires_content(client: AsyncClient):
    response = await client.post("/api/notes", json={"title": "x"})
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "content"


# ============================================
# ORDERS
# ============================================

@pytest.mark.asyncio
async def test_order_lifecycle(client: AsyncClient):
    await receive(client, Rose=10, Tulip=8)

    response = await client.post("/api/orders", json=order_body(notes="без упаковки"))
    assert response.status_code == 201
    order = response.json()
    assert order["status"] == "Новый"
    assert order["from"] == "Анна"
    assert order["nextStatuses"] == ["Собран", "Удалён"]
    assert await warehouse(client) == {"Rose": 7, "Tulip": 6}

    items = (await client.get(f"/api/orders/{order['id']}/items")).json()
    assert [(i["flower"], i["amount"]) for i in items] == [("Rose", 3), ("Tulip", 2)]
    assert all(i["orderId"] == order["id"] for i in items)

    response = await client.put(
        f"/api/orders/{order['id']}",
        json={"order": {"address": "пр. Мира, 5"}, "items": [{"flower": "Rose", "amount": 5}]},
    )
    assert response.status_code == 200
    assert response.json()["address"] == "пр. Мира, 5"
    assert response.json()["to"] == "Мария"
    assert await warehouse(client) == {"Rose": 5, "Tulip": 8}

    response = await client.put(f"/api/orders/{order['id']}/status", json={"status": "Собран"})
    assert response.json()["status"] == "Собран"

    assert (await client.delete(f"/api/orders/{order['id']}")).json() == {"success": True}
    assert (await client.delete(f"/api/orders/{order['id']}")).json() == {"success": True}
    assert await warehouse(client) == {"Rose": 10, "Tulip": 8}
    assert (await client.get(f"/api/orders/{order['id']}")).json()["status"] == "Удалён"


@pytest.mark.asyncio
async def test_pickup_order_via_api(client: AsyncClient):
    body = order_body(pickup=True, to=None, address=None, timeFrom="", timeTo="")
    response = await client.post("/api/orders", json=body)
    assert response.status_code == 201
    order = response.json()
    assert order["to"] == "Самовывоз"
    assert order["address"] == "Магазин"
    assert order["timeFrom"] is None
    assert order["nextStatuses"] == ["Собран", "В доставке", "Удалён"]


@pytest.mark.asyncio
async def test_order_business_validation(client: AsyncClient):
    response = await client.post("/api/orders", json=order_body(to=None))
    assert response.status_code == 400
    assert response.json()["detail"].startswith("to:")
    assert (await client.get("/api/orders")).json() == []


@pytest.mark.asyncio
async def test_order_schema_validation(client: AsyncClient):
    body = order_body(timeFrom="25:00")
    body["items"] = []
    response = await client.post("/api/orders", json=body)
    assert response.status_code == 400
    fields = {e["field"] for e in response.json()["errors"]}
    assert fields == {"order.timeFrom", "items"}


@pytest.mark.asyncio
async def test_order_bad_status(client: AsyncClient):
    response = await client.post("/api/orders", json=order_body())
    order_id = response.json()["id"]
    response = await client.put(f"/api/orders/{order_id}/status", json={"status": "Потерян"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_order_not_found(client: AsyncClient):
    assert (await client.get("/api/orders/404")).status_code == 404
    assert (await client.get("/api/orders/404/items")).status_code == 404
    assert (await client.delete("/api/orders/404")).status_code == 404
    response = await client.put("/api/orders/404/status", json={"status": "Собран"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_orders_by_status(client: AsyncClient):
    first = (await client.post("/api/orders", json=order_body())).json()
    second = (await client.post("/api/orders", json=order_body(dateTime="2026-03-09T09:00:00"))).json()
    await client.put(f"/api/orders/{first['id']}/status", json={"status": "Собран"})

    orders = (await client.get("/api/orders")).json()
    assert [o["id"] for o in orders] == [second["id"], first["id"]]

    response = await client.get("/api/orders", params={"status": ["Собран"]})
    assert [o["id"] for o in response.json()] == [first["id"]]

    response = await client.get("/api/orders", params={"status": ["new", "assembled"]})
    assert len(response.json()) == 2

    assert (await client.get("/api/orders", params={"status": "nope"})).status_code == 400


@pytest.mark.asyncio
async def test_check_stock(client: AsyncClient):
    await receive(client, Rose=4, Tulip=2)
    order = (await client.post("/api/orders", json=order_body())).json()

    response = await client.post(
        "/api/orders/check-stock",
        json={"items": [{"flower": "Rose", "amount": 4}], "orderId": order["id"]},
    )
    assert response.json() == {"ok": True, "shortages": []}

    response = await client.post("/api/orders/check-stock", json={"items": [{"flower": "Rose", "amount": 4}]})
    assert response.json() == {
        "ok": False,
        "shortages": [{"flower": "Rose", "needed": 4, "available": 1}],
    }


@pytest.mark.asyncio
async def test_strict_stock_rejects_order(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(get_settings(), "STRICT_STOCK_CHECK", True)
    await receive(client, Rose=1, Tulip=5)
    response = await client.post("/api/orders", json=order_body())
    assert response.status_code == 400
    assert "Rose" in response.json()["detail"]
    assert await warehouse(client) == {"Rose": 1, "Tulip": 5}
    assert (await client.get("/api/orders")).json() == []


# ============================================
# BOUQUETS
# ============================================

@pytest.mark.asyncio
async def test_bouquet_disassemble(client: AsyncClient):
    await receive(client, Rose=5)
    response = await client.post(
        "/api/bouquets",
        json={"bouquet": {"description": ""}, "items": [{"flower": "Rose", "amount": 2}]},
    )
    assert response.status_code == 201
    bouquet = response.json()
    assert bouquet["description"] == "Rose ×2"
    assert await warehouse(client) == {"Rose": 3}

    items = (await client.get(f"/api/bouquets/{bouquet['id']}/items")).json()
    assert [(i["bouquetId"], i["flower"], i["amount"]) for i in items] == [(bouquet["id"], "Rose", 2)]

    response = await client.post(f"/api/bouquets/{bouquet['id']}/disassemble")
    assert response.json() == {"success": True}
    assert await warehouse(client) == {"Rose": 5}
    assert (await client.get(f"/api/bouquets/{bouquet['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_bouquet_sell(client: AsyncClient):
    await receive(client, Rose=5)
    bouquet = (await client.post(
        "/api/bouquets",
        json={"bouquet": {"description": "Для витрины"}, "items": [{"flower": "Rose", "amount": 2}]},
    )).json()

    response = await client.put(f"/api/bouquets/{bouquet['id']}", json={"description": "Нежность"})
    assert response.json()["description"] == "Нежность"

    assert (await client.post(f"/api/bouquets/{bouquet['id']}/sell")).status_code == 200
    assert await warehouse(client) == {"Rose": 3}
    assert (await client.get("/api/bouquets")).json() == []
    assert (await client.post(f"/api/bouquets/{bouquet['id']}/sell")).status_code == 404


@pytest.mark.asyncio
async def test_bouquet_bad_photo(client: AsyncClient):
    response = await client.post(
        "/api/bouquets",
        json={"bouquet": {"description": "x", "photo": "###"}, "items": [{"flower": "Rose", "amount": 1}]},
    )
    assert response.status_code == 400
    assert (await client.get("/api/bouquets")).json() == []
