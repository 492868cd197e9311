"""Bouquet lifecycle: assemble (debit), sell (no change), disassemble (credit back)."""
import base64
import io

import pytest
from PIL import Image

from flowerdesk.app.core.exceptions import InsufficientStockError
from flowerdesk.app.services.bouquets import (
    BouquetNotFoundError,
    BouquetService,
    EmptyBouquetError,
    InvalidPhotoError,
    bouquet_item_to_dict,
    bouquet_to_dict,
    describe_items,
)
from flowerdesk.app.services.ledger import LineItem


def _photo(width=900, height=300) -> str:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color=(250, 200, 210)).save(buf, format="JPEG")
    return "data:image/jpeg;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


@pytest.mark.asyncio
async def test_create_debits_stock(storage, helpers):
    await helpers.stock(storage, Rose=5)
    bouquet = await BouquetService(storage).create_bouquet("Весенний", None, [("Rose", 2)])
    assert bouquet.description == "Весенний"
    assert bouquet.photo is None
    assert await helpers.amounts(storage) == {"Rose": 3}
    items = await storage.list_bouquet_items(bouquet.id)
    assert [(i.flower_name, i.quantity) for i in items] == [("Rose", 2)]


@pytest.mark.asyncio
async def test_disassemble_returns_flowers(storage, helpers):
    await helpers.stock(storage, Rose=5)
    service = BouquetService(storage)
    bouquet = await service.create_bouquet("", None, [("Rose", 2)])
    await service.disassemble(bouquet.id)
    assert await helpers.amounts(storage) == {"Rose": 5}
    assert await service.list_bouquets() == []
    assert await storage.list_bouquet_items(bouquet.id) == []


@pytest.mark.asyncio
async def test_sell_keeps_stock_debited(storage, helpers):
    await helpers.stock(storage, Rose=5)
    service = BouquetService(storage)
    bouquet = await service.create_bouquet("", None, [("Rose", 2)])
    await service.sell(bouquet.id)
    assert await helpers.amounts(storage) == {"Rose": 3}
    with pytest.raises(BouquetNotFoundError):
        await service.get_bouquet(bouquet.id)
    assert await storage.list_bouquet_items(bouquet.id) == []


@pytest.mark.asyncio
async def test_disassemble_creates_missing_flower(storage, helpers):
    service = BouquetService(storage)
    bouquet = await service.create_bouquet("", None, [("Peony", 3)])
    # Peony was never in stock: nothing debited, but it comes back on disassembly
    assert await helpers.amounts(storage) == {}
    await service.disassemble(bouquet.id)
    assert await helpers.amounts(storage) == {"Peony": 3}


@pytest.mark.asyncio
async def test_blank_description_is_generated(storage, helpers):
    bouquet = await BouquetService(storage).create_bouquet(
        "  ", None, [("Роза", 3), ("Лилия", 2), ("Роза", 1)]
    )
    assert bouquet.description == "Роза ×4, Лилия ×2"


def test_describe_items():
    assert describe_items([LineItem("Tulip", 7)]) == "Tulip ×7"


@pytest.mark.asyncio
async def test_create_requires_items(storage):
    with pytest.raises(EmptyBouquetError):
        await BouquetService(storage).create_bouquet("x", None, [])


@pytest.mark.asyncio
async def test_photo_is_normalized(storage, helpers):
    service = BouquetService(storage, photo_max_side_px=300)
    bouquet = await service.create_bouquet("С фото", _photo(), [("Rose", 1)])
    assert bouquet.photo.startswith("data:image/webp;base64,")
    raw = base64.b64decode(bouquet.photo.split(",", 1)[1])
    assert Image.open(io.BytesIO(raw)).size == (300, 100)


@pytest.mark.asyncio
async def test_bad_photo_rejected_without_stock_change(storage, helpers):
    await helpers.stock(storage, Rose=5)
    with pytest.raises(InvalidPhotoError) as exc:
        await BouquetService(storage).create_bouquet("x", "bm90IGFuIGltYWdl", [("Rose", 1)])
    assert exc.value.status_code == 400
    assert await helpers.amounts(storage) == {"Rose": 5}


@pytest.mark.asyncio
async def test_strict_mode_rejects_short_bouquet(storage, helpers):
    await helpers.stock(storage, Rose=1)
    service = BouquetService(storage, strict_stock=True)
    with pytest.raises(InsufficientStockError):
        await service.create_bouquet("", None, [("Rose", 2)])
    assert await helpers.amounts(storage) == {"Rose": 1}
    assert await service.list_bouquets() == []


@pytest.mark.asyncio
async def test_update_header_only(storage, helpers):
    await helpers.stock(storage, Rose=5)
    service = BouquetService(storage)
    bouquet = await service.create_bouquet("old", None, [("Rose", 2)])
    updated = await service.update_bouquet(bouquet.id, description="new")
    assert updated.description == "new"
    assert await helpers.amounts(storage) == {"Rose": 3}


@pytest.mark.asyncio
async def test_update_empty_photo_removes_it(storage):
    service = BouquetService(storage)
    bouquet = await service.create_bouquet("x", _photo(40, 40), [("Rose", 1)])
    assert bouquet.photo is not None
    updated = await service.update_bouquet(bouquet.id, photo="")
    assert updated.photo is None


@pytest.mark.asyncio
async def test_missing_bouquet_is_404(storage):
    service = BouquetService(storage)
    for call in (service.get_bouquet, service.get_items, service.sell, service.disassemble):
        with pytest.raises(BouquetNotFoundError) as exc:
            await call(77)
        assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_list_newest_first_and_dicts(storage):
    service = BouquetService(storage)
    first = await service.create_bouquet("a", None, [("Rose", 1)])
    second = await service.create_bouquet("b", None, [("Rose", 1)])
    assert [b.id for b in await service.list_bouquets()] == [second.id, first.id]

    data = bouquet_to_dict(first)
    assert set(data) == {"id", "description", "dateTime", "photo"}
    item = (await service.get_items(first.id))[0]
    assert bouquet_item_to_dict(item) == {"id": item.id, "bouquetId": first.id, "flower": "Rose", "amount": 1}
