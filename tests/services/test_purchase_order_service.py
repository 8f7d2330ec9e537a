from datetime import date, timedelta

import pytest

from app.models.enums import PurchaseOrderStatus
from app.schemas.filters import PurchaseOrderFilters
from app.services.purchase_order_service import PurchaseOrderService
from tests.factories import NOW, TODAY, FakeDataSource, make_order, make_supplier


def _source() -> FakeDataSource:
    return FakeDataSource(
        suppliers=[make_supplier(1, "Acme", contact_name="Ann"), make_supplier(2, "Bolt Co")],
        orders=[
            make_order(1, 1, date(2024, 6, 1), 100, status="delivered", expected=date(2024, 6, 5)),
            make_order(2, 2, date(2024, 6, 10), 250, status="shipped", expected=date(2024, 6, 12), line_count=4),
            make_order(3, 1, date(2024, 6, 10), 75, expected=date(2024, 6, 30)),
            make_order(4, 1, date(2024, 5, 20), 60, status="cancelled", expected=date(2024, 5, 25)),
            make_order(5, 2, date(2024, 5, 1), 40, status="confirmed", expected=date(2024, 5, 10)),
            # 供应商主档缺失
            make_order(6, 99, date(2024, 6, 14), 10),
        ],
    )


@pytest.mark.asyncio
async def test_recent_purchases_latest_first():
    resp = await PurchaseOrderService(_source()).get_recent_purchases(now=NOW)
    # 同日按 id 倒序；缺失供应商的采购单不展示
    assert [o.id for o in resp.recent_orders] == [3, 2, 1, 4, 5]

    shipped = resp.recent_orders[1]
    assert shipped.supplier.name == "Bolt Co"
    assert shipped.product_count == 4
    assert shipped.total_amount == 250.0
    assert shipped.is_overdue is True

    assert resp.recent_orders[0].supplier.contact_name == "Ann"
    assert resp.recent_orders[0].is_overdue is False


@pytest.mark.asyncio
async def test_recent_purchases_filters_before_limit():
    svc = PurchaseOrderService(_source())
    by_supplier = await svc.get_recent_purchases(PurchaseOrderFilters(supplier_id=1), limit=2, now=NOW)
    assert [o.id for o in by_supplier.recent_orders] == [3, 1]

    by_status = await svc.get_recent_purchases(
        PurchaseOrderFilters(status=PurchaseOrderStatus.CONFIRMED), limit=1, now=NOW
    )
    assert [o.id for o in by_status.recent_orders] == [5]

    by_range = await svc.get_recent_purchases(
        PurchaseOrderFilters(date_from=date(2024, 5, 15), date_to=date(2024, 6, 1)), now=NOW
    )
    assert [o.id for o in by_range.recent_orders] == [1, 4]


@pytest.mark.asyncio
async def test_recent_purchases_empty():
    resp = await PurchaseOrderService(FakeDataSource()).get_recent_purchases(now=NOW)
    assert resp.recent_orders == []


@pytest.mark.asyncio
async def test_overdue_purchase_orders():
    src = _source()
    out = await PurchaseOrderService(src).get_overdue_purchase_orders(now=NOW)
    # 已到货 / 已取消不算逾期；按预计日期升序
    assert [o.id for o in out] == [5, 2]
    assert all(o.is_overdue for o in out)
    assert src.calls == ["load_purchasing"]


@pytest.mark.asyncio
async def test_due_today_is_not_overdue():
    src = FakeDataSource(
        suppliers=[make_supplier(1)],
        orders=[
            make_order(1, 1, TODAY - timedelta(days=7), expected=TODAY),
            make_order(2, 1, TODAY - timedelta(days=7), expected=None),
        ],
    )
    assert await PurchaseOrderService(src).get_overdue_purchase_orders(now=NOW) == []
