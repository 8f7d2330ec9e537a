import pytest

from app.schemas.filters import WarehouseDistributionFilters
from app.services.warehouse_distribution_service import (
    WarehouseDistributionService,
    imbalance_score,
    suggest_transfers,
)
from app.schemas.warehouse_distribution import ImbalanceLocation
from tests.factories import FakeDataSource, make_location, make_product, make_record


def _source() -> FakeDataSource:
    return FakeDataSource(
        products=[
            make_product(1, "Alpha", category="A"),
            make_product(2, "Beta", category="B"),
            make_product(3, "Gamma", active=False),
        ],
        records=[
            make_record(1, 1, 10, 5.0),
            make_record(2, 1, 4, None),
            make_record(1, 2, 90, 5.0),
            make_record(2, 2, 0, 1.0),
            make_record(1, 3, 5, 1.0),
            make_record(3, 1, 7, 1.0),
        ],
        locations=[
            make_location(1, "Main", address="1 Main St"),
            make_location(2, "Annex"),
            make_location(3, "Closed", active=False),
        ],
    )


@pytest.mark.asyncio
async def test_distribution_groups_by_location():
    resp = await WarehouseDistributionService(_source()).get_warehouse_distribution()
    assert [w.warehouse_name for w in resp.warehouses] == ["Annex", "Main"]

    annex, main = resp.warehouses
    assert annex.total_products == 1
    assert annex.total_quantity == 90
    assert annex.total_value == 450.0

    assert main.warehouse_address == "1 Main St"
    assert main.total_products == 2
    assert main.total_quantity == 14
    assert main.total_value == 50.0
    assert main.excluded_records == 1
    assert [p.name for p in main.products] == ["Alpha", "Beta"]
    assert main.products[1].unit_cost is None


@pytest.mark.asyncio
async def test_distribution_min_value_keeps_empty_location():
    resp = await WarehouseDistributionService(_source()).get_warehouse_distribution(
        WarehouseDistributionFilters(min_value=100)
    )
    by_name = {w.warehouse_name: w for w in resp.warehouses}
    assert by_name["Annex"].total_value == 450.0
    main = by_name["Main"]
    assert main.products == []
    assert (main.total_products, main.total_quantity, main.total_value) == (0, 0, 0.0)


@pytest.mark.asyncio
async def test_distribution_filters():
    svc = WarehouseDistributionService(_source())
    by_wh = await svc.get_warehouse_distribution(WarehouseDistributionFilters(warehouse_id=1))
    assert [w.warehouse_id for w in by_wh.warehouses] == [1]

    by_cat = await svc.get_warehouse_distribution(WarehouseDistributionFilters(category="B"))
    assert [(w.warehouse_name, [p.product_id for p in w.products]) for w in by_cat.warehouses] == [
        ("Main", [2])
    ]

    by_product = await svc.get_warehouse_distribution(WarehouseDistributionFilters(product_id=1))
    assert sum(w.total_quantity for w in by_product.warehouses) == 100


@pytest.mark.asyncio
async def test_distribution_empty():
    resp = await WarehouseDistributionService(FakeDataSource()).get_warehouse_distribution()
    assert resp.warehouses == []


def test_imbalance_score():
    assert imbalance_score([50.0, 50.0]) == 0.0
    assert imbalance_score([10.0, 90.0]) == pytest.approx(0.4)
    assert imbalance_score([100.0, 0.0, 0.0]) == pytest.approx(min(1.4142135 / 2, 1), rel=1e-5)
    assert imbalance_score([]) == 0.0


def test_suggest_transfers_greedy():
    locs = [
        ImbalanceLocation(warehouse_id=1, warehouse_name="A", quantity=70, percentage=70),
        ImbalanceLocation(warehouse_id=2, warehouse_name="B", quantity=20, percentage=20),
        ImbalanceLocation(warehouse_id=3, warehouse_name="C", quantity=10, percentage=10),
    ]
    out = suggest_transfers(locs, 100)
    # ideal = 33
    assert [(t.from_warehouse_id, t.to_warehouse_id, t.suggested_quantity) for t in out] == [
        (1, 2, 13),
        (1, 3, 23),
    ]


@pytest.mark.asyncio
async def test_identify_stock_imbalances():
    src = _source()
    out = await WarehouseDistributionService(src).identify_stock_imbalances()
    assert [x.product_id for x in out] == [1]
    alpha = out[0]
    assert alpha.total_stock == 100
    assert [loc.warehouse_name for loc in alpha.locations] == ["Annex", "Main"]
    assert alpha.imbalance_score == pytest.approx(0.4)
    (t,) = alpha.suggested_transfers
    assert (t.from_warehouse_id, t.to_warehouse_id, t.suggested_quantity) == (2, 1, 40)
    assert src.calls == ["load_inventory"]


@pytest.mark.asyncio
async def test_warehouse_summary_stats():
    svc = WarehouseDistributionService(_source())
    stats = await svc.get_warehouse_summary_stats()
    assert stats.total_warehouses == 2
    assert stats.total_products == 2
    assert stats.total_value == 500.0
    assert stats.average_value_per_warehouse == 250.0
    assert stats.warehouses_with_inventory == 2

    one = await svc.get_warehouse_summary_stats(warehouse_id=1)
    assert (one.total_warehouses, one.total_products, one.total_value) == (1, 2, 50.0)

    empty = await WarehouseDistributionService(FakeDataSource()).get_warehouse_summary_stats()
    assert empty.total_warehouses == 0
    assert empty.average_value_per_warehouse == 0.0
