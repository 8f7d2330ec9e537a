import pytest

from app.models.enums import MetricStatus
from app.services.summary_metrics_service import (
    SummaryMetricsService,
    build_summary_metrics,
    low_stock_status,
    out_of_stock_status,
    product_count_status,
    stock_value_status,
    suppliers_status,
)
from app.domain.rows import InventorySnapshot
from tests.factories import FakeDataSource, make_location, make_product, make_record, make_supplier


@pytest.mark.parametrize(
    "count,expected",
    [(0, MetricStatus.NORMAL), (19, MetricStatus.NORMAL), (20, MetricStatus.WARNING),
     (45, MetricStatus.WARNING), (50, MetricStatus.CRITICAL), (55, MetricStatus.CRITICAL)],
)
def test_low_stock_thresholds(count, expected):
    assert low_stock_status(count) is expected


def test_other_thresholds():
    assert product_count_status(0) is MetricStatus.CRITICAL
    assert product_count_status(9) is MetricStatus.WARNING
    assert product_count_status(10) is MetricStatus.NORMAL
    assert out_of_stock_status(4) is MetricStatus.NORMAL
    assert out_of_stock_status(5) is MetricStatus.WARNING
    assert out_of_stock_status(10) is MetricStatus.CRITICAL
    assert suppliers_status(0) is MetricStatus.CRITICAL
    assert suppliers_status(4) is MetricStatus.WARNING
    assert suppliers_status(5) is MetricStatus.NORMAL
    assert stock_value_status(0) is MetricStatus.CRITICAL
    assert stock_value_status(9999.99) is MetricStatus.WARNING
    assert stock_value_status(10000) is MetricStatus.NORMAL


def _low_stock_snapshot(n_low: int) -> InventorySnapshot:
    products = [make_product(i, reorder_point=10) for i in range(1, n_low + 1)]
    records = [make_record(i, 1, 3, 1.0) for i in range(1, n_low + 1)]
    return InventorySnapshot(products=products, records=records, locations={1: make_location(1)})


def test_scenario_d_low_stock_status():
    m45 = build_summary_metrics(_low_stock_snapshot(45))
    assert m45.low_stock.value == 45
    assert m45.low_stock.status is MetricStatus.WARNING
    assert m45.low_stock.threshold == 50

    m55 = build_summary_metrics(_low_stock_snapshot(55))
    assert m55.low_stock.status is MetricStatus.CRITICAL


def test_empty_input_is_all_zero():
    m = build_summary_metrics(InventorySnapshot())
    assert m.total_products.value == 0
    assert m.low_stock.value == 0
    assert m.out_of_stock.value == 0
    assert m.suppliers.value == 0
    assert m.total_stock_value.value == 0
    assert m.total_stock_value.excluded_products == 0
    assert m.total_stock_value.currency == "USD"


def _mixed_source() -> FakeDataSource:
    return FakeDataSource(
        products=[
            make_product(1, reorder_point=10),  # 3+4=7 → low
            make_product(2, reorder_point=10),  # 0 → out
            make_product(3, reorder_point=0),   # 无记录 → out；reorder_point=0 不算 low
            make_product(4, reorder_point=5),   # 100 → adequate，单价为空
            make_product(5, active=False),
        ],
        records=[
            make_record(1, 1, 3, 10.0),
            make_record(1, 2, 4, 10.0),
            make_record(2, 1, 0, 2.0),
            make_record(4, 2, 100, None),
            make_record(5, 1, 10, 1.0),
        ],
        locations=[make_location(1), make_location(2)],
        suppliers=[make_supplier(1), make_supplier(2), make_supplier(3, active=False)],
    )


@pytest.mark.asyncio
async def test_summary_metrics_counts():
    src = _mixed_source()
    m = await SummaryMetricsService(src).calculate_summary_metrics()
    assert m.total_products.value == 4
    assert m.low_stock.value == 1
    assert m.out_of_stock.value == 2
    assert m.suppliers.value == 2
    # 库存价值按库存行汇总，不看商品是否启用
    assert m.total_stock_value.value == 80.0
    assert m.total_stock_value.excluded_products == 1
    assert src.calls == ["load_inventory"]


@pytest.mark.asyncio
async def test_summary_metrics_warehouse_scope():
    m = await SummaryMetricsService(_mixed_source()).calculate_summary_metrics(warehouse_id=1)
    # 1 号仓：商品 1(3)、2(0)
    assert m.total_products.value == 2
    assert m.low_stock.value == 1
    assert m.out_of_stock.value == 1
    # 供应商不受仓库过滤影响
    assert m.suppliers.value == 2
    assert m.total_stock_value.value == 40.0
    assert m.total_stock_value.excluded_products == 0
