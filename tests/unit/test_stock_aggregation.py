import math

import pytest

from app.models.enums import StockFilter, StockStatus
from app.services import stock_aggregation as agg
from tests.factories import make_location, make_product, make_record


def test_classify_stock_status_boundaries():
    assert agg.classify_stock_status(0, 20) is StockStatus.OUT_OF_STOCK
    assert agg.classify_stock_status(1, 20) is StockStatus.LOW_STOCK
    assert agg.classify_stock_status(19, 20) is StockStatus.LOW_STOCK
    assert agg.classify_stock_status(20, 20) is StockStatus.ADEQUATE
    # reorder_point = 0：有货即充足
    assert agg.classify_stock_status(5, 0) is StockStatus.ADEQUATE
    assert agg.classify_stock_status(0, 0) is StockStatus.OUT_OF_STOCK


def test_aggregate_group_sums_across_locations():
    p = make_product(1, reorder_point=20)
    a = agg.aggregate_group(p, [make_record(1, 1, 15, 10.0), make_record(1, 2, 10, 12.0)])
    assert a.total_quantity == 25
    assert a.total_value == pytest.approx(270.0)
    assert a.avg_unit_cost == pytest.approx(11.0)
    assert a.stock_status is StockStatus.ADEQUATE


def test_aggregate_group_falls_back_to_cost_price():
    p = make_product(2, cost_price=8.0)
    a = agg.aggregate_group(p, [])
    assert a.total_quantity == 0
    assert a.avg_unit_cost == 8.0
    assert a.total_value == 0.0
    assert a.stock_status is StockStatus.OUT_OF_STOCK


def test_aggregate_group_ignores_null_unit_cost_in_average():
    p = make_product(3, cost_price=99.0)
    a = agg.aggregate_group(p, [make_record(3, 1, 4, None), make_record(3, 2, 6, 5.0)])
    assert a.avg_unit_cost == 5.0
    assert a.total_value == 30.0


def test_select_products_active_search_category():
    products = [
        make_product(1, "Blue Widget", category="Widgets"),
        make_product(2, "Red Gadget", category="Gadgets"),
        make_product(3, "Blue Gadget", category="Gadgets", active=False),
    ]
    assert [p.id for p in agg.select_products(products)] == [1, 2]
    assert [p.id for p in agg.select_products(products, search="BLUE")] == [1]
    assert [p.id for p in agg.select_products(products, search="sku-0002")] == [2]
    assert [p.id for p in agg.select_products(products, search="widg")] == [1]
    assert [p.id for p in agg.select_products(products, category="Gadgets")] == [2]
    # category 精确匹配
    assert agg.select_products(products, category="gadgets") == []


def test_status_filter_applies_after_aggregation():
    # 单行都 < reorder_point，但合计充足：不能被 low_stock 选中
    p = make_product(1, reorder_point=20)
    records = [make_record(1, 1, 12, 1.0), make_record(1, 2, 12, 1.0)]
    (a,) = agg.aggregate_products([p], records)
    assert a.stock_status is StockStatus.ADEQUATE
    assert not agg.matches_stock_filter(a.stock_status, StockFilter.LOW_STOCK)
    assert agg.matches_stock_filter(a.stock_status, StockFilter.ALL)


def test_aggregate_products_require_records():
    products = [make_product(1), make_product(2)]
    records = [make_record(1, 1, 5, 1.0)]
    assert [a.product.id for a in agg.aggregate_products(products, records)] == [1, 2]
    assert [
        a.product.id for a in agg.aggregate_products(products, records, require_records=True)
    ] == [1]


def test_sort_by_name_uses_id_as_tiebreak():
    products = [make_product(3, "Same"), make_product(1, "Same"), make_product(2, "Alpha")]
    aggs = agg.sort_by_name(agg.aggregate_products(products, []))
    assert [a.product.id for a in aggs] == [2, 1, 3]


def test_location_breakdown_only_in_stock_sorted_by_name():
    locations = {1: make_location(1, "Zeta"), 2: make_location(2, "Alpha"), 3: make_location(3, "Mid")}
    records = [make_record(1, 1, 5, 2.0), make_record(1, 2, 3, None), make_record(1, 3, 0, 1.0)]
    rows = agg.location_breakdown(records, locations)
    assert [r.location_name for r in rows] == ["Alpha", "Zeta"]
    assert rows[0].unit_cost is None

    only = agg.location_breakdown(records, locations, warehouse_id=1)
    assert [r.location_id for r in only] == [1]


@pytest.mark.parametrize(
    "page,limit,total",
    [(1, 1, 0), (1, 10, 0), (1, 10, 10), (2, 10, 11), (3, 7, 50), (8, 7, 50), (9, 7, 50)],
)
def test_pagination_meta_consistency(page, limit, total):
    meta = agg.pagination_meta(page=page, limit=limit, total=total)
    assert meta.total == total
    assert meta.total_pages == math.ceil(total / limit)
    assert meta.has_next == (page < meta.total_pages)
    assert meta.has_prev == (page > 1)


def test_pagination_meta_serializes_camel_case():
    meta = agg.pagination_meta(page=1, limit=10, total=25)
    out = meta.model_dump(by_alias=True)
    assert out["totalPages"] == 3
    assert out["hasNext"] is True
    assert out["hasPrev"] is False


def test_paginate_slices():
    items = list(range(25))
    assert agg.paginate(items, page=1, limit=10) == list(range(10))
    assert agg.paginate(items, page=3, limit=10) == [20, 21, 22, 23, 24]
    assert agg.paginate(items, page=4, limit=10) == []
