import pytest

from recompra.analytics.flatten import build_purchase_product_rows, flatten_purchases
from recompra.analytics.metrics import aggregate_product_metrics
from recompra.domain.formats import days_between
from recompra.domain.models import Product, Purchase
from recompra.errors import InternalConsistencyError


def _purchase(date, *items):
    return Purchase(
        date=date,
        total=0.0,
        products=[Product(quantity=q, name=name, total_price=price) for name, q, price in items],
    )


@pytest.fixture
def rows():
    purchases = [
        _purchase("2024-01-01", ("Arroz", 2, 10.0), ("Café", 1, 18.9)),
        _purchase("2024-01-11", ("Arroz", 1, 5.5)),
        _purchase("2024-01-31", ("Arroz", 3, 15.75), ("Café", 1, 19.9)),
        _purchase("2024-02-05", ("Sal", 1, 3.0)),
    ]
    return build_purchase_product_rows(purchases)


def _by_name(metrics):
    return {m.product_name: m for m in metrics.values()}


def test_totals_and_counts(rows):
    arroz = _by_name(aggregate_product_metrics(rows))["Arroz"]

    assert arroz.total_in_cents == 1000 + 550 + 1575
    assert arroz.quantity == 6
    assert arroz.purchase_count == 3
    assert arroz.purchase_count == len(arroz.purchases)
    assert arroz.average_price == pytest.approx(3125 / 6)
    assert arroz.last_purchase_date == "2024-01-31"


def test_purchases_in_date_order(rows):
    metrics = aggregate_product_metrics(rows)
    arroz_rows = [r for r in rows if r.product_name == "Arroz"]

    assert _by_name(metrics)["Arroz"].purchases == [r.purchase_id for r in arroz_rows]


def test_average_days_between_purchases(rows):
    by_name = _by_name(aggregate_product_metrics(rows))

    assert by_name["Arroz"].average_days_between_purchases == 15.0
    assert by_name["Café"].average_days_between_purchases == 30.0


def test_single_purchase_average_is_zero(rows):
    sal = _by_name(aggregate_product_metrics(rows))["Sal"]

    assert sal.purchase_count == 1
    assert sal.average_days_between_purchases == 0


def test_keyed_by_product_id(rows):
    metrics = aggregate_product_metrics(rows)
    ids = {r.product_id for r in rows}

    assert set(metrics) == ids


def test_aggregation_is_repeatable(rows):
    first = aggregate_product_metrics(rows)
    second = aggregate_product_metrics(rows)

    assert first == second
    assert first is not second
    for pid in first:
        assert first[pid] is not second[pid]


def _from_scratch_average(rows, product_id):
    mine = [r for r in rows if r.product_id == product_id]
    if len(mine) < 2:
        return 0
    total = 0
    for idx, row in enumerate(mine):
        if idx == 0:
            continue
        earlier = [r.date for r in rows if r.product_id == product_id and r.date < row.date]
        if earlier:
            total += days_between(row.date, max(earlier))
    return total / (len(mine) - 1)


def test_incremental_average_matches_from_scratch_each_step():
    purchases = [
        _purchase("2024-01-01", ("Arroz", 1, 1.0)),
        _purchase("2024-01-01", ("Arroz", 1, 1.0)),
        _purchase("2024-01-04", ("Arroz", 1, 1.0)),
        _purchase("2024-01-09", ("Arroz", 1, 1.0)),
        _purchase("2024-01-09", ("Arroz", 1, 1.0)),
        _purchase("2024-01-30", ("Arroz", 1, 1.0)),
    ]
    rows = build_purchase_product_rows(purchases)
    pid = rows[0].product_id

    for k in range(1, len(rows) + 1):
        prefix = rows[:k]
        m = aggregate_product_metrics(prefix)[pid]
        assert m.average_days_between_purchases == pytest.approx(_from_scratch_average(prefix, pid))


def test_row_without_product_id_is_internal_error():
    rows = flatten_purchases([_purchase("2024-01-01", ("Arroz", 1, 1.0))])
    with pytest.raises(InternalConsistencyError):
        aggregate_product_metrics(rows)


def test_metrics_serialize_camel_case(rows):
    doc = next(iter(aggregate_product_metrics(rows).values())).model_dump(by_alias=True)

    assert {"productName", "totalInCents", "purchaseCount", "averagePrice", "averageDaysBetweenPurchases"} <= set(doc)
