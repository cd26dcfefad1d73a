import pytest

from recompra.analytics.flatten import assign_product_ids, build_purchase_product_rows, flatten_purchases
from recompra.analytics.identity import ExactNameResolver, NormalizedNameResolver
from recompra.domain.models import Product, Purchase
from recompra.errors import InternalConsistencyError


def _purchase(date, *items):
    return Purchase(
        date=date,
        total=sum(price for _, price in items),
        products=[Product(quantity=1, name=name, total_price=price) for name, price in items],
    )


@pytest.fixture
def purchases():
    return [
        _purchase("2024-01-20", ("Arroz Tipo 1", 10.0), ("Café Torrado", 18.9)),
        _purchase("2024-01-10", ("Arroz Tipo 1", 9.5)),
        _purchase("2024-01-20", ("Leite Integral", 5.49)),
    ]


def test_one_row_per_product(purchases):
    rows = flatten_purchases(purchases)

    assert len(rows) == 4
    assert all(r.product_id is None for r in rows)


def test_rows_sorted_by_date_stable(purchases):
    rows = flatten_purchases(purchases)

    assert [r.date for r in rows] == ["2024-01-10", "2024-01-20", "2024-01-20", "2024-01-20"]
    assert [r.product_name for r in rows] == ["Arroz Tipo 1", "Arroz Tipo 1", "Café Torrado", "Leite Integral"]


def test_row_references_purchase_and_product(purchases):
    row = flatten_purchases(purchases)[0]
    source = purchases[1]

    assert row.purchase_id == source.id
    assert row.purchase_product_id == source.products[0].id


def test_total_price_cents(purchases):
    rows = flatten_purchases(purchases)
    assert [r.total_price_cents for r in rows] == [950, 1000, 1890, 549]


def test_same_name_same_product_id(purchases):
    rows = build_purchase_product_rows(purchases)
    ids = {r.product_name: set() for r in rows}
    for r in rows:
        ids[r.product_name].add(r.product_id)

    assert all(len(v) == 1 for v in ids.values())
    assert len({next(iter(v)) for v in ids.values()}) == 3


def test_assign_does_not_mutate_input(purchases):
    rows = flatten_purchases(purchases)
    stamped = assign_product_ids(rows)

    assert rows[0].product_id is None
    assert stamped[0].product_id is not None


def test_exact_resolver_is_case_and_space_sensitive():
    purchases = [_purchase("2024-01-01", ("Arroz", 1.0), ("arroz", 1.0), ("Arroz ", 1.0))]
    rows = build_purchase_product_rows(purchases, ExactNameResolver())

    assert len({r.product_id for r in rows}) == 3


def test_normalized_resolver_merges_variants():
    purchases = [_purchase("2024-01-01", ("Arroz  Tipo 1", 1.0), ("arroz tipo 1 ", 1.0))]
    rows = build_purchase_product_rows(purchases, NormalizedNameResolver())

    assert rows[0].product_id == rows[1].product_id
    assert rows[0].product_name != rows[1].product_name


def test_missing_identity_is_internal_error(purchases):
    class EmptyResolver(ExactNameResolver):
        def build(self, rows):
            return {}

    with pytest.raises(InternalConsistencyError):
        assign_product_ids(flatten_purchases(purchases), EmptyResolver())


def test_empty_purchases():
    assert build_purchase_product_rows([]) == []
