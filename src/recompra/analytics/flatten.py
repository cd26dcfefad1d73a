"""
@file flatten.py
@brief Appiattimento acquisti in righe acquisto x prodotto.
@ingroup analytics_module

@details
Tre passi:
- una PurchaseProductRow per ogni coppia (Purchase, Product)
- ordinamento stabile per data crescente
- assegnazione product_id tramite ProductIdentityResolver
"""

from __future__ import annotations
from typing import Iterable, Optional

from recompra.domain.formats import to_cents
from recompra.domain.models import Purchase, PurchaseProductRow
from recompra.errors import InternalConsistencyError
from .identity import ExactNameResolver, ProductIdentityResolver


def flatten_purchases(purchases: Iterable[Purchase]) -> list[PurchaseProductRow]:
    """
    @brief Una riga per prodotto per acquisto, ordinate per data.
    @return Righe senza product_id.

    @note sorted() è stabile: a parità di data resta l'ordine originale.
    """
    rows = [
        PurchaseProductRow(
            purchase_id=purchase.id,
            purchase_product_id=product.id,
            date=purchase.date,
            product_name=product.name,
            quantity=product.quantity,
            total_price=product.total_price,
            total_price_cents=to_cents(product.total_price),
            unit_price=product.unit_price,
            weight=product.weight,
            price_per_kg=product.price_per_kg,
            substituted=product.substituted,
            out_of_stock=product.out_of_stock,
        )
        for purchase in purchases
        for product in purchase.products
    ]
    return sorted(rows, key=lambda r: r.date)


def assign_product_ids(
    rows: list[PurchaseProductRow],
    resolver: Optional[ProductIdentityResolver] = None,
) -> list[PurchaseProductRow]:
    """
    @brief Ritorna copie delle righe con product_id valorizzato.
    @param rows Righe (tipicamente output di flatten_purchases).
    @param resolver Strategia nome -> id (default ExactNameResolver).

    @throws InternalConsistencyError Se un nome non è nel mapping.
    """
    resolver = resolver or ExactNameResolver()
    mapping = resolver.build(rows)

    out: list[PurchaseProductRow] = []
    for row in rows:
        product_id = mapping.get(resolver.key(row.product_name))
        if product_id is None:
            raise InternalConsistencyError(
                f"prodotto senza identità: {row.product_name!r}"
            )
        out.append(row.model_copy(update={"product_id": product_id}))
    return out


def build_purchase_product_rows(
    purchases: Iterable[Purchase],
    resolver: Optional[ProductIdentityResolver] = None,
) -> list[PurchaseProductRow]:
    return assign_product_ids(flatten_purchases(purchases), resolver)
