"""
@file metrics.py
@brief Aggregazione delle righe in metriche per prodotto.
@ingroup analytics_module

@details
Fold sinistro delle righe (già ordinate per data) in un dict
product_id -> ProductMetrics. Il dict viene creato a ogni chiamata:
rieseguire l'aggregazione sulle stesse righe dà metriche identiche.

La cadenza è la media delle distanze tra acquisti consecutivi, non solo
l'ultima distanza (che era il risultato della prima versione in JS).
"""

from __future__ import annotations
from datetime import date
from typing import Iterable

from recompra.domain.models import ProductMetrics, PurchaseProductRow
from recompra.errors import InternalConsistencyError


def _gap_to_previous(dates: list[date], current: date) -> int:
    """Giorni dall'ultima data strettamente precedente (0 se non esiste)."""
    earlier = [d for d in dates if d < current]
    if not earlier:
        return 0
    return (current - max(earlier)).days


def aggregate_product_metrics(rows: Iterable[PurchaseProductRow]) -> dict[str, ProductMetrics]:
    """
    @brief Calcola le metriche per product_id.
    @param rows Righe con product_id, in ordine di data crescente.
    @return Mapping product_id -> ProductMetrics (ordine di prima occorrenza).

    @details
    Per ogni riga: somma centesimi e quantità, accoda purchase_id,
    aggiorna average_price (centesimi / quantità) e
    average_days_between_purchases.

    La media giorni è la media, sugli acquisti dopo il primo, della distanza
    dall'acquisto precedente dello stesso prodotto (data strettamente minore).
    Con un solo acquisto vale 0. La somma delle distanze è mantenuta in modo
    incrementale: una riga nuova non cambia le distanze di quelle già viste.

    @throws InternalConsistencyError Se una riga non ha product_id.
    """
    metrics: dict[str, ProductMetrics] = {}
    seen_dates: dict[str, list[date]] = {}
    gap_sums: dict[str, int] = {}

    for row in rows:
        pid = row.product_id
        if pid is None:
            raise InternalConsistencyError(
                f"riga senza product_id: {row.purchase_product_id}"
            )

        m = metrics.get(pid)
        if m is None:
            m = metrics[pid] = ProductMetrics(product_name=row.product_name)
            seen_dates[pid] = []
            gap_sums[pid] = 0

        current = date.fromisoformat(row.date)

        m.total_in_cents += row.total_price_cents
        m.quantity += row.quantity
        m.purchases.append(row.purchase_id)
        m.purchase_count += 1
        m.average_price = m.total_in_cents / m.quantity if m.quantity else 0.0
        m.last_purchase_date = row.date

        if m.purchase_count > 1:
            gap_sums[pid] += _gap_to_previous(seen_dates[pid], current)
            m.average_days_between_purchases = gap_sums[pid] / (m.purchase_count - 1)
        else:
            m.average_days_between_purchases = 0.0

        seen_dates[pid].append(current)

    return metrics
