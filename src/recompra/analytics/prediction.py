"""
@file prediction.py
@brief Cadenza complessiva, data del prossimo acquisto e prodotti "in scadenza".
@ingroup analytics_module

@details
- average_days_between_purchases: media dei giorni tra acquisti consecutivi
  (qualsiasi prodotto)
- next_purchase_date: ultima data + cadenza media
- predict_next_purchase_products: prodotti con almeno due acquisti,
  ordinati per overdue ratio = giorni dall'ultimo acquisto / cadenza media

Attenzione: di default "giorni dall'ultimo acquisto" è lo stesso valore per
tutti i prodotti, calcolato dall'ultimo acquisto in assoluto. Con
per_product_recency=True si usa invece l'ultimo acquisto del singolo prodotto.
"""

from __future__ import annotations
import math
from datetime import date, timedelta
from typing import Iterable, Mapping, Optional

from recompra.domain.formats import days_between, round_half_up
from recompra.domain.models import PredictionEntry, ProductMetrics, Purchase, PurchaseForecast

OVERDUE_THRESHOLD = 0.8
MIN_PURCHASES = 2


def sort_purchases(purchases: Iterable[Purchase]) -> list[Purchase]:
    return sorted(purchases, key=lambda p: p.date)


def average_days_between_purchases(purchases: Iterable[Purchase]) -> Optional[float]:
    """
    @brief Cadenza media tra acquisti consecutivi.
    @return Giorni medi, oppure None con meno di due acquisti.
    """
    ordered = sort_purchases(purchases)
    if len(ordered) < 2:
        return None

    total_days = sum(
        days_between(cur.date, prev.date) for prev, cur in zip(ordered, ordered[1:])
    )
    return total_days / (len(ordered) - 1)


def next_purchase_date(purchases: Iterable[Purchase]) -> Optional[str]:
    """
    @brief Ultima data + cadenza media (giorni arrotondati all'intero).
    @return Data ISO o None con meno di due acquisti.
    """
    ordered = sort_purchases(purchases)
    cadence = average_days_between_purchases(ordered)
    if cadence is None:
        return None
    last = date.fromisoformat(ordered[-1].date)
    return (last + timedelta(days=int(round_half_up(cadence)))).isoformat()


def _overdue_ratio(days_since: int, average_days: float) -> float:
    # cadenza 0 (acquisti nello stesso giorno): sempre in testa
    if average_days == 0:
        return math.inf
    return days_since / average_days


def predict_next_purchase_products(
    product_metrics: Mapping[str, ProductMetrics],
    last_purchase_date: str,
    today: Optional[date] = None,
    *,
    per_product_recency: bool = False,
    overdue_threshold: float = OVERDUE_THRESHOLD,
    min_purchases: int = MIN_PURCHASES,
) -> list[PredictionEntry]:
    """
    @brief Prodotti probabilmente da ricomprare, dal più "in ritardo".
    @param product_metrics Output di aggregate_product_metrics.
    @param last_purchase_date Data ISO dell'ultimo acquisto (qualsiasi prodotto).
    @param today Data di valutazione (default: oggi).
    @param per_product_recency Usa l'ultimo acquisto del prodotto invece di
    last_purchase_date.
    @param overdue_threshold Frazione della cadenza oltre cui il prodotto entra.
    @param min_purchases Acquisti minimi per avere una media significativa.
    @return Lista di PredictionEntry ordinata per overdue ratio decrescente.
    """
    today = today or date.today()
    global_days_since = (today - date.fromisoformat(last_purchase_date)).days

    candidates: list[tuple[float, PredictionEntry]] = []
    for m in product_metrics.values():
        if m.purchase_count < min_purchases:
            continue

        days_since = global_days_since
        if per_product_recency and m.last_purchase_date:
            days_since = (today - date.fromisoformat(m.last_purchase_date)).days

        avg_days = m.average_days_between_purchases
        if days_since < avg_days * overdue_threshold:
            continue

        entry = PredictionEntry(
            name=m.product_name,
            average_purchase_frequency=int(round_half_up(avg_days)),
            days_since_last_purchase=days_since,
            average_quantity_per_purchase=round_half_up(m.quantity / m.purchase_count, 2),
            average_price_in_reais=round_half_up(m.average_price) / 100,
        )
        candidates.append((_overdue_ratio(days_since, avg_days), entry))

    candidates.sort(key=lambda c: c[0], reverse=True)
    return [entry for _, entry in candidates]


def forecast(
    purchases: Iterable[Purchase],
    product_metrics: Mapping[str, ProductMetrics],
    today: Optional[date] = None,
    *,
    per_product_recency: bool = False,
    overdue_threshold: float = OVERDUE_THRESHOLD,
    min_purchases: int = MIN_PURCHASES,
) -> PurchaseForecast:
    """
    @brief Combina cadenza, prossima data e lista prodotti.
    @return PurchaseForecast (vuoto se non ci sono acquisti).
    """
    ordered = sort_purchases(purchases)
    if not ordered:
        return PurchaseForecast()

    last_date = ordered[-1].date
    return PurchaseForecast(
        average_days_between_purchases=average_days_between_purchases(ordered),
        last_purchase_date=last_date,
        next_purchase_date=next_purchase_date(ordered),
        products=predict_next_purchase_products(
            product_metrics,
            last_date,
            today,
            per_product_recency=per_product_recency,
            overdue_threshold=overdue_threshold,
            min_purchases=min_purchases,
        ),
    )
