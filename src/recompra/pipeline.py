"""
@file pipeline.py
@brief Orchestrazione batch: testo -> acquisti -> righe -> metriche -> previsione.
@ingroup pipeline_module

@details
Ogni scontrino è isolato: un ReceiptParseError viene loggato, la sorgente
finisce in PipelineResult.skipped e il batch prosegue.
InternalConsistencyError invece risale al chiamante.

Il parsing può andare in parallelo (workers > 1): il parser non ha stato
condiviso e gli acquisti vengono comunque ordinati per data prima
dell'appiattimento.
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from recompra.analytics.flatten import build_purchase_product_rows
from recompra.analytics.identity import ProductIdentityResolver
from recompra.analytics.metrics import aggregate_product_metrics
from recompra.analytics.prediction import (
    MIN_PURCHASES,
    OVERDUE_THRESHOLD,
    forecast,
    sort_purchases,
)
from recompra.domain.models import (
    ProductMetrics,
    Purchase,
    PurchaseForecast,
    PurchaseProductRow,
)
from recompra.domain.parsing import parse_receipt_with_warnings
from recompra.errors import ReceiptParseError
from recompra.logging_setup import get_logger

logger = get_logger(__name__)


@dataclass
class ReceiptSource:
    """
    @brief Testo di uno scontrino con il nome della sua sorgente.
    @details name serve solo per log e report (es. nome file).
    """
    name: str
    text: str


@dataclass
class PipelineResult:
    """@brief Output di tutti gli stadi, più gli scontrini scartati."""
    purchases: list[Purchase] = field(default_factory=list)
    rows: list[PurchaseProductRow] = field(default_factory=list)
    metrics: dict[str, ProductMetrics] = field(default_factory=dict)
    forecast: PurchaseForecast = field(default_factory=PurchaseForecast)
    skipped: list[str] = field(default_factory=list)
    warnings: dict[str, list[str]] = field(default_factory=dict)


def _parse_one(source: ReceiptSource) -> tuple[ReceiptSource, Optional[Purchase], list[str]]:
    try:
        purchase, warnings = parse_receipt_with_warnings(source.text)
    except ReceiptParseError as e:
        logger.warning("scontrino %s scartato: %s", source.name, e)
        return source, None, []

    logger.info(
        "scontrino %s: data=%s totale=%.2f prodotti=%d",
        source.name, purchase.date, purchase.total, len(purchase.products),
    )
    for w in warnings:
        logger.debug("scontrino %s: %s", source.name, w)
    return source, purchase, warnings


def parse_receipts(
    sources: Iterable[ReceiptSource],
    workers: int = 1,
) -> tuple[list[Purchase], list[str], dict[str, list[str]]]:
    """
    @brief Parsing di più scontrini con isolamento degli errori.
    @param sources Testi da analizzare.
    @param workers Thread di parsing (1 = sequenziale).
    @return (acquisti ordinati per data, sorgenti scartate, warnings per sorgente)
    """
    sources = list(sources)
    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(_parse_one, sources))
    else:
        results = [_parse_one(s) for s in sources]

    purchases: list[Purchase] = []
    skipped: list[str] = []
    warnings: dict[str, list[str]] = {}
    for source, purchase, w in results:
        if purchase is None:
            skipped.append(source.name)
            continue
        purchases.append(purchase)
        if w:
            warnings[source.name] = w

    return sort_purchases(purchases), skipped, warnings


def analyze_purchases(
    purchases: Iterable[Purchase],
    today: Optional[date] = None,
    *,
    resolver: Optional[ProductIdentityResolver] = None,
    per_product_recency: bool = False,
    overdue_threshold: float = OVERDUE_THRESHOLD,
    min_purchases: int = MIN_PURCHASES,
) -> PipelineResult:
    """
    @brief Stadi analitici su acquisti già disponibili.
    @return PipelineResult senza skipped/warnings.
    """
    ordered = sort_purchases(purchases)
    rows = build_purchase_product_rows(ordered, resolver)
    metrics = aggregate_product_metrics(rows)
    fc = forecast(
        ordered,
        metrics,
        today,
        per_product_recency=per_product_recency,
        overdue_threshold=overdue_threshold,
        min_purchases=min_purchases,
    )
    if fc.average_days_between_purchases is not None:
        logger.info(
            "cadenza media %.2f giorni, prossimo acquisto %s",
            fc.average_days_between_purchases, fc.next_purchase_date,
        )
    return PipelineResult(purchases=ordered, rows=rows, metrics=metrics, forecast=fc)


def run_pipeline(
    sources: Iterable[ReceiptSource],
    today: Optional[date] = None,
    *,
    workers: int = 1,
    resolver: Optional[ProductIdentityResolver] = None,
    per_product_recency: bool = False,
    overdue_threshold: float = OVERDUE_THRESHOLD,
    min_purchases: int = MIN_PURCHASES,
) -> PipelineResult:
    """
    @brief Esegue la pipeline completa.
    @param sources Testi degli scontrini.
    @param today Data di valutazione della previsione (default: oggi).
    @return PipelineResult completo.

    @throws InternalConsistencyError Se gli stadi analitici trovano dati incoerenti.
    """
    purchases, skipped, warnings = parse_receipts(sources, workers=workers)
    result = analyze_purchases(
        purchases,
        today,
        resolver=resolver,
        per_product_recency=per_product_recency,
        overdue_threshold=overdue_threshold,
        min_purchases=min_purchases,
    )
    result.skipped = skipped
    result.warnings = warnings
    return result
