"""
@file parsing.py
@brief Parsing euristico del testo estratto dal PDF in un Purchase.
@ingroup domain_module

@details
Il layout dello scontrino è rigido ma non documentato. Un item appare come:

    2                        <- quantità (solo cifre)
    Arroz Tipo 1 R$ 10,00    <- nome + prezzo totale (eventuale "Esgotado")
    ...                      <- riga fissa, ignorata
    R$ 5,00/pc               <- dettaglio: prezzo unitario e/o peso
    Substituído por X        <- opzionale

Data e totale vengono cercati una volta sola su tutto il testo.
La scansione delle righe è in avanti, con cursore esplicito e senza
backtracking.
"""

from __future__ import annotations
import re
from typing import Optional

from recompra.errors import ReceiptParseError
from recompra.logging_setup import get_logger
from .formats import parse_currency, parse_date_phrase
from .models import Product, Purchase

logger = get_logger(__name__)

TOTAL_RE = re.compile(r"TotalR\$ ([\d,]+)")
QUANTITY_RE = re.compile(r"\d+")
PRICE_RE = re.compile(r"R\$ ([\d,]+)")
UNIT_PRICE_RE = re.compile(r"R\$ ([\d,]+)/pc")
WEIGHT_RE = re.compile(r"Final ([\d,]+) kg")
PRICE_PER_KG_RE = re.compile(r"R\$ ([\d,]+)/kg")

CURRENCY_MARKER = "R$"
OUT_OF_STOCK_MARKER = "Esgotado"
SUBSTITUTED_MARKER = "Substituído"

# differenza massima tollerata tra somma items e totale
TOTALS_TOLERANCE = 0.05


def parse_total(text: str) -> float:
    """
    @brief Estrae il totale ('TotalR$ 45,90').
    @throws ReceiptParseError Se il totale manca.
    """
    total = parse_currency(text, TOTAL_RE)
    if total is None:
        raise ReceiptParseError("totale non trovato nello scontrino")
    return total


def _parse_detail(detail: str) -> tuple[Optional[float], Optional[float], Optional[float]]:
    """
    Riga dettaglio -> (unit_price, weight, price_per_kg).
    Peso e prezzo/kg solo se la riga contiene 'kg'; ogni campo può mancare.
    """
    unit_price = parse_currency(detail.strip(), UNIT_PRICE_RE)

    weight: Optional[float] = None
    price_per_kg: Optional[float] = None
    if "kg" in detail.lower():
        weight = parse_currency(detail, WEIGHT_RE)
        price_per_kg = parse_currency(detail, PRICE_PER_KG_RE)

    return unit_price, weight, price_per_kg


def _parse_substitution(line: Optional[str]) -> Optional[str]:
    if line is None or SUBSTITUTED_MARKER not in line:
        return None
    return line.replace(SUBSTITUTED_MARKER, "").strip()


def parse_products(text: str, warnings: Optional[list[str]] = None) -> list[Product]:
    """
    @brief Scansione riga per riga degli item.
    @param text Testo completo dello scontrino.
    @param warnings Lista opzionale dove accodare anomalie non bloccanti.
    @return Prodotti nell'ordine in cui compaiono.

    @details
    - riga di sole cifre: inizio item (quantità)
    - riga successiva: nome + prezzo totale; senza prezzo l'item è scartato
    - due righe più avanti: dettaglio (prezzo unitario, peso, prezzo/kg)
    - riga dopo il dettaglio: eventuale sostituzione. Non viene consumata,
      la scansione riprende proprio da lì.
    """
    products: list[Product] = []
    lines = text.split("\n")
    n = len(lines)

    i = 0
    while i < n:
        line = lines[i].strip()

        if QUANTITY_RE.fullmatch(line):
            quantity = int(line)
            i += 1
            if i >= n:
                break

            info = lines[i].strip()
            total_price = parse_currency(info, PRICE_RE)

            if total_price is None:
                logger.debug("riga quantità %r senza prezzo, item scartato", line)
                if warnings is not None:
                    warnings.append(f"item_skipped: line={i} text={info[:60]!r}")
            else:
                i += 2
                detail = lines[i] if i < n else ""
                unit_price, weight, price_per_kg = _parse_detail(detail)
                substituted = _parse_substitution(lines[i + 1] if i + 1 < n else None)

                products.append(
                    Product(
                        quantity=quantity,
                        name=info.split(CURRENCY_MARKER)[0].strip(),
                        unit_price=unit_price,
                        total_price=total_price,
                        weight=weight,
                        price_per_kg=price_per_kg,
                        substituted=substituted,
                        out_of_stock=OUT_OF_STOCK_MARKER in info,
                    )
                )

        i += 1

    return products


def parse_receipt_with_warnings(text: str) -> tuple[Purchase, list[str]]:
    """
    @brief Come parse_receipt, ma ritorna anche le anomalie non bloccanti.
    @return (Purchase, warnings)

    @details
    warnings può contenere:
    - item_skipped: riga quantità senza prezzo
    - totals_inconsistent: somma items diversa dal totale oltre TOTALS_TOLERANCE
      (succede con spese di consegna o prodotti esauriti)
    """
    date = parse_date_phrase(text)
    total = parse_total(text)

    warnings: list[str] = []
    products = parse_products(text, warnings)

    items_sum = sum(p.total_price for p in products)
    delta = abs(items_sum - total)
    if delta > TOTALS_TOLERANCE:
        warnings.append(
            f"totals_inconsistent: sum_items={items_sum:.2f} total={total:.2f} delta={delta:.2f}"
        )

    return Purchase(date=date, total=total, products=products), warnings


def parse_receipt(text: str) -> Purchase:
    """
    @brief Converte il testo di uno scontrino in un Purchase.
    @param text Testo estratto dal PDF.
    @return Purchase con data ISO, totale e prodotti.

    @throws ReceiptParseError Se mancano data o totale.
    """
    purchase, _ = parse_receipt_with_warnings(text)
    return purchase
