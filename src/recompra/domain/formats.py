"""
@file formats.py
@brief Conversione importi con virgola decimale e date "D de MÊS de AAAA".
@ingroup domain_module

@details
Gli scontrini arrivano in formato brasiliano:
- importi tipo '12,50' (virgola come separatore decimale)
- date tipo '5 de março de 2024'

Contiene anche l'arrotondamento half-up usato per centesimi e previsioni
(round() di Python arrotonda al pari, non va bene per i centesimi).
"""

from __future__ import annotations
import math
import re
from datetime import date
from typing import Optional

from recompra.errors import ReceiptParseError


MONTHS_PT: dict[str, str] = {
    "janeiro": "01",
    "fevereiro": "02",
    "março": "03",
    "abril": "04",
    "maio": "05",
    "junho": "06",
    "julho": "07",
    "agosto": "08",
    "setembro": "09",
    "outubro": "10",
    "novembro": "11",
    "dezembro": "12",
}

AMOUNT_RE = re.compile(r"(\d[\d,]*)")
DATE_PHRASE_RE = re.compile(r"(\d+) de (\w+) de (\d{4})")

_LEADING_FLOAT_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def _to_float_brl(s: str) -> Optional[float]:
    """
    @brief Converte un importo con virgola decimale in float.
    @param s Stringa numerica (es. '12,50', '1,500').
    @return Float o None se la stringa non contiene un numero.

    @note Solo la prima virgola diventa punto; il resto viene ignorato
    come farebbe un parse del prefisso numerico ('1,234,56' -> 1.234).
    """
    s = s.strip().replace(",", ".", 1)
    m = _LEADING_FLOAT_RE.match(s)
    if not m:
        return None
    return float(m.group(0))


def parse_currency(text: str, pattern: re.Pattern = AMOUNT_RE) -> Optional[float]:
    """
    @brief Cerca un importo nel testo e lo converte.
    @param text Riga o testo completo.
    @param pattern Regex con un gruppo di cattura sull'importo.
    @return Float, oppure None se il pattern non compare.

    @note None significa "campo assente", mai zero.
    """
    m = pattern.search(text)
    if not m:
        return None
    return _to_float_brl(m.group(1))


def parse_date_phrase(text: str) -> str:
    """
    @brief Estrae la data '<giorno> de <mese> de <anno>' e la porta in ISO.
    @param text Testo completo dello scontrino.
    @return Stringa 'YYYY-MM-DD'.

    @throws ReceiptParseError Se la frase manca, il mese non è in MONTHS_PT
    o la data non esiste (es. 31 de fevereiro).
    """
    m = DATE_PHRASE_RE.search(text)
    if not m:
        raise ReceiptParseError("data non trovata nello scontrino")

    day, month_name, year = m.groups()
    month = MONTHS_PT.get(month_name.lower())
    if month is None:
        raise ReceiptParseError(f"mese non riconosciuto: {month_name!r}")

    try:
        parsed = date(int(year), int(month), int(day))
    except ValueError as e:
        raise ReceiptParseError(f"data non valida: {m.group(0)!r} ({e})") from e

    return parsed.isoformat()


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Arrotonda .5 verso +inf (stessa aritmetica dei totali in centesimi)."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def to_cents(amount: float) -> int:
    return int(round_half_up(amount * 100))


def days_between(later: str, earlier: str) -> int:
    """Giorni interi tra due date ISO (later - earlier)."""
    return (date.fromisoformat(later) - date.fromisoformat(earlier)).days
