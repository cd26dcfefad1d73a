"""
@file errors.py
@brief Gerarchia eccezioni della pipeline.
@ingroup domain_module

@details
- ReceiptParseError: scontrino non utilizzabile (manca data o totale).
  Lo scontrino viene scartato, il batch prosegue.
- InternalConsistencyError: violazione di un invariante interno
  (es. riga senza identità prodotto). Interrompe il batch.

Campi opzionali assenti (prezzo unitario, peso, prezzo/kg) e righe quantità
senza prezzo non sono errori: vengono lasciati a None o ignorati.
"""

from __future__ import annotations


class RecompraError(Exception):
    """@brief Base per gli errori del pacchetto."""


class ReceiptParseError(RecompraError):
    """@brief Testo scontrino privo di data o totale riconoscibili."""


class InternalConsistencyError(RecompraError):
    """@brief Stato incoerente tra stadi della pipeline (non recuperabile)."""
