"""
@file identity.py
@brief Risoluzione identità prodotto (nome -> product_id).
@ingroup analytics_module

@details
L'identità di un prodotto è derivata dal nome stampato sullo scontrino.
Il resolver è intercambiabile: il default (ExactNameResolver) usa il nome
così com'è, quindi uno spazio o una maiuscola diversa creano un prodotto
distinto. NormalizedNameResolver confronta i nomi normalizzati.
"""

from __future__ import annotations
import re
import unicodedata
from abc import ABC, abstractmethod
from typing import Iterable

from recompra.domain.models import PurchaseProductRow, new_id

_MULTI_SPACE_RE = re.compile(r"\s+")


class ProductIdentityResolver(ABC):
    """Mappa i nomi prodotto su identificativi stabili."""

    @abstractmethod
    def key(self, name: str) -> str:
        """Chiave di confronto per un nome prodotto."""

    def build(self, rows: Iterable[PurchaseProductRow]) -> dict[str, str]:
        """
        @brief Assegna un nuovo id a ogni chiave distinta.
        @param rows Righe nell'ordine di incontro.
        @return Mapping chiave -> product_id (ordine di prima occorrenza).
        """
        mapping: dict[str, str] = {}
        for row in rows:
            k = self.key(row.product_name)
            if k not in mapping:
                mapping[k] = new_id()
        return mapping


class ExactNameResolver(ProductIdentityResolver):
    """Confronto esatto (maiuscole e spazi inclusi)."""

    def key(self, name: str) -> str:
        return name


class NormalizedNameResolver(ProductIdentityResolver):
    """Confronto su nome in NFC, casefold, spazi collassati."""

    def key(self, name: str) -> str:
        s = unicodedata.normalize("NFC", name).casefold()
        return _MULTI_SPACE_RE.sub(" ", s).strip()
