"""
@file models.py
@brief Modelli dominio (contratto JSON) tramite Pydantic.
@ingroup domain_module

@details
Definisce i record scambiati tra gli stadi della pipeline:
- Purchase / Product: output del parser (uno per scontrino)
- PurchaseProductRow: join denormalizzato acquisto x prodotto
- ProductMetrics: aggregati per identità prodotto
- PredictionEntry / PurchaseForecast: vista di previsione

In Python i campi sono snake_case; in JSON (by_alias=True) diventano
camelCase, es. total_price_cents -> totalPriceCents.
"""

from __future__ import annotations
from typing import Optional, List
from uuid import uuid4
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return str(uuid4())


class Record(BaseModel):
    """@brief Base immutabile con alias camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Product(Record):
    """
    @brief Riga prodotto estratta dallo scontrino.
    @details
    unit_price è None per i prodotti venduti solo a peso.
    substituted contiene il nome del prodotto sostitutivo, se presente.
    """
    id: str = Field(default_factory=new_id)
    quantity: int
    name: str
    unit_price: Optional[float] = None
    total_price: float
    weight: Optional[float] = None
    price_per_kg: Optional[float] = None
    substituted: Optional[str] = None
    out_of_stock: bool = False


class Purchase(Record):
    """@brief Un acquisto (= uno scontrino): data ISO, totale, prodotti in ordine."""
    id: str = Field(default_factory=new_id)
    date: str
    total: float
    products: List[Product] = Field(default_factory=list)


class PurchaseProductRow(Record):
    """
    @brief Join acquisto x prodotto.
    @details
    product_id resta None fino alla risoluzione identità
    (vedi analytics.flatten.assign_product_ids).
    """
    purchase_id: str
    purchase_product_id: str
    date: str
    product_name: str
    quantity: int
    total_price: float
    total_price_cents: int
    unit_price: Optional[float] = None
    weight: Optional[float] = None
    price_per_kg: Optional[float] = None
    substituted: Optional[str] = None
    out_of_stock: bool = False
    product_id: Optional[str] = None


class ProductMetrics(BaseModel):
    """
    @brief Aggregati per prodotto.
    @details
    Mutabile: viene aggiornato riga per riga durante il fold in
    aggregate_product_metrics. average_price è in centesimi per unità.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_name: str
    total_in_cents: int = 0
    quantity: int = 0
    purchases: List[str] = Field(default_factory=list)
    purchase_count: int = 0
    average_price: float = 0.0
    average_days_between_purchases: float = 0.0
    last_purchase_date: Optional[str] = None


class PredictionEntry(Record):
    """@brief Prodotto suggerito per il prossimo acquisto."""
    name: str
    average_purchase_frequency: int
    days_since_last_purchase: int
    average_quantity_per_purchase: float
    average_price_in_reais: float


class PurchaseForecast(Record):
    """
    @brief Previsione complessiva.
    @details
    average_days_between_purchases e next_purchase_date sono None
    con meno di due acquisti.
    """
    average_days_between_purchases: Optional[float] = None
    last_purchase_date: Optional[str] = None
    next_purchase_date: Optional[str] = None
    products: List[PredictionEntry] = Field(default_factory=list)
