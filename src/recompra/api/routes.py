"""
@file routes.py
@brief Endpoints HTTP per parsing scontrini e previsione.
@ingroup api_module

@details
Espone API minimali:
- GET /health
- POST /parse: testo di uno scontrino -> Purchase
- POST /predict: testi di più scontrini -> previsione
"""

from __future__ import annotations
from datetime import date
from typing import List, Optional
from fastapi import APIRouter
from pydantic import BaseModel, Field

from recompra.domain.parsing import parse_receipt
from recompra.pipeline import ReceiptSource, run_pipeline

router = APIRouter()


class ParseRequest(BaseModel):
    """@brief Payload parse: testo già estratto dal PDF."""
    text: str


class PredictRequest(BaseModel):
    """
    @brief Payload predict.
    @details
    receipts: testi degli scontrini (uno per elemento).
    today: data di valutazione, default oggi.
    """
    receipts: List[str] = Field(default_factory=list)
    today: Optional[date] = None
    per_product_recency: bool = False


@router.post("/parse")
def parse(req: ParseRequest):
    """
    @brief Parsing di un singolo scontrino.
    @return Purchase serializzato (camelCase).

    @note ReceiptParseError diventa 422 tramite l'handler registrato in main.
    """
    return parse_receipt(req.text).model_dump(by_alias=True)


@router.post("/predict")
def predict(req: PredictRequest):
    """
    @brief Esegue la pipeline sui testi ricevuti.
    @return JSON con forecast e indici degli scontrini scartati.
    """
    sources = [ReceiptSource(name=str(i), text=t) for i, t in enumerate(req.receipts)]
    result = run_pipeline(sources, req.today, per_product_recency=req.per_product_recency)
    return {
        "forecast": result.forecast.model_dump(by_alias=True),
        "purchases": len(result.purchases),
        "skipped": [int(s) for s in result.skipped],
    }


@router.get("/health")
def health():
    """
    @brief Healthcheck semplice.
    @return {"ok": True}
    """
    return {"ok": True}
