"""
@file main.py
@brief Costruzione dell'app FastAPI.
@ingroup api_module

@details
create_app() configura logging e handler degli errori di dominio:
- ReceiptParseError -> 422 (scontrino senza data/totale o con data non valida)
- InternalConsistencyError -> 500, loggato
"""

from __future__ import annotations
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from recompra.config import Settings, load_config
from recompra.errors import InternalConsistencyError, ReceiptParseError
from recompra.logging_setup import configure_logging, get_logger
from .routes import router

logger = get_logger(__name__)


async def _receipt_error(request: Request, exc: ReceiptParseError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def _consistency_error(request: Request, exc: InternalConsistencyError) -> JSONResponse:
    logger.error("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "errore interno di consistenza"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    @brief Crea l'app con router e handler degli errori.
    @param settings Configurazione (default: load_config() da env).
    """
    settings = settings or load_config()
    configure_logging(settings.log_level)

    api = FastAPI(title="Recompra API", version="0.1.0")
    api.add_exception_handler(ReceiptParseError, _receipt_error)
    api.add_exception_handler(InternalConsistencyError, _consistency_error)
    api.include_router(router)
    return api


app = create_app()
