"""
@file config.py
@brief Configurazione da file TOML, con override da variabili d'ambiente.
@ingroup infra_module

@details
Priorità (dalla più alta): flag CLI > RECOMPRA_* > file TOML > default.
Esempio di file:

    [recompra]
    input_dir = "input"
    output_dir = "output"
    overdue_threshold = 0.8
    per_product_recency = false
"""

from __future__ import annotations
import os
import tomllib
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field

ENV_PREFIX = "RECOMPRA_"


class Settings(BaseModel):
    """@brief Parametri della pipeline."""
    input_dir: str = "input"
    output_dir: Optional[str] = None
    overdue_threshold: float = Field(default=0.8, gt=0)
    min_purchases: int = Field(default=2, ge=2)
    per_product_recency: bool = False
    workers: int = Field(default=1, ge=1)
    log_level: Optional[str] = None


def _env_overrides() -> dict[str, str]:
    out: dict[str, str] = {}
    for name in Settings.model_fields:
        value = os.environ.get(ENV_PREFIX + name.upper())
        if value:
            out[name] = value
    return out


def load_config(path: str | Path | None = None) -> Settings:
    """
    @brief Carica la configurazione.
    @param path File TOML opzionale (tabella [recompra] o chiavi al top level).
    @return Settings validati.

    @note Se il file non esiste si usano i default. I valori da env sono
    stringhe: la conversione la fa Pydantic.
    """
    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p, "rb") as f:
                data = tomllib.load(f)
            raw = data.get("recompra", data)

    return Settings.model_validate({**raw, **_env_overrides()})
