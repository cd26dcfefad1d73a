"""
@file json_sink.py
@brief Scrittura dei risultati della pipeline come file JSON.
@ingroup output_module

@details
Un file per stadio, chiavi camelCase:
- purchases.json
- purchaseProducts.json
- productMetrics.json (oggetto product_id -> metriche)
- prediction.json
"""

from __future__ import annotations
import json
from pathlib import Path
from typing import Any

from recompra.pipeline import PipelineResult

PURCHASES_FILE = "purchases.json"
ROWS_FILE = "purchaseProducts.json"
METRICS_FILE = "productMetrics.json"
PREDICTION_FILE = "prediction.json"


def result_to_documents(result: PipelineResult) -> dict[str, Any]:
    """
    @brief Converte il risultato in documenti JSON-serializzabili.
    @return Dict nome_file -> contenuto.
    """
    return {
        PURCHASES_FILE: [p.model_dump(by_alias=True) for p in result.purchases],
        ROWS_FILE: [r.model_dump(by_alias=True) for r in result.rows],
        METRICS_FILE: {pid: m.model_dump(by_alias=True) for pid, m in result.metrics.items()},
        PREDICTION_FILE: result.forecast.model_dump(by_alias=True),
    }


def write_outputs(result: PipelineResult, out_dir: str | Path) -> list[Path]:
    """
    @brief Scrive i quattro file JSON nella cartella indicata.
    @param result Output di run_pipeline.
    @param out_dir Cartella di destinazione (creata se manca).
    @return Path dei file scritti.
    """
    d = Path(out_dir)
    d.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    for name, doc in result_to_documents(result).items():
        path = d / name
        path.write_text(json.dumps(doc, indent=2, ensure_ascii=False), encoding="utf-8")
        written.append(path)
    return written
