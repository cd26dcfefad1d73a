"""
@file pdf.py
@brief Wrapper per l'estrazione testo dai PDF degli scontrini.
@ingroup extract_module

@details
Usa pdfplumber. Il wrapper separa:
- estrazione (bytes -> testo, pagina per pagina)
- gestione errori: un PDF illeggibile diventa testo vuoto, il parser poi
  scarta lo scontrino con ReceiptParseError
- lettura da file (.pdf tramite estrattore, .txt così com'è)
"""

from __future__ import annotations
import io
from pathlib import Path

import pdfplumber

from recompra.logging_setup import get_logger
from .postprocess import normalize_extracted_text

logger = get_logger(__name__)

SUPPORTED_SUFFIXES = (".pdf", ".txt")


def extract_text(data: bytes) -> str:
    """
    @brief Estrae il testo di tutte le pagine di un PDF.
    @param data Contenuto del file PDF.
    @return Testo (pagine separate da newline), "" se l'estrazione fallisce.
    """
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        logger.error("estrazione PDF fallita: %s", e)
        return ""
    return normalize_extracted_text("\n".join(pages))


def read_receipt_text(path: str | Path) -> str:
    """
    @brief Legge il testo di uno scontrino da file.
    @param path File .pdf o .txt.
    @return Testo normalizzato.

    @throws ValueError Se l'estensione non è supportata.
    """
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".pdf":
        return extract_text(p.read_bytes())
    if suffix == ".txt":
        return normalize_extracted_text(p.read_text(encoding="utf-8"))
    raise ValueError(f"formato non supportato: {p.name}")


def list_receipt_files(input_dir: str | Path) -> list[Path]:
    """File .pdf/.txt della cartella, in ordine alfabetico."""
    d = Path(input_dir)
    return sorted(f for f in d.iterdir() if f.is_file() and f.suffix.lower() in SUPPORTED_SUFFIXES)
