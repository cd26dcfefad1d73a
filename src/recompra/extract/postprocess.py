"""
@file postprocess.py
@brief Normalizzazione minima del testo estratto dal PDF.
@ingroup extract_module

@details
Il parser lavora per posizione di riga, quindi qui non si toccano i newline
(niente compattazione di righe vuote): si uniformano solo i terminatori di
riga e gli spazi non separabili che i PDF mettono tra "R$" e l'importo.
"""

from __future__ import annotations
import re

_NBSP_RE = re.compile("[\u00a0\u202f]")


def normalize_extracted_text(text: str) -> str:
    """
    @brief Uniforma newline e spazi speciali.
    @param text Testo grezzo dell'estrattore.
    @return Testo con '\n' come unico terminatore e spazi normali.
    """
    t = text.replace("\r\n", "\n").replace("\r", "\n")
    return _NBSP_RE.sub(" ", t)
