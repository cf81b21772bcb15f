# scanner/extractors/orchestrator.py
from __future__ import annotations
import logging
from dataclasses import replace
from typing import Dict, Iterable, List

from .candidates import BarcodeData, DateCodePair
from .payload import pagopa_code_from_payload
from .proximity import pair_pages
from .utils_text import clean_text, parse_date_to_iso

logger = logging.getLogger(__name__)


def extract_dates_and_codes_from_html(html_text: str) -> List[DateCodePair]:
    pairs: List[DateCodePair] = []
    for date_str, code in pair_pages(html_text):
        iso = parse_date_to_iso(date_str)
        if iso is None:
            # date invalide (32/01/2024...) : on lâche la paire
            logger.debug("dropping pair with invalid date %r", date_str)
            continue
        pairs.append(DateCodePair(date=iso, code=clean_text(code)))
    return pairs


def build_code_date_index(pairs: Iterable[DateCodePair]) -> Dict[str, str]:
    # même code sur plusieurs paires : la dernière (page puis rang) l'emporte
    return {p.code: p.date for p in pairs}


def enrich_barcodes_with_dates(barcodes: Iterable[BarcodeData],
                               pairs: Iterable[DateCodePair]) -> List[BarcodeData]:
    index = build_code_date_index(pairs)
    out: List[BarcodeData] = []
    for b in barcodes:
        code = pagopa_code_from_payload(b.data)
        date_iso = index.get(code) if code else None
        out.append(replace(b, date=date_iso))
    return out


def enrich(html_text: str, barcodes: Iterable[BarcodeData]) -> List[BarcodeData]:
    """
    Point d'entrée du cœur : HTML positionné + codes-barres décodés ->
    codes-barres enrichis de leur date d'échéance quand le code pagoPA
    est retrouvé sur la page.
    """
    pairs = extract_dates_and_codes_from_html(html_text)
    logger.debug("%d date/code pairs extracted", len(pairs))
    return enrich_barcodes_with_dates(barcodes, pairs)
