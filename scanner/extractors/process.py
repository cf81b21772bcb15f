# scanner/extractors/process.py
from __future__ import annotations
from pathlib import Path
from typing import List, Optional
import logging

from .candidates import BarcodeData, ScanResult
from .errors import ConversionError
from .io_pdf_image import DecodeHints, decode_images, detect_kind, get_images, run_mutool_to_html
from .orchestrator import enrich

logger = logging.getLogger(__name__)


def scan_barcodes(path: str | Path, hints: Optional[DecodeHints] = None) -> List[BarcodeData]:
    p = Path(path)
    images = get_images(p)
    barcodes = decode_images(images, hints)
    logger.info("%s: %d image(s), %d barcode(s)", p.name, len(images), len(barcodes))
    return barcodes


def process_file(path: str | Path, hints: Optional[DecodeHints] = None) -> ScanResult:
    """
    Codes-barres du document + date d'échéance pagoPA quand elle est
    retrouvée dans le HTML (PDF uniquement). Un échec de mutool n'est pas
    bloquant : les codes-barres sont renvoyés sans date.
    """
    p = Path(path)
    barcodes = scan_barcodes(p, hints)

    if detect_kind(p) != "pdf":
        return ScanResult(barcodes=barcodes)

    try:
        html = run_mutool_to_html(p)
    except ConversionError as e:
        logger.warning("HTML conversion failed for %s: %s", p.name, e)
        html = ""

    return ScanResult(barcodes=enrich(html, barcodes))
