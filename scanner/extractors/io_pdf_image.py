# scanner/extractors/io_pdf_image.py
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple
import logging
import os
import subprocess

import filetype
import numpy as np
from PIL import Image, ImageOps
import pypdfium2 as pdfium

from .candidates import BarcodeData
from .errors import ConversionError, ScanError

logger = logging.getLogger(__name__)

PDF_EXTS = {".pdf"}
IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".tif", ".tiff", ".bmp"}
PDF_MIME = "application/pdf"
IMAGE_MIMES = {"image/jpeg", "image/png", "image/gif", "image/webp", "image/tiff", "image/bmp"}

# noms de formats exposés par l'API -> symboles zbar
FORMAT_SYMBOLS: Dict[str, str] = {
    "QR_CODE":      "QRCODE",
    "CODE_128":     "CODE128",
    "CODE_39":      "CODE39",
    "CODE_93":      "CODE93",
    "EAN_13":       "EAN13",
    "EAN_8":        "EAN8",
    "UPC_A":        "UPCA",
    "UPC_E":        "UPCE",
    "ITF":          "I25",
    "CODABAR":      "CODABAR",
    "PDF_417":      "PDF417",
    "RSS_14":       "DATABAR",
    "RSS_EXPANDED": "DATABAR_EXP",
}
SYMBOL_FORMATS: Dict[str, str] = {v: k for k, v in FORMAT_SYMBOLS.items()}

# pyzbar charge libzbar à l'import : import paresseux
_PYZBAR = None  # type: ignore


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw and raw.strip().isdigit() and int(raw) > 0:
        return int(raw)
    return default


def _render_dpi() -> int:
    return _env_int("SCAN_DPI", 144) or 144

def _max_pages() -> Optional[int]:
    return _env_int("MAX_PAGES", None)

def _workers() -> Optional[int]:
    return _env_int("SCAN_WORKERS", None)

def _mutool_bin() -> str:
    return os.getenv("MUTOOL_BIN") or "mutool"

def _mutool_timeout() -> int:
    return _env_int("MUTOOL_TIMEOUT", 120) or 120


@dataclass(frozen=True)
class DecodeHints:
    """Indices de décodage, partagés en lecture seule par tous les workers."""
    symbols: Tuple[str, ...] = ()


def create_hints(formats: Optional[Iterable[str]] = None) -> DecodeHints:
    if not formats:
        return DecodeHints()
    symbols: List[str] = []
    for f in formats:
        key = str(f).strip().upper()
        if key not in FORMAT_SYMBOLS:
            raise ValueError(f"Unsupported barcode format: {f}")
        if FORMAT_SYMBOLS[key] not in symbols:
            symbols.append(FORMAT_SYMBOLS[key])
    return DecodeHints(symbols=tuple(symbols))


# --------- Type de fichier ---------

def detect_kind(p: Path) -> str:
    """'pdf' | 'image' d'après le contenu ; l'extension ne sert que d'indice."""
    try:
        guess = filetype.guess(str(p))
    except OSError as e:
        raise ScanError(f"Failed to read file: {e}") from e
    if guess is not None:
        if guess.mime == PDF_MIME:
            return "pdf"
        if guess.mime in IMAGE_MIMES:
            return "image"
        raise ScanError(f"Unexpected file type: {guess.mime}")

    # contenu non reconnu
    ext = p.suffix.lower()
    if ext in PDF_EXTS:
        return "pdf"
    if ext in IMAGE_EXTS:
        return "image"
    raise ScanError(f"Unexpected file type: {ext or 'unknown'}")


# --------- Images ---------

def _render_pdf_to_images(p: Path, dpi: int = 144, max_pages: Optional[int] = None) -> List[Image.Image]:
    doc = pdfium.PdfDocument(str(p))
    try:
        n = len(doc)
        limit = min(n, max_pages) if (isinstance(max_pages, int) and max_pages > 0) else n
        imgs: List[Image.Image] = []
        for i in range(limit):
            page = doc.get_page(i)
            # pages paysage tournées de 90° avant décodage
            rotation = 90 if page.get_width() > page.get_height() else 0
            pil = page.render(scale=dpi/72.0, rotation=rotation).to_pil()
            page.close()
            imgs.append(pil)
    finally:
        doc.close()
    logger.debug("rendered %d/%d pages from %s at %d dpi", len(imgs), n, p.name, dpi)
    return imgs


def _open_image(p: Path) -> Image.Image:
    img = Image.open(str(p))
    img.load()
    return img


def get_images(p: Path) -> List[Image.Image]:
    kind = detect_kind(p)
    if kind == "pdf":
        try:
            return _render_pdf_to_images(p, dpi=_render_dpi(), max_pages=_max_pages())
        except (pdfium.PdfiumError, OSError) as e:
            raise ScanError(f"Failed to extract images from PDF: {e}") from e
    try:
        return [_open_image(p)]
    except (OSError, ValueError) as e:
        raise ScanError(f"Failed to read image: {e}") from e


# --------- Décodage ---------

def _get_pyzbar():
    global _PYZBAR
    if _PYZBAR is None:
        from pyzbar import pyzbar  # import tardif
        _PYZBAR = pyzbar
    return _PYZBAR


def decode_image(img: Image.Image, hints: DecodeHints) -> List[BarcodeData]:
    zb = _get_pyzbar()
    arr = np.array(ImageOps.grayscale(img))  # luminance 8 bits
    symbols = [zb.ZBarSymbol[s] for s in hints.symbols] or None
    try:
        results = zb.decode(arr, symbols=symbols)
    except Exception as e:
        logger.warning("barcode decoding failed on one image: %s", e)
        return []
    found: List[BarcodeData] = []
    for r in results:
        raw_type = str(r.type)
        found.append(BarcodeData(
            type=SYMBOL_FORMATS.get(raw_type, raw_type),
            data=r.data.decode("utf-8", errors="replace"),
        ))
    return found


def decode_images(images: List[Image.Image], hints: Optional[DecodeHints] = None) -> List[BarcodeData]:
    """
    Décodage en parallèle : chaque image renvoie sa propre liste, fusionnées
    à la fin. L'ordre du résultat n'est pas garanti.
    """
    if not images:
        return []
    hints = hints or DecodeHints()
    _get_pyzbar()  # échoue tôt si libzbar est absente
    with ThreadPoolExecutor(max_workers=_workers()) as ex:
        per_image = list(ex.map(lambda img: decode_image(img, hints), images))
    barcodes: List[BarcodeData] = []
    for found in per_image:
        barcodes.extend(found)
    return barcodes


# --------- mutool ---------

def run_mutool_to_html(p: Path) -> str:
    cmd = [_mutool_bin(), "convert", "-F", "html", "-o", "-", str(p)]
    try:
        proc = subprocess.run(cmd, capture_output=True, check=False, timeout=_mutool_timeout())
    except FileNotFoundError as e:
        raise ConversionError(f"'{cmd[0]}' not found in PATH.") from e
    except subprocess.TimeoutExpired as e:
        raise ConversionError(f"mutool timed out after {e.timeout}s") from e

    if proc.returncode != 0:
        stderr = (proc.stderr or b"").decode("utf-8", errors="replace")
        raise ConversionError(f"mutool failed (exit {proc.returncode}): {stderr}")
    try:
        return proc.stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ConversionError("mutool produced non-UTF8 output") from e
