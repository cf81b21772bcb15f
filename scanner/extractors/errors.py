# scanner/extractors/errors.py
from __future__ import annotations


class ScanError(Exception):
    """Document illisible ou type de fichier non supporté."""


class ConversionError(Exception):
    """Échec de la conversion document -> HTML (mutool absent, code de sortie, sortie non UTF-8)."""
