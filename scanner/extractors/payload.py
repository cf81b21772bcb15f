# scanner/extractors/payload.py
from __future__ import annotations
from typing import Optional

from .patterns import PAGOPA_PAYLOAD_RE


def pagopa_code_from_payload(payload: Optional[str]) -> Optional[str]:
    """Code avis pagoPA (18 chiffres) contenu dans le texte d'un code-barres."""
    m = PAGOPA_PAYLOAD_RE.match(payload or "")
    if not m:
        return None
    return m.group("code1") or m.group("code2")
