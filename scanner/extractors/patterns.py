# scanner/extractors/patterns.py
from __future__ import annotations
import re

PATTERNS_VERSION = "v1.0.0"

# Texte lisible sur la page (toujours appliqués avec fullmatch)
DATE_TEXT_RE = re.compile(r"[0-9]{2}/[0-9]{2}/[0-9]{4}")
# Commence par 30 ou 1x ; un seul espace optionnel aux frontières 4/8/12/16
PAGOPA_TEXT_RE = re.compile(r"(?:30|1[0-9])[0-9]{2}(?:\s?[0-9]{4}){3}\s?[0-9]{2}")

# Payload des codes-barres pagoPA : forme préfixée | forme structurelle
PAGOPA_PAYLOAD_RE = re.compile(
    r"^PAGOPA\|002\|(?P<code1>[0-9]{18})\|[0-9]{11}\|[0-9]+"
    r"|"
    r"^codfase=NBPA;18(?P<code2>[0-9]{18})12[0-9]{12}10[0-9]{10}38961P1[0-9]{11}[A-Z0-9 ]{16}.{162}A\Z"
)

PAGE_ID_RE = re.compile(r"page([0-9]+)")
CSS_FLOAT_RE = re.compile(r"([-+]?[0-9]+(?:\.[0-9]+)?)")
WHITESPACE_RE = re.compile(r"\s+")
