
from __future__ import annotations
from datetime import datetime, timezone

from .patterns import DATE_TEXT_RE, WHITESPACE_RE


def clean_text(s: str | None) -> str:
    if not s:
        return ""
    return WHITESPACE_RE.sub("", s)


def parse_date_to_iso(s: str | None) -> str | None:
    """DD/MM/YYYY -> minuit UTC en ISO-8601, None si la date est invalide."""
    s = (s or "").strip()
    # strptime accepte "1/3/2024" : on impose d'abord le découpage exact
    if not DATE_TEXT_RE.fullmatch(s):
        return None
    try:
        d = datetime.strptime(s, "%d/%m/%Y")
    except ValueError:
        return None
    return d.replace(tzinfo=timezone.utc).isoformat()
