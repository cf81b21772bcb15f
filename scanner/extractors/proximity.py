# scanner/extractors/proximity.py
from __future__ import annotations
import logging
import math
from typing import Dict, Iterable, List, Optional, Tuple

from .candidates import Cand, Kind, PositionedText
from .markup_text import iter_pages, iter_positioned_texts, parse_markup
from .patterns import DATE_TEXT_RE, PAGOPA_TEXT_RE
from .utils_text import clean_text

logger = logging.getLogger(__name__)

GRAMMARS = {
    Kind.DATE:   DATE_TEXT_RE,
    Kind.PAGOPA: PAGOPA_TEXT_RE,
}


def calculate_score(top: Optional[float], left: Optional[float]) -> float:
    if top is None or left is None:
        return math.inf
    return math.sqrt(top * top + left * left)


def classify(text: str, kind: Kind) -> Optional[str]:
    """
    Texte brut (espaces internes compris) testé contre la grammaire du type
    demandé. Renvoie la valeur nettoyée, ou None.
    """
    if not text or not GRAMMARS[kind].fullmatch(text):
        return None
    return clean_text(text)


def collect_candidates(texts: Iterable[PositionedText], kind: Kind) -> List[Cand]:
    # une seule entrée par valeur : on garde le meilleur score
    best: Dict[str, Cand] = {}
    for pt in texts:
        val = classify(pt.text, kind)
        if val is None:
            continue
        cand = Cand(value=val, score=calculate_score(pt.top, pt.left), kind=kind)
        cur = best.get(val)
        if cur is None or cand.score < cur.score:
            best[val] = cand
    return sorted(best.values(), key=lambda c: c.score)


def pair_candidates(dates: List[Cand], codes: List[Cand]) -> List[Tuple[str, str]]:
    if not dates or not codes:
        return []
    return [(d.value, c.value) for d, c in zip(dates, codes)]


def pair_pages(html_text: str) -> List[Tuple[str, str]]:
    """
    Pour chaque page (ordre croissant), aligne le classement des dates avec
    celui des codes pagoPA, rang par rang. La queue de la liste la plus
    longue est ignorée.
    """
    doc = parse_markup(html_text)
    all_pairs: List[Tuple[str, str]] = []
    for n, root in iter_pages(doc):
        texts = list(iter_positioned_texts(root))
        dates = collect_candidates(texts, Kind.DATE)
        codes = collect_candidates(texts, Kind.PAGOPA)
        pairs = pair_candidates(dates, codes)
        logger.debug("page %d: %d dates, %d codes, %d pairs", n, len(dates), len(codes), len(pairs))
        all_pairs.extend(pairs)
    return all_pairs
