# scanner/extractors/markup_text.py
from __future__ import annotations
from typing import Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from .candidates import PositionedText
from .patterns import CSS_FLOAT_RE, PAGE_ID_RE

TEXT_ELEMENTS = "p, span, div"


def parse_markup(html_text: str) -> BeautifulSoup:
    return BeautifulSoup(html_text or "", "lxml")


def iter_pages(doc: BeautifulSoup) -> List[Tuple[int, Tag]]:
    """
    Conteneurs de page (<div id="pageN">) triés par N croissant,
    quel que soit leur ordre dans le document.
    """
    pages: List[Tuple[int, Tag]] = []
    for el in doc.select("div[id]"):
        m = PAGE_ID_RE.fullmatch(el.get("id") or "")
        if m:
            pages.append((int(m.group(1)), el))
    pages.sort(key=lambda t: t[0])
    return pages


def text_of(el: Tag) -> str:
    return " ".join(el.strings).strip()


def parse_style(style: Optional[str]) -> Tuple[Optional[float], Optional[float]]:
    top: Optional[float] = None
    left: Optional[float] = None
    if not style:
        return top, left
    for part in style.split(";"):
        part = part.strip()
        if not part or ":" not in part:
            continue
        k, v = part.split(":", 1)
        k, v = k.strip().lower(), v.strip().lower()
        m = CSS_FLOAT_RE.search(v)
        if not m:
            continue
        try:
            val = float(m.group(1))
        except ValueError:
            continue
        if k == "top" and top is None:
            top = val
        elif k == "left" and left is None:
            left = val
    return top, left


def find_coordinates(el: Tag, root: Optional[Tag] = None) -> Tuple[Optional[float], Optional[float]]:
    """
    Remonte la chaîne des ancêtres (l'élément inclus) : chaque axe prend la
    valeur de l'ancêtre le plus proche qui le déclare. Arrêt dès que top et
    left sont trouvés, ou à la racine de la page.
    """
    top: Optional[float] = None
    left: Optional[float] = None
    node: Optional[Tag] = el
    while node is not None:
        style = node.get("style") if isinstance(node, Tag) else None
        t, l = parse_style(style if isinstance(style, str) else None)
        if top is None and t is not None:
            top = t
        if left is None and l is not None:
            left = l
        if top is not None and left is not None:
            break
        if node is root:
            break
        node = node.parent
    return top, left


def iter_elements(root: Tag) -> Iterator[Tag]:
    # le conteneur de page est lui-même un <div>
    yield root
    yield from root.select(TEXT_ELEMENTS)


def iter_positioned_texts(root: Tag) -> Iterator[PositionedText]:
    for el in iter_elements(root):
        txt = text_of(el)
        if not txt:
            continue
        top, left = find_coordinates(el, root)
        yield PositionedText(text=txt, top=top, left=left)
