# scanner/extractors/candidates.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Kind(str, Enum):
    DATE = "date"
    PAGOPA = "pagopa"


@dataclass(frozen=True)
class PositionedText:
    text: str                  # texte brut joint (non nettoyé)
    top: Optional[float] = None
    left: Optional[float] = None


@dataclass
class Cand:
    value: str                 # texte sans aucun espace
    score: float               # distance à l'origine, inf si non positionné
    kind: Kind


@dataclass(frozen=True)
class DateCodePair:
    date: str                  # ISO-8601
    code: str


@dataclass(frozen=True)
class BarcodeData:
    type: str
    data: str
    date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type, "data": self.data}
        if self.date is not None:
            out["date"] = self.date
        return out


@dataclass
class ScanResult:
    barcodes: List[BarcodeData] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"barcodes": [b.to_dict() for b in self.barcodes]}
