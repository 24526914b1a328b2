"""Vintage and variety hints read off OCR'd label text.

These are heuristics with rough confidence scores, not a wine match.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

EARLIEST_VINTAGE = 1950

_YEAR = re.compile(r"\b(19\d{2}|20\d{2})\b")
_NON_VINTAGE = re.compile(r"\bnon[-\s]?vintage\b|\bnv\b")
_CHAMPAGNE = re.compile(r"\bchampagne\b|\b[ée]pernay\b")
_BLANC_DE_BLANCS = re.compile(r"\bblanc\s+de\s+blancs?\b")
_BLANC_DE_NOIRS = re.compile(r"\bblanc\s+de\s+noirs?\b")
_STYLE_WORDS = re.compile(r"\bbrut\b|\bextra\s+brut\b|\bcuv[ée]e\b|\bsec\b|\bdosage\b|m[ée]thode\s+traditionnelle|traditional\s+method")

VARIETY_KEYWORDS: dict[str, str] = {
    "chardonnay": "Chardonnay",
    "riesling": "Riesling",
    "pinot noir": "PinotNoir",
    "pinot meunier": "PinotMeunier",
    "pinot grigio": "PinotGrigio",
    "pinot gris": "PinotGris",
    "merlot": "Merlot",
    "zinfandel": "Zinfandel",
    "primitivo": "Primitivo",
    "syrah": "Syrah",
    "shiraz": "Shiraz",
    "cabernet": "Cabernet",
    "sangiovese": "Sangiovese",
    "nebbiolo": "Nebbiolo",
    "tempranillo": "Tempranillo",
    "grenache": "Grenache",
    "gamay": "Gamay",
    "chenin": "Chenin",
    "semillon": "Semillon",
}

OLD_WORLD = frozenset({
    "france", "italy", "spain", "germany", "portugal", "greece",
    "austria", "hungary", "georgia", "slovenia", "croatia",
})


def is_old_world(country: str | None) -> bool:
    return (country or "").strip().lower() in OLD_WORLD


@dataclass
class LabelHints:
    vintage_year: int | None
    is_non_vintage: bool
    inferred_variety: str | None
    inferred_varieties: list[str]
    signals: list[str] = field(default_factory=list)
    variety_confidence: float = 0.0
    vintage_confidence: float = 0.3

    def as_dict(self) -> dict[str, Any]:
        return {
            "vintage_year": self.vintage_year,
            "is_non_vintage": self.is_non_vintage,
            "inferred_variety": self.inferred_variety,
            "inferred_varieties": self.inferred_varieties,
            "inference_meta": {
                "signals": self.signals,
                "confidence": {
                    "variety": self.variety_confidence,
                    "vintage": self.vintage_confidence,
                },
            },
        }


def extract_label_hints(text: str, current_year: int) -> LabelHints:
    lowered = (text or "").lower()

    years = [int(y) for y in _YEAR.findall(lowered)]
    plausible = [y for y in years if EARLIEST_VINTAGE <= y <= current_year]
    non_vintage = bool(_NON_VINTAGE.search(lowered))
    champagne = bool(_CHAMPAGNE.search(lowered))

    signals: list[str] = []
    varieties: list[str] = []

    def add(variety: str) -> None:
        if variety not in varieties:
            varieties.append(variety)

    if _BLANC_DE_BLANCS.search(lowered):
        signals.append("blanc de blancs")
        add("Chardonnay")
    if _BLANC_DE_NOIRS.search(lowered):
        signals.append("blanc de noirs")
        add("PinotNoir")
        add("PinotMeunier")

    for keyword, variety in VARIETY_KEYWORDS.items():
        if keyword in lowered:
            signals.append(f"found:{keyword}")
            add(variety)

    # Style words describe the wine, not the grape.
    if _STYLE_WORDS.search(lowered):
        signals.append("style-words")
    if champagne:
        signals.append("champagne")

    if len(varieties) == 1:
        inferred, confidence = varieties[0], 0.6
    elif len(varieties) > 1:
        inferred, confidence = "Blend", 0.5
    else:
        inferred, confidence = None, 0.0

    vintage = None if non_vintage or not plausible else plausible[0]
    if non_vintage:
        vintage_confidence = 0.9
    elif vintage is not None:
        vintage_confidence = 0.7
    else:
        vintage_confidence = 0.3

    return LabelHints(
        vintage_year=vintage,
        is_non_vintage=non_vintage or (vintage is None and champagne),
        inferred_variety=inferred,
        inferred_varieties=varieties,
        signals=signals,
        variety_confidence=confidence,
        vintage_confidence=vintage_confidence,
    )
