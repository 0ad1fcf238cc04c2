from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

from gpakit.core.entries import EXCLUDED, GradeEntry, NormalizedMark
from gpakit.core.scales import BandScale, MANCHESTER_GPA_SCALE, NOTTINGHAM_GPA_SCALE

logger = logging.getLogger(__name__)

MAX_POINT = 4.0
PASS_NO_PASS: FrozenSet[str] = frozenset({"P", "NP"})


class GradePointTable:
    def __init__(self, points: Mapping[str, float], excluded: Iterable[str] = PASS_NO_PASS) -> None:
        for token, value in points.items():
            if not 0.0 <= value <= MAX_POINT:
                raise ValueError(f"Grade point for {token!r} must be within 0.0-{MAX_POINT}, got {value}")
        self._points = MappingProxyType(dict(points))
        self._excluded = frozenset(excluded)

    def normalize(self, token: str) -> NormalizedMark:
        if token in self._excluded:
            return EXCLUDED
        try:
            return NormalizedMark(points=self._points[token], excluded=False)
        except KeyError:
            logger.debug("Unknown grade token %r excluded from aggregation", token)
            return EXCLUDED


def build_plus_minus_table(
    base: Optional[Mapping[str, float]] = None,
    *,
    step: float = 0.3,
    failing: str = "F",
    excluded: Iterable[str] = PASS_NO_PASS,
) -> GradePointTable:
    """
    Plus/minus letters around integer bases, e.g. B+ = 3.3, B- = 2.7.
    The top grade is capped at MAX_POINT, so A+ == A == 4.0.
    """
    base = base or {"A": 4.0, "B": 3.0, "C": 2.0, "D": 1.0}
    points: Dict[str, float] = {}
    for letter, value in base.items():
        points[f"{letter}+"] = round(min(value + step, MAX_POINT), 2)
        points[letter] = value
        points[f"{letter}-"] = round(max(value - step, 0.0), 2)
    points[failing] = 0.0
    return GradePointTable(points, excluded)


PLUS_MINUS_TABLE = build_plus_minus_table()

LETTER_TABLE = GradePointTable({"A": 4.0, "B": 3.0, "C": 2.0, "D": 1.0, "F": 0.0})


@dataclass(frozen=True)
class GradingScheme:
    grade_points: GradePointTable = field(default_factory=lambda: PLUS_MINUS_TABLE)
    percentage_scale: Optional[BandScale] = None

    def normalize_entry(self, entry: GradeEntry) -> NormalizedMark:
        mark = entry.mark
        if mark is None:
            return EXCLUDED
        if isinstance(mark, str):
            return self.grade_points.normalize(mark)
        if self.percentage_scale is None:
            logger.debug("Numeric mark on %r has no percentage scale configured", entry.label)
            return EXCLUDED
        return NormalizedMark(points=self.percentage_scale.point_for(mark), excluded=False)


PLUS_MINUS_SCHEME = GradingScheme(PLUS_MINUS_TABLE)
LETTER_SCHEME = GradingScheme(LETTER_TABLE)
MANCHESTER_SCHEME = GradingScheme(PLUS_MINUS_TABLE, MANCHESTER_GPA_SCALE)
NOTTINGHAM_SCHEME = GradingScheme(PLUS_MINUS_TABLE, NOTTINGHAM_GPA_SCALE)

SCHEMES = {
    "plus_minus": PLUS_MINUS_SCHEME,
    "letter": LETTER_SCHEME,
    "manchester": MANCHESTER_SCHEME,
    "nottingham": NOTTINGHAM_SCHEME,
}
