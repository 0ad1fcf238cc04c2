from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from gpakit.core.entries import AggregationResult


@dataclass(frozen=True)
class Band:
    lower_bound: float
    point: float
    label: str
    point_range: Optional[Tuple[float, float]] = None


class BandScale:
    """Piecewise mapping of a value in [0, ceiling] onto ordered bands.

    Bands are kept highest-first so that lookup is a single descending scan;
    the top band is open-ended up to ``ceiling``. The lowest band must start
    at 0 so the scale has no gap at the bottom.
    """

    def __init__(self, bands: Iterable[Band], *, ceiling: float = 100.0) -> None:
        ordered = sorted(bands, key=lambda band: band.lower_bound, reverse=True)
        if not ordered:
            raise ValueError("A scale needs at least one band")
        bounds = [band.lower_bound for band in ordered]
        if len(set(bounds)) != len(bounds):
            raise ValueError("Band lower bounds must be unique")
        if ordered[-1].lower_bound != 0:
            raise ValueError("The lowest band must start at 0")
        if ordered[0].lower_bound > ceiling:
            raise ValueError(f"Band lower bound {ordered[0].lower_bound} exceeds ceiling {ceiling}")
        self._bands: Tuple[Band, ...] = tuple(ordered)
        self.ceiling = ceiling

    @property
    def bands(self) -> Tuple[Band, ...]:
        return self._bands

    @property
    def boundaries(self) -> List[float]:
        return [band.lower_bound for band in self._bands if band.lower_bound > 0]

    def classify(self, value: float) -> Band:
        for band in self._bands:
            if band.lower_bound <= value:
                return band
        return self._bands[-1]

    def point_for(self, value: float) -> float:
        return self.classify(value).point

    def label_for(self, value: float) -> str:
        return self.classify(value).label

    def is_borderline(self, value: float, margin: float = 1.0) -> bool:
        """True when ``value`` sits within ``margin`` below a band boundary."""
        return any(boundary - margin <= value < boundary for boundary in self.boundaries)


def classify_result(result: AggregationResult, scale: BandScale) -> Optional[Band]:
    if not result.is_defined:
        return None
    return scale.classify(result.gpa)


UK_CLASSIFICATION_SCALE = BandScale(
    [
        Band(70, 4.0, "First Class Honours", (3.7, 4.0)),
        Band(60, 3.3, "Upper Second Class (2:1)", (3.0, 3.7)),
        Band(50, 2.3, "Lower Second Class (2:2)", (2.0, 3.0)),
        Band(40, 1.5, "Third Class Honours", (1.0, 2.0)),
        Band(35, 1.0, "Ordinary Degree", (0.7, 1.0)),
        Band(0, 0.5, "Fail", (0.0, 1.0)),
    ]
)

# Russell Group style mark-to-GPA conversion; labels name the sub-band.
MANCHESTER_GPA_SCALE = BandScale(
    [
        Band(80, 4.0, "First Class (high)"),
        Band(75, 3.9, "First Class (strong)"),
        Band(70, 3.7, "First Class Honours"),
        Band(67, 3.6, "Upper Second (high 2:1)"),
        Band(64, 3.4, "Upper Second (strong 2:1)"),
        Band(60, 3.0, "Upper Second Class (2:1)"),
        Band(57, 2.9, "Lower Second (high 2:2)"),
        Band(54, 2.7, "Lower Second (mid 2:2)"),
        Band(50, 2.3, "Lower Second Class (2:2)"),
        Band(45, 2.0, "Third Class (high)"),
        Band(40, 1.7, "Third Class Honours"),
        Band(35, 1.3, "Fail (compensatable)"),
        Band(30, 1.0, "Fail"),
        Band(0, 0.0, "Clear Fail"),
    ]
)

NOTTINGHAM_GPA_SCALE = BandScale(
    [
        Band(70, 3.85, "First Class Honours", (3.7, 4.0)),
        Band(60, 3.35, "Upper Second Class Honours (2:1)", (3.0, 3.7)),
        Band(50, 2.35, "Lower Second Class Honours (2:2)", (2.0, 3.0)),
        Band(40, 1.5, "Third Class Honours", (1.0, 2.0)),
        Band(0, 0.5, "Fail", (0.0, 1.0)),
    ]
)

US_PERCENTAGE_SCALE = BandScale(
    [
        Band(93, 4.0, "A"),
        Band(90, 3.7, "A-"),
        Band(87, 3.3, "B+"),
        Band(83, 3.0, "B"),
        Band(80, 2.7, "B-"),
        Band(77, 2.3, "C+"),
        Band(73, 2.0, "C"),
        Band(70, 1.7, "C-"),
        Band(67, 1.3, "D+"),
        Band(63, 1.0, "D"),
        Band(60, 0.7, "D-"),
        Band(0, 0.0, "F"),
    ]
)

GPA_STANDING_SCALE = BandScale(
    [
        Band(3.7, 3.7, "Highly Competitive"),
        Band(3.5, 3.5, "Very Competitive"),
        Band(3.2, 3.2, "Competitive"),
        Band(3.0, 3.0, "Meets Requirements"),
        Band(2.5, 2.5, "Below Competitive"),
        Band(0, 0.0, "At Risk"),
    ],
    ceiling=4.0,
)

SCALES = {
    "uk": UK_CLASSIFICATION_SCALE,
    "manchester": MANCHESTER_GPA_SCALE,
    "nottingham": NOTTINGHAM_GPA_SCALE,
    "us_percentage": US_PERCENTAGE_SCALE,
    "gpa_standing": GPA_STANDING_SCALE,
}
