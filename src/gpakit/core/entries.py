from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Union

Mark = Union[str, float, None]


@dataclass(frozen=True)
class GradeEntry:
    label: str
    credit_weight: float
    mark: Mark
    categories: FrozenSet[str] = field(default_factory=frozenset)
    sequence_index: Optional[int] = None
    year: Optional[int] = None

    @property
    def has_credit(self) -> bool:
        return self.credit_weight > 0

    def in_any(self, tags: FrozenSet[str]) -> bool:
        return bool(self.categories & tags)


@dataclass(frozen=True)
class NormalizedMark:
    points: float
    excluded: bool


EXCLUDED = NormalizedMark(points=0.0, excluded=True)


@dataclass(frozen=True)
class AggregationResult:
    """
    points: Σ(point * credit) over contributing entries
    credits_counted: Σ(credit) over the same entries
    """

    points: float = 0.0
    credits_counted: float = 0.0

    @property
    def is_defined(self) -> bool:
        return self.credits_counted > 0

    @property
    def gpa(self) -> float:
        if not self.is_defined:
            return 0.0
        return self.points / self.credits_counted

    def gpa_or_none(self, round_to: Optional[int] = None) -> Optional[float]:
        if not self.is_defined:
            return None
        if round_to is None:
            return self.gpa
        return round(self.gpa, round_to)


@dataclass(frozen=True)
class WindowSlice:
    entry: GradeEntry
    effective_credit: float

    @property
    def truncated(self) -> bool:
        return self.effective_credit < self.entry.credit_weight
