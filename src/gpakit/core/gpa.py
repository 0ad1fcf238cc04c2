from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from gpakit.core.entries import AggregationResult, GradeEntry, WindowSlice
from gpakit.core.grades import GradingScheme

logger = logging.getLogger(__name__)


def _accumulate(weighted_points: Iterable[Tuple[float, float]]) -> AggregationResult:
    """
    weighted_points: iterable of (point, credit)
    GPA = Σ(credit * point) / Σ(credit)
    """
    points = 0.0
    credits_counted = 0.0
    for point, credit in weighted_points:
        points += point * credit
        credits_counted += credit
    return AggregationResult(points=points, credits_counted=credits_counted)


def qualifies(
    entry: GradeEntry,
    category_filter: Optional[AbstractSet[str]] = None,
    exclude: Optional[AbstractSet[str]] = None,
) -> bool:
    if category_filter is not None and not entry.categories & category_filter:
        return False
    if exclude and entry.categories & exclude:
        return False
    return True


def aggregate(
    entries: Iterable[GradeEntry],
    scheme: GradingScheme,
    category_filter: Optional[AbstractSet[str]] = None,
    *,
    exclude: Optional[AbstractSet[str]] = None,
) -> AggregationResult:
    def contributions() -> Iterable[Tuple[float, float]]:
        for entry in entries:
            if not entry.has_credit or not qualifies(entry, category_filter, exclude):
                continue
            normalized = scheme.normalize_entry(entry)
            if normalized.excluded:
                continue
            yield normalized.points, entry.credit_weight

    return _accumulate(contributions())


def aggregate_categories(
    entries: Sequence[GradeEntry],
    scheme: GradingScheme,
    filters: Mapping[str, AbstractSet[str]],
    *,
    exclude: Optional[AbstractSet[str]] = None,
) -> Dict[str, AggregationResult]:
    return {
        name: aggregate(entries, scheme, frozenset(tags), exclude=exclude)
        for name, tags in filters.items()
    }


def order_by_recency(entries: Iterable[GradeEntry]) -> List[GradeEntry]:
    """
    Most recent first. Entries with a ``sequence_index`` sort highest first;
    entries without one are older than any indexed entry and were appended
    oldest first, so they follow in reverse input order.
    """
    entries = list(entries)
    indexed = [e for e in entries if e.sequence_index is not None]
    unindexed = [e for e in entries if e.sequence_index is None]
    indexed.sort(key=lambda e: e.sequence_index, reverse=True)
    return indexed + unindexed[::-1]


def select_trailing_window(
    ordered_entries: Iterable[GradeEntry],
    credit_cap: float,
    scheme: Optional[GradingScheme] = None,
) -> List[WindowSlice]:
    selected: List[WindowSlice] = []
    credits_so_far = 0.0
    for entry in ordered_entries:
        if not entry.has_credit:
            continue
        if scheme is not None and scheme.normalize_entry(entry).excluded:
            continue
        if credits_so_far + entry.credit_weight <= credit_cap:
            selected.append(WindowSlice(entry, entry.credit_weight))
            credits_so_far += entry.credit_weight
        elif credits_so_far < credit_cap:
            remaining = credit_cap - credits_so_far
            logger.debug("Window boundary splits %r: %s of %s credits", entry.label, remaining, entry.credit_weight)
            selected.append(WindowSlice(entry, remaining))
            break
        else:
            break
    return selected


def aggregate_slices(slices: Iterable[WindowSlice], scheme: GradingScheme) -> AggregationResult:
    def contributions() -> Iterable[Tuple[float, float]]:
        for item in slices:
            normalized = scheme.normalize_entry(item.entry)
            if normalized.excluded:
                continue
            yield normalized.points, item.effective_credit

    return _accumulate(contributions())


def aggregate_window(
    ordered_entries: Iterable[GradeEntry],
    credit_cap: float,
    scheme: GradingScheme,
) -> AggregationResult:
    return aggregate_slices(select_trailing_window(ordered_entries, credit_cap, scheme), scheme)


def aggregate_year_weighted(
    entries: Iterable[GradeEntry],
    scheme: GradingScheme,
    year_weights: Mapping[int, float],
    *,
    use_marks: bool = False,
) -> AggregationResult:
    """
    Each entry counts with credit * year_weight. With ``use_marks`` the raw
    numeric mark is averaged instead of its normalized point, which gives a
    weighted percentage rather than a GPA.
    """

    def contributions() -> Iterable[Tuple[float, float]]:
        for entry in entries:
            weight = year_weights.get(entry.year, 0.0) if entry.year is not None else 0.0
            if weight <= 0 or not entry.has_credit:
                continue
            if use_marks:
                if isinstance(entry.mark, str) or entry.mark is None:
                    continue
                yield float(entry.mark), entry.credit_weight * weight
                continue
            normalized = scheme.normalize_entry(entry)
            if normalized.excluded:
                continue
            yield normalized.points, entry.credit_weight * weight

    return _accumulate(contributions())


def average_marks(entries: Iterable[GradeEntry]) -> AggregationResult:
    """Credit-weighted mean of raw numeric marks."""
    return _accumulate(
        (float(e.mark), e.credit_weight)
        for e in entries
        if e.has_credit and e.mark is not None and not isinstance(e.mark, str)
    )


def aggregate_year_averages(
    entries: Iterable[GradeEntry],
    year_weights: Mapping[int, float],
) -> AggregationResult:
    """
    Weighted mean of per-year mark averages. Each year contributes its own
    credit-weighted average times its weight, independent of how many credits
    that year carried. Years without numeric marks drop out and the remaining
    weights are renormalized.
    """
    by_year: Dict[int, List[GradeEntry]] = {}
    for entry in entries:
        if entry.year is not None:
            by_year.setdefault(entry.year, []).append(entry)

    def contributions() -> Iterable[Tuple[float, float]]:
        for year, weight in sorted(year_weights.items()):
            if weight <= 0:
                continue
            average = average_marks(by_year.get(year, ()))
            if not average.is_defined:
                logger.debug("Year %s has no numeric marks; weight %s dropped", year, weight)
                continue
            yield average.gpa, weight

    return _accumulate(contributions())


@dataclass(frozen=True)
class CreditSummary:
    gpa_credits: float
    attempted_credits: float
    by_group: Dict[str, float] = field(default_factory=dict)
    degree_target: float = 0.0

    @property
    def credits_remaining(self) -> float:
        """Graded credits still needed to reach ``degree_target``, never negative."""
        return max(0.0, self.degree_target - self.gpa_credits)


def credit_summary(
    entries: Iterable[GradeEntry],
    scheme: GradingScheme,
    groups: Optional[Mapping[str, AbstractSet[str]]] = None,
    *,
    other: str = "other",
    degree_target: float = 120.0,
) -> CreditSummary:
    groups = groups or {}
    gpa_credits = 0.0
    attempted_credits = 0.0
    by_group: Dict[str, float] = {name: 0.0 for name in groups}
    for entry in entries:
        if not entry.has_credit or entry.mark is None:
            continue
        attempted_credits += entry.credit_weight
        if not scheme.normalize_entry(entry).excluded:
            gpa_credits += entry.credit_weight
        if not groups:
            continue
        for name, tags in groups.items():
            if entry.categories & tags:
                by_group[name] += entry.credit_weight
                break
        else:
            by_group[other] = by_group.get(other, 0.0) + entry.credit_weight
    return CreditSummary(
        gpa_credits=gpa_credits,
        attempted_credits=attempted_credits,
        by_group=by_group,
        degree_target=degree_target,
    )
