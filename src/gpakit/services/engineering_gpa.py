from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from gpakit.config.settings import settings
from gpakit.core.entries import AggregationResult, GradeEntry
from gpakit.core.gpa import (
    CreditSummary,
    aggregate,
    aggregate_slices,
    credit_summary,
    order_by_recency,
    select_trailing_window,
)
from gpakit.core.grades import PLUS_MINUS_SCHEME, GradingScheme
from gpakit.core.scales import GPA_STANDING_SCALE, Band, BandScale, classify_result
from gpakit.services.inputs import build_entries

logger = logging.getLogger(__name__)

ENGINEERING_CORE = "Engineering Core"
COOP = "Co-op/Internship"

MAJOR: FrozenSet[str] = frozenset({ENGINEERING_CORE})
TECHNICAL: FrozenSet[str] = frozenset({ENGINEERING_CORE, "Mathematics", "Physical Sciences", "Computer Science"})
NON_TECHNICAL: FrozenSet[str] = frozenset({"Humanities & Social Sciences", "Electives"})
CUMULATIVE_EXCLUDE: FrozenSet[str] = frozenset({COOP})

CREDIT_GROUPS: Dict[str, FrozenSet[str]] = {
    "engineering_core": MAJOR,
    "math_science": frozenset({"Mathematics", "Physical Sciences", "Computer Science"}),
    "humanities": frozenset({"Humanities & Social Sciences"}),
}


@dataclass
class EngineeringGpaReport:
    major: AggregationResult
    technical: AggregationResult
    non_technical: AggregationResult
    cumulative: AggregationResult
    trailing: AggregationResult
    credit_cap: float
    credits: CreditSummary
    standings: Dict[str, Optional[Band]]
    warnings: List[str] = field(default_factory=list)

    def to_dict(self, round_to: int = 2) -> Dict[str, Any]:
        return {
            "major_gpa": self.major.gpa_or_none(round_to),
            "technical_gpa": self.technical.gpa_or_none(round_to),
            "non_technical_gpa": self.non_technical.gpa_or_none(round_to),
            "cumulative_gpa": self.cumulative.gpa_or_none(round_to),
            "trailing_gpa": self.trailing.gpa_or_none(round_to),
            "trailing_credits": self.trailing.credits_counted,
            "credit_cap": self.credit_cap,
            "gpa_credits": self.credits.gpa_credits,
            "attempted_credits": self.credits.attempted_credits,
            "credit_distribution": dict(self.credits.by_group),
            "degree_credit_target": self.credits.degree_target,
            "credits_remaining": self.credits.credits_remaining,
            "standings": {name: band.label if band else None for name, band in self.standings.items()},
            "warnings": list(self.warnings),
        }


class EngineeringGpaService:
    def __init__(
        self,
        scheme: GradingScheme = PLUS_MINUS_SCHEME,
        *,
        credit_cap: float = 60.0,
        max_entry_credits: float = 6.0,
        degree_credit_target: float = 120.0,
        standing_scale: BandScale = GPA_STANDING_SCALE,
    ) -> None:
        self.scheme = scheme
        self.credit_cap = credit_cap
        self.max_entry_credits = max_entry_credits
        self.degree_credit_target = degree_credit_target
        self.standing_scale = standing_scale

    @classmethod
    def from_settings(cls) -> "EngineeringGpaService":
        return cls(
            credit_cap=settings.trailing_credit_cap,
            max_entry_credits=settings.max_entry_credits,
            degree_credit_target=settings.degree_credit_target,
        )

    def evaluate(
        self,
        entries: Iterable[GradeEntry],
        credit_cap: Optional[float] = None,
        warnings: Optional[List[str]] = None,
    ) -> EngineeringGpaReport:
        entries = list(entries)
        cap = self.credit_cap if credit_cap is None else credit_cap

        cumulative_entries = [e for e in entries if not e.categories & CUMULATIVE_EXCLUDE]
        window = select_trailing_window(order_by_recency(cumulative_entries), cap, self.scheme)

        major = aggregate(entries, self.scheme, MAJOR)
        technical = aggregate(entries, self.scheme, TECHNICAL)
        cumulative = aggregate(entries, self.scheme, exclude=CUMULATIVE_EXCLUDE)
        trailing = aggregate_slices(window, self.scheme)
        standings = {
            name: classify_result(result, self.standing_scale)
            for name, result in (
                ("major", major),
                ("technical", technical),
                ("cumulative", cumulative),
                ("trailing", trailing),
            )
        }

        report = EngineeringGpaReport(
            major=major,
            technical=technical,
            non_technical=aggregate(entries, self.scheme, NON_TECHNICAL),
            cumulative=cumulative,
            trailing=trailing,
            credit_cap=cap,
            credits=credit_summary(entries, self.scheme, CREDIT_GROUPS, degree_target=self.degree_credit_target),
            standings=standings,
            warnings=list(warnings or []),
        )
        logger.debug("Engineering report over %d entries, %d in window", len(entries), len(window))
        return report

    def evaluate_rows(self, rows: Iterable[Any], credit_cap: Optional[float] = None) -> EngineeringGpaReport:
        parsed = build_entries(rows, max_credits=self.max_entry_credits)
        return self.evaluate(parsed.entries, credit_cap, parsed.warnings)
