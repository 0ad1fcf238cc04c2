from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from gpakit.config.settings import settings
from gpakit.core.entries import AggregationResult, GradeEntry
from gpakit.core.gpa import aggregate_year_averages, aggregate_year_weighted, average_marks
from gpakit.core.grades import MANCHESTER_SCHEME, NOTTINGHAM_SCHEME, GradingScheme
from gpakit.core.scales import NOTTINGHAM_GPA_SCALE, UK_CLASSIFICATION_SCALE, Band, BandScale, classify_result
from gpakit.services.inputs import build_entries

logger = logging.getLogger(__name__)

MANCHESTER_YEAR_WEIGHTS: Dict[int, float] = {1: 0.2, 2: 0.3, 3: 0.5}
NOTTINGHAM_YEAR_WEIGHTS: Dict[int, float] = {1: 0.0, 2: 1 / 3, 3: 2 / 3}

# Every module counts with credits * year weight, and the US GPA converts each
# module mark before averaging.
MODULE_WEIGHTED = "module_weighted"
# Each year is averaged on its own, the year averages are combined by weight,
# and the US GPA is the band point of that combined percentage.
YEAR_AVERAGE = "year_average"


@dataclass(frozen=True)
class ClassificationProfile:
    scheme: GradingScheme
    year_weights: Mapping[int, float]
    classification_scale: BandScale = UK_CLASSIFICATION_SCALE
    method: str = MODULE_WEIGHTED

    def __post_init__(self) -> None:
        if self.method not in (MODULE_WEIGHTED, YEAR_AVERAGE):
            raise ValueError(f"Unsupported weighting method: {self.method}")
        if self.method == MODULE_WEIGHTED and self.scheme.percentage_scale is None:
            raise ValueError("UK classification needs a scheme with a percentage scale")


MANCHESTER_PROFILE = ClassificationProfile(MANCHESTER_SCHEME, MANCHESTER_YEAR_WEIGHTS)
NOTTINGHAM_PROFILE = ClassificationProfile(
    NOTTINGHAM_SCHEME,
    NOTTINGHAM_YEAR_WEIGHTS,
    classification_scale=NOTTINGHAM_GPA_SCALE,
    method=YEAR_AVERAGE,
)

PROFILES: Dict[str, ClassificationProfile] = {
    "manchester": MANCHESTER_PROFILE,
    "nottingham": NOTTINGHAM_PROFILE,
}


@dataclass
class UkClassificationReport:
    weighted_percentage: AggregationResult
    us_gpa: Optional[float]
    classification: Optional[Band]
    borderline: bool
    year_averages: Dict[int, AggregationResult]
    total_credits: float
    warnings: List[str] = field(default_factory=list)

    def to_dict(self, round_to: int = 2) -> Dict[str, Any]:
        return {
            "weighted_percentage": self.weighted_percentage.gpa_or_none(round_to),
            "us_gpa": None if self.us_gpa is None else round(self.us_gpa, round_to),
            "classification": self.classification.label if self.classification else None,
            "gpa_range": list(self.classification.point_range)
            if self.classification and self.classification.point_range
            else None,
            "borderline": self.borderline,
            "year_averages": {
                str(year): result.gpa_or_none(round_to) for year, result in sorted(self.year_averages.items())
            },
            "total_credits": self.total_credits,
            "warnings": list(self.warnings),
        }


class UkClassificationService:
    def __init__(
        self,
        profile: ClassificationProfile = MANCHESTER_PROFILE,
        *,
        year_weights: Optional[Mapping[int, float]] = None,
        borderline_margin: float = 1.0,
        max_module_credits: float = 240.0,
    ) -> None:
        self.profile = profile
        self.year_weights = dict(profile.year_weights if year_weights is None else year_weights)
        self.borderline_margin = borderline_margin
        self.max_module_credits = max_module_credits

    @classmethod
    def from_settings(cls, profile: str = "manchester", year_weights: Optional[Mapping[int, float]] = None):
        try:
            selected = PROFILES[profile]
        except KeyError as exc:
            raise ValueError(f"Unsupported classification profile: {profile}") from exc
        return cls(
            selected,
            year_weights=year_weights,
            borderline_margin=settings.borderline_margin,
            max_module_credits=settings.max_module_credits,
        )

    def _module_weighted(self, modules: List[GradeEntry]):
        scheme = self.profile.scheme
        weighted = aggregate_year_weighted(modules, scheme, self.year_weights, use_marks=True)
        us_gpa = aggregate_year_weighted(modules, scheme, self.year_weights)
        return weighted, us_gpa.gpa_or_none()

    def _year_average(self, modules: List[GradeEntry]):
        weighted = aggregate_year_averages(modules, self.year_weights)
        if not weighted.is_defined:
            return weighted, None
        return weighted, self.profile.classification_scale.point_for(weighted.gpa)

    def evaluate(self, entries: Iterable[GradeEntry], warnings: Optional[List[str]] = None) -> UkClassificationReport:
        modules = [e for e in entries if e.has_credit and isinstance(e.mark, (int, float))]
        scale = self.profile.classification_scale

        if self.profile.method == YEAR_AVERAGE:
            weighted, us_gpa = self._year_average(modules)
        else:
            weighted, us_gpa = self._module_weighted(modules)
        years = sorted({m.year for m in modules if m.year is not None})
        logger.debug("UK classification over %d modules in years %s", len(modules), years)

        return UkClassificationReport(
            weighted_percentage=weighted,
            us_gpa=us_gpa,
            classification=classify_result(weighted, scale),
            borderline=weighted.is_defined and scale.is_borderline(weighted.gpa, self.borderline_margin),
            year_averages={year: average_marks(m for m in modules if m.year == year) for year in years},
            total_credits=sum(m.credit_weight for m in modules),
            warnings=list(warnings or []),
        )

    def evaluate_rows(self, rows: Iterable[Any]) -> UkClassificationReport:
        parsed = build_entries(rows, max_credits=self.max_module_credits)
        return self.evaluate(parsed.entries, parsed.warnings)
