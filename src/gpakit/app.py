import logging
from typing import Any, Dict, List, Literal, Optional, Union

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from gpakit.config.settings import settings
from gpakit.core.gpa import aggregate, aggregate_categories
from gpakit.core.grades import SCHEMES
from gpakit.core.scales import SCALES
from gpakit.core.validation import clamp
from gpakit.services.engineering_gpa import EngineeringGpaService
from gpakit.services.inputs import GradeInputError, build_entries
from gpakit.services.uk_classification import UkClassificationService


logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.WARNING))

app = FastAPI(title="gpakit API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

NumberInput = Optional[Union[float, str]]


class CoursePayload(BaseModel):
    label: str = ""
    credits: NumberInput = None
    grade: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    sequence: Optional[int] = None


class EngineeringPayload(BaseModel):
    courses: List[CoursePayload]
    credit_cap: Optional[float] = Field(default=None, ge=0)


class AggregatePayload(BaseModel):
    entries: List[CoursePayload]
    filters: Dict[str, List[str]] = Field(default_factory=dict)
    exclude: List[str] = Field(default_factory=list)
    scheme: Literal["plus_minus", "letter"] = "plus_minus"


class ModulePayload(BaseModel):
    label: str = ""
    credits: NumberInput = None
    percentage: NumberInput = None
    year: Optional[int] = None


class UkPayload(BaseModel):
    modules: List[ModulePayload]
    profile: Literal["manchester", "nottingham"] = "manchester"
    year_weights: Optional[Dict[int, float]] = None


class ClassifyPayload(BaseModel):
    percentage: NumberInput = None
    scale: Literal["uk", "manchester", "nottingham", "us_percentage"] = "uk"


def _rows(items: List[BaseModel]) -> List[Dict[str, Any]]:
    return [item.model_dump() for item in items]


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/gpa/engineering")
def engineering_gpa(payload: EngineeringPayload) -> Dict:
    service = EngineeringGpaService.from_settings()
    try:
        report = service.evaluate_rows(_rows(payload.courses), payload.credit_cap)
    except GradeInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return report.to_dict(settings.round_to)


@app.post("/gpa/aggregate")
def aggregate_gpa(payload: AggregatePayload) -> Dict:
    scheme = SCHEMES[payload.scheme]
    try:
        parsed = build_entries(_rows(payload.entries), max_credits=settings.max_entry_credits)
    except GradeInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    exclude = frozenset(payload.exclude)
    filters = {name: frozenset(tags) for name, tags in payload.filters.items()}
    results = aggregate_categories(parsed.entries, scheme, filters, exclude=exclude)
    cumulative = aggregate(parsed.entries, scheme, exclude=exclude)
    return {
        "cumulative": {
            "gpa": cumulative.gpa_or_none(settings.round_to),
            "credits": cumulative.credits_counted,
        },
        "categories": {
            name: {"gpa": result.gpa_or_none(settings.round_to), "credits": result.credits_counted}
            for name, result in results.items()
        },
        "warnings": parsed.warnings,
    }


@app.post("/classification/uk")
def uk_classification(payload: UkPayload) -> Dict:
    try:
        service = UkClassificationService.from_settings(payload.profile, payload.year_weights)
        report = service.evaluate_rows(_rows(payload.modules))
    except (GradeInputError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return report.to_dict(settings.round_to)


@app.post("/classify")
def classify(payload: ClassifyPayload) -> Dict:
    scale = SCALES[payload.scale]
    result = clamp(payload.percentage, 0.0, scale.ceiling)
    if not result.provided:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="percentage must be a number")
    band = scale.classify(result.value)
    return {
        "percentage": result.value,
        "clamped": result.clamped,
        "label": band.label,
        "point": band.point,
        "borderline": scale.is_borderline(result.value, settings.borderline_margin),
    }
