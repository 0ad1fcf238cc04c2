from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional

from gpakit.core.entries import GradeEntry, Mark
from gpakit.core.validation import clamp, clamp_credits, clamp_percentage


class GradeInputError(ValueError):
    pass


@dataclass
class ParsedEntries:
    entries: List[GradeEntry] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _categories(row: Mapping[str, Any]) -> frozenset:
    raw = row.get("categories")
    if raw is None:
        raw = row.get("category")
    if raw is None:
        return frozenset()
    if isinstance(raw, str):
        raw = [raw]
    return frozenset(str(tag).strip() for tag in raw if str(tag).strip())


def _int_or_none(raw: Any) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _mark(row: Mapping[str, Any], name: str, warnings: List[str]) -> Mark:
    grade = row.get("grade")
    if isinstance(grade, str) and grade.strip():
        return grade.strip()
    if "percentage" not in row:
        return None
    result = clamp_percentage(row.get("percentage"))
    if result.clamped:
        warnings.append(f"{name}.percentage clamped to {result.value:g}")
    return result.value


def build_entries(
    rows: Iterable[Any],
    *,
    max_credits: float,
    max_year: int = 4,
) -> ParsedEntries:
    parsed = ParsedEntries()
    for idx, row in enumerate(rows):
        name = f"entries[{idx}]"
        if not isinstance(row, Mapping):
            raise GradeInputError(f"{name} must be an object")

        credits = clamp_credits(row.get("credits"), max_credits)
        if credits.clamped:
            parsed.warnings.append(f"{name}.credits clamped to {credits.value:g}")

        year: Optional[int] = None
        if row.get("year") is not None:
            year_result = clamp(_int_or_none(row.get("year")), 1, max_year)
            if year_result.clamped:
                parsed.warnings.append(f"{name}.year clamped to {year_result.value:g}")
            year = int(year_result.value) if year_result.provided else None

        parsed.entries.append(
            GradeEntry(
                label=str(row.get("label") or row.get("name") or ""),
                credit_weight=credits.value if credits.provided else 0.0,
                mark=_mark(row, name, parsed.warnings),
                categories=_categories(row),
                sequence_index=_int_or_none(row.get("sequence")),
                year=year,
            )
        )
    return parsed
