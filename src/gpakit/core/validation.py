from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClampResult:
    value: Optional[float]
    clamped: bool = False

    @property
    def provided(self) -> bool:
        return self.value is not None


NOT_PROVIDED = ClampResult(value=None)


def parse_number(raw: Any) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def clamp(raw: Any, minimum: float, maximum: float) -> ClampResult:
    if minimum > maximum:
        raise ValueError(f"minimum {minimum} is greater than maximum {maximum}")
    value = parse_number(raw)
    if value is None:
        return NOT_PROVIDED
    bounded = max(minimum, min(maximum, value))
    if bounded != value:
        logger.debug("Clamped %s into [%s, %s] -> %s", value, minimum, maximum, bounded)
        return ClampResult(value=bounded, clamped=True)
    return ClampResult(value=value)


def clamp_percentage(raw: Any) -> ClampResult:
    return clamp(raw, 0.0, 100.0)


def clamp_credits(raw: Any, maximum: float) -> ClampResult:
    return clamp(raw, 0.0, maximum)
