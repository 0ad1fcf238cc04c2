from dataclasses import dataclass
import os
from dotenv import load_dotenv


load_dotenv()


class SettingsError(RuntimeError):
    pass


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError as exc:
        raise SettingsError(f"{name} must be a number, got {raw!r}") from exc


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise SettingsError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    trailing_credit_cap: float = _env_float("GPAKIT_TRAILING_CREDIT_CAP", "60")
    degree_credit_target: float = _env_float("GPAKIT_DEGREE_CREDIT_TARGET", "120")
    max_entry_credits: float = _env_float("GPAKIT_MAX_ENTRY_CREDITS", "6")
    max_module_credits: float = _env_float("GPAKIT_MAX_MODULE_CREDITS", "240")
    round_to: int = _env_int("GPAKIT_ROUND_TO", "2")
    borderline_margin: float = _env_float("GPAKIT_BORDERLINE_MARGIN", "1.0")
    log_level: str = os.getenv("GPAKIT_LOG_LEVEL", "WARNING")

    cors_allowed_origins: tuple[str, ...] = _split_csv(
        os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
    )


settings = Settings()
