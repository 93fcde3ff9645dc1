"""Engine settings and scoring weights loaded from TOML."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

MIN_DURATION_MINUTES = 1
MAX_DURATION_MINUTES = 60

# Completed-task penalty differs between the task list and the dashboard views.
COMPLETED_PENALTY_PRESETS = {"default": -15, "dashboard": -30}


def _as_int(value, *, default: int) -> int:
    try:
        return int(value)
    except Exception:  # noqa: BLE001
        return int(default)


def _as_bool(value, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "y", "on"}:
            return True
        if lowered in {"0", "false", "no", "n", "off"}:
            return False
    return bool(default)


def _clamp_duration(value: int) -> int:
    return max(MIN_DURATION_MINUTES, min(MAX_DURATION_MINUTES, value))


@dataclass
class ScoringWeights:
    """Additive weights used by the priority scoring engine."""

    priority: dict[str, int] = field(default_factory=lambda: {"high": 50, "medium": 30, "low": 10})
    overdue: int = 40
    due_today: int = 35
    due_tomorrow: int = 30
    due_within_3_days: int = 25
    due_within_week: int = 20
    due_later: int = 10
    in_progress_bonus: int = 15
    completed_penalty: int = COMPLETED_PENALTY_PRESETS["default"]
    high_productivity_bonus: int = 15
    medium_productivity_bonus: int = 10
    time_invested_bonus: int = 10
    time_invested_threshold_minutes: int = 60

    @classmethod
    def preset(cls, name: str) -> "ScoringWeights":
        if name not in COMPLETED_PENALTY_PRESETS:
            logger.warning("Unknown scoring preset %r, using 'default'", name)
            name = "default"
        return cls(completed_penalty=COMPLETED_PENALTY_PRESETS[name])


@dataclass
class EngineSettings:
    """Mutable settings shared between the host application and the engine."""

    work_duration: int = 25
    break_duration: int = 5
    notifications_enabled: bool = True
    notification_lead_minutes: int = 30
    scoring: ScoringWeights = field(default_factory=ScoringWeights)

    def __post_init__(self) -> None:
        self.work_duration = _clamp_duration(_as_int(self.work_duration, default=25))
        self.break_duration = _clamp_duration(_as_int(self.break_duration, default=5))
        self.notification_lead_minutes = max(0, _as_int(self.notification_lead_minutes, default=30))

    def update(self, **changes) -> None:
        """Apply changes in place, normalizing durations the same way construction does."""

        for key, value in changes.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting '{key}'")
            setattr(self, key, value)
        self.notifications_enabled = _as_bool(self.notifications_enabled, default=True)
        self.__post_init__()


def settings_from_dict(payload: dict) -> EngineSettings:
    """Build settings from a parsed TOML document, ignoring malformed values."""

    timer = payload.get("timer") if isinstance(payload.get("timer"), dict) else {}
    notifications = payload.get("notifications") if isinstance(payload.get("notifications"), dict) else {}
    scoring_raw = payload.get("scoring") if isinstance(payload.get("scoring"), dict) else {}

    scoring = ScoringWeights.preset(str(scoring_raw.get("preset", "default")))
    if "completed_penalty" in scoring_raw:
        scoring.completed_penalty = _as_int(scoring_raw["completed_penalty"], default=scoring.completed_penalty)

    return EngineSettings(
        work_duration=_as_int(timer.get("work_duration"), default=25),
        break_duration=_as_int(timer.get("break_duration"), default=5),
        notifications_enabled=_as_bool(notifications.get("enabled"), default=True),
        notification_lead_minutes=_as_int(notifications.get("lead_minutes"), default=30),
        scoring=scoring,
    )


def load_settings(path: Path | str | None) -> EngineSettings:
    """Load settings from a TOML file, falling back to defaults when unavailable."""

    if path is None:
        return EngineSettings()
    config_path = Path(path)
    try:
        with config_path.open("rb") as handle:
            payload = tomllib.load(handle)
    except FileNotFoundError:
        logger.info("No settings file at %s, using defaults", config_path)
        return EngineSettings()
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Could not read settings from %s (%s), using defaults", config_path, exc)
        return EngineSettings()
    return settings_from_dict(payload)
