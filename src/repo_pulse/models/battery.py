"""Battery status models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BatteryState(str, Enum):
    """Charging state reported by a battery provider."""

    UNKNOWN = "unknown"
    UNPLUGGED = "unplugged"
    CHARGING = "charging"
    FULL = "full"


class BatteryColor(str, Enum):
    """Semantic color token for displaying a battery status."""

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    GRAY = "gray"


LOW_LEVEL_THRESHOLD = 0.2
MEDIUM_LEVEL_THRESHOLD = 0.5

_DESCRIPTIONS = {
    BatteryState.UNKNOWN: "Unknown",
    BatteryState.UNPLUGGED: "Unplugged",
    BatteryState.CHARGING: "Charging",
    BatteryState.FULL: "Full",
}


class BatteryStatus(BaseModel):
    """Snapshot of the battery: level, human-readable state and display color."""

    model_config = ConfigDict(frozen=True)

    level: float | None = Field(default=None, ge=0.0, le=1.0)  # None = unknown
    state: BatteryState = BatteryState.UNKNOWN
    description: str = "Unknown"
    color: BatteryColor = BatteryColor.GRAY

    @classmethod
    def from_reading(cls, level: float | None, state: BatteryState) -> "BatteryStatus":
        """Derive description and color from a raw level/state reading."""
        if level is not None:
            level = min(max(level, 0.0), 1.0)
        return cls(
            level=level,
            state=state,
            description=_DESCRIPTIONS[state],
            color=battery_color(level, state),
        )

    @classmethod
    def unknown(cls) -> "BatteryStatus":
        return cls.from_reading(None, BatteryState.UNKNOWN)

    @property
    def percent(self) -> int | None:
        """Level as a whole percentage, or None when unknown."""
        if self.level is None:
            return None
        return round(self.level * 100)


def battery_color(level: float | None, state: BatteryState) -> BatteryColor:
    """Pick the display color for a battery level and state."""
    if level is None:
        return BatteryColor.GRAY
    if state in (BatteryState.CHARGING, BatteryState.FULL) or level >= MEDIUM_LEVEL_THRESHOLD:
        return BatteryColor.GREEN
    if level >= LOW_LEVEL_THRESHOLD:
        return BatteryColor.YELLOW
    return BatteryColor.RED
