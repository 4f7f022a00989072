"""StatusReducer: raw daemon status → render-ready ViewModel.

Design principles:
    1. Pure function: same (raw, running, fallback) always gives the same
       ViewModel.  No I/O, no clock, no state.
    2. The service registry alone decides whether the daemon is running.
    3. Offline dominates: when the daemon is not running every derived
       label collapses to the offline variant, whatever the status file says.
    4. Odd input (missing fields, unknown levels) degrades to "N/A", it
       never raises.
"""

from __future__ import annotations

from fanpanel.domain.enums import FanMode, classify_temperature
from fanpanel.domain.telemetry import RawStatus, ViewModel

OFFLINE = "Offline"
NOT_AVAILABLE = "N/A"
STARTING = "Starting…"
DETECTING = "Detecting…"

# Auto-mode levels 0..4, in order: (label, color)
LEVELS: tuple[tuple[str, str], ...] = (
    ("Off", "#cbd5e1"),
    ("Quiet", "#38bdf8"),
    ("Low", "#3b82f6"),
    ("Medium", "#818cf8"),
    ("High", "#f43f5e"),
)
MANUAL_COLOR = "#38bdf8"


def reduce_status(
    raw: RawStatus,
    service_running: bool,
    fallback_temp_raw: str | None,
) -> ViewModel:
    """Reduce one tick's inputs into a ViewModel (sparkline left empty)."""
    # A stopped daemon leaves its last status behind; only the sensor is live
    status_temp = raw.temp if service_running else None
    temperature = _temperature(status_temp, fallback_temp_raw)
    severity = classify_temperature(temperature)
    temperature_label = f"{temperature} °C" if temperature is not None else NOT_AVAILABLE

    if not service_running:
        return ViewModel(
            running=False,
            status_label="Stopped",
            temperature_c=temperature,
            temperature_label=temperature_label,
            temperature_severity=severity,
            peak_c=None,
            mode_label=OFFLINE,
            speed_label=OFFLINE,
            speed_color=None,
            night_active=False,
            night_end_label=OFFLINE,
            uptime_label=OFFLINE,
            bus_label=OFFLINE,
        )

    speed_label, speed_color = _speed(raw)
    night_active = raw.night == 1
    night_end = _hour_label(raw.night_end)
    if night_active:
        overlay = f"(Night Capped until {night_end})" if night_end else "(Night Capped)"
        speed_label = f"{speed_label} {overlay}"

    if raw.uptime:
        uptime_label = format_uptime(raw.uptime)
    else:
        uptime_label = STARTING

    return ViewModel(
        running=True,
        status_label="Running",
        temperature_c=temperature,
        temperature_label=temperature_label,
        temperature_severity=severity,
        peak_c=raw.peak,
        mode_label=raw.mode.upper() if raw.mode else "UNKNOWN",
        speed_label=speed_label,
        speed_color=speed_color,
        night_active=night_active,
        night_end_label=night_end or NOT_AVAILABLE,
        uptime_label=uptime_label,
        bus_label=raw.i2c_bus or DETECTING,
    )


def format_uptime(seconds: int | None) -> str:
    """Format uptime using only the largest applicable unit tier.

    90061 → "1d 1h 1m", 3661 → "1h 1m 1s", 61 → "1m 1s", 5 → "5s".
    Absent or non-positive input is invalid and yields "N/A".
    """
    if seconds is None or seconds <= 0:
        return NOT_AVAILABLE

    days, rem = divmod(seconds, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, secs = divmod(rem, 60)

    if days:
        return f"{days}d {hours}h {minutes}m"
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


# ── Helpers ──────────────────────────────────────────────────────────────────

def _temperature(status_temp: int | None, fallback_temp_raw: str | None) -> int | None:
    if status_temp is not None:
        return status_temp
    try:
        millidegrees = int(str(fallback_temp_raw).strip())
    except (TypeError, ValueError):
        return None
    if millidegrees <= 0:
        return None
    return millidegrees // 1000


def _percent(value: int | None) -> str:
    return f"{value}%" if value is not None else NOT_AVAILABLE


def _speed(raw: RawStatus) -> tuple[str, str | None]:
    if raw.mode == FanMode.MANUAL.value:
        return f"{_percent(raw.active_speed)} (Manual)", MANUAL_COLOR

    level = raw.level
    if level is None or not 0 <= level < len(LEVELS):
        return NOT_AVAILABLE, None

    label, color = LEVELS[level]
    if level == 0:
        return f"0% ({label})", color
    return f"{_percent(raw.active_speed)} ({label})", color


def _hour_label(night_end: str | None) -> str | None:
    if not night_end:
        return None
    if night_end.isdigit() and len(night_end) <= 2:
        return f"{int(night_end):02d}:00"
    return night_end
