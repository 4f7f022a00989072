"""Sparkline rendering: recent temperatures as a compact inline SVG.

Pure and deterministic: the same sample sequence always yields the same
bytes, so rendered output can be snapshot-tested.
"""

from __future__ import annotations

from typing import Sequence

from fanpanel.domain.enums import Severity, classify_temperature
from fanpanel.domain.telemetry import Sample

WIDTH = 120
HEIGHT = 30
# Narrower ranges are widened downward so sensor noise does not fill the chart
MIN_SPAN_C = 5

STROKE_COLORS: dict[Severity, str] = {
    Severity.NORMAL: "#38bdf8",
    Severity.WARN: "#f59e0b",
    Severity.CRITICAL: "#ef4444",
}


def render_sparkline(samples: Sequence[Sample]) -> str:
    """Render *samples* (oldest first) as an SVG polyline.

    Returns an empty string for fewer than two samples.
    """
    if len(samples) < 2:
        return ""

    temps = [s.temperature_c for s in samples]
    high = max(temps)
    low = min(temps)
    if high - low < MIN_SPAN_C:
        low = high - MIN_SPAN_C
    span = high - low

    step = WIDTH / (len(temps) - 1)
    points = " ".join(
        f"{i * step:.1f},{HEIGHT - (t - low) / span * HEIGHT:.1f}"
        for i, t in enumerate(temps)
    )

    severity = classify_temperature(temps[-1])
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{WIDTH}" height="{HEIGHT}" '
        f'viewBox="0 0 {WIDTH} {HEIGHT}" class="sparkline sparkline-{severity.value}">'
        f'<polyline fill="none" stroke="{STROKE_COLORS[severity]}" stroke-width="1.5" '
        f'points="{points}"/>'
        "</svg>"
    )
