"""Per-segment colour assignment for route overlays."""

from __future__ import annotations

import math
import random

PALETTE: tuple[str, ...] = (
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
    "#96CEB4",
    "#FFA62B",
    "#DDA0DD",
    "#2ECC71",
    "#F7DC6F",
    "#BB8FCE",
    "#3498DB",
    "#E67E22",
    "#1ABC9C",
    "#E84393",
    "#6C5CE7",
    "#00B894",
)
GOLDEN_ANGLE_DEGREES = 137.508


def _synthesized_color(offset: int) -> str:
    # Saturation and lightness vary per call; only the hue is fixed by position.
    hue = (offset * GOLDEN_ANGLE_DEGREES) % 360
    saturation = math.floor((70 + random.random() * 30) * 10) / 10
    lightness = math.floor((45 + random.random() * 20) * 10) / 10
    return f"hsl({hue:.3f}, {saturation:.1f}%, {lightness:.1f}%)"


def colors_for(segment_count: int) -> list[str]:
    """Return one colour per segment, palette first, golden-angle hues beyond it."""

    if segment_count <= 0:
        return []

    colors = list(PALETTE[:segment_count])
    for index in range(len(PALETTE), segment_count):
        colors.append(_synthesized_color(index - len(PALETTE)))
    return colors


def color_for(index: int, total: int) -> str:
    colors = colors_for(total)
    if 0 <= index < len(colors):
        return colors[index]
    return PALETTE[0]
