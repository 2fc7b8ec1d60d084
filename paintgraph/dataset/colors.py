"""Palette color parsing."""

import re
from typing import Iterable

from ..models import Color

_HEX_RE = re.compile(r"^[0-9a-fA-F]{6}$")


def parse_color(raw: str | None) -> Color | None:
    """Parse ``#RRGGBB`` or ``RRGGBB``; anything else means "no color"."""
    if not raw:
        return None
    value = raw.strip()
    if value.startswith("#"):
        value = value[1:]
    if not _HEX_RE.match(value):
        return None
    return Color(
        r=int(value[0:2], 16),
        g=int(value[2:4], 16),
        b=int(value[4:6], 16),
        hex=value,
    )


def parse_colors(raws: Iterable[str | None]) -> tuple[Color, ...]:
    """Parse a palette, keeping order and dropping absent entries."""
    parsed = (parse_color(raw) for raw in raws)
    return tuple(c for c in parsed if c is not None)
