"""
styles.py
=========

Decoding of spreadsheet cell styles into the small vocabulary the venue
model needs.

Excel knows thirteen border line styles; the venue map only cares about
how heavy a line is, because medium and heavier lines are what the map
authors draw around a block of stalls.  ``BorderStyleMap`` folds the
spreadsheet names onto the five ``BorderKind`` levels and ``FillColourMap``
turns ARGB fill colours into ``#RRGGBB`` strings, treating the workbook
defaults as "no background".

Example usage::

    borders = BorderStyleMap()
    borders.get_kind("mediumDashed")     # BorderKind.MEDIUM
    borders.get_kind("hair")             # BorderKind.THIN

    fills = FillColourMap()
    fills.normalise("FFFFC000")          # '#FFC000'
    fills.normalise("FFFFFFFF")          # None
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from venue_planner.core.models import BorderKind, BorderStyle


_HEX_PATTERN = re.compile(r"^#?([0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$")


@dataclass
class BorderStyleMap:
    """Map spreadsheet border style names onto ``BorderKind``.

    Unknown names fall back to ``default_kind`` so that an unusual line is
    still drawn, but never strong enough to enclose a block.
    """

    default_kind: BorderKind = BorderKind.THIN
    style_map: Dict[str, BorderKind] = field(default_factory=lambda: {
        "thin": BorderKind.THIN,
        "hair": BorderKind.THIN,
        "dotted": BorderKind.THIN,
        "dashed": BorderKind.THIN,
        "dashDot": BorderKind.THIN,
        "dashDotDot": BorderKind.THIN,
        "medium": BorderKind.MEDIUM,
        "mediumDashed": BorderKind.MEDIUM,
        "mediumDashDot": BorderKind.MEDIUM,
        "mediumDashDotDot": BorderKind.MEDIUM,
        "slantDashDot": BorderKind.MEDIUM,
        "thick": BorderKind.THICK,
        "double": BorderKind.DOUBLE,
    })

    def get_kind(self, style_name: Optional[str]) -> Optional[BorderKind]:
        """Return the border kind for a style name, or None for no border."""
        if not style_name or style_name == "none":
            return None
        return self.style_map.get(style_name, self.default_kind)

    def to_border(self, style_name: Optional[str], colour: Optional[str] = None) -> Optional[BorderStyle]:
        kind = self.get_kind(style_name)
        if kind is None:
            return None
        return BorderStyle(kind=kind, color=normalise_hex(colour) or "#000000")


@dataclass
class FillColourMap:
    """Normalise fill colours; workbook defaults become ``None``."""

    default_backgrounds: Tuple[str, ...] = ("FFFFFF", "000000")

    def normalise(self, colour: Optional[str]) -> Optional[str]:
        if not colour or not isinstance(colour, str):
            return None
        match = _HEX_PATTERN.match(colour.strip())
        if not match:
            return None
        digits = match.group(1).upper()
        if len(digits) == 8:
            # ARGB; a zero alpha channel is openpyxl's "no fill"
            if digits[:2] == "00":
                return None
            digits = digits[2:]
        if digits in self.default_backgrounds:
            return None
        return f"#{digits}"


def normalise_hex(colour: Optional[str]) -> Optional[str]:
    """Return ``#RRGGBB`` for an RGB or ARGB hex string, dropping alpha."""
    if not colour or not isinstance(colour, str):
        return None
    match = _HEX_PATTERN.match(colour.strip())
    if not match:
        return None
    digits = match.group(1).upper()
    return f"#{digits[-6:]}"
