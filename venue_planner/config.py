"""
config.py
=========

Tunable thresholds and palettes shared by the venue planner components.

Every component takes an optional ``PlannerConfig``; when omitted the
module-level ``DEFAULT_CONFIG`` is used.  The values reproduce the
behaviour of the hall-map workbooks the planner was built for: block name
seeds of at least 2x2 merged cells, stall numbers 1..100, halls drawn with
four to six vertices and a thirty step undo history.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple


# Sheets holding a day's map are named "1日目", "2日目", ...
DAY_SHEET_PATTERN = re.compile(r"^\d+日目$")

# Fallback palette for detected blocks, cycled by block index
BLOCK_COLORS: Tuple[str, ...] = (
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7",
    "#DDA0DD", "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E9",
    "#F8B500", "#82E0AA", "#F1948A", "#AED6F1", "#D7BDE2",
)

HALL_COLORS: Tuple[str, ...] = (
    "#E74C3C", "#3498DB", "#2ECC71", "#F39C12", "#9B59B6",
    "#1ABC9C", "#E67E22", "#34495E",
)


@dataclass(frozen=True)
class PlannerConfig:
    # Block detection
    min_seed_area: int = 4
    max_block_name_length: int = 3
    min_block_cells: int = 4
    min_stall_label: int = 1
    max_stall_label: int = 100

    # Halls
    min_hall_vertices: int = 4
    max_hall_vertices: int = 6

    # Routing
    orthogonal_cost: float = 1.0
    diagonal_cost: float = 1.4
    allow_diagonal: bool = True
    simplify_tolerance: float = 1e-6

    # Visit list editing
    history_limit: int = 30

    # Fill colours (RRGGBB) treated as "no background"
    default_backgrounds: Tuple[str, ...] = ("FFFFFF", "000000")

    def block_color(self, index: int) -> str:
        return BLOCK_COLORS[index % len(BLOCK_COLORS)]

    def hall_color(self, index: int) -> str:
        return HALL_COLORS[index % len(HALL_COLORS)]


DEFAULT_CONFIG = PlannerConfig()
