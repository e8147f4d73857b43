import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from openpyxl.utils.cell import range_boundaries

from venue_planner.config import DEFAULT_CONFIG, PlannerConfig
from venue_planner.core.models import (
    SIDES, Cell, CellBorders, CellValue, Coord, MergedRegion, VenueMap,
)
from venue_planner.core.styles import BorderStyleMap, FillColourMap
from venue_planner.errors import ParseError

logger = logging.getLogger(__name__)


@dataclass
class RawCell:
    """Styled cell as read from a worksheet, before any interpretation."""
    value: CellValue = None
    fill: Optional[str] = None
    # side -> (style name, colour)
    borders: Dict[str, Tuple[Optional[str], Optional[str]]] = field(default_factory=dict)


@dataclass
class RawSheet:
    name: str
    ref: Optional[str]
    cells: Dict[Coord, RawCell] = field(default_factory=dict)
    # (start_row, start_col, end_row, end_col)
    merges: List[Tuple[int, int, int, int]] = field(default_factory=list)


class GridModelBuilder:
    """Turn a ``RawSheet`` into a trimmed, addressable ``VenueMap``."""

    def __init__(self, config: Optional[PlannerConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.border_map = BorderStyleMap()
        self.fill_map = FillColourMap(default_backgrounds=self.config.default_backgrounds)

    def build(self, sheet: RawSheet) -> VenueMap:
        min_col, min_row, max_col, max_row = self._declared_range(sheet)

        # Step 1: decode styles of every cell inside the declared range
        decoded: Dict[Coord, Cell] = {}
        for (row, col), raw in sheet.cells.items():
            if not (min_row <= row <= max_row and min_col <= col <= max_col):
                continue
            cell = self._decode_cell(row, col, raw)
            if cell.has_value or cell.background_color or cell.borders:
                decoded[(row, col)] = cell

        # Step 2: trim trailing blank rows and columns
        rows = max((row for row, _ in decoded), default=0)
        cols = max((col for _, col in decoded), default=0)
        if not decoded:
            logger.info("Sheet '%s' has no content inside %s", sheet.name, sheet.ref)

        cells = []
        for row in range(1, rows + 1):
            for col in range(1, cols + 1):
                cells.append(decoded.get((row, col)) or Cell(row, col))
        venue_map = VenueMap(rows=rows, cols=cols, cells=cells, sheet_name=sheet.name)

        # Step 3: merged regions anchored inside the trimmed extent
        for start_row, start_col, end_row, end_col in sorted(sheet.merges):
            if not venue_map.in_bounds(start_row, start_col):
                continue
            anchor = venue_map.cell_at(start_row, start_col)
            region = MergedRegion(start_row, start_col, end_row, end_col, anchor.value)
            venue_map.merged_regions.append(region)
            for row, col in region.rect.cells():
                cell = venue_map.cell_at(row, col)
                if cell is None:
                    continue
                cell.merge_anchor = region.anchor
                cell.is_merged = (row, col) != region.anchor

        logger.debug("Built %dx%d grid with %d merged regions from '%s'",
                     rows, cols, len(venue_map.merged_regions), sheet.name)
        return venue_map

    def _declared_range(self, sheet: RawSheet) -> Tuple[int, int, int, int]:
        if not sheet.ref or not sheet.ref.strip():
            raise ParseError(f"Sheet '{sheet.name}' has no address range")
        try:
            min_col, min_row, max_col, max_row = range_boundaries(sheet.ref.strip())
        except (ValueError, TypeError) as e:
            raise ParseError(f"Sheet '{sheet.name}' has an invalid address range {sheet.ref!r}") from e

        # Whole-row or whole-column references leave one side open
        present_rows = [row for row, _ in sheet.cells] or [1]
        present_cols = [col for _, col in sheet.cells] or [1]
        return (
            min_col or 1,
            min_row or 1,
            max_col or max(present_cols),
            max_row or max(present_rows),
        )

    def _decode_cell(self, row: int, col: int, raw: RawCell) -> Cell:
        borders = CellBorders()
        for side in SIDES:
            style_name, colour = raw.borders.get(side, (None, None))
            setattr(borders, side, self.border_map.to_border(style_name, colour))
        value = raw.value
        if isinstance(value, str) and not value.strip():
            value = None
        return Cell(
            row=row,
            col=col,
            value=value,
            background_color=self.fill_map.normalise(raw.fill),
            borders=borders,
        )
