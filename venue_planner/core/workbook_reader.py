import logging
from io import BytesIO
from typing import Dict, List, Optional, Union
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from venue_planner.config import DAY_SHEET_PATTERN, DEFAULT_CONFIG, PlannerConfig
from venue_planner.core.block_detector import BlockDetector
from venue_planner.core.grid_builder import GridModelBuilder, RawCell, RawSheet
from venue_planner.core.models import SIDES, VenueMap
from venue_planner.errors import ParseError

logger = logging.getLogger(__name__)

WorkbookSource = Union[str, bytes]


class WorkbookReader:
    """Read day sheets of a venue workbook into raw sheets and venue maps."""

    def __init__(self, source: WorkbookSource, config: Optional[PlannerConfig] = None):
        self.source = source
        self.config = config or DEFAULT_CONFIG
        self.workbook = None

    def load(self):
        # Styles are needed, so read_only mode cannot be used
        target = BytesIO(self.source) if isinstance(self.source, bytes) else self.source
        try:
            self.workbook = openpyxl.load_workbook(target, data_only=True)
        except (OSError, BadZipFile, InvalidFileException, KeyError) as e:
            raise ParseError(f"Not a readable xlsx workbook: {self._describe()}") from e
        logger.info("Loaded workbook %s with sheets %s", self._describe(), self.workbook.sheetnames)
        return self.workbook

    def day_sheets(self) -> List[str]:
        if self.workbook is None:
            self.load()
        return [name for name in self.workbook.sheetnames if DAY_SHEET_PATTERN.match(name)]

    def read_sheet(self, name: str) -> RawSheet:
        if self.workbook is None:
            self.load()
        if name not in self.workbook.sheetnames:
            raise ParseError(f"Sheet '{name}' not found in {self._describe()}")
        return sheet_to_raw(self.workbook[name])

    def read_day_maps(self, detect_blocks: bool = True) -> Dict[str, VenueMap]:
        builder = GridModelBuilder(self.config)
        detector = BlockDetector(self.config)
        maps = {}
        for name in self.day_sheets():
            venue_map = builder.build(self.read_sheet(name))
            if detect_blocks:
                venue_map.blocks = detector.detect(venue_map)
            maps[name] = venue_map
        if not maps:
            logger.warning("No day sheets found in %s", self._describe())
        return maps

    def _describe(self) -> str:
        if isinstance(self.source, bytes):
            return f"<{len(self.source)} bytes>"
        return str(self.source)


def sheet_to_raw(worksheet: Worksheet) -> RawSheet:
    """Copy values, fills, borders and merges out of an openpyxl worksheet."""
    sheet = RawSheet(name=worksheet.title, ref=worksheet.dimensions)

    for row in worksheet.iter_rows():
        for cell in row:
            raw = RawCell()
            # Booleans are check marks, not venue content
            if cell.value is not None and not isinstance(cell.value, bool):
                raw.value = cell.value if isinstance(cell.value, (int, float, str)) else str(cell.value)

            fill = cell.fill
            if fill is not None and fill.fill_type == "solid":
                raw.fill = _rgb(fill.fgColor)

            border = cell.border
            if border is not None:
                for side_name in SIDES:
                    side = getattr(border, side_name)
                    if side is not None and side.style:
                        raw.borders[side_name] = (side.style, _rgb(side.color))

            if raw.value is not None or raw.fill or raw.borders:
                sheet.cells[(cell.row, cell.column)] = raw

    for merged in worksheet.merged_cells.ranges:
        sheet.merges.append((merged.min_row, merged.min_col, merged.max_row, merged.max_col))

    return sheet


def _rgb(colour) -> Optional[str]:
    # Theme and indexed colours carry no literal rgb string
    if colour is None or getattr(colour, "type", None) != "rgb":
        return None
    rgb = colour.rgb
    return rgb if isinstance(rgb, str) else None
