import pytest
from openpyxl import Workbook
from openpyxl.styles import Border, PatternFill, Side

from venue_planner.catalog.item_catalog import CatalogItem
from venue_planner.core.block_detector import BlockDetector
from venue_planner.core.grid_builder import GridModelBuilder, RawCell, RawSheet
from venue_planner.core.models import Hall


def enclose(sheet, start_row, start_col, end_row, end_col, style="thick"):
    """Draw a border of ``style`` around a rectangle of a RawSheet."""
    for row in range(start_row, end_row + 1):
        for col in range(start_col, end_col + 1):
            cell = sheet.cells.setdefault((row, col), RawCell())
            if row == start_row:
                cell.borders["top"] = (style, "FF000000")
            if row == end_row:
                cell.borders["bottom"] = (style, "FF000000")
            if col == start_col:
                cell.borders["left"] = (style, "FF000000")
            if col == end_col:
                cell.borders["right"] = (style, "FF000000")


def block_a_sheet():
    """10x10 sheet: block "A" merged over (2,2)-(3,3), stall 5 at (2,4), thick fence around (2,2)-(3,4)."""
    sheet = RawSheet(name="1日目", ref="A1:J10")
    sheet.cells[(2, 2)] = RawCell(value="A")
    sheet.cells[(2, 4)] = RawCell(value=5)
    sheet.merges.append((2, 2, 3, 3))
    enclose(sheet, 2, 2, 3, 4)
    sheet.cells[(10, 10)] = RawCell(borders={"bottom": ("thin", None)})
    return sheet


@pytest.fixture
def raw_sheet():
    return block_a_sheet()


@pytest.fixture
def venue_map(raw_sheet):
    venue_map = GridModelBuilder().build(raw_sheet)
    venue_map.blocks = BlockDetector().detect(venue_map)
    return venue_map


@pytest.fixture
def two_block_map():
    """Blocks "A" (stalls 1, 2) and "B" (stalls 1, 2) in separate fences on a 10x12 sheet."""
    sheet = RawSheet(name="2日目", ref="A1:L10")
    for name, col in (("A", 2), ("B", 8)):
        sheet.cells[(2, col)] = RawCell(value=name)
        sheet.merges.append((2, col, 3, col + 1))
        sheet.cells[(4, col)] = RawCell(value=1)
        sheet.cells[(4, col + 1)] = RawCell(value=2)
        enclose(sheet, 2, col, 4, col + 1)
    sheet.cells[(10, 12)] = RawCell(value="exit")
    venue_map = GridModelBuilder().build(sheet)
    venue_map.blocks = BlockDetector().detect(venue_map)
    return venue_map


@pytest.fixture
def west_east_halls():
    return [
        Hall("west", "West hall", [(1, 1), (1, 6), (10, 6), (10, 1)]),
        Hall("east", "East hall", [(1, 7), (1, 12), (10, 12), (10, 7)]),
    ]


@pytest.fixture
def catalog_items():
    return [
        CatalogItem("a1", "A", "1-1", "2日目"),
        CatalogItem("a2", "A", "2", "2日目", remarks="優先"),
        CatalogItem("b1", "B", "1", "2日目"),
        CatalogItem("b2", "B", "2-3", "2日目", remarks="最優先"),
        CatalogItem("ghost", "Z", "9", "2日目"),
    ]


@pytest.fixture
def workbook_path(tmp_path):
    wb = Workbook()
    ws = wb.active
    ws.title = "1日目"
    thick = Side(style="thick", color="FF000000")
    ws["B2"] = "A"
    ws.merge_cells("B2:C3")
    # openpyxl spreads the anchor's outer sides over the merged range on load
    ws["B2"].border = Border(top=thick, left=thick, bottom=thick)
    ws["D2"] = 5
    ws["D2"].border = Border(top=thick, right=thick)
    ws["D3"].border = Border(bottom=thick, right=thick)
    ws["F6"].fill = PatternFill(fill_type="solid", fgColor="FFFFC000")
    ws["J10"] = "exit"

    notes = wb.create_sheet("Notes")
    notes["A1"] = "not a map"
    wb.create_sheet("2日目")["A1"] = "B"

    path = tmp_path / "venue.xlsx"
    wb.save(path)
    return path
