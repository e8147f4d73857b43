import pytest

from venue_planner.core.grid_builder import GridModelBuilder, RawCell, RawSheet
from venue_planner.core.models import BorderKind
from venue_planner.errors import ParseError


def test_build_is_deterministic(raw_sheet):
    builder = GridModelBuilder()
    first = builder.build(raw_sheet)
    second = builder.build(raw_sheet)
    assert first == second


def test_dimensions_and_lookup(raw_sheet):
    venue_map = GridModelBuilder().build(raw_sheet)
    assert (venue_map.rows, venue_map.cols) == (10, 10)
    assert venue_map.cell_at(2, 4).value == 5
    assert venue_map.cell_at(11, 1) is None
    assert venue_map.cell_at(0, 1) is None


def test_trailing_blank_rows_and_columns_are_trimmed():
    sheet = RawSheet(name="1日目", ref="A1:Z50")
    sheet.cells[(3, 4)] = RawCell(value="x")
    sheet.cells[(20, 1)] = RawCell(value="  ")
    venue_map = GridModelBuilder().build(sheet)
    assert (venue_map.rows, venue_map.cols) == (3, 4)


def test_empty_sheet_builds_empty_map():
    venue_map = GridModelBuilder().build(RawSheet(name="1日目", ref="A1"))
    assert (venue_map.rows, venue_map.cols) == (0, 0)
    assert venue_map.cells == []


@pytest.mark.parametrize("ref", [None, "", "not a range"])
def test_missing_or_invalid_range_raises(ref):
    with pytest.raises(ParseError):
        GridModelBuilder().build(RawSheet(name="1日目", ref=ref))


def test_merge_anchor_and_merged_flags(raw_sheet):
    venue_map = GridModelBuilder().build(raw_sheet)
    anchor = venue_map.cell_at(2, 2)
    covered = venue_map.cell_at(3, 3)
    assert anchor.merge_anchor == (2, 2) and not anchor.is_merged
    assert covered.merge_anchor == (2, 2) and covered.is_merged
    assert venue_map.cell_at(2, 4).merge_anchor is None
    assert venue_map.merged_regions[0].value == "A"


def test_merges_anchored_outside_trimmed_area_are_dropped():
    sheet = RawSheet(name="1日目", ref="A1:H8")
    sheet.cells[(2, 2)] = RawCell(value=1)
    sheet.merges.append((6, 6, 7, 7))
    venue_map = GridModelBuilder().build(sheet)
    assert venue_map.merged_regions == []


def test_border_styles_map_to_kinds():
    sheet = RawSheet(name="1日目", ref="A1:B1")
    sheet.cells[(1, 1)] = RawCell(value="x", borders={
        "top": ("hair", None),
        "right": ("slantDashDot", "FFFF0000"),
        "bottom": ("double", None),
        "left": ("someFutureStyle", None),
    })
    sheet.cells[(1, 2)] = RawCell(value="y", borders={"top": ("none", None)})
    venue_map = GridModelBuilder().build(sheet)
    borders = venue_map.cell_at(1, 1).borders
    assert borders.top.kind is BorderKind.THIN
    assert borders.right.kind is BorderKind.MEDIUM
    assert borders.right.color == "#FF0000"
    assert borders.bottom.kind is BorderKind.DOUBLE
    assert borders.left.kind is BorderKind.THIN
    assert venue_map.cell_at(1, 2).borders.top is None


def test_default_backgrounds_become_none():
    sheet = RawSheet(name="1日目", ref="A1:D1")
    sheet.cells[(1, 1)] = RawCell(value=1, fill="FFFFFFFF")
    sheet.cells[(1, 2)] = RawCell(value=1, fill="00000000")
    sheet.cells[(1, 3)] = RawCell(value=1, fill="FF000000")
    sheet.cells[(1, 4)] = RawCell(value=1, fill="FF92D050")
    venue_map = GridModelBuilder().build(sheet)
    assert [venue_map.cell_at(1, c).background_color for c in range(1, 5)] == [None, None, None, "#92D050"]
