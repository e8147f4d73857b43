import pytest

from venue_planner.catalog.item_catalog import CatalogItem
from venue_planner.core.grid_builder import GridModelBuilder
from venue_planner.core.block_detector import BlockDetector
from venue_planner.core.models import CellVisitState, Hall, Rect
from venue_planner.project.day_plan import DayPlan
from venue_planner.project.project_manager import ProjectManager
from venue_planner.errors import ParseError

from conftest import block_a_sheet


@pytest.fixture
def plan(two_block_map, west_east_halls, catalog_items):
    return DayPlan("event-1", "2日目", two_block_map, halls=west_east_halls, items=catalog_items,
                   visit_order=["b1", "a1", "ghost"])


def test_end_to_end_single_block():
    venue_map = GridModelBuilder().build(block_a_sheet())
    venue_map.blocks = BlockDetector().detect(venue_map)
    hall = Hall("h1", "Hall 1", [(1, 1), (1, 10), (10, 10), (10, 1)])
    plan = DayPlan("e", "1日目", venue_map, halls=[hall], items=[CatalogItem("i", "A", "5-1")],
                   visit_order=["i"])
    assert [b.name for b in venue_map.blocks] == ["A"]
    assert plan.locations["i"] == (2, 4)
    assert plan.hall_of("i") == "h1"
    assert plan.hall_of_block("A").id == "h1"


def test_hall_order_defaults_to_hall_list(plan):
    assert plan.hall_order == ["west", "east"]


def test_hall_membership_is_derived(plan):
    assert plan.hall_of("a1") == "west"
    assert plan.hall_of("b1") == "east"
    assert plan.hall_of("ghost") is None
    assert plan.orphans() == ["ghost"]


def test_visit_points_and_routes(plan):
    points = plan.visit_points()
    assert [(p.row, p.col, p.order) for p in points] == [(4, 8, 1), (4, 2, 2)]
    [segment] = plan.route_segments()
    assert segment.start == (4, 8) and segment.end == (4, 2)


def test_visit_points_share_a_cell(two_block_map):
    items = [CatalogItem("p", "A", "1-1"), CatalogItem("q", "A", "1-2")]
    plan = DayPlan("e", "d", two_block_map, items=items, visit_order=["p", "q"])
    [point] = plan.visit_points()
    assert point.item_ids == ["p", "q"]
    assert plan.route_segments() == []


def test_cross_hall_move_is_rejected(plan):
    assert not plan.move_up("a1")
    assert list(plan.visit_order) == ["b1", "a1", "ghost"]


def test_reorder_follows_hall_order(plan):
    assert plan.reorder_by_hall_order()
    assert list(plan.visit_order) == ["a1", "b1", "ghost"]
    assert plan.visit_points()[0].coord == (4, 2)
    assert not plan.reorder_by_hall_order()


def test_reorder_with_priority(plan):
    plan.append_items(["a2", "b2"])
    plan.reorder_by_hall_order(priority_first=True)
    assert list(plan.visit_order) == ["a2", "a1", "b2", "b1", "ghost"]


def test_set_halls_keeps_order_of_surviving_halls(plan, west_east_halls):
    plan.set_hall_order(["east", "west"])
    north = Hall("north", "North", [(20, 1), (20, 5), (25, 5), (25, 1)])
    plan.set_halls([west_east_halls[0], north, west_east_halls[1]])
    assert plan.hall_order == ["east", "west", "north"]
    plan.set_halls([north])
    assert plan.hall_order == ["north"]
    assert plan.hall_of("a1") is None


def test_add_from_map_inserts_next_to_same_hall(plan):
    assert plan.add_from_map("b2")
    assert list(plan.visit_order) == ["b1", "b2", "a1", "ghost"]


def test_cell_states(plan):
    assert plan.cell_state(4, 2) is CellVisitState.ALL_VISIT
    assert plan.cell_state(4, 3) is CellVisitState.HAS_ITEMS
    assert plan.cell_state(1, 1) is CellVisitState.DEFAULT


def test_partial_visit(two_block_map):
    items = [CatalogItem("p", "A", "1-1"), CatalogItem("q", "A", "1-2")]
    plan = DayPlan("e", "d", two_block_map, items=items, visit_order=["p"])
    assert plan.cell_state(4, 2) is CellVisitState.PARTIAL_VISIT


def test_block_edits_trigger_recompute(plan):
    block_a = plan.venue_map.find_block("A")
    assert plan.remove_block(block_a.id)
    assert plan.hall_of("a1") is None
    assert "a1" in plan.orphans()

    block = plan.define_block("A", Rect(2, 2, 4, 3))
    assert not block.auto_detected
    assert plan.locations["a1"] == (4, 2)
    assert plan.block_at(3, 3).name == "A"


def test_undo_recomputes_routes(plan):
    plan.reorder_by_hall_order()
    plan.undo()
    assert plan.visit_points()[0].coord == (4, 8)


def test_visit_groups(plan):
    groups = plan.visit_groups()
    assert [g.hall_name for g in groups] == ["West hall", "East hall", "(no hall)"]


def test_snapshot_round_trip(plan, tmp_path):
    plan.set_sub_order("east", ["b1"])
    path = tmp_path / "plan.json"
    ProjectManager().save_plan(path, plan)
    loaded = ProjectManager().load_plan(path)
    assert loaded.to_dict() == plan.to_dict()
    assert loaded.visit_points() == plan.visit_points()


def test_loading_garbage_raises(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ParseError):
        ProjectManager().load_plan(path)


def test_item_dated_for_another_day_is_not_placed(venue_map):
    plan = DayPlan("ev", "1日目", venue_map, items=[CatalogItem("i", "A", "5", event_date="2日目")],
                   visit_order=["i"])
    assert plan.locations["i"] is None
    assert plan.orphans() == ["i"]
    assert plan.visit_points() == []
    assert plan.cell_state(2, 4) is CellVisitState.DEFAULT
