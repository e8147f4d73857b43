"""
day_plan.py
===========

The working context for one event day.

``DayPlan`` owns everything the planner knows about a day: the venue map
with its blocks, the hall outlines, the catalogue items, the visit order,
the order in which halls are walked and any per-hall item order.  All
derived data (block to hall assignment, item cells, visit points and
route segments) is recomputed eagerly after every edit, so the queries a
renderer makes always reflect the latest state.  The last edit wins.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from venue_planner.catalog.item_catalog import CatalogItem, ItemResolver, item_count_by_hall
from venue_planner.config import DEFAULT_CONFIG, PlannerConfig
from venue_planner.core.block_detector import define_block
from venue_planner.core.models import (
    Block, Cell, CellVisitState, Coord, Hall, Priority, Rect, RouteSegment, VenueMap, VisitGroup, VisitPoint,
)
from venue_planner.optimization.hall_partitioner import HallPartitioner, normalise_halls
from venue_planner.optimization.route_builder import RouteBuilder
from venue_planner.optimization.spatial_index import BlockIndex
from venue_planner.optimization.visit_sequencer import VisitOrder, group_by_hall

logger = logging.getLogger(__name__)

PLAN_VERSION = "1.0"


class DayPlan:
    def __init__(self, event_id: str, day: str, venue_map: VenueMap,
                 halls: Iterable[Hall] = (), items: Iterable[CatalogItem] = (),
                 visit_order: Iterable[str] = (), hall_order: Optional[Sequence[str]] = None,
                 sub_orders: Optional[Dict[str, Sequence[str]]] = None,
                 config: Optional[PlannerConfig] = None):
        self.event_id = event_id
        self.day = day
        self.config = config or DEFAULT_CONFIG
        self.venue_map = venue_map
        self.halls: List[Hall] = normalise_halls(halls, self.config)
        self.items: Dict[str, CatalogItem] = {item.id: item for item in items}
        self.visit_order = VisitOrder(visit_order, history_limit=self.config.history_limit)
        if hall_order is None:
            hall_order = [hall.id for hall in self.halls]
        self.hall_order: List[str] = list(dict.fromkeys(hall_order))
        self.sub_orders: Dict[str, List[str]] = {k: list(v) for k, v in (sub_orders or {}).items()}

        self.route_builder = RouteBuilder(self.venue_map, config=self.config)
        self.recompute()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    def recompute(self):
        """Rebuild hall assignment, item cells, visit points and routes."""
        self.partitioner = HallPartitioner(self.halls, self.config)
        self.block_halls = self.partitioner.assign_blocks(self.venue_map.blocks)
        self.block_index = BlockIndex(self.venue_map.blocks)
        self.resolver = ItemResolver(self.venue_map, self.day)
        self.locations = self.resolver.resolve_all(self.items.values())

        self.items_by_cell: Dict[Coord, List[str]] = {}
        for item_id, coord in self.locations.items():
            if coord is not None:
                self.items_by_cell.setdefault(coord, []).append(item_id)

        self._visit_points = self._collect_visit_points()
        self._segments = self.route_builder.build([point.coord for point in self._visit_points])

    def _collect_visit_points(self) -> List[VisitPoint]:
        points: Dict[Coord, VisitPoint] = {}
        for item_id in self.visit_order:
            coord = self.locations.get(item_id)
            if coord is None:
                continue
            if coord not in points:
                points[coord] = VisitPoint(coord[0], coord[1], order=len(points) + 1)
            points[coord].item_ids.append(item_id)
        return list(points.values())

    def hall_of(self, item_id: str) -> Optional[str]:
        """Derived hall id of an item; None for orphans and hall-less items."""
        item = self.items.get(item_id)
        if item is None or self.locations.get(item_id) is None:
            return None
        return self.block_halls.get(item.block_name)

    def priority_of(self, item_id: str) -> Priority:
        item = self.items.get(item_id)
        return item.priority if item is not None else Priority.NONE

    # ------------------------------------------------------------------
    # Map and hall edits
    # ------------------------------------------------------------------

    def set_halls(self, halls: Iterable[Hall]):
        """Replace the hall outlines, keeping the walk order of surviving halls."""
        self.halls = normalise_halls(halls, self.config)
        current_ids = [hall.id for hall in self.halls]
        kept = [hall_id for hall_id in self.hall_order if hall_id in current_ids]
        added = [hall_id for hall_id in current_ids if hall_id not in kept]
        self.hall_order = kept + added
        self.sub_orders = {k: v for k, v in self.sub_orders.items() if k in current_ids}
        self.recompute()

    def set_hall_order(self, hall_order: Sequence[str]):
        self.hall_order = list(dict.fromkeys(hall_order))
        self.recompute()

    def set_sub_order(self, hall_id: str, item_ids: Sequence[str]):
        self.sub_orders[hall_id] = list(dict.fromkeys(item_ids))
        self.recompute()

    def add_block(self, block: Block):
        self.venue_map.blocks.append(block)
        self.recompute()

    def define_block(self, name: str, bounds: Rect) -> Block:
        block = define_block(self.venue_map, name, bounds, self.config)
        self.add_block(block)
        return block

    def replace_block(self, block: Block) -> bool:
        for position, existing in enumerate(self.venue_map.blocks):
            if existing.id == block.id:
                self.venue_map.blocks[position] = block
                self.recompute()
                return True
        return False

    def remove_block(self, block_id: str) -> bool:
        remaining = [b for b in self.venue_map.blocks if b.id != block_id]
        if len(remaining) == len(self.venue_map.blocks):
            return False
        self.venue_map.blocks = remaining
        self.recompute()
        return True

    def set_items(self, items: Iterable[CatalogItem]):
        self.items = {item.id: item for item in items}
        self.recompute()

    # ------------------------------------------------------------------
    # Visit list edits
    # ------------------------------------------------------------------

    def _after_edit(self, changed: bool) -> bool:
        if changed:
            self.recompute()
        return changed

    def append_items(self, ids: Iterable[str], candidates: Optional[Sequence[str]] = None) -> bool:
        return self._after_edit(self.visit_order.append(ids, candidates))

    def add_from_map(self, item_id: str) -> bool:
        return self._after_edit(self.visit_order.insert_by_hall(item_id, self.hall_of, self.hall_order))

    def remove_items(self, ids: Iterable[str]) -> bool:
        return self._after_edit(self.visit_order.remove(ids))

    def move_up(self, item_id: str, selected: Optional[Iterable[str]] = None) -> bool:
        return self._after_edit(self.visit_order.move_up(item_id, self.hall_of, selected))

    def move_down(self, item_id: str, selected: Optional[Iterable[str]] = None) -> bool:
        return self._after_edit(self.visit_order.move_down(item_id, self.hall_of, selected))

    def reorder_by_hall_order(self, priority_first: bool = False) -> bool:
        priority_of = self.priority_of if priority_first else None
        return self._after_edit(self.visit_order.reorder_by_hall_order(
            self.hall_of, self.hall_order, self.sub_orders, priority_of))

    def undo(self) -> bool:
        return self._after_edit(self.visit_order.undo())

    def redo(self) -> bool:
        return self._after_edit(self.visit_order.redo())

    # ------------------------------------------------------------------
    # Renderer queries
    # ------------------------------------------------------------------

    def cell(self, row: int, col: int) -> Optional[Cell]:
        return self.venue_map.cell_at(row, col)

    def block_at(self, row: int, col: int) -> Optional[Block]:
        return self.block_index.block_at(row, col)

    def hall_of_block(self, block_name: str) -> Optional[Hall]:
        return self.partitioner.hall_by_id(self.block_halls.get(block_name))

    def cell_state(self, row: int, col: int) -> CellVisitState:
        item_ids = self.items_by_cell.get((row, col))
        if not item_ids:
            return CellVisitState.DEFAULT
        visited = sum(1 for item_id in item_ids if item_id in self.visit_order)
        if visited == 0:
            return CellVisitState.HAS_ITEMS
        if visited == len(item_ids):
            return CellVisitState.ALL_VISIT
        return CellVisitState.PARTIAL_VISIT

    def visit_points(self) -> List[VisitPoint]:
        return list(self._visit_points)

    def route_segments(self) -> List[RouteSegment]:
        return list(self._segments)

    def visit_groups(self, priority_first: bool = False) -> List[VisitGroup]:
        priority_of = self.priority_of if priority_first else None
        return group_by_hall(self.visit_order.items, self.hall_of, self.hall_order, self.halls, priority_of)

    def orphans(self) -> List[str]:
        return [item_id for item_id in self.visit_order if self.locations.get(item_id) is None]

    def item_counts(self) -> Dict[Optional[str], int]:
        return item_count_by_hall(self.items.values(), self.block_halls, self.locations)

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': PLAN_VERSION,
            'event_id': self.event_id,
            'day': self.day,
            'venue_map': self.venue_map.to_dict(),
            'halls': [hall.to_dict() for hall in self.halls],
            'items': [item.to_dict() for item in self.items.values()],
            'visit_order': list(self.visit_order),
            'hall_order': list(self.hall_order),
            'sub_orders': {k: list(v) for k, v in self.sub_orders.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config: Optional[PlannerConfig] = None) -> "DayPlan":
        return cls(
            event_id=data.get('event_id', ''),
            day=data.get('day', ''),
            venue_map=VenueMap.from_dict(data['venue_map']),
            halls=[Hall.from_dict(h) for h in data.get('halls', [])],
            items=[CatalogItem.from_dict(i) for i in data.get('items', [])],
            visit_order=data.get('visit_order', []),
            hall_order=data.get('hall_order'),
            sub_orders=data.get('sub_orders'),
            config=config,
        )
