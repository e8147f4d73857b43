"""
route_builder.py
================

Walking routes between consecutive visit cells.

The venue grid becomes a directed graph: every cell is a node and an edge
leads into each walkable neighbour, orthogonal steps costing 1 and
diagonal steps 1.4.  A diagonal step is allowed only when both cells it
squeezes between are walkable, so routes never cut across a stall corner.
Shortest paths come from ``scipy.sparse.csgraph.dijkstra``.

Visit cells are usually stall numbers and therefore obstacles themselves.
The route leaves its start cell freely and enters its goal from the
cheapest reachable neighbour.  When no such neighbour exists the segment
degrades to a straight two-point line.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Set

import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import dijkstra

from venue_planner.config import DEFAULT_CONFIG, PlannerConfig
from venue_planner.core.cell_classifier import CellClassifier
from venue_planner.core.geometry_utils import GeometryUtils
from venue_planner.core.models import Coord, RouteSegment, VenueMap

logger = logging.getLogger(__name__)

_ORTHOGONAL = ((-1, 0), (1, 0), (0, -1), (0, 1))
_DIAGONAL = ((-1, -1), (-1, 1), (1, -1), (1, 1))


def default_obstacles(venue_map: VenueMap, config: Optional[PlannerConfig] = None) -> Set[Coord]:
    """Stall numbers and filled cells block the way; block name labels do not."""
    classifier = CellClassifier(config)
    walkable_labels: Set[Coord] = set()
    for region in venue_map.merged_regions:
        if classifier.is_block_name(region.value):
            walkable_labels.update(region.rect.cells())

    obstacles = set()
    for cell in venue_map.cells:
        coord = (cell.row, cell.col)
        if coord in walkable_labels:
            continue
        if classifier.is_numeric(cell.value) or cell.background_color:
            obstacles.add(coord)
    return obstacles


class RouteBuilder:
    def __init__(self, venue_map: VenueMap, obstacles: Optional[Iterable[Coord]] = None,
                 config: Optional[PlannerConfig] = None):
        self.venue_map = venue_map
        self.config = config or DEFAULT_CONFIG
        if obstacles is None:
            obstacles = default_obstacles(venue_map, self.config)
        self.walkable = np.ones((venue_map.rows, venue_map.cols), dtype=bool)
        for row, col in obstacles:
            if venue_map.in_bounds(row, col):
                self.walkable[row - 1, col - 1] = False
        self.graph = self._build_graph()

    def _moves(self):
        moves = [(d_row, d_col, self.config.orthogonal_cost) for d_row, d_col in _ORTHOGONAL]
        if self.config.allow_diagonal:
            moves += [(d_row, d_col, self.config.diagonal_cost) for d_row, d_col in _DIAGONAL]
        return moves

    def _build_graph(self) -> csr_matrix:
        rows, cols = self.venue_map.rows, self.venue_map.cols
        size = rows * cols
        node = np.arange(size).reshape(rows, cols)
        sources, targets, weights = [], [], []

        for d_row, d_col, cost in self._moves():
            src_r = slice(max(0, -d_row), rows - max(0, d_row))
            src_c = slice(max(0, -d_col), cols - max(0, d_col))
            dst_r = slice(max(0, d_row), rows - max(0, -d_row))
            dst_c = slice(max(0, d_col), cols - max(0, -d_col))

            allowed = self.walkable[dst_r, dst_c].copy()
            if d_row and d_col:
                # Both cells beside a diagonal step must be open
                allowed &= self.walkable[dst_r, src_c]
                allowed &= self.walkable[src_r, dst_c]

            sources.append(node[src_r, src_c][allowed])
            targets.append(node[dst_r, dst_c][allowed])
            weights.append(np.full(int(allowed.sum()), cost, dtype=float))

        if size == 0:
            return csr_matrix((0, 0))
        return csr_matrix(
            (np.concatenate(weights), (np.concatenate(sources), np.concatenate(targets))),
            shape=(size, size),
        )

    def _is_walkable(self, row: int, col: int) -> bool:
        return self.venue_map.in_bounds(row, col) and bool(self.walkable[row - 1, col - 1])

    def find_path(self, start: Coord, goal: Coord) -> Optional[List[Coord]]:
        """Raw cell path from start to goal, or None when the goal cannot be reached."""
        if start == goal:
            return [start]
        if not (self.venue_map.in_bounds(*start) and self.venue_map.in_bounds(*goal)):
            return None

        start_index = self.venue_map.index(*start)
        distances, predecessors = dijkstra(
            self.graph, directed=True, indices=start_index, return_predecessors=True
        )

        # The goal is entered from its cheapest reached neighbour
        best_cost, best_index = np.inf, None
        goal_row, goal_col = goal
        for d_row, d_col, cost in self._moves():
            row, col = goal_row - d_row, goal_col - d_col
            if not self.venue_map.in_bounds(row, col):
                continue
            if d_row and d_col and not (self._is_walkable(goal_row, col) and self._is_walkable(row, goal_col)):
                continue
            index = self.venue_map.index(row, col)
            total = distances[index] + cost
            if total < best_cost:
                best_cost, best_index = total, index

        if best_index is None or not np.isfinite(best_cost):
            return None

        path = [goal]
        index = best_index
        while index != start_index:
            if index < 0:
                return None
            path.append(self._coord(index))
            index = predecessors[index]
        path.append(start)
        path.reverse()
        return path

    def build_segment(self, start: Coord, goal: Coord) -> RouteSegment:
        path = self.find_path(start, goal)
        if path is None:
            logger.warning("No walkable path from %s to %s, using a straight line", start, goal)
            path = [start, goal]
        simplified = GeometryUtils.simplify_polyline(path, self.config.simplify_tolerance)
        return RouteSegment(start=start, end=goal, path=tuple(simplified))

    def build(self, targets: Sequence[Coord]) -> List[RouteSegment]:
        """One segment per consecutive pair of targets."""
        segments = []
        for start, goal in zip(targets, targets[1:]):
            segments.append(self.build_segment(tuple(start), tuple(goal)))
        logger.debug("Built %d route segments over %d targets", len(segments), len(targets))
        return segments

    def _coord(self, index: int) -> Coord:
        row, col = divmod(int(index), self.venue_map.cols)
        return (row + 1, col + 1)
