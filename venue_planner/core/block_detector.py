"""
block_detector.py
=================

Find the vendor blocks drawn on a venue map.

A block is a run of stall cells fenced in by medium or heavier borders
and labelled by a merged cell holding a short name ("A", "ア", "あい").
Detection starts from every such name cell and flood fills outwards,
crossing only thin or missing borders.  The visited area gives the block
bounds, and the numeric cells inside those bounds are its stalls.

The grid is never modified; detection only reads cells and returns new
``Block`` objects.
"""

import logging
from collections import deque
from typing import Dict, List, Optional, Set

import numpy as np

from venue_planner.config import DEFAULT_CONFIG, PlannerConfig
from venue_planner.core.cell_classifier import CellClassifier
from venue_planner.core.models import Block, Coord, MergedRegion, NumberCell, Rect, VenueMap

logger = logging.getLogger(__name__)

# (row delta, col delta, side of the current cell, facing side of the neighbour)
_STEPS = (
    (-1, 0, "top", "bottom"),
    (1, 0, "bottom", "top"),
    (0, -1, "left", "right"),
    (0, 1, "right", "left"),
)


class BlockDetector:
    def __init__(self, config: Optional[PlannerConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.classifier = CellClassifier(self.config)

    def find_seeds(self, venue_map: VenueMap) -> List[MergedRegion]:
        """Merged name cells large enough to label a block, one per anchor."""
        seeds: Dict[Coord, MergedRegion] = {}
        for region in venue_map.merged_regions:
            if region.area < self.config.min_seed_area:
                continue
            if not self.classifier.is_block_name(region.value):
                continue
            seeds.setdefault(region.anchor, region)
        return [seeds[anchor] for anchor in sorted(seeds)]

    def flood_fill(self, venue_map: VenueMap, start: Coord) -> np.ndarray:
        """Return a flat bool array of the cells reachable from ``start``.

        Movement between two neighbours is blocked when either cell draws a
        strong border on the shared edge.
        """
        visited = np.zeros(venue_map.rows * venue_map.cols, dtype=bool)
        if not venue_map.in_bounds(*start):
            return visited

        visited[venue_map.index(*start)] = True
        queue = deque([start])
        while queue:
            row, col = queue.popleft()
            cell = venue_map.cell_at(row, col)
            for d_row, d_col, side, facing in _STEPS:
                n_row, n_col = row + d_row, col + d_col
                if not venue_map.in_bounds(n_row, n_col):
                    continue
                n_index = venue_map.index(n_row, n_col)
                if visited[n_index]:
                    continue
                neighbour = venue_map.cell_at(n_row, n_col)
                if cell.borders.is_strong(side) or neighbour.borders.is_strong(facing):
                    continue
                visited[n_index] = True
                queue.append((n_row, n_col))
        return visited

    def number_cells_in(self, venue_map: VenueMap, bounds: Rect,
                        claimed: Optional[Set[Coord]] = None) -> List[NumberCell]:
        found = []
        for row, col in bounds.cells():
            if claimed is not None and (row, col) in claimed:
                continue
            cell = venue_map.cell_at(row, col)
            if cell is None or cell.is_merged:
                continue
            label = self.classifier.stall_label(cell.value)
            if label is not None:
                found.append(NumberCell(row, col, label))
        return found

    def detect(self, venue_map: VenueMap) -> List[Block]:
        blocks: List[Block] = []
        by_name: Dict[str, Block] = {}
        claimed: Set[Coord] = set()

        for seed in self.find_seeds(venue_map):
            visited = self.flood_fill(venue_map, seed.anchor)
            if int(visited.sum()) < self.config.min_block_cells:
                logger.debug("Seed '%s' at %s encloses too few cells", seed.value, seed.anchor)
                continue

            bounds = _bounding_rect(visited, venue_map.cols)
            number_cells = self.number_cells_in(venue_map, bounds, claimed)
            if not number_cells:
                logger.debug("Seed '%s' at %s has no stall numbers", seed.value, seed.anchor)
                continue
            claimed.update((n.row, n.col) for n in number_cells)

            name = str(seed.value).strip()
            existing = by_name.get(name)
            if existing is not None:
                # Same name drawn in several places is one block
                existing.bounds = existing.bounds.union(bounds)
                existing.number_cells.extend(number_cells)
                continue

            block = Block(
                id=f"block-{seed.start_row}-{seed.start_col}",
                name=name,
                bounds=bounds,
                number_cells=number_cells,
                color=self.config.block_color(len(blocks)),
                auto_detected=True,
            )
            by_name[name] = block
            blocks.append(block)

        if not blocks:
            logger.warning("No blocks detected on sheet '%s'", venue_map.sheet_name)
        else:
            logger.info("Detected %d blocks on sheet '%s': %s", len(blocks), venue_map.sheet_name,
                        ", ".join(b.name for b in blocks))
        return blocks


def define_block(venue_map: VenueMap, name: str, bounds: Rect,
                 config: Optional[PlannerConfig] = None) -> Block:
    """Build a block from a rectangle drawn by the user."""
    detector = BlockDetector(config)
    bounds = Rect(
        min(bounds.start_row, bounds.end_row), min(bounds.start_col, bounds.end_col),
        max(bounds.start_row, bounds.end_row), max(bounds.start_col, bounds.end_col),
    )
    return Block(
        id=f"manual-{bounds.start_row}-{bounds.start_col}",
        name=name,
        bounds=bounds,
        number_cells=detector.number_cells_in(venue_map, bounds),
        color=detector.config.block_color(len(venue_map.blocks)),
        auto_detected=False,
    )


def _bounding_rect(visited: np.ndarray, cols: int) -> Rect:
    indices = np.flatnonzero(visited)
    rows, columns = np.divmod(indices, cols)
    return Rect(int(rows.min()) + 1, int(columns.min()) + 1, int(rows.max()) + 1, int(columns.max()) + 1)
