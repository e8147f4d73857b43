import rtree
from typing import Iterable, List, Optional, Tuple

from venue_planner.core.models import Block

Bounds = Tuple[float, float, float, float]


class SpatialIndex:
    def __init__(self):
        self.idx = rtree.index.Index()

    def insert(self, id: int, bounds: Bounds):
        self.idx.insert(id, bounds)

    def query(self, bounds: Bounds) -> List[int]:
        """Ids whose boxes intersect ``bounds``, in insertion id order."""
        return sorted(self.idx.intersection(bounds))

    def query_point(self, x: float, y: float) -> List[int]:
        return self.query((x, y, x, y))


class BlockIndex:
    """Answer "which block covers this cell" for the renderer."""

    def __init__(self, blocks: Iterable[Block] = ()):
        self.blocks: List[Block] = list(blocks)
        self.index = SpatialIndex()
        for position, block in enumerate(self.blocks):
            self.index.insert(position, block.bounds.bounds)

    def block_at(self, row: int, col: int) -> Optional[Block]:
        for position in self.index.query_point(row, col):
            return self.blocks[position]
        return None
